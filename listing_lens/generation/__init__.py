from listing_lens.generation.base import BaseReportGenerator
from listing_lens.generation.factory import GeneratorFactory
from listing_lens.generation.generator import ReportGenerator

__all__ = ["BaseReportGenerator", "GeneratorFactory", "ReportGenerator"]
