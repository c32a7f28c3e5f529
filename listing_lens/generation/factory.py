from typing import ClassVar

from listing_lens.config.settings import Settings
from listing_lens.generation.anthropic_client_adapter import AnthropicClientAdapter
from listing_lens.generation.base import BaseReportGenerator
from listing_lens.generation.client_base import BaseGenerationClient
from listing_lens.generation.example_client_adapter import ExampleClientAdapter
from listing_lens.generation.generator import ReportGenerator
from listing_lens.generation.openai_client_adapter import OpenAIClientAdapter


class GeneratorFactory:
    """Creates the configured report generator."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseReportGenerator:
        """Create a configured generator from application settings."""
        provider = settings.generation_provider.lower()
        client, model = cls._create_client(provider, settings)
        return ReportGenerator(
            client=client,
            model=model,
            max_tokens=settings.generation_max_tokens,
        )

    @classmethod
    def _create_client(
        cls, provider: str, settings: Settings
    ) -> tuple[BaseGenerationClient, str]:
        if provider == "example":
            return ExampleClientAdapter(), "example"
        if provider == "anthropic":
            client = AnthropicClientAdapter(
                api_key=settings.generation_anthropic_api_key,
                timeout_seconds=settings.generation_anthropic_timeout_seconds,
            )
            return client, settings.generation_anthropic_model_name
        if provider == "openai":
            client = OpenAIClientAdapter(
                api_key=settings.generation_openai_api_key,
                timeout_seconds=settings.generation_openai_timeout_seconds,
            )
            return client, settings.generation_openai_model_name
        if provider == "openai_compatible":
            url = settings.generation_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "generation_openai_compatible_base_url is required for "
                    "generation_provider=openai_compatible"
                )
            client = OpenAIClientAdapter(
                api_key=settings.generation_openai_compatible_api_key,
                timeout_seconds=settings.generation_openai_timeout_seconds,
                base_url=url,
            )
            return client, settings.generation_openai_compatible_model_name
        if provider == "openrouter":
            client = OpenAIClientAdapter(
                api_key=settings.generation_openrouter_api_key,
                timeout_seconds=settings.generation_openai_timeout_seconds,
                base_url=cls.OPENAI_COMPATIBLE_BASE_URLS["openrouter"],
            )
            return client, settings.generation_openrouter_model_name

        supported = ["anthropic", "example", "openai", "openai_compatible", "openrouter"]
        raise ValueError(
            f"Unknown generation provider '{provider}'. Choose from: {supported}"
        )
