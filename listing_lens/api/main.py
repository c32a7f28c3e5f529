import uvicorn

from listing_lens.api.app import create_app
from listing_lens.config.settings import Settings

app = create_app()


def run() -> None:
    """API entry point."""
    settings = Settings()
    uvicorn.run("listing_lens.api.main:app", host=settings.api_host, port=settings.api_port)
