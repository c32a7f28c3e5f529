import base64
from collections.abc import Sequence
from typing import Any

import anthropic
import httpx

from listing_lens.generation.client_base import BaseGenerationClient
from listing_lens.generation.exceptions import GenerationError, GenerationNetworkError
from listing_lens.session.models import Asset


class AnthropicClientAdapter(BaseGenerationClient):
    """Generation client built on the Anthropic messages API."""

    def __init__(self, *, api_key: str, timeout_seconds: int) -> None:
        self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout_seconds)

    def create_report(
        self,
        *,
        model: str,
        system_prompt: str,
        images: Sequence[Asset],
        instruction: str,
        max_tokens: int,
    ) -> str:
        try:
            response = self._client.messages.create(
                model=model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": self._user_content(images, instruction)},
                ],
            )
        except (anthropic.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise GenerationNetworkError(f"AI provider network error: {exc}") from exc
        except anthropic.APIError as exc:
            raise GenerationNetworkError(f"AI provider API error: {exc}") from exc

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise GenerationError("AI returned empty response")
        return text

    @staticmethod
    def _user_content(images: Sequence[Asset], instruction: str) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.content_type,
                    "data": base64.b64encode(image.data).decode("ascii"),
                },
            }
            for image in images
        ]
        parts.append({"type": "text", "text": instruction})
        return parts
