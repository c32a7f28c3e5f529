import base64
from collections.abc import Sequence
from typing import Any

import httpx
import openai

from listing_lens.generation.client_base import BaseGenerationClient
from listing_lens.generation.exceptions import GenerationError, GenerationNetworkError
from listing_lens.session.models import Asset


class OpenAIClientAdapter(BaseGenerationClient):
    """Generation client built on the OpenAI-compatible chat API with image inputs."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

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
            response = self._client.chat.completions.create(
                model=model,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": self._user_content(images, instruction)},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise GenerationNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise GenerationNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise GenerationError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise GenerationError("AI returned empty response")
        return content

    @staticmethod
    def _user_content(images: Sequence[Asset], instruction: str) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = [
            {
                "type": "image_url",
                "image_url": {
                    "url": (
                        f"data:{image.content_type};base64,"
                        f"{base64.b64encode(image.data).decode('ascii')}"
                    ),
                },
            }
            for image in images
        ]
        parts.append({"type": "text", "text": instruction})
        return parts
