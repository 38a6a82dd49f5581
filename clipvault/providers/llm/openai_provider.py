"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider` for
clip analysis.  Text and PDF clips go to the text model, image clips to
the vision model; both calls share one request path so timeouts, empty
answers and API failures surface as the same ``LLMError``.

When ``openai_base_url`` is configured (TogetherAI, Groq, a local
gateway...) the client points at that URL instead of api.openai.com and
vision is only offered if ``openai_vision_model`` names a model.
"""

from __future__ import annotations

import base64
from typing import Any

import openai
import structlog

from clipvault.config.settings import Settings
from clipvault.interfaces.llm_provider import ILLMProvider
from clipvault.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TEXT_MODEL = "gpt-4o-mini"
_DEFAULT_VISION_MODEL = "gpt-4o"
_CONNECT_TIMEOUT_SECONDS = 5.0

_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
)


def _detect_media_type(image_bytes: bytes) -> str:
    """Best-guess image MIME type from magic bytes; JPEG when unknown."""
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    for signature, media_type in _IMAGE_SIGNATURES:
        if image_bytes.startswith(signature):
            return media_type
    return "image/jpeg"


class OpenAILLMProvider(ILLMProvider):
    """Clip analysis through an OpenAI-compatible chat completions API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._custom_endpoint = bool(settings.openai_base_url)

        client_kwargs: dict[str, Any] = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(
                settings.llm_timeout_seconds, connect=_CONNECT_TIMEOUT_SECONDS
            ),
        }
        if self._custom_endpoint:
            client_kwargs["base_url"] = settings.openai_base_url
        self._client = openai.AsyncOpenAI(**client_kwargs)

        self._text_model = settings.openai_text_model or _DEFAULT_TEXT_MODEL
        self._vision_model: str | None = settings.openai_vision_model or None
        if self._vision_model is None and not self._custom_endpoint:
            self._vision_model = _DEFAULT_VISION_MODEL

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        return await self._chat(
            model=self._text_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )

    async def vision_extract(self, image_bytes: bytes, prompt: str, max_tokens: int = 1000) -> str:
        if self._vision_model is None:
            raise LLMError(
                message="No vision model configured for this endpoint (set OPENAI_VISION_MODEL)",
                provider_name=self.get_provider_name(),
            )
        data_url = (
            f"data:{_detect_media_type(image_bytes)};base64,"
            f"{base64.b64encode(image_bytes).decode('ascii')}"
        )
        return await self._chat(
            model=self._vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
            max_tokens=max_tokens,
        )

    def supports_vision(self) -> bool:
        return self._vision_model is not None

    def is_available(self) -> bool:
        """``True`` when an API key is configured; the key itself is not checked."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "openai-compatible" if self._custom_endpoint else "openai"

    # ── Internals ──────────────────────────────────────────────────────

    async def _chat(
        self,
        *,
        model: str,
        messages: list[dict[str, Any]],
        max_tokens: int,
        temperature: float | None = None,
    ) -> str:
        request: dict[str, Any] = {"model": model, "messages": messages, "max_tokens": max_tokens}
        if temperature is not None:
            request["temperature"] = temperature

        try:
            response = await self._client.chat.completions.create(**request)
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self.get_provider_name()} request to {model} timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self.get_provider_name()} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError(
                message=f"{model} returned an empty response",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "openai_chat_completed",
            model=model,
            provider=self.get_provider_name(),
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content
