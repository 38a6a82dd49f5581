"""LLM-backed content analysis for uploaded clips.

Produces the ``summary`` / ``tags`` / ``category`` triple stored with every
clip.  Images go to the provider's vision endpoint as raw bytes; text and
PDF clips are reduced to plain text first and sent through ``complete``,
truncated to ``max_chars`` characters.

Like the rest of the LLM-as-parser code in this package, the model is
asked for bare JSON but its reply is still cleaned up before parsing:
markdown fences are stripped and, failing that, the outermost brace pair
is extracted.  If the first reply is unusable a stricter prompt is sent
once; a second failure raises :class:`AnalysisError`.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from clipvault.interfaces.llm_provider import ILLMProvider
from clipvault.models.clip import AnalysisResult, FileType
from clipvault.utils.errors import AnalysisError, LLMError
from clipvault.utils.logging import get_logger

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

_SYSTEM_PROMPT = (
    "You catalogue files for a personal content vault. "
    "Always answer with a single JSON object and nothing else."
)

_ANALYSIS_INSTRUCTIONS = (
    "Analyze this {subject} and provide a JSON response with: "
    '"summary" (2-3 sentences), "tags" (array of 5-10 keywords) and '
    '"category" (a single word).'
)

_RETRY_INSTRUCTIONS = (
    'Return ONLY this JSON, no prose, no code fences: '
    '{{"summary": "<2-3 sentences>", "tags": ["<keyword>", ...], "category": "<word>"}}. '
    "Describe this {subject}."
)


class AnalysisService:
    """Generates AI metadata for a file via an injected :class:`ILLMProvider`."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        max_chars: int = 10_000,
        temperature: float = 0.2,
        max_tokens: int = 800,
        max_tags: int = 10,
    ) -> None:
        self._llm = llm_provider
        self._max_chars = max_chars
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._max_tags = max_tags
        self._logger = get_logger(__name__)

    @property
    def provider_name(self) -> str:
        return self._llm.get_provider_name()

    async def analyze(
        self,
        file_type: FileType,
        data: bytes,
        extracted_text: str | None = None,
    ) -> AnalysisResult:
        """Analyse one file and return its summary, tags and category.

        Parameters
        ----------
        file_type:
            Coarse class of the file; decides between vision and text analysis.
        data:
            Raw file bytes.  Only used directly for images.
        extracted_text:
            Plain text of a text or PDF file.  Required for non-image types.

        Raises
        ------
        AnalysisError
            If the provider fails or twice returns output that does not
            contain a usable summary.
        """
        if file_type is FileType.IMAGE:
            if not self._llm.supports_vision():
                raise AnalysisError(
                    message="Configured LLM provider cannot analyse images",
                    provider_name=self.provider_name,
                )
            subject = "image"
        else:
            subject = "document"
            extracted_text = (extracted_text or "")[: self._max_chars]

        last_error: Exception | None = None
        for attempt, template in enumerate((_ANALYSIS_INSTRUCTIONS, _RETRY_INSTRUCTIONS), start=1):
            prompt = template.format(subject=subject)
            try:
                if file_type is FileType.IMAGE:
                    raw = await self._llm.vision_extract(data, prompt, max_tokens=self._max_tokens)
                else:
                    raw = await self._llm.complete(
                        system_prompt=_SYSTEM_PROMPT,
                        user_prompt=self._text_prompt(prompt, extracted_text or ""),
                        temperature=self._temperature if attempt == 1 else 0.0,
                        max_tokens=self._max_tokens,
                    )
            except LLMError as exc:
                raise AnalysisError(
                    message=f"Analysis request failed: {exc.message}",
                    provider_name=self.provider_name,
                ) from exc

            try:
                result = self._build_result(self._parse_llm_response(raw))
            except (ValueError, PydanticValidationError) as exc:
                last_error = exc
                self._logger.warning(
                    "analysis_response_unparseable",
                    attempt=attempt,
                    file_type=file_type.value,
                    error=str(exc),
                )
                continue

            self._logger.info(
                "analysis_complete",
                file_type=file_type.value,
                provider=self.provider_name,
                tags=len(result.tags),
                category=result.category,
                attempt=attempt,
            )
            return result

        raise AnalysisError(
            message=f"LLM returned unusable analysis output: {last_error}",
            provider_name=self.provider_name,
        ) from last_error

    @staticmethod
    def _text_prompt(instructions: str, text: str) -> str:
        body = text if text.strip() else "(the document has no extractable text)"
        return f"{instructions}\n\nContent:\n{body}"

    @staticmethod
    def _parse_llm_response(response: str) -> dict[str, Any]:
        """Extract a JSON object from an LLM reply.

        Raises ``ValueError`` (``json.JSONDecodeError`` included) when no
        object can be recovered.
        """
        text = response.strip()

        fence_match = _JSON_FENCE_RE.search(text)
        if fence_match:
            text = fence_match.group(1).strip()

        if not text.startswith("{"):
            brace_start = text.find("{")
            brace_end = text.rfind("}")
            if brace_start != -1 and brace_end > brace_start:
                text = text[brace_start : brace_end + 1]

        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("LLM response is not a JSON object")
        return parsed

    def _build_result(self, parsed: dict[str, Any]) -> AnalysisResult:
        summary = parsed.get("summary")
        if not isinstance(summary, str):
            raise ValueError("LLM response missing 'summary' string")

        raw_tags = parsed.get("tags") or []
        if isinstance(raw_tags, str):
            raw_tags = raw_tags.split(",")
        tags: list[str] = []
        for tag in raw_tags:
            if not isinstance(tag, str):
                continue
            cleaned = tag.strip()
            if cleaned and cleaned not in tags:
                tags.append(cleaned)

        category = parsed.get("category")
        if not isinstance(category, str) or not category.strip():
            category = None

        return AnalysisResult(
            summary=summary.strip(),
            tags=tags[: self._max_tags],
            category=category.strip() if category else None,
        )
