"""Abstract base class for LLM service providers.

Defines the contract for the large-language-model backend that turns an
uploaded file into a summary, tags, and a category.  Implementations wrap
the Anthropic API (Claude) or an OpenAI-compatible API.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: AnthropicLLMProvider, OpenAILLMProvider
# Located in: clipvault/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used by the analysis service.

    Providers must support plain text completion; vision (image analysis) is
    optional and declared via :meth:`supports_vision`.
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """Generate a text completion from the model.

        Raises
        ------
        clipvault.utils.errors.LLMError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    async def vision_extract(self, image_bytes: bytes, prompt: str, max_tokens: int = 1000) -> str:
        """Analyse an image using the model's vision capability.

        ``max_tokens`` caps the answer length, as for :meth:`complete`.

        Raises
        ------
        clipvault.utils.errors.LLMError
            If the provider has no vision support or the API call fails.
        """

    @abstractmethod
    def supports_vision(self) -> bool:
        """Return ``True`` if this provider can process image inputs."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"anthropic"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (API key present)."""
