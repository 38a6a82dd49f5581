"""LLM provider adapters.

Two concrete implementations of ILLMProvider (clipvault/interfaces/llm_provider.py):
    - AnthropicLLMProvider: Claude Sonnet (vision + text)
    - OpenAILLMProvider: gpt-4o / gpt-4o-mini (also OpenAI-compatible APIs)

At startup, clipvault.main picks the provider matching the configured API
key (Anthropic first, then OpenAI) and injects it into the analysis service.
"""

from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider
from clipvault.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
