"""Public interface definitions for every storage and external service.

Every backend ClipVault talks to is accessed exclusively through the
abstract base classes defined in this package.  Concrete adapters
implement these interfaces and are injected at startup by
``clipvault.main``, so tests can substitute fakes and a managed backend
can replace the local one without touching the clip service.

CONCRETE PROVIDER MAP:
    Interface          →  Concrete implementations (in clipvault/providers/)
    ─────────────────────────────────────────────────────────────────────
    IBlobStore         →  LocalBlobStore
    IClipRepository    →  SQLiteClipRepository
    ILLMProvider       →  AnthropicLLMProvider, OpenAILLMProvider
"""

from clipvault.interfaces.blob_store import IBlobStore
from clipvault.interfaces.clip_repository import IClipRepository
from clipvault.interfaces.llm_provider import ILLMProvider

__all__ = [
    "IBlobStore",
    "IClipRepository",
    "ILLMProvider",
]
