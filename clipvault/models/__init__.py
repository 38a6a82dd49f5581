"""ClipVault domain models: re-exports all public model classes."""

from __future__ import annotations

from clipvault.models.clip import (
    AnalysisResult,
    Clip,
    ClipFilter,
    FileType,
    IngestRequest,
)

__all__ = [
    "AnalysisResult",
    "Clip",
    "ClipFilter",
    "FileType",
    "IngestRequest",
]
