"""Business logic layer.

- **clip_service** -- ClipService, the ingest / search / remove orchestrator
  over the blob store and clip repository.
- **analysis_service** -- AnalysisService, LLM-generated summary, tags and
  category for an uploaded file.
"""

from clipvault.services.analysis_service import AnalysisService
from clipvault.services.clip_service import ClipService

__all__ = ["AnalysisService", "ClipService"]
