"""ClipVault FastAPI application entry point.

Wires together providers, services and routes via dependency injection.
Configuration comes from ``.env`` / environment variables (Settings) and
``config/config.yaml`` (analysis tuning).  Uploaded blobs are mounted as
static files under the public upload prefix so ``thumbnail_url`` values
resolve directly.

Every component is built inside :func:`create_app`; nothing is created at
import time.  Run with::

    python -m clipvault.main
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from clipvault.api.middleware import (
    BodySizeLimitMiddleware,
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from clipvault.api.routes import router as api_router
from clipvault.config.loader import load_config
from clipvault.config.settings import Settings
from clipvault.interfaces.llm_provider import ILLMProvider
from clipvault.providers.blob.local_blob_store import LocalBlobStore
from clipvault.providers.clips.sqlite_clip_repository import SQLiteClipRepository
from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider
from clipvault.providers.llm.openai_provider import OpenAILLMProvider
from clipvault.services.analysis_service import AnalysisService
from clipvault.services.clip_service import ClipService
from clipvault.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# LLM provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first LLM provider with a configured API key.

    Priority order: Anthropic -> OpenAI.  ``None`` disables server-side
    analysis; client-analysed clips are still accepted.
    """
    available = app_settings.get_available_llm_providers()
    if not available:
        return None
    if available[0] == "anthropic":
        return AnthropicLLMProvider(settings=app_settings)
    return OpenAILLMProvider(settings=app_settings)


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    config = config if config is not None else load_config(settings=app_settings)
    analysis_cfg = config.get("analysis", {})

    clip_repository = SQLiteClipRepository(db_path=app_settings.database_path)
    blob_store = LocalBlobStore(
        root_dir=app_settings.upload_dir,
        public_prefix=app_settings.public_upload_prefix,
    )

    llm_provider = _build_llm_provider(app_settings)
    analysis_service: AnalysisService | None = None
    if llm_provider is not None:
        analysis_service = AnalysisService(
            llm_provider=llm_provider,
            max_chars=analysis_cfg.get("max_chars", app_settings.analysis_max_chars),
            temperature=analysis_cfg.get("temperature", 0.2),
            max_tokens=analysis_cfg.get("max_tokens", 800),
            max_tags=analysis_cfg.get("max_tags", 10),
        )

    clip_service = ClipService(
        repository=clip_repository,
        blob_store=blob_store,
        analysis=analysis_service,
    )

    provider_info = {
        "clip_repository": clip_repository.get_provider_name(),
        "blob_store": blob_store.get_provider_name(),
        "llm": llm_provider.get_provider_name() if llm_provider else None,
        "llm_vision": llm_provider.supports_vision() if llm_provider else False,
    }

    return {
        "clip_repository": clip_repository,
        "blob_store": blob_store,
        "llm_provider": llm_provider,
        "analysis_service": analysis_service,
        "clip_service": clip_service,
        "provider_info": provider_info,
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    components: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    settings:
        Application settings; read from the environment when omitted.
    components:
        Pre-built components (tests inject fakes here).  When omitted
        they are constructed by :func:`_build_all` at startup.
    """
    app_settings = settings or Settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
    )

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        built = components if components is not None else _build_all(app_settings)
        for key, value in built.items():
            setattr(application.state, key, value)

        await built["blob_store"].initialize()
        await built["clip_repository"].initialize()

        _logger.info(
            "app_startup",
            version=_VERSION,
            environment=app_settings.app_env,
            providers=built.get("provider_info", {}),
        )
        yield
        _logger.info("app_shutdown")

    application = FastAPI(
        title="ClipVault API",
        version=_VERSION,
        description=(
            "Store files together with an AI-generated summary, tags and "
            "category, then search them by type and free text."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = app_settings

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(
        BodySizeLimitMiddleware, max_body_size=app_settings.max_request_size
    )
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())
    register_exception_handlers(application)

    # -- API routes --
    application.include_router(api_router)

    # -- Stored blobs, served at the address returned as thumbnail_url --
    application.mount(
        app_settings.public_upload_prefix,
        StaticFiles(directory=app_settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return application


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    _settings = Settings()
    uvicorn.run(
        "clipvault.main:create_app",
        factory=True,
        host=_settings.app_host,
        port=_settings.app_port,
        reload=(_settings.app_env == "development"),
    )
