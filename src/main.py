"""Smart-link resolver FastAPI application entry point.

Wires together providers, stores, services, and routes via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``
and configures structured logging.

``build_resolver`` is also used by the CLI to get the same wiring outside
the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.routes import API_VERSION
from src.api.routes import router as api_router
from src.config import ResolverConfig, Settings, load_config, settings
from src.pipeline.orchestrator import TrackResolutionPipeline
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.catalog.spotify_provider import SpotifyCatalogProvider
from src.providers.identification.acrcloud_provider import (
    DEFAULT_PLATFORMS,
    ACRCloudIdentificationProvider,
)
from src.providers.store.sqlite_resolution_store import SQLiteResolutionStore
from src.providers.store.sqlite_smart_link_store import SQLiteSmartLinkStore
from src.services.persistence_finalizer import PersistenceFinalizer
from src.services.resolution_cache import ResolutionCache
from src.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def build_resolver(
    app_settings: Settings,
    config: dict[str, Any] | None = None,
    db_path: str | None = None,
) -> dict[str, Any]:
    """Construct every provider, store and service for the resolver.

    Parameters
    ----------
    app_settings:
        Credentials, paths and app settings.
    config:
        Output of :func:`load_config`; read from disk when omitted.
    db_path:
        Overrides ``app_settings.resolver_db_path``.

    Returns
    -------
    dict
        Named components; the web app stores them on ``app.state``.
        ``http_client`` must be closed by the caller.
    """
    config = config if config is not None else load_config(settings=app_settings)
    resolver_config = ResolverConfig.from_config(config)
    provider_config = config.get("providers") or {}

    http_client = httpx.AsyncClient(timeout=resolver_config.provider_timeout_seconds)
    token_cache = MemoryCacheProvider()

    identification_provider = ACRCloudIdentificationProvider(
        http_client=http_client,
        settings=app_settings,
        platforms=provider_config.get("acrcloud_platforms") or DEFAULT_PLATFORMS,
    )
    catalog_provider = SpotifyCatalogProvider(
        http_client=http_client,
        settings=app_settings,
        token_cache=token_cache,
    )

    path = db_path or app_settings.resolver_db_path
    resolution_store = SQLiteResolutionStore(db_path=path)
    smart_link_store = SQLiteSmartLinkStore(db_path=path)

    pipeline = TrackResolutionPipeline(
        identification_provider=identification_provider,
        catalog_provider=catalog_provider,
        cache=ResolutionCache(resolution_store, min_confidence=resolver_config.confidence_min),
        finalizer=PersistenceFinalizer(
            store=resolution_store,
            config=resolver_config,
            smart_links=smart_link_store,
        ),
        config=resolver_config,
    )

    return {
        "http_client": http_client,
        "token_cache": token_cache,
        "identification_provider": identification_provider,
        "catalog_provider": catalog_provider,
        "resolution_store": resolution_store,
        "smart_link_store": smart_link_store,
        "resolver_config": resolver_config,
        "pipeline": pipeline,
    }


async def initialize_stores(components: dict[str, Any]) -> None:
    """Create the SQLite tables used by the resolver."""
    await components["resolution_store"].initialize()
    await components["smart_link_store"].initialize()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(preset: dict[str, Any] | None):
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Build components on startup, close the HTTP client on shutdown."""
        if preset is None:
            config = load_config(settings=settings)
            configure_logging(
                log_level=settings.log_level,
                json_output=bool((config.get("logging") or {}).get("json")),
            )
            components = build_resolver(settings, config)
            await initialize_stores(components)
        else:
            components = preset

        for key, value in components.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=API_VERSION,
            environment=settings.app_env,
            providers=settings.get_available_providers(),
        )

        yield

        http_client: httpx.AsyncClient | None = components.get("http_client")
        if http_client is not None:
            await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(components: dict[str, Any] | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Pre-built components to expose on ``app.state`` instead of
        building them from settings (used by tests).
    """
    application = FastAPI(
        title="Smart-link Resolver API",
        version=API_VERSION,
        description=(
            "Resolve a track reference (fingerprint ID, ISRC, streaming URL or "
            "title/artist hints) into canonical cross-platform streaming links."
        ),
        lifespan=_make_lifespan(components),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
