"""FastAPI API routes for the track resolver.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                          Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/resolve                   POST    Resolve a track reference
# /api/v1/resolutions/{id}          GET     Fetch a cached resolution row
# /api/v1/health                    GET     Health check + provider status
#
# Dependencies are read from app.state (populated at startup in main.py)
# through Annotated[..., Depends(helper)] aliases.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import HealthResponse, ProviderStatus, ResolveRequest
from src.interfaces.resolution_store import IResolutionStore
from src.models.track import CachedResolution, ResolutionResult
from src.pipeline.orchestrator import TrackResolutionPipeline
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

API_VERSION = "0.1.0"


def _get_pipeline(request: Request) -> TrackResolutionPipeline:
    """Return the resolution pipeline from application state."""
    return request.app.state.pipeline


def _get_resolution_store(request: Request) -> IResolutionStore:
    """Return the resolution cache store from application state."""
    return request.app.state.resolution_store


PipelineDep = Annotated[TrackResolutionPipeline, Depends(_get_pipeline)]
ResolutionStoreDep = Annotated[IResolutionStore, Depends(_get_resolution_store)]


@router.post("/resolve", response_model=ResolutionResult)
async def resolve_track(body: ResolveRequest, pipeline: PipelineDep) -> ResolutionResult:
    """Resolve a track reference.

    Always answers 200; a failed resolution is ``success: false`` on the
    ``none`` path with ``needs_manual_review: true``.
    """
    result = await pipeline.resolve(body.to_request())
    _logger.info(
        "resolve_request_complete",
        success=result.success,
        resolver_path=result.resolver_path.value,
        confidence=result.confidence,
    )
    return result


@router.get("/resolutions/{resolution_id}", response_model=CachedResolution)
async def get_resolution(resolution_id: str, store: ResolutionStoreDep) -> CachedResolution:
    """Return one cached resolution row."""
    row = await store.find_by_id(resolution_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Resolution {resolution_id} not found")
    return row


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Report liveness and which providers are configured."""
    providers: list[ProviderStatus] = []
    for role, attr in (("identification", "identification_provider"), ("catalog", "catalog_provider")):
        provider = getattr(request.app.state, attr, None)
        if provider is None:
            continue
        providers.append(
            ProviderStatus(
                name=provider.get_provider_name(),
                role=role,
                available=provider.is_available(),
            )
        )
    return HealthResponse(status="ok", version=API_VERSION, providers=providers)
