"""FastAPI route definitions for the URL shortener REST API.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    POST /api/shorten
        ├─ ShortenRequest (request body)
        └─ ShortenResponse (201) or 400/409/500/503

    GET  /api/stats
        └─ list[URLStats] (200), newest first

    GET  /api/stats/:short_code
        └─ URLStats (200) or 404

    GET  /:short_code
        └─ 302 Redirect, or 404 / fallback redirect

Request Flow Diagram
====================
::
    ┌─────────────┐
    │  HTTP       │
    │  Request    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Parse body  │
    │ (Pydantic)  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Inject      │
    │ service /   │
    │ resolver    │
    └──────┬──────┘
           ▼
    ┌─────────────┐   ShortenerError   ┌───────────────┐
    │ Call core   ├───────────────────►│ HTTPException │
    └──────┬──────┘                    │ (status, kind)│
           ▼                           └───────────────┘
    ┌─────────────┐
    │ Serialize   │
    │ response    │
    └─────────────┘

Key Behaviours
===============
- Core errors become ``{"detail": {"error": kind, "message": ...}}`` bodies.
- Short URLs use BASE_URL when configured, otherwise the request's own host.
- The redirect returns before the click increment has been written.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from app.dependencies import (
    RequestContext,
    get_redirect_resolver,
    get_request_context,
    get_shortening_service,
)
from app.enums import HealthStatus
from app.errors import NotFoundError, ShortenerError
from app.models import URL
from app.resolver import RedirectResolver
from app.schemas import HealthResponse, ShortenRequest, ShortenResponse, URLStats
from app.service import ShorteningService

__all__ = ["router"]

router = APIRouter()


def _http_error(exc: ShortenerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail={"error": exc.kind, "message": str(exc)})


def _to_stats(url: URL, ctx: RequestContext) -> URLStats:
    return URLStats(
        id=url.id,
        original_url=url.original_url,
        short_code=url.short_code,
        click_count=url.click_count,
        created_at=url.created_at,
        short_url=ctx.short_url(url.short_code),
    )


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> HealthResponse:
    db_status = HealthStatus.HEALTHY
    try:
        await ctx.service_manager.database.ping()
    except Exception as e:
        ctx.logger.error(f"Database health check failed: {e}")
        db_status = HealthStatus.UNHEALTHY

    return HealthResponse(status=db_status, database=db_status)


@router.post("/api/shorten", response_model=ShortenResponse, status_code=201, tags=["urls"])
async def shorten_url(
    payload: ShortenRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ShorteningService = Depends(get_shortening_service),
) -> ShortenResponse:
    ctx.logger.info(
        f"URL shortening requested: {payload.original_url}",
        extra={"operation": "shorten", "custom_code": payload.custom_code},
    )
    try:
        url = await service.shorten(payload.original_url, payload.custom_code)
    except ShortenerError as exc:
        raise _http_error(exc) from exc

    return ShortenResponse(
        original_url=url.original_url,
        short_code=url.short_code,
        short_url=ctx.short_url(url.short_code),
    )


@router.get("/api/stats", response_model=list[URLStats], tags=["urls"])
async def list_stats(
    ctx: RequestContext = Depends(get_request_context),
    service: ShorteningService = Depends(get_shortening_service),
) -> list[URLStats]:
    try:
        urls = await service.stats()
    except ShortenerError as exc:
        raise _http_error(exc) from exc
    return [_to_stats(url, ctx) for url in urls]


@router.get("/api/stats/{short_code}", response_model=URLStats, tags=["urls"])
async def get_stats(
    short_code: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ShorteningService = Depends(get_shortening_service),
) -> URLStats:
    try:
        url = await service.get_stats(short_code)
    except ShortenerError as exc:
        raise _http_error(exc) from exc
    if url is None:
        raise _http_error(NotFoundError(f"Short code not found: {short_code}"))
    return _to_stats(url, ctx)


@router.get("/{short_code}", tags=["redirect"])
async def redirect_to_url(
    short_code: str,
    ctx: RequestContext = Depends(get_request_context),
    resolver: RedirectResolver = Depends(get_redirect_resolver),
) -> RedirectResponse:
    if short_code == "favicon.ico":
        raise HTTPException(status_code=404)

    try:
        target = await resolver.resolve(short_code)
    except NotFoundError as exc:
        ctx.logger.info(f"Redirect failed - short code not found: {short_code}")
        fallback = ctx.settings.NOT_FOUND_REDIRECT_URL
        if fallback:
            return RedirectResponse(url=fallback, status_code=302)
        raise _http_error(exc) from exc
    except ShortenerError as exc:
        raise _http_error(exc) from exc

    ctx.logger.info(
        f"Redirect: {short_code} -> {target}",
        extra={"operation": "redirect", "short_code": short_code, "duration_ms": ctx.get_duration()},
    )
    return RedirectResponse(url=target, status_code=302)
