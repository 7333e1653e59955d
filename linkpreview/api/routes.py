"""GET /?q=, GET /avatar/{username}, GET /health endpoint handlers."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from linkpreview.api.schemas import HealthStatus
from linkpreview.api.service import (
    AvatarError,
    fetch_avatar,
    is_previewable_url,
    is_valid_username,
    preview,
)
from linkpreview.api.usage import render_usage
from linkpreview.cache.redis import ResponseCache
from linkpreview.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.client


def _get_cache(request: Request) -> ResponseCache | None:
    return getattr(request.app.state, "cache", None)


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _usage_response(request: Request, settings: Settings) -> PlainTextResponse:
    text = render_usage(str(request.base_url), settings.avatar_profile_url_template)
    return PlainTextResponse(text, status_code=400)


def _fetch_failure(url: str, exc: Exception) -> HTTPException:
    logger.warning("fetch failed", extra={"url": url, "error": str(exc)})
    return HTTPException(status_code=422, detail=f"Could not fetch {url}: {type(exc).__name__}")


@router.get("/")
async def get_preview(
    request: Request,
    q: str | None = None,
    client: httpx.AsyncClient = Depends(_get_client),
    cache: ResponseCache | None = Depends(_get_cache),
    settings: Settings = Depends(_get_settings),
):
    if not is_previewable_url(q):
        return _usage_response(request, settings)

    try:
        metadata = await preview(client, cache, q)
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise _fetch_failure(q, exc) from exc

    if metadata.error:
        cache_control = "no-store"
    else:
        cache_control = f"public, max-age={settings.response_max_age}"
    return JSONResponse(
        content=metadata.to_json_dict(),
        headers={"Cache-Control": cache_control},
    )


@router.get("/avatar/{username}")
async def get_avatar(
    username: str,
    request: Request,
    client: httpx.AsyncClient = Depends(_get_client),
    cache: ResponseCache | None = Depends(_get_cache),
    settings: Settings = Depends(_get_settings),
):
    if not is_valid_username(username):
        return _usage_response(request, settings)

    try:
        avatar = await fetch_avatar(client, cache, settings, username)
    except AvatarError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        raise _fetch_failure(username, exc) from exc

    return Response(
        content=avatar.content,
        media_type=avatar.content_type,
        headers={"Cache-Control": f"public, max-age={settings.response_max_age}"},
    )


@router.get("/health")
async def health() -> HealthStatus:
    return HealthStatus()
