"""Matters proxy router: update (diff + correlation) and activity list (enriched)."""

from typing import Annotated, Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from matter_diff.api.dependencies import (
    get_actor_user_id,
    get_backend_client,
    get_enrichment_reader,
    get_update_proxy,
)
from matter_diff.application.enrichment import EnrichmentReader
from matter_diff.application.update_proxy import UpdateProxy
from matter_diff.core.context import matter_id_ctx
from matter_diff.infrastructure.backend.backend_client import BackendClient

router = APIRouter()

# Recomputed by Starlette for the relayed body (httpx has already decoded it).
_RELAY_EXCLUDED_HEADERS = frozenset(
    {"content-length", "content-encoding", "transfer-encoding", "connection", "keep-alive"}
)


def _relay(upstream: httpx.Response, content: bytes, media_type: Optional[str] = None) -> Response:
    """Rebuild the backend response for the caller: same status, headers (repeats kept) and body."""
    response = Response(content=content, status_code=upstream.status_code)
    for key, value in upstream.headers.multi_items():
        if key.lower() in _RELAY_EXCLUDED_HEADERS:
            continue
        if media_type and key.lower() == "content-type":
            continue
        response.headers.append(key, value)
    if media_type:
        response.headers["content-type"] = media_type
    return response


@router.api_route("/{practice_id}/update/{matter_id}", methods=["PUT", "PATCH", "POST"])
async def update_matter(
    request: Request,
    practice_id: str,
    matter_id: str,
    actor_user_id: Annotated[Optional[str], Depends(get_actor_user_id)] = None,
    update_proxy: Annotated[UpdateProxy, Depends(get_update_proxy)] = ...,
):
    """Forward a matter write; the caller gets the backend response as-is."""
    matter_id_ctx.set(matter_id)
    body = await request.body()
    upstream = await update_proxy.proxy_update(
        practice_id=practice_id,
        matter_id=matter_id,
        method=request.method,
        path=request.url.path,
        headers=request.headers,
        body=body,
        actor_user_id=actor_user_id,
        params=request.query_params.multi_items(),
    )
    return _relay(upstream, upstream.content)


@router.get("/{practice_id}/matters/{matter_id}/activity")
async def get_matter_activity(
    request: Request,
    practice_id: str,
    matter_id: str,
    backend: Annotated[BackendClient, Depends(get_backend_client)] = ...,
    reader: Annotated[EnrichmentReader, Depends(get_enrichment_reader)] = ...,
):
    """Proxy the activity list and attach stored changed_fields to matching entries."""
    matter_id_ctx.set(matter_id)
    upstream = await backend.request(
        "GET",
        request.url.path,
        request.headers,
        params=request.query_params.multi_items(),
    )
    content = await reader.enrich_activity_list(matter_id, upstream.content)
    if content is upstream.content:
        return _relay(upstream, content)
    return _relay(upstream, content, media_type="application/json")
