# matter_diff/infrastructure/backend/backend_client.py

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx

from matter_diff.application.exceptions import UpstreamUnavailableError
from matter_diff.config.settings import get_settings
from matter_diff.domain.activity_payload import extract_activity_items, extract_matter
from matter_diff.domain.models.activity import ActivityEntry

logger = logging.getLogger(__name__)

MATTER_PATH = "/api/matters/{practice_id}"
ACTIVITY_PATH = "/api/matters/{practice_id}/matters/{matter_id}/activity"

# Connection-scoped headers never travel between hops.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)


def forwardable_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Request headers safe to send to the backend."""
    return {k: v for k, v in headers.items() if k.lower() not in HOP_BY_HOP_HEADERS}


def parse_json_body(content: bytes) -> Any:
    if not content:
        return None
    try:
        return json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return None


class BackendClient:
    """HTTP client for the backend system of record. Every call carries the client timeout."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        if client is None:
            settings = get_settings()
            client = httpx.AsyncClient(
                base_url=settings.backend_api_url,
                timeout=settings.backend_timeout_seconds,
            )
        self.client = client

    async def close(self) -> None:
        await self.client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        content: Optional[bytes] = None,
        params: Optional[Sequence[Tuple[str, str]]] = None,
    ) -> httpx.Response:
        """Send a request unmodified apart from hop-by-hop headers. Raises UpstreamUnavailableError."""
        try:
            return await self.client.request(
                method,
                path,
                headers=forwardable_headers(headers),
                content=content,
                params=params,
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Backend {method} {path} failed: {e!r}") from e

    async def fetch_matter_snapshot(
        self,
        practice_id: str,
        matter_id: str,
        headers: Mapping[str, str],
    ) -> Optional[Dict[str, Any]]:
        """Current matter state, or None on a non-2xx status or unusable body."""
        response = await self.request(
            "GET",
            MATTER_PATH.format(practice_id=practice_id),
            headers,
            params=[("matter_uuid", matter_id)],
        )
        if not response.is_success:
            logger.info(
                "matter_snapshot_unavailable",
                extra={"matter_id": matter_id, "status_code": response.status_code},
            )
            return None
        return extract_matter(parse_json_body(response.content))

    async def fetch_activity_list(
        self,
        practice_id: str,
        matter_id: str,
        headers: Mapping[str, str],
    ) -> List[ActivityEntry]:
        """Activity entries for a matter; empty on a non-2xx status or unusable body."""
        response = await self.request(
            "GET",
            ACTIVITY_PATH.format(practice_id=practice_id, matter_id=matter_id),
            headers,
        )
        if not response.is_success:
            return []
        return [ActivityEntry.from_payload(item) for item in extract_activity_items(parse_json_body(response.content))]
