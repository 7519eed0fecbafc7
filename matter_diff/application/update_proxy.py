"""Update proxy: forwards a matter write to the backend and schedules diff correlation for it."""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import httpx

from matter_diff.application.correlation_worker import CorrelationWorker
from matter_diff.application.exceptions import ApplicationError
from matter_diff.application.task_supervisor import BackgroundTaskSupervisor
from matter_diff.domain.activity_payload import extract_matter
from matter_diff.domain.differ import compute_changed_fields
from matter_diff.infrastructure.backend.backend_client import BackendClient, parse_json_body


class UpdateProxy:
    """
    The backend response is relayed to the caller exactly as received. Snapshot reads, diffing and
    correlation are best-effort: they only ever log, never fail the write.
    """

    def __init__(
        self,
        backend: BackendClient,
        worker: CorrelationWorker,
        supervisor: BackgroundTaskSupervisor,
        logger: logging.Logger,
    ) -> None:
        self._backend = backend
        self._worker = worker
        self._supervisor = supervisor
        self._logger = logger

    async def _snapshot(
        self,
        practice_id: str,
        matter_id: str,
        headers: Mapping[str, str],
        phase: str,
    ) -> Optional[Dict[str, Any]]:
        try:
            return await self._backend.fetch_matter_snapshot(practice_id, matter_id, headers)
        except ApplicationError as e:
            self._logger.warning(
                "matter_snapshot_failed",
                extra={"matter_id": matter_id, "phase": phase, "error": e.message},
            )
            return None

    async def proxy_update(
        self,
        practice_id: str,
        matter_id: str,
        method: str,
        path: str,
        headers: Mapping[str, str],
        body: bytes,
        actor_user_id: Optional[str],
        params: Optional[Sequence[Tuple[str, str]]] = None,
    ) -> httpx.Response:
        """
        Capture before-state, forward the write, capture after-state, schedule correlation.
        Only a failure to reach the backend for the write itself propagates (UpstreamUnavailableError).
        """
        before = await self._snapshot(practice_id, matter_id, headers, "before")

        response = await self._backend.request(method, path, headers, content=body, params=params)
        if not response.is_success:
            return response

        after = extract_matter(parse_json_body(response.content))
        if after is None:
            after = await self._snapshot(practice_id, matter_id, headers, "after")

        if before is None or after is None:
            self._logger.info(
                "diff_skipped_missing_snapshot",
                extra={"matter_id": matter_id, "has_before": before is not None, "has_after": after is not None},
            )
            return response

        fields = compute_changed_fields(before, after)
        self._logger.info("diff_computed", extra={"matter_id": matter_id, "fields": fields})
        if not fields:
            return response

        try:
            await self._supervisor.spawn(
                self._worker.run(practice_id, matter_id, fields, actor_user_id, dict(headers)),
                name=f"correlate:{matter_id}",
            )
        except Exception as e:
            self._logger.error(
                "correlation_schedule_failed",
                extra={"matter_id": matter_id, "error": str(e)},
            )
        return response
