"""FastAPI dependency injection: Redis, backend client, supervisor, services, actor and correlation id."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from matter_diff.application.correlation_worker import CorrelationWorker
from matter_diff.application.enrichment import EnrichmentReader
from matter_diff.application.task_supervisor import BackgroundTaskSupervisor
from matter_diff.application.update_proxy import UpdateProxy
from matter_diff.config.settings import get_settings
from matter_diff.infrastructure.backend.backend_client import BackendClient
from matter_diff.infrastructure.cache.diff_repository_redis import RedisDiffRepository
from matter_diff.infrastructure.cache.redis_client import RedisClient

_redis_client: RedisClient | None = None
_backend_client: BackendClient | None = None
_supervisor: BackgroundTaskSupervisor | None = None


def get_redis_client() -> RedisClient:
    """Return singleton Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client


def get_backend_client() -> BackendClient:
    """Return singleton backend HTTP client."""
    global _backend_client
    if _backend_client is None:
        _backend_client = BackendClient()
    return _backend_client


def get_supervisor() -> BackgroundTaskSupervisor:
    """Return singleton background task supervisor."""
    global _supervisor
    if _supervisor is None:
        _supervisor = BackgroundTaskSupervisor(inline=get_settings().correlation_inline)
    return _supervisor


async def close_clients() -> None:
    """Drain background work, then close network clients. Called on application shutdown."""
    global _redis_client, _backend_client, _supervisor
    if _supervisor is not None:
        await _supervisor.drain(timeout=get_settings().shutdown_drain_seconds)
        _supervisor = None
    if _backend_client is not None:
        await _backend_client.close()
        _backend_client = None
    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_diff_repository(
    redis: Annotated[RedisClient, Depends(get_redis_client)],
) -> RedisDiffRepository:
    return RedisDiffRepository(redis_client=redis)


def get_update_proxy(
    backend: Annotated[BackendClient, Depends(get_backend_client)],
    repository: Annotated[RedisDiffRepository, Depends(get_diff_repository)],
    supervisor: Annotated[BackgroundTaskSupervisor, Depends(get_supervisor)],
) -> UpdateProxy:
    """Build UpdateProxy with injected backend, correlation worker, supervisor, logger."""
    worker = CorrelationWorker(activity_reader=backend, diff_repository=repository)
    return UpdateProxy(
        backend=backend,
        worker=worker,
        supervisor=supervisor,
        logger=logging.getLogger("matter_diff.application.update_proxy"),
    )


def get_enrichment_reader(
    repository: Annotated[RedisDiffRepository, Depends(get_diff_repository)],
) -> EnrichmentReader:
    return EnrichmentReader(diff_repository=repository)


def get_actor_user_id(request: Request) -> Optional[str]:
    """Actor id from the header set by the upstream auth layer, if any."""
    value = request.headers.get(get_settings().actor_header)
    return value.strip() if value and value.strip() else None


def get_correlation_id(request: Request) -> str:
    """Extract correlation_id from request.state (set by middleware)."""
    return getattr(request.state, "correlation_id", "") or ""
