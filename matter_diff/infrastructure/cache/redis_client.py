# matter_diff/infrastructure/cache/redis_client.py

from typing import List, Mapping, Optional, Sequence

import redis.asyncio as redis

from matter_diff.config.settings import get_settings


class RedisClient:
    def __init__(self, url: Optional[str] = None):
        settings = get_settings()
        self.client = redis.from_url(
            url or settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.store_timeout_seconds,
            socket_connect_timeout=settings.store_timeout_seconds,
        )

    async def hset_many(self, key: str, mapping: Mapping[str, str]) -> int:
        """Set several hash fields in one atomic command. Returns number of new fields."""
        return await self.client.hset(key, mapping=dict(mapping))

    async def hmget(self, key: str, fields: Sequence[str]) -> List[Optional[str]]:
        """Values for fields in order; None where a field does not exist."""
        return await self.client.hmget(key, list(fields))

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()
