from types import TracebackType
from typing import Self

import redis.asyncio as redis
import structlog

from minibank.config import settings


logger = structlog.get_logger()


class RedisClient:
    """Owns the Redis connection behind the exchange rate cache.

    A short socket timeout keeps a slow Redis from stalling transfers: the
    cache treats timeouts like any other Redis error and falls back to the
    rate source.
    """

    def __init__(self, url: str | None = None, socket_timeout: float = 1.0) -> None:
        self._url = url or settings.redis_url
        self._socket_timeout = socket_timeout
        self._client: redis.Redis[bytes] | None = None

    @property
    def safe_url(self) -> str:
        """Connection URL without credentials."""
        return self._url.rsplit("@", 1)[-1]

    @property
    def client(self) -> "redis.Redis[bytes]":
        if self._client is None:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        client: redis.Redis[bytes] = redis.from_url(
            self._url,
            decode_responses=False,
            socket_timeout=self._socket_timeout,
            socket_connect_timeout=self._socket_timeout,
        )
        try:
            await client.ping()
        except redis.RedisError:
            await client.aclose()
            raise
        self._client = client
        logger.info("redis_connected", url=self.safe_url)

    async def close(self) -> None:
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        logger.info("redis_disconnected", url=self.safe_url)

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except redis.RedisError:
            return False

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
