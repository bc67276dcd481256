import asyncio
from typing import NoReturn

import httpx
import structlog
import uvicorn

from minibank.api.app import create_app
from minibank.api.deps import AppContext
from minibank.application.converter import CurrencyConverter
from minibank.application.locks import AccountLocks
from minibank.application.ports import ExchangeRateSource
from minibank.application.unit_of_work import UnitOfWorkProvider
from minibank.config import Settings, settings
from minibank.infrastructure.database import Database
from minibank.infrastructure.exchange_rates import (
    CachedExchangeRateSource,
    HttpExchangeRateSource,
    StaticExchangeRateSource,
)
from minibank.infrastructure.memory import InMemoryStorage
from minibank.infrastructure.redis_client import RedisClient
from minibank.logging import configure_logging


logger = structlog.get_logger()


def build_rate_source(
    config: Settings,
    http_client: httpx.AsyncClient,
    redis_client: RedisClient | None = None,
) -> ExchangeRateSource:
    source: ExchangeRateSource
    if config.exchange_rate_source == "http":
        source = HttpExchangeRateSource(config.exchange_rates_url, http_client)
    else:
        source = StaticExchangeRateSource(config.static_exchange_rates)

    if redis_client is not None:
        source = CachedExchangeRateSource(
            source,
            redis_client.client,
            ttl_seconds=config.exchange_rate_cache_ttl_seconds,
        )
    return source


def build_context(
    config: Settings,
    uow_provider: UnitOfWorkProvider,
    rate_source: ExchangeRateSource,
) -> AppContext:
    return AppContext(
        uow_provider=uow_provider,
        converter=CurrencyConverter(rate_source),
        locks=AccountLocks(),
        allow_overdraft=config.allow_overdraft,
        commission_rate=config.commission_rate,
    )


async def main() -> NoReturn:
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
    )

    logger.info(
        "starting_minibank",
        http_port=settings.http_port,
        storage_backend=settings.storage_backend,
        exchange_rate_source=settings.exchange_rate_source,
        exchange_rate_cache_enabled=settings.exchange_rate_cache_enabled,
        allow_overdraft=settings.allow_overdraft,
        log_level=settings.log_level,
    )

    database: Database | None = None
    uow_provider: UnitOfWorkProvider
    if settings.storage_backend == "postgres":
        database = Database(settings.database_url)
        uow_provider = database.unit_of_work
    else:
        uow_provider = InMemoryStorage().unit_of_work

    redis_client: RedisClient | None = None
    if settings.exchange_rate_cache_enabled:
        redis_client = RedisClient(settings.redis_url)
        await redis_client.connect()

    http_client = httpx.AsyncClient(timeout=settings.exchange_rates_timeout_seconds)
    rate_source = build_rate_source(settings, http_client, redis_client)
    app = create_app(build_context(settings, uow_provider, rate_source))

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.http_host,
            port=settings.http_port,
            log_config=None,
        )
    )

    try:
        await server.serve()
    finally:
        await http_client.aclose()
        if redis_client:
            await redis_client.close()
        if database:
            await database.close()
        logger.info("minibank_stopped")

    raise SystemExit(0)


if __name__ == "__main__":
    asyncio.run(main())
