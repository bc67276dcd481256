"""Exchange rate sources.

Every source reports a currency's rate as a positive multiplier against one
common base unit, and reports any failure as ExchangeRateUnavailableError.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

import httpx
import redis.asyncio as redis
import structlog

from minibank.application.ports import ExchangeRateSource
from minibank.domain.exceptions import ExchangeRateUnavailableError, InvalidAmountError
from minibank.domain.models import Currency
from minibank.domain.money import to_decimal
from minibank.infrastructure.metrics import EXCHANGE_RATE_LOOKUPS_TOTAL


logger = structlog.get_logger()


def _ensure_positive(currency: Currency, rate: Decimal) -> Decimal:
    if rate <= 0:
        raise ExchangeRateUnavailableError(currency.value, f"non-positive rate {rate}")
    return rate


class StaticExchangeRateSource:
    """Rates from a fixed table, e.g. loaded from settings."""

    name = "static"

    def __init__(self, rates: Mapping[Currency | str, Decimal | float | str]) -> None:
        self._rates: dict[Currency, Decimal] = {}
        for code, rate in rates.items():
            self.set_rate(Currency.parse(code), rate)

    def set_rate(self, currency: Currency, rate: Decimal | float | str) -> None:
        value = to_decimal(rate)
        if value <= 0:
            raise ValueError(f"Exchange rate for {currency.value} must be positive, got {value}")
        self._rates[currency] = value

    async def rate_of(self, currency: Currency) -> Decimal:
        rate = self._rates.get(currency)
        if rate is None:
            EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=self.name, status="error").inc()
            raise ExchangeRateUnavailableError(currency.value, "no rate configured")
        EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=self.name, status="ok").inc()
        return rate


class HttpExchangeRateSource:
    """Rates from a daily rates JSON document.

    The document lists every quoted currency under ``Valute`` with its
    ``Value`` for ``Nominal`` units, expressed in the base currency. The base
    currency itself is not listed and has rate 1.
    """

    name = "http"

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient,
        base_currency: Currency = Currency.RUB,
    ) -> None:
        self._url = url
        self._client = client
        self._base_currency = base_currency

    async def rate_of(self, currency: Currency) -> Decimal:
        if currency == self._base_currency:
            return Decimal("1")

        try:
            document = await self._fetch(currency)
            rate = self._parse(document, currency)
        except ExchangeRateUnavailableError:
            EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=self.name, status="error").inc()
            raise
        EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source=self.name, status="ok").inc()
        return rate

    async def _fetch(self, currency: Currency) -> Any:
        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise ExchangeRateUnavailableError(currency.value, f"rates request failed: {e}") from e
        except ValueError as e:
            raise ExchangeRateUnavailableError(currency.value, "rates document is not valid JSON") from e

    def _parse(self, document: Any, currency: Currency) -> Decimal:
        try:
            entry = document["Valute"][currency.value]
            value = to_decimal(entry["Value"])
            nominal = to_decimal(entry.get("Nominal", 1))
        except KeyError as e:
            raise ExchangeRateUnavailableError(currency.value, "currency missing from rates document") from e
        except (TypeError, AttributeError, InvalidAmountError) as e:
            raise ExchangeRateUnavailableError(currency.value, "malformed rates document") from e
        if nominal <= 0:
            raise ExchangeRateUnavailableError(currency.value, f"non-positive nominal {nominal}")
        return _ensure_positive(currency, value / nominal)


class CachedExchangeRateSource:
    """Caches another source's rates in Redis for ``ttl_seconds``.

    The cache is best effort: if Redis misbehaves, lookups go straight to the
    wrapped source.
    """

    def __init__(
        self,
        inner: ExchangeRateSource,
        redis_client: "redis.Redis[bytes]",
        ttl_seconds: int = 3600,
        key_prefix: str = "exchange_rate:",
    ) -> None:
        self._inner = inner
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    async def rate_of(self, currency: Currency) -> Decimal:
        key = f"{self._key_prefix}{currency.value}"

        try:
            cached = await self._redis.get(key)
        except redis.RedisError as e:
            logger.warning("exchange_rate_cache_read_failed", currency=currency.value, error=str(e))
            cached = None

        if cached is not None:
            cached_rate = self._parse_cached(cached)
            if cached_rate is not None:
                EXCHANGE_RATE_LOOKUPS_TOTAL.labels(source="cache", status="hit").inc()
                return cached_rate
            # Refetched below, which also overwrites the bad entry.
            logger.warning("exchange_rate_cache_entry_invalid", currency=currency.value, raw=repr(cached))

        rate = await self._inner.rate_of(currency)

        try:
            await self._redis.set(key, str(rate), ex=self._ttl_seconds)
        except redis.RedisError as e:
            logger.warning("exchange_rate_cache_write_failed", currency=currency.value, error=str(e))

        return rate

    @staticmethod
    def _parse_cached(cached: bytes | str) -> Decimal | None:
        raw = cached.decode(errors="replace") if isinstance(cached, bytes) else str(cached)
        try:
            rate = to_decimal(raw)
        except InvalidAmountError:
            return None
        return rate if rate > 0 else None
