"""Unit tests for CurrencyConverter."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from minibank.application.converter import CurrencyConverter
from minibank.domain.exceptions import ExchangeRateUnavailableError, InvalidAmountError, InvalidCurrencyError
from minibank.domain.models import Currency
from minibank.infrastructure.exchange_rates import StaticExchangeRateSource


class TestCurrencyConverter:
    """Tests for CurrencyConverter.convert."""

    @pytest.mark.asyncio
    async def test_usd_to_eur(self, converter: CurrencyConverter) -> None:
        result = await converter.convert(Decimal("100"), Currency.USD, Currency.EUR)
        assert result == Decimal("111.11")

    @pytest.mark.asyncio
    async def test_accepts_codes(self, converter: CurrencyConverter) -> None:
        result = await converter.convert("1000", "rub", "USD")
        assert result == Decimal("12.50")

    @pytest.mark.asyncio
    async def test_same_currency_returns_rounded_input(self, converter: CurrencyConverter) -> None:
        result = await converter.convert(Decimal("10.005"), Currency.EUR, Currency.EUR)
        assert result == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_zero_amount(self, converter: CurrencyConverter) -> None:
        assert await converter.convert(Decimal("0"), Currency.USD, Currency.RUB) == Decimal("0")

    @pytest.mark.asyncio
    async def test_amount_too_large_for_cents(self, converter: CurrencyConverter) -> None:
        with pytest.raises(InvalidAmountError, match="too large"):
            await converter.convert(Decimal("1e30"), Currency.USD, Currency.EUR)

    @pytest.mark.asyncio
    async def test_negative_amount_is_rejected(self, converter: CurrencyConverter) -> None:
        with pytest.raises(InvalidAmountError, match="cannot be negative"):
            await converter.convert(Decimal("-1"), Currency.USD, Currency.EUR)

    @pytest.mark.asyncio
    async def test_unknown_currency_is_rejected(self, converter: CurrencyConverter) -> None:
        with pytest.raises(InvalidCurrencyError):
            await converter.convert(Decimal("1"), "GBP", Currency.EUR)

    @pytest.mark.parametrize("amount", ["0.01", "5", "99.99", "12345.67"])
    @pytest.mark.asyncio
    async def test_round_trip_is_within_two_cents(self, converter: CurrencyConverter, amount: str) -> None:
        original = Decimal(amount)
        there = await converter.convert(original, Currency.USD, Currency.EUR)
        back = await converter.convert(there, Currency.EUR, Currency.USD)
        assert abs(back - original) <= Decimal("0.02")

    @pytest.mark.asyncio
    async def test_missing_rate_propagates(self) -> None:
        converter = CurrencyConverter(StaticExchangeRateSource({Currency.USD: Decimal("1")}))

        with pytest.raises(ExchangeRateUnavailableError) as exc_info:
            await converter.convert(Decimal("1"), Currency.USD, Currency.EUR)

        assert exc_info.value.currency == "EUR"

    @pytest.mark.asyncio
    async def test_looks_up_both_rates_even_for_same_currency(self) -> None:
        rates = AsyncMock()
        rates.rate_of = AsyncMock(return_value=Decimal("2"))
        converter = CurrencyConverter(rates)

        await converter.convert(Decimal("1"), Currency.RUB, Currency.RUB)

        assert rates.rate_of.await_count == 2

    @pytest.mark.asyncio
    async def test_rates_are_looked_up_at_call_time(self) -> None:
        source = StaticExchangeRateSource({Currency.USD: Decimal("1"), Currency.EUR: Decimal("1")})
        converter = CurrencyConverter(source)
        assert await converter.convert(Decimal("10"), Currency.USD, Currency.EUR) == Decimal("10.00")

        source.set_rate(Currency.EUR, Decimal("2"))

        assert await converter.convert(Decimal("10"), Currency.USD, Currency.EUR) == Decimal("5.00")
