from decimal import Decimal

import structlog

from minibank.application.ports import ExchangeRateSource
from minibank.domain.exceptions import InvalidAmountError
from minibank.domain.models import Currency
from minibank.domain.money import convert_amount, to_decimal


logger = structlog.get_logger()


class CurrencyConverter:
    """Converts amounts between currencies using two independent rate lookups.

    The two lookups are not a consistent snapshot: each uses whatever rate the
    source reports at that moment. Nothing is cached or retried here.
    """

    def __init__(self, rates: ExchangeRateSource) -> None:
        self._rates = rates

    async def convert(
        self,
        amount: Decimal | int | float | str,
        from_currency: Currency | str,
        to_currency: Currency | str,
    ) -> Decimal:
        value = to_decimal(amount)
        if value < 0:
            raise InvalidAmountError(value, "amount cannot be negative")

        source = Currency.parse(from_currency)
        target = Currency.parse(to_currency)

        from_rate = await self._rates.rate_of(source)
        to_rate = await self._rates.rate_of(target)
        converted = convert_amount(value, from_rate, to_rate)

        logger.debug(
            "currency_converted",
            amount=str(value),
            from_currency=source.value,
            to_currency=target.value,
            from_rate=str(from_rate),
            to_rate=str(to_rate),
            converted=str(converted),
        )
        return converted
