"""Money arithmetic shared by conversion and commission.

All functions here are pure: they never touch storage or rate sources, so the
numeric policy can be tested on its own.
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from minibank.domain.exceptions import InvalidAmountError


CENT = Decimal("0.01")
# Balances and amounts are stored as NUMERIC(18, 2).
MAX_AMOUNT = Decimal("1e16")
DEFAULT_COMMISSION_RATE = Decimal("0.02")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Normalize an amount or rate to Decimal.

    Floats go through ``str`` so that ``0.9`` becomes ``Decimal("0.9")`` rather
    than its binary approximation.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidAmountError(Decimal(0), f"not a number: {value!r}") from e
    if not result.is_finite():
        raise InvalidAmountError(result, "must be a finite number")
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents with banker's rounding."""
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_EVEN)
    except InvalidOperation as e:
        raise InvalidAmountError(value, "too large to represent in cents") from e


def require_cents(value: Decimal) -> Decimal:
    """Reject amounts that storage could not hold without rounding."""
    if abs(value) >= MAX_AMOUNT:
        raise InvalidAmountError(value, f"must be less than {MAX_AMOUNT:f} in absolute value")
    if value != value.quantize(CENT):
        raise InvalidAmountError(value, "more than two decimal places")
    return value


def convert_amount(amount: Decimal, from_rate: Decimal, to_rate: Decimal) -> Decimal:
    # Single rounding step, after the division.
    return round_money(amount * from_rate / to_rate)


def commission_for(
    amount: Decimal,
    same_owner: bool,
    rate: Decimal = DEFAULT_COMMISSION_RATE,
) -> Decimal:
    if same_owner:
        return Decimal("0")
    return round_money(amount * rate)
