from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Self

from ulid import ULID

from minibank.domain.exceptions import InvalidAmountError, InvalidCurrencyError


class Currency(Enum):
    RUB = "RUB"
    USD = "USD"
    EUR = "EUR"

    @classmethod
    def parse(cls, code: "Currency | str") -> "Currency":
        if isinstance(code, Currency):
            return code
        if isinstance(code, str):
            try:
                return cls(code.strip().upper())
            except ValueError as e:
                raise InvalidCurrencyError(code) from e
        raise InvalidCurrencyError(code)


@dataclass
class User:
    id: str
    login: str
    email: str

    @classmethod
    def create(cls, login: str, email: str) -> Self:
        return cls(id=str(ULID()), login=login, email=email)


@dataclass
class Account:
    id: str
    user_id: str
    balance: Decimal
    currency: Currency
    is_open: bool = True
    opened_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    closed_at: datetime | None = None

    @classmethod
    def open(
        cls,
        user_id: str,
        currency: Currency,
        balance: Decimal = Decimal("0"),
    ) -> Self:
        if balance < 0:
            raise InvalidAmountError(balance, "opening balance cannot be negative")
        return cls(
            id=str(ULID()),
            user_id=user_id,
            balance=balance,
            currency=currency,
        )

    def closed(self, at: datetime | None = None) -> "Account":
        """Return the full record of this account in its closed state."""
        return replace(self, is_open=False, closed_at=at or datetime.now(UTC))


@dataclass(frozen=True)
class Transaction:
    """A completed transfer. ``amount`` is the net sum credited to the destination."""

    id: str
    source_account_id: str
    destination_account_id: str
    amount: Decimal
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        source_account_id: str,
        destination_account_id: str,
        amount: Decimal,
    ) -> Self:
        return cls(
            id=str(ULID()),
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
            amount=amount,
        )
