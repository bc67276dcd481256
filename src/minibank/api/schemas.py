from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel

from minibank.domain.models import Account, Transaction, User


class UserIn(BaseModel):
    login: str
    email: str


class UserOut(BaseModel):
    id: str
    login: str
    email: str

    @classmethod
    def from_domain(cls, user: User) -> Self:
        return cls(id=user.id, login=user.login, email=user.email)


class AccountIn(BaseModel):
    user_id: str
    # Validated against the supported set by the service, not here.
    currency: str
    balance: Decimal = Decimal("0")


class AccountOut(BaseModel):
    id: str
    user_id: str
    balance: Decimal
    currency: str
    is_open: bool
    opened_at: datetime
    closed_at: datetime | None = None

    @classmethod
    def from_domain(cls, account: Account) -> Self:
        return cls(
            id=account.id,
            user_id=account.user_id,
            balance=account.balance,
            currency=account.currency.value,
            is_open=account.is_open,
            opened_at=account.opened_at,
            closed_at=account.closed_at,
        )


class TransferIn(BaseModel):
    amount: Decimal
    source_account_id: str
    destination_account_id: str


class TransactionOut(BaseModel):
    id: str
    source_account_id: str
    destination_account_id: str
    amount: Decimal
    created_at: datetime

    @classmethod
    def from_domain(cls, transaction: Transaction) -> Self:
        return cls(
            id=transaction.id,
            source_account_id=transaction.source_account_id,
            destination_account_id=transaction.destination_account_id,
            amount=transaction.amount,
            created_at=transaction.created_at,
        )


class CommissionOut(BaseModel):
    amount: Decimal
    commission: Decimal


class ConversionOut(BaseModel):
    amount: Decimal
    from_currency: str
    to_currency: str
    converted_amount: Decimal


class ErrorOut(BaseModel):
    error: str
