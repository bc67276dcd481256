"""Domain layer - business entities and rules."""

from minibank.domain.exceptions import (
    AccountClosedError,
    AccountNotFoundError,
    DomainError,
    ExchangeRateUnavailableError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCurrencyError,
    InvalidTransferError,
    NonZeroBalanceError,
    NotFoundError,
    UserHasAccountsError,
    UserNotFoundError,
    ValidationError,
)
from minibank.domain.models import Account, Currency, Transaction, User


__all__ = [
    "Account",
    "AccountClosedError",
    "AccountNotFoundError",
    "Currency",
    "DomainError",
    "ExchangeRateUnavailableError",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidCurrencyError",
    "InvalidTransferError",
    "NonZeroBalanceError",
    "NotFoundError",
    "Transaction",
    "User",
    "UserHasAccountsError",
    "UserNotFoundError",
    "ValidationError",
]
