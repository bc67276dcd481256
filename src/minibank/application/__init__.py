"""Application layer - services and use cases."""

from minibank.application.converter import CurrencyConverter
from minibank.application.locks import AccountLocks
from minibank.application.services import (
    AccountService,
    TransferService,
    UserService,
)
from minibank.application.unit_of_work import SqlUnitOfWork, UnitOfWork, UnitOfWorkProvider


__all__ = [
    "AccountLocks",
    "AccountService",
    "CurrencyConverter",
    "SqlUnitOfWork",
    "TransferService",
    "UnitOfWork",
    "UnitOfWorkProvider",
    "UserService",
]
