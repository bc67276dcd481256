"""Repository implementations."""

from minibank.infrastructure.repositories.account import AccountRepository
from minibank.infrastructure.repositories.transaction import TransactionRepository
from minibank.infrastructure.repositories.user import UserRepository


__all__ = [
    "AccountRepository",
    "TransactionRepository",
    "UserRepository",
]
