"""Capabilities the application layer needs from storage and rate providers.

Each backend (in-memory, SQL, HTTP, Redis) implements these structurally.
"""

from decimal import Decimal
from typing import Protocol

from minibank.domain.models import Account, Currency, Transaction, User


class AccountStore(Protocol):
    async def get(self, account_id: str) -> Account | None: ...

    async def get_for_update(self, account_id: str) -> Account | None: ...

    async def list_all(self, user_id: str | None = None) -> list[Account]: ...

    async def add(self, account: Account) -> None: ...

    async def update(self, account: Account) -> None: ...

    async def set_balance(self, account_id: str, new_balance: Decimal) -> None: ...

    async def exists_for_user(self, user_id: str) -> bool: ...


class UserStore(Protocol):
    async def get(self, user_id: str) -> User | None: ...

    async def list_all(self) -> list[User]: ...

    async def add(self, user: User) -> None: ...

    async def update(self, user: User) -> None: ...

    async def delete(self, user_id: str) -> None: ...

    async def exists(self, user_id: str) -> bool: ...


class TransactionLog(Protocol):
    async def append(self, transaction: Transaction) -> None: ...

    async def get(self, transaction_id: str) -> Transaction | None: ...

    async def list_for_account(self, account_id: str, limit: int = 100) -> list[Transaction]: ...


class ExchangeRateSource(Protocol):
    async def rate_of(self, currency: Currency) -> Decimal:
        """Return the positive rate of ``currency`` against the common base unit.

        Raises ExchangeRateUnavailableError when the rate cannot be obtained.
        """
        ...
