"""In-process storage backend.

Writes made through an ``InMemoryUnitOfWork`` are staged and only become
visible in the shared ``InMemoryStorage`` on ``commit()``; ``rollback()``
discards them. Reads and balance writes yield to the event loop the way a
database round-trip would, so concurrent callers interleave realistically.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from decimal import Decimal

from minibank.application.unit_of_work import UnitOfWork
from minibank.domain.exceptions import AccountNotFoundError, UserNotFoundError
from minibank.domain.models import Account, Transaction, User


class InMemoryStorage:
    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.users: dict[str, User] = {}
        self.transactions: list[Transaction] = []

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator["InMemoryUnitOfWork"]:
        yield InMemoryUnitOfWork(self)


class InMemoryAccountRepository:
    def __init__(self, storage: InMemoryStorage, staged: dict[str, Account]) -> None:
        self._storage = storage
        self._staged = staged

    def _current(self, account_id: str) -> Account | None:
        if account_id in self._staged:
            return self._staged[account_id]
        return self._storage.accounts.get(account_id)

    async def get(self, account_id: str) -> Account | None:
        await asyncio.sleep(0)
        account = self._current(account_id)
        return replace(account) if account else None

    async def get_for_update(self, account_id: str) -> Account | None:
        return await self.get(account_id)

    async def list_all(self, user_id: str | None = None) -> list[Account]:
        merged = {**self._storage.accounts, **self._staged}
        accounts = [
            replace(account) for account in merged.values() if user_id is None or account.user_id == user_id
        ]
        return sorted(accounts, key=lambda account: account.opened_at)

    async def add(self, account: Account) -> None:
        self._staged[account.id] = replace(account)

    async def update(self, account: Account) -> None:
        if self._current(account.id) is None:
            raise AccountNotFoundError(account.id)
        self._staged[account.id] = replace(account)

    async def set_balance(self, account_id: str, new_balance: Decimal) -> None:
        await asyncio.sleep(0)
        account = self._current(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        self._staged[account_id] = replace(account, balance=new_balance)

    async def exists_for_user(self, user_id: str) -> bool:
        merged = {**self._storage.accounts, **self._staged}
        return any(account.user_id == user_id for account in merged.values())


class InMemoryUserRepository:
    def __init__(self, storage: InMemoryStorage, staged: dict[str, User | None]) -> None:
        self._storage = storage
        self._staged = staged

    def _current(self, user_id: str) -> User | None:
        if user_id in self._staged:
            return self._staged[user_id]
        return self._storage.users.get(user_id)

    async def get(self, user_id: str) -> User | None:
        user = self._current(user_id)
        return replace(user) if user else None

    async def list_all(self) -> list[User]:
        merged: dict[str, User | None] = {**self._storage.users, **self._staged}
        return [replace(user) for _, user in sorted(merged.items()) if user is not None]

    async def add(self, user: User) -> None:
        self._staged[user.id] = replace(user)

    async def update(self, user: User) -> None:
        if self._current(user.id) is None:
            raise UserNotFoundError(user.id)
        self._staged[user.id] = replace(user)

    async def delete(self, user_id: str) -> None:
        if self._current(user_id) is None:
            raise UserNotFoundError(user_id)
        self._staged[user_id] = None

    async def exists(self, user_id: str) -> bool:
        return self._current(user_id) is not None


class InMemoryTransactionLog:
    def __init__(self, storage: InMemoryStorage, staged: list[Transaction]) -> None:
        self._storage = storage
        self._staged = staged

    async def append(self, transaction: Transaction) -> None:
        self._staged.append(transaction)

    async def get(self, transaction_id: str) -> Transaction | None:
        for transaction in [*self._storage.transactions, *self._staged]:
            if transaction.id == transaction_id:
                return transaction
        return None

    async def list_for_account(self, account_id: str, limit: int = 100) -> list[Transaction]:
        matching = [
            transaction
            for transaction in [*self._storage.transactions, *self._staged]
            if account_id in (transaction.source_account_id, transaction.destination_account_id)
        ]
        matching.reverse()
        return matching[:limit]


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, storage: InMemoryStorage) -> None:
        self._storage = storage
        self._accounts: dict[str, Account] = {}
        self._users: dict[str, User | None] = {}
        self._transactions: list[Transaction] = []
        self.accounts = InMemoryAccountRepository(storage, self._accounts)
        self.users = InMemoryUserRepository(storage, self._users)
        self.transactions = InMemoryTransactionLog(storage, self._transactions)

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._accounts or self._users or self._transactions)

    async def commit(self) -> None:
        self._storage.accounts.update(self._accounts)
        for user_id, user in self._users.items():
            if user is None:
                self._storage.users.pop(user_id, None)
            else:
                self._storage.users[user_id] = user
        self._storage.transactions.extend(self._transactions)
        self._clear()

    async def rollback(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self._accounts.clear()
        self._users.clear()
        self._transactions.clear()
