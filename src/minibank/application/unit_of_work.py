from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from minibank.application.ports import AccountStore, TransactionLog, UserStore
from minibank.infrastructure.repositories import (
    AccountRepository,
    TransactionRepository,
    UserRepository,
)


class UnitOfWork(ABC):
    """Groups the writes of one operation so they are committed together.

    Leaving the context because of an exception rolls back anything that was
    not committed.
    """

    accounts: AccountStore
    users: UserStore
    transactions: TransactionLog

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...


UnitOfWorkProvider = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.accounts = AccountRepository(session)
        self.users = UserRepository(session)
        self.transactions = TransactionRepository(session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
