from decimal import Decimal
from typing import Any, cast

from sqlalchemy import CursorResult, Row, text
from sqlalchemy.ext.asyncio import AsyncSession

from minibank.domain.exceptions import AccountNotFoundError
from minibank.domain.models import Account, Currency


_COLUMNS = "id, user_id, balance, currency, is_open, opened_at, closed_at"


def _to_account(row: Row[Any]) -> Account:
    return Account(
        id=row.id,
        user_id=row.user_id,
        balance=Decimal(row.balance),
        currency=Currency(row.currency),
        is_open=row.is_open,
        opened_at=row.opened_at,
        closed_at=row.closed_at,
    )


class AccountRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, account_id: str) -> Account | None:
        result = await self._session.execute(
            text(f"SELECT {_COLUMNS} FROM accounts WHERE id = :id"),
            {"id": account_id},
        )
        row = result.fetchone()
        if not row:
            return None
        return _to_account(row)

    async def get_for_update(self, account_id: str) -> Account | None:
        result = await self._session.execute(
            text(f"SELECT {_COLUMNS} FROM accounts WHERE id = :id FOR UPDATE"),
            {"id": account_id},
        )
        row = result.fetchone()
        if not row:
            return None
        return _to_account(row)

    async def list_all(self, user_id: str | None = None) -> list[Account]:
        if user_id is None:
            result = await self._session.execute(
                text(f"SELECT {_COLUMNS} FROM accounts ORDER BY opened_at"),
            )
        else:
            result = await self._session.execute(
                text(f"SELECT {_COLUMNS} FROM accounts WHERE user_id = :user_id ORDER BY opened_at"),
                {"user_id": user_id},
            )
        return [_to_account(row) for row in result.fetchall()]

    async def add(self, account: Account) -> None:
        await self._session.execute(
            text("""
                INSERT INTO accounts (id, user_id, balance, currency, is_open, opened_at, closed_at)
                VALUES (:id, :user_id, :balance, :currency, :is_open, :opened_at, :closed_at)
            """),
            self._params(account),
        )

    async def update(self, account: Account) -> None:
        result = cast(
            "CursorResult[Any]",
            await self._session.execute(
                text("""
                    UPDATE accounts
                    SET user_id = :user_id,
                        balance = :balance,
                        currency = :currency,
                        is_open = :is_open,
                        opened_at = :opened_at,
                        closed_at = :closed_at
                    WHERE id = :id
                """),
                self._params(account),
            ),
        )
        if (result.rowcount or 0) == 0:
            raise AccountNotFoundError(account.id)

    async def set_balance(self, account_id: str, new_balance: Decimal) -> None:
        result = cast(
            "CursorResult[Any]",
            await self._session.execute(
                text("UPDATE accounts SET balance = :balance WHERE id = :id"),
                {"id": account_id, "balance": new_balance},
            ),
        )
        if (result.rowcount or 0) == 0:
            raise AccountNotFoundError(account_id)

    async def exists_for_user(self, user_id: str) -> bool:
        result = await self._session.execute(
            text("SELECT EXISTS (SELECT 1 FROM accounts WHERE user_id = :user_id)"),
            {"user_id": user_id},
        )
        return bool(result.scalar())

    @staticmethod
    def _params(account: Account) -> dict[str, Any]:
        return {
            "id": account.id,
            "user_id": account.user_id,
            "balance": account.balance,
            "currency": account.currency.value,
            "is_open": account.is_open,
            "opened_at": account.opened_at,
            "closed_at": account.closed_at,
        }
