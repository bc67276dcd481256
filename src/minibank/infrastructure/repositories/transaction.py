from decimal import Decimal
from typing import Any

from sqlalchemy import Row, text
from sqlalchemy.ext.asyncio import AsyncSession

from minibank.domain.models import Transaction


def _to_transaction(row: Row[Any]) -> Transaction:
    return Transaction(
        id=row.id,
        source_account_id=row.source_account_id,
        destination_account_id=row.destination_account_id,
        amount=Decimal(row.amount),
        created_at=row.created_at,
    )


class TransactionRepository:
    """Append-only log of completed transfers."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(self, transaction: Transaction) -> None:
        await self._session.execute(
            text("""
                INSERT INTO transactions
                    (id, source_account_id, destination_account_id, amount, created_at)
                VALUES
                    (:id, :source_account_id, :destination_account_id, :amount, :created_at)
            """),
            {
                "id": transaction.id,
                "source_account_id": transaction.source_account_id,
                "destination_account_id": transaction.destination_account_id,
                "amount": transaction.amount,
                "created_at": transaction.created_at,
            },
        )

    async def get(self, transaction_id: str) -> Transaction | None:
        result = await self._session.execute(
            text("""
                SELECT id, source_account_id, destination_account_id, amount, created_at
                FROM transactions
                WHERE id = :id
            """),
            {"id": transaction_id},
        )
        row = result.fetchone()
        if not row:
            return None
        return _to_transaction(row)

    async def list_for_account(self, account_id: str, limit: int = 100) -> list[Transaction]:
        result = await self._session.execute(
            text("""
                SELECT id, source_account_id, destination_account_id, amount, created_at
                FROM transactions
                WHERE source_account_id = :account_id OR destination_account_id = :account_id
                ORDER BY created_at DESC
                LIMIT :limit
            """),
            {"account_id": account_id, "limit": limit},
        )
        return [_to_transaction(row) for row in result.fetchall()]
