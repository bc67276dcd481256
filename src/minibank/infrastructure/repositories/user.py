from typing import Any, cast

from sqlalchemy import CursorResult, text
from sqlalchemy.ext.asyncio import AsyncSession

from minibank.domain.exceptions import UserNotFoundError
from minibank.domain.models import User


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> User | None:
        result = await self._session.execute(
            text("SELECT id, login, email FROM users WHERE id = :id"),
            {"id": user_id},
        )
        row = result.fetchone()
        if not row:
            return None
        return User(id=row.id, login=row.login, email=row.email)

    async def list_all(self) -> list[User]:
        result = await self._session.execute(
            text("SELECT id, login, email FROM users ORDER BY id"),
        )
        return [User(id=row.id, login=row.login, email=row.email) for row in result.fetchall()]

    async def add(self, user: User) -> None:
        await self._session.execute(
            text("INSERT INTO users (id, login, email) VALUES (:id, :login, :email)"),
            {"id": user.id, "login": user.login, "email": user.email},
        )

    async def update(self, user: User) -> None:
        result = cast(
            "CursorResult[Any]",
            await self._session.execute(
                text("UPDATE users SET login = :login, email = :email WHERE id = :id"),
                {"id": user.id, "login": user.login, "email": user.email},
            ),
        )
        if (result.rowcount or 0) == 0:
            raise UserNotFoundError(user.id)

    async def delete(self, user_id: str) -> None:
        result = cast(
            "CursorResult[Any]",
            await self._session.execute(
                text("DELETE FROM users WHERE id = :id"),
                {"id": user_id},
            ),
        )
        if (result.rowcount or 0) == 0:
            raise UserNotFoundError(user_id)

    async def exists(self, user_id: str) -> bool:
        result = await self._session.execute(
            text("SELECT EXISTS (SELECT 1 FROM users WHERE id = :id)"),
            {"id": user_id},
        )
        return bool(result.scalar())
