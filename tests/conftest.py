"""Shared pytest fixtures for minibank tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from minibank.application.converter import CurrencyConverter
from minibank.application.locks import AccountLocks
from minibank.application.services import TransferService
from minibank.application.unit_of_work import UnitOfWork
from minibank.domain.models import Account, Currency, User
from minibank.infrastructure.exchange_rates import StaticExchangeRateSource
from minibank.infrastructure.memory import InMemoryStorage, InMemoryUnitOfWork


@pytest.fixture
def storage() -> InMemoryStorage:
    """Create empty in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def rate_source() -> StaticExchangeRateSource:
    """Rates used by the worked examples: USD is the base, EUR trades at 0.9."""
    return StaticExchangeRateSource(
        {
            Currency.RUB: Decimal("0.0125"),
            Currency.USD: Decimal("1.0"),
            Currency.EUR: Decimal("0.9"),
        }
    )


@pytest.fixture
def converter(rate_source: StaticExchangeRateSource) -> CurrencyConverter:
    return CurrencyConverter(rate_source)


@pytest.fixture
def locks() -> AccountLocks:
    return AccountLocks()


@pytest.fixture
def make_transfer_service(
    storage: InMemoryStorage,
    converter: CurrencyConverter,
    locks: AccountLocks,
) -> Callable[..., TransferService]:
    """Build a TransferService with its own unit of work over the shared storage."""

    def factory(allow_overdraft: bool = False, **kwargs: object) -> TransferService:
        return TransferService(
            InMemoryUnitOfWork(storage),
            converter,
            locks,
            allow_overdraft=allow_overdraft,
            **kwargs,  # type: ignore[arg-type]
        )

    return factory


@pytest.fixture
def mock_account_repository() -> AsyncMock:
    """Create mock account store."""
    repo = AsyncMock()
    repo.get = AsyncMock(return_value=None)
    repo.get_for_update = AsyncMock(return_value=None)
    repo.list_all = AsyncMock(return_value=[])
    repo.add = AsyncMock(return_value=None)
    repo.update = AsyncMock(return_value=None)
    repo.set_balance = AsyncMock(return_value=None)
    repo.exists_for_user = AsyncMock(return_value=False)
    return repo


@pytest.fixture
def mock_user_repository() -> AsyncMock:
    """Create mock user store."""
    repo = AsyncMock()
    repo.get = AsyncMock(return_value=None)
    repo.list_all = AsyncMock(return_value=[])
    repo.add = AsyncMock(return_value=None)
    repo.update = AsyncMock(return_value=None)
    repo.delete = AsyncMock(return_value=None)
    repo.exists = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_transaction_log() -> AsyncMock:
    """Create mock transaction log."""
    repo = AsyncMock()
    repo.append = AsyncMock(return_value=None)
    repo.get = AsyncMock(return_value=None)
    repo.list_for_account = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_uow(
    mock_account_repository: AsyncMock,
    mock_user_repository: AsyncMock,
    mock_transaction_log: AsyncMock,
) -> AsyncMock:
    """Create mock Unit of Work with all repositories."""
    uow = AsyncMock(spec=UnitOfWork)
    uow.accounts = mock_account_repository
    uow.users = mock_user_repository
    uow.transactions = mock_transaction_log
    uow.commit = AsyncMock(return_value=None)
    uow.rollback = AsyncMock(return_value=None)

    # Configure async context manager
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=None)

    return uow


def create_account(
    account_id: str,
    user_id: str = "user-001",
    balance: Decimal | str = "0",
    currency: Currency = Currency.RUB,
    is_open: bool = True,
) -> Account:
    """Helper to create Account with custom values."""
    return Account(
        id=account_id,
        user_id=user_id,
        balance=Decimal(balance),
        currency=currency,
        is_open=is_open,
        opened_at=datetime.now(UTC),
        closed_at=None if is_open else datetime.now(UTC),
    )


def seed_account(storage: InMemoryStorage, account_id: str, **kwargs: object) -> Account:
    """Put an account straight into committed storage."""
    account = create_account(account_id, **kwargs)  # type: ignore[arg-type]
    storage.accounts[account.id] = account
    return account


def seed_user(storage: InMemoryStorage, user_id: str, login: str = "login", email: str = "user@example.com") -> User:
    user = User(id=user_id, login=login, email=email)
    storage.users[user.id] = user
    return user
