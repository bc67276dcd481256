"""Unit tests for domain models and exceptions."""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime
from decimal import Decimal

import pytest

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


class TestCurrency:
    """Tests for Currency enum."""

    def test_currency_values(self) -> None:
        """Currency is restricted to three codes."""
        assert {currency.value for currency in Currency} == {"RUB", "USD", "EUR"}

    def test_parse_accepts_member(self) -> None:
        assert Currency.parse(Currency.EUR) is Currency.EUR

    def test_parse_accepts_code(self) -> None:
        assert Currency.parse("USD") is Currency.USD

    def test_parse_is_case_insensitive(self) -> None:
        assert Currency.parse(" rub ") is Currency.RUB

    @pytest.mark.parametrize("code", ["GBP", "", "US", "dollar"])
    def test_parse_rejects_unknown_codes(self, code: str) -> None:
        with pytest.raises(InvalidCurrencyError, match="Invalid currency code"):
            Currency.parse(code)

    def test_parse_rejects_non_string(self) -> None:
        with pytest.raises(InvalidCurrencyError):
            Currency.parse(840)  # type: ignore[arg-type]


class TestAccount:
    """Tests for Account entity."""

    def test_open_generates_ulid(self) -> None:
        account = Account.open(user_id="user-001", currency=Currency.RUB)
        assert len(account.id) == 26

    def test_open_defaults(self) -> None:
        """A new account is open, empty and stamped in UTC."""
        account = Account.open(user_id="user-001", currency=Currency.USD)
        assert account.balance == Decimal("0")
        assert account.is_open is True
        assert account.closed_at is None
        assert account.opened_at.tzinfo == UTC

    def test_open_with_balance(self) -> None:
        account = Account.open(user_id="user-001", currency=Currency.EUR, balance=Decimal("12.50"))
        assert account.balance == Decimal("12.50")

    def test_open_rejects_negative_balance(self) -> None:
        with pytest.raises(InvalidAmountError, match="cannot be negative"):
            Account.open(user_id="user-001", currency=Currency.EUR, balance=Decimal("-1"))

    def test_closed_returns_full_record(self) -> None:
        """Closing keeps every field and only flips the open flag and closing time."""
        account = Account.open(user_id="user-001", currency=Currency.RUB)
        at = datetime(2024, 5, 1, tzinfo=UTC)

        closed = account.closed(at)

        assert closed.id == account.id
        assert closed.user_id == account.user_id
        assert closed.currency == account.currency
        assert closed.opened_at == account.opened_at
        assert closed.is_open is False
        assert closed.closed_at == at
        assert account.is_open is True

    def test_closed_defaults_to_now(self) -> None:
        account = Account.open(user_id="user-001", currency=Currency.RUB)
        closed = account.closed()
        assert closed.closed_at is not None
        assert closed.closed_at.tzinfo == UTC


class TestUser:
    def test_create_generates_ulid(self) -> None:
        user = User.create(login="alice", email="alice@example.com")
        assert len(user.id) == 26
        assert user.login == "alice"
        assert user.email == "alice@example.com"


class TestTransaction:
    """Tests for Transaction record."""

    def test_create(self) -> None:
        transaction = Transaction.create(
            source_account_id="acc-001",
            destination_account_id="acc-002",
            amount=Decimal("108.89"),
        )
        assert len(transaction.id) == 26
        assert transaction.source_account_id == "acc-001"
        assert transaction.destination_account_id == "acc-002"
        assert transaction.amount == Decimal("108.89")
        assert transaction.created_at.tzinfo == UTC

    def test_transaction_is_immutable(self) -> None:
        transaction = Transaction.create("acc-001", "acc-002", Decimal("1"))
        with pytest.raises(FrozenInstanceError):
            transaction.amount = Decimal("2")  # type: ignore[misc]

    def test_ids_are_unique(self) -> None:
        ids = {Transaction.create("a", "b", Decimal("1")).id for _ in range(100)}
        assert len(ids) == 100


class TestExceptions:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [
            InvalidAmountError(Decimal("-1"), "amount cannot be negative"),
            InvalidTransferError("acc-001"),
            InvalidCurrencyError("GBP"),
            NonZeroBalanceError("acc-001", Decimal("5")),
            InsufficientFundsError("acc-001", Decimal("10"), Decimal("5")),
            AccountClosedError("acc-001"),
            UserHasAccountsError("user-001"),
        ],
    )
    def test_validation_errors(self, error: DomainError) -> None:
        assert isinstance(error, ValidationError)
        assert isinstance(error, DomainError)

    @pytest.mark.parametrize("error", [AccountNotFoundError("acc-001"), UserNotFoundError("user-001")])
    def test_not_found_errors(self, error: DomainError) -> None:
        assert isinstance(error, NotFoundError)
        assert not isinstance(error, ValidationError)

    def test_exchange_rate_error_is_its_own_kind(self) -> None:
        error = ExchangeRateUnavailableError("EUR", "timeout")
        assert isinstance(error, DomainError)
        assert not isinstance(error, (ValidationError, NotFoundError))
        assert error.currency == "EUR"
        assert "timeout" in str(error)

    def test_invalid_amount_message(self) -> None:
        error = InvalidAmountError(Decimal("-5"), "amount cannot be negative")
        assert str(error) == "Invalid amount -5: amount cannot be negative"
        assert error.amount == Decimal("-5")

    def test_invalid_transfer_message(self) -> None:
        assert "different accounts" in str(InvalidTransferError("acc-001"))

    def test_insufficient_funds_attributes(self) -> None:
        error = InsufficientFundsError("acc-001", Decimal("10"), Decimal("5"))
        assert error.account_id == "acc-001"
        assert error.required == Decimal("10")
        assert error.available == Decimal("5")
