from decimal import Decimal


class DomainError(Exception):
    """Base exception for domain errors."""


class ValidationError(DomainError):
    """Base for errors caused by a request that breaks a business rule."""


class NotFoundError(DomainError):
    """Base for errors raised when a referenced entity does not exist."""


class InvalidAmountError(ValidationError):
    """Raised when an amount of money is invalid."""

    def __init__(self, amount: Decimal, reason: str) -> None:
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}")


class InvalidTransferError(ValidationError):
    """Raised when source and destination of a transfer are the same account."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Money can be transferred only between different accounts, got {account_id} twice")


class InvalidCurrencyError(ValidationError):
    """Raised when a currency code is outside the supported set."""

    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__(f"Invalid currency code: {code}")


class NonZeroBalanceError(ValidationError):
    """Raised when closing an account that still holds money."""

    def __init__(self, account_id: str, balance: Decimal) -> None:
        self.account_id = account_id
        self.balance = balance
        super().__init__(f"Account {account_id} must have zero balance to be closed, has {balance}")


class InsufficientFundsError(ValidationError):
    """Raised when account has insufficient funds for a transfer."""

    def __init__(self, account_id: str, required: Decimal, available: Decimal) -> None:
        self.account_id = account_id
        self.required = required
        self.available = available
        super().__init__(f"Account {account_id} has insufficient funds: required {required}, available {available}")


class AccountClosedError(ValidationError):
    """Raised when a closed account is asked to change."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account {account_id} is closed")


class UserHasAccountsError(ValidationError):
    """Raised when deleting a user that still owns accounts."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} has connected accounts")


class AccountNotFoundError(NotFoundError):
    """Raised when an account cannot be found."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class ExchangeRateUnavailableError(DomainError):
    """Raised when the exchange rate of a currency cannot be obtained."""

    def __init__(self, currency: str, reason: str) -> None:
        self.currency = currency
        self.reason = reason
        super().__init__(f"Exchange rate for {currency} is unavailable: {reason}")
