from decimal import Decimal

import structlog

from minibank.application.converter import CurrencyConverter
from minibank.application.locks import AccountLocks
from minibank.application.unit_of_work import UnitOfWork
from minibank.domain.exceptions import (
    AccountClosedError,
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidTransferError,
    NonZeroBalanceError,
    UserHasAccountsError,
    UserNotFoundError,
)
from minibank.domain.models import Account, Currency, Transaction, User
from minibank.domain.money import DEFAULT_COMMISSION_RATE, commission_for, require_cents, to_decimal
from minibank.infrastructure.metrics import (
    COMMISSION_COLLECTED_TOTAL,
    TRANSFERS_TOTAL,
    track_transfer_duration,
)


logger = structlog.get_logger()


async def _require_account(uow: UnitOfWork, account_id: str, for_update: bool = False) -> Account:
    if for_update:
        account = await uow.accounts.get_for_update(account_id)
    else:
        account = await uow.accounts.get(account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


class TransferService:
    """Moves money between accounts.

    A transfer debits the source, converts the amount into the destination
    currency when needed, withholds commission for transfers between different
    users and credits the rest to the destination. The whole sequence runs
    while holding both account locks and inside one unit of work, so balances
    never lose updates and a failed transfer leaves no trace.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        converter: CurrencyConverter,
        locks: AccountLocks,
        allow_overdraft: bool = False,
        commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    ) -> None:
        self.uow = uow
        self.converter = converter
        self.locks = locks
        self.allow_overdraft = allow_overdraft
        self.commission_rate = commission_rate

    async def calculate_commission(
        self,
        amount: Decimal | int | float | str,
        source_account_id: str,
        destination_account_id: str,
    ) -> Decimal:
        value = to_decimal(amount)
        async with self.uow:
            source = await _require_account(self.uow, source_account_id)
            destination = await _require_account(self.uow, destination_account_id)
        return commission_for(value, source.user_id == destination.user_id, self.commission_rate)

    @track_transfer_duration
    async def transfer(
        self,
        amount: Decimal | int | float | str,
        source_account_id: str,
        destination_account_id: str,
    ) -> Transaction:
        try:
            transaction = await self._transfer(to_decimal(amount), source_account_id, destination_account_id)
        except Exception as e:
            TRANSFERS_TOTAL.labels(status="failed", error_code=type(e).__name__).inc()
            raise
        TRANSFERS_TOTAL.labels(status="completed", error_code="").inc()
        return transaction

    async def _transfer(
        self,
        amount: Decimal,
        source_account_id: str,
        destination_account_id: str,
    ) -> Transaction:
        if source_account_id == destination_account_id:
            raise InvalidTransferError(source_account_id)
        if amount <= 0:
            raise InvalidAmountError(amount, "transfer amount must be positive")
        require_cents(amount)

        log = logger.bind(
            source=source_account_id,
            destination=destination_account_id,
            amount=str(amount),
        )

        async with self.locks.hold(source_account_id, destination_account_id), self.uow:
            # Row locks follow the same order as the in-process locks.
            accounts = {
                account_id: await _require_account(self.uow, account_id, for_update=True)
                for account_id in sorted((source_account_id, destination_account_id))
            }
            source = accounts[source_account_id]
            destination = accounts[destination_account_id]

            for account in (source, destination):
                if not account.is_open:
                    raise AccountClosedError(account.id)

            new_source_balance = source.balance - amount
            if new_source_balance < 0 and not self.allow_overdraft:
                raise InsufficientFundsError(source.id, amount, source.balance)

            await self.uow.accounts.set_balance(source.id, new_source_balance)

            final_amount = amount
            if source.currency != destination.currency:
                final_amount = await self.converter.convert(amount, source.currency, destination.currency)

            commission = commission_for(
                final_amount,
                source.user_id == destination.user_id,
                self.commission_rate,
            )
            final_amount -= commission

            await self.uow.accounts.set_balance(destination.id, destination.balance + final_amount)

            transaction = Transaction.create(
                source_account_id=source.id,
                destination_account_id=destination.id,
                amount=final_amount,
            )
            await self.uow.transactions.append(transaction)
            await self.uow.commit()

        if commission:
            COMMISSION_COLLECTED_TOTAL.labels(currency=destination.currency.value).inc(float(commission))

        log.info(
            "transfer_completed",
            transaction_id=transaction.id,
            source_currency=source.currency.value,
            destination_currency=destination.currency.value,
            commission=str(commission),
            credited=str(final_amount),
        )
        return transaction

    async def list_transactions(self, account_id: str, limit: int = 100) -> list[Transaction]:
        async with self.uow:
            await _require_account(self.uow, account_id)
            return await self.uow.transactions.list_for_account(account_id, limit=limit)


class AccountService:
    def __init__(self, uow: UnitOfWork, locks: AccountLocks) -> None:
        self.uow = uow
        self.locks = locks

    async def open_account(
        self,
        user_id: str,
        currency: Currency | str,
        balance: Decimal | int | float | str = Decimal("0"),
    ) -> Account:
        account_currency = Currency.parse(currency)
        opening_balance = require_cents(to_decimal(balance))

        async with self.uow:
            if not await self.uow.users.exists(user_id):
                raise UserNotFoundError(user_id)

            account = Account.open(user_id=user_id, currency=account_currency, balance=opening_balance)
            await self.uow.accounts.add(account)
            await self.uow.commit()

        logger.info(
            "account_opened",
            account_id=account.id,
            user_id=user_id,
            currency=account_currency.value,
            balance=str(opening_balance),
        )
        return account

    async def get_account(self, account_id: str) -> Account:
        async with self.uow:
            return await _require_account(self.uow, account_id)

    async def list_accounts(self, user_id: str | None = None) -> list[Account]:
        async with self.uow:
            return await self.uow.accounts.list_all(user_id=user_id)

    async def close_account(self, account_id: str) -> Account:
        async with self.locks.hold(account_id), self.uow:
            account = await _require_account(self.uow, account_id, for_update=True)
            if not account.is_open:
                raise AccountClosedError(account_id)
            if account.balance != 0:
                raise NonZeroBalanceError(account_id, account.balance)

            closed = account.closed()
            await self.uow.accounts.update(closed)
            await self.uow.commit()

        logger.info("account_closed", account_id=account_id, closed_at=closed.closed_at)
        return closed


class UserService:
    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def add_user(self, login: str, email: str) -> User:
        user = User.create(login=login, email=email)
        async with self.uow:
            await self.uow.users.add(user)
            await self.uow.commit()
        logger.info("user_added", user_id=user.id, login=login)
        return user

    async def get_user(self, user_id: str) -> User:
        async with self.uow:
            user = await self.uow.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def list_users(self) -> list[User]:
        async with self.uow:
            return await self.uow.users.list_all()

    async def update_user(self, user_id: str, login: str, email: str) -> User:
        async with self.uow:
            if not await self.uow.users.exists(user_id):
                raise UserNotFoundError(user_id)
            user = User(id=user_id, login=login, email=email)
            await self.uow.users.update(user)
            await self.uow.commit()
        logger.info("user_updated", user_id=user_id)
        return user

    async def delete_user(self, user_id: str) -> None:
        async with self.uow:
            if not await self.uow.users.exists(user_id):
                raise UserNotFoundError(user_id)
            if await self.uow.accounts.exists_for_user(user_id):
                raise UserHasAccountsError(user_id)
            await self.uow.users.delete(user_id)
            await self.uow.commit()
        logger.info("user_deleted", user_id=user_id)
