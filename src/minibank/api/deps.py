from collections.abc import AsyncGenerator
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated

from fastapi import Depends, Request

from minibank.application.converter import CurrencyConverter
from minibank.application.locks import AccountLocks
from minibank.application.services import AccountService, TransferService, UserService
from minibank.application.unit_of_work import UnitOfWork, UnitOfWorkProvider
from minibank.domain.money import DEFAULT_COMMISSION_RATE


@dataclass
class AppContext:
    """Long-lived collaborators shared by every request."""

    uow_provider: UnitOfWorkProvider
    converter: CurrencyConverter
    locks: AccountLocks
    allow_overdraft: bool = False
    commission_rate: Decimal = DEFAULT_COMMISSION_RATE


def get_context(request: Request) -> AppContext:
    return request.app.state.context


ContextDep = Annotated[AppContext, Depends(get_context)]


async def get_uow(context: ContextDep) -> AsyncGenerator[UnitOfWork, None]:
    async with context.uow_provider() as uow:
        yield uow


UnitOfWorkDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_transfer_service(uow: UnitOfWorkDep, context: ContextDep) -> TransferService:
    return TransferService(
        uow,
        context.converter,
        context.locks,
        allow_overdraft=context.allow_overdraft,
        commission_rate=context.commission_rate,
    )


def get_account_service(uow: UnitOfWorkDep, context: ContextDep) -> AccountService:
    return AccountService(uow, context.locks)


def get_user_service(uow: UnitOfWorkDep) -> UserService:
    return UserService(uow)


def get_converter(context: ContextDep) -> CurrencyConverter:
    return context.converter


TransferServiceDep = Annotated[TransferService, Depends(get_transfer_service)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ConverterDep = Annotated[CurrencyConverter, Depends(get_converter)]
