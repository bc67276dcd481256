from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Query, status

from minibank.api.deps import AccountServiceDep, ConverterDep, TransferServiceDep, UserServiceDep
from minibank.api.schemas import (
    AccountIn,
    AccountOut,
    CommissionOut,
    ConversionOut,
    ErrorOut,
    TransactionOut,
    TransferIn,
    UserIn,
    UserOut,
)
from minibank.domain.models import Currency


router = APIRouter(
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorOut},
        status.HTTP_404_NOT_FOUND: {"model": ErrorOut},
    },
)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED, tags=["users"])
async def add_user(body: UserIn, service: UserServiceDep) -> UserOut:
    user = await service.add_user(login=body.login, email=body.email)
    return UserOut.from_domain(user)


@router.get("/users", response_model=list[UserOut], tags=["users"])
async def list_users(service: UserServiceDep) -> list[UserOut]:
    return [UserOut.from_domain(user) for user in await service.list_users()]


@router.get("/users/{user_id}", response_model=UserOut, tags=["users"])
async def get_user(user_id: str, service: UserServiceDep) -> UserOut:
    return UserOut.from_domain(await service.get_user(user_id))


@router.put("/users/{user_id}", response_model=UserOut, tags=["users"])
async def update_user(user_id: str, body: UserIn, service: UserServiceDep) -> UserOut:
    user = await service.update_user(user_id, login=body.login, email=body.email)
    return UserOut.from_domain(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["users"])
async def delete_user(user_id: str, service: UserServiceDep) -> None:
    await service.delete_user(user_id)


@router.post("/accounts", response_model=AccountOut, status_code=status.HTTP_201_CREATED, tags=["accounts"])
async def open_account(body: AccountIn, service: AccountServiceDep) -> AccountOut:
    account = await service.open_account(user_id=body.user_id, currency=body.currency, balance=body.balance)
    return AccountOut.from_domain(account)


@router.get("/accounts", response_model=list[AccountOut], tags=["accounts"])
async def list_accounts(service: AccountServiceDep, user_id: str | None = None) -> list[AccountOut]:
    return [AccountOut.from_domain(account) for account in await service.list_accounts(user_id=user_id)]


@router.get("/accounts/{account_id}", response_model=AccountOut, tags=["accounts"])
async def get_account(account_id: str, service: AccountServiceDep) -> AccountOut:
    return AccountOut.from_domain(await service.get_account(account_id))


@router.post("/accounts/{account_id}/close", response_model=AccountOut, tags=["accounts"])
async def close_account(account_id: str, service: AccountServiceDep) -> AccountOut:
    return AccountOut.from_domain(await service.close_account(account_id))


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=list[TransactionOut],
    tags=["accounts"],
)
async def list_account_transactions(
    account_id: str,
    service: TransferServiceDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> list[TransactionOut]:
    transactions = await service.list_transactions(account_id, limit=limit)
    return [TransactionOut.from_domain(transaction) for transaction in transactions]


@router.post("/transfers", response_model=TransactionOut, status_code=status.HTTP_201_CREATED, tags=["transfers"])
async def transfer(body: TransferIn, service: TransferServiceDep) -> TransactionOut:
    transaction = await service.transfer(
        body.amount,
        source_account_id=body.source_account_id,
        destination_account_id=body.destination_account_id,
    )
    return TransactionOut.from_domain(transaction)


@router.get("/transfers/commission", response_model=CommissionOut, tags=["transfers"])
async def calculate_commission(
    amount: Decimal,
    source_account_id: str,
    destination_account_id: str,
    service: TransferServiceDep,
) -> CommissionOut:
    commission = await service.calculate_commission(amount, source_account_id, destination_account_id)
    return CommissionOut(amount=amount, commission=commission)


@router.get("/currency/convert", response_model=ConversionOut, tags=["currency"])
async def convert(
    amount: Decimal,
    from_currency: str,
    to_currency: str,
    converter: ConverterDep,
) -> ConversionOut:
    converted = await converter.convert(amount, from_currency, to_currency)
    return ConversionOut(
        amount=amount,
        from_currency=Currency.parse(from_currency).value,
        to_currency=Currency.parse(to_currency).value,
        converted_amount=converted,
    )
