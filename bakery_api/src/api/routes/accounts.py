from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.procurement import PartyRepository
from src.repositories.sales import CustomerRepository
from src.schemas.accounts import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    PartyCreate,
    PartyRead,
    PartyType,
    PartyUpdate,
)
from src.services.accounts import AccountService

customers_router = APIRouter(prefix="/customers", tags=["Customers"])
parties_router = APIRouter(prefix="/parties", tags=["Parties"])


# PUBLIC_INTERFACE
@customers_router.get(
    "",
    response_model=List[CustomerRead],
    summary="List customers",
    dependencies=[Depends(require_permission("customers", "read"))],
)
async def list_customers(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[CustomerRead]:
    items = await CustomerRepository(session).list(limit=limit, offset=offset)
    return [CustomerRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@customers_router.get(
    "/{customer_id}",
    response_model=CustomerRead,
    summary="Get customer",
    dependencies=[Depends(require_permission("customers", "read"))],
)
async def get_customer(customer_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> CustomerRead:
    return CustomerRead.model_validate(await AccountService(session).get("customer", customer_id))


# PUBLIC_INTERFACE
@customers_router.post(
    "",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create customer",
)
async def create_customer(
    payload: CustomerCreate,
    user: User = Depends(require_permission("customers", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> CustomerRead:
    created = await AccountService(session).create("customer", payload.model_dump(), user=user)
    return CustomerRead.model_validate(created)


# PUBLIC_INTERFACE
@customers_router.put(
    "/{customer_id}",
    response_model=CustomerRead,
    summary="Update customer",
    description="Changing the opening balance recalculates every running balance in the customer's ledger.",
)
async def update_customer(
    payload: CustomerUpdate,
    customer_id: int = Path(...),
    user: User = Depends(require_permission("customers", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> CustomerRead:
    updated = await AccountService(session).update(
        "customer", customer_id, payload.model_dump(exclude_unset=True), user=user
    )
    return CustomerRead.model_validate(updated)


# PUBLIC_INTERFACE
@customers_router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete customer",
    description="Delete the customer together with its ledger postings.",
)
async def delete_customer(
    customer_id: int = Path(...),
    user: User = Depends(require_permission("customers", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await AccountService(session).delete("customer", customer_id, user=user)


# PUBLIC_INTERFACE
@parties_router.get(
    "",
    response_model=List[PartyRead],
    summary="List parties",
    description="Suppliers and creditors. Parties of type 'both' match either type filter.",
    dependencies=[Depends(require_permission("parties", "read"))],
)
async def list_parties(
    session: AsyncSession = Depends(get_async_session),
    type_: Optional[PartyType] = Query(None, alias="type"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[PartyRead]:
    items = await PartyRepository(session).list_parties(type_=type_, limit=limit, offset=offset)
    return [PartyRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@parties_router.get(
    "/{party_id}",
    response_model=PartyRead,
    summary="Get party",
    dependencies=[Depends(require_permission("parties", "read"))],
)
async def get_party(party_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> PartyRead:
    return PartyRead.model_validate(await AccountService(session).get("party", party_id))


# PUBLIC_INTERFACE
@parties_router.post("", response_model=PartyRead, status_code=status.HTTP_201_CREATED, summary="Create party")
async def create_party(
    payload: PartyCreate,
    user: User = Depends(require_permission("parties", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> PartyRead:
    return PartyRead.model_validate(await AccountService(session).create("party", payload.model_dump(), user=user))


# PUBLIC_INTERFACE
@parties_router.put("/{party_id}", response_model=PartyRead, summary="Update party")
async def update_party(
    payload: PartyUpdate,
    party_id: int = Path(...),
    user: User = Depends(require_permission("parties", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> PartyRead:
    updated = await AccountService(session).update("party", party_id, payload.model_dump(exclude_unset=True), user=user)
    return PartyRead.model_validate(updated)


# PUBLIC_INTERFACE
@parties_router.delete("/{party_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete party")
async def delete_party(
    party_id: int = Path(...),
    user: User = Depends(require_permission("parties", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await AccountService(session).delete("party", party_id, user=user)
