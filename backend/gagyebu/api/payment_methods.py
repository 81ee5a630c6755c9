from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.api.deps import HouseholdAccess, get_household_access, parse_uuid
from gagyebu.core.db import get_session
from gagyebu.models.payment_method import BUILT_IN_PAYMENT_METHODS, PaymentMethod, utc_now_naive
from gagyebu.models.transaction import Transaction
from gagyebu.schemas.payment_method import (
    PaymentMethodCreateRequest,
    PaymentMethodListResponse,
    PaymentMethodResponse,
    PaymentMethodUpdateRequest,
)

router = APIRouter(prefix="/households/{household_id}/payment-methods", tags=["payment-methods"])

DUPLICATE_NAME_DETAIL = "A payment method with this name already exists"


def _to_payment_method_response(method: PaymentMethod) -> PaymentMethodResponse:
    return PaymentMethodResponse(
        id=str(method.id),
        name=method.name,
        description=method.description,
        icon=method.icon,
        color=method.color,
        is_default=method.is_default,
        is_active=method.is_active,
        created_at=method.created_at.isoformat(),
        updated_at=method.updated_at.isoformat(),
    )


def _clean_name(name: str) -> str:
    return " ".join(name.strip().split())


async def _name_taken(
    session: AsyncSession,
    access: HouseholdAccess,
    name: str,
    exclude_id=None,
) -> bool:
    stmt = select(PaymentMethod.id).where(
        PaymentMethod.household_id == access.household.id,
        PaymentMethod.name == name,
    )
    if exclude_id is not None:
        stmt = stmt.where(PaymentMethod.id != exclude_id)
    result = await session.execute(stmt)
    return result.first() is not None


async def _clear_default(session: AsyncSession, access: HouseholdAccess) -> None:
    await session.execute(
        update(PaymentMethod)
        .where(
            PaymentMethod.household_id == access.household.id,
            PaymentMethod.is_default.is_(True),
        )
        .values(is_default=False, updated_at=utc_now_naive())
    )


async def _load_method(session: AsyncSession, access: HouseholdAccess, method_id: str) -> PaymentMethod:
    result = await session.execute(
        select(PaymentMethod).where(
            PaymentMethod.id == parse_uuid(method_id, "payment_method_id"),
            PaymentMethod.household_id == access.household.id,
        )
    )
    method = result.scalar_one_or_none()
    if method is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment method not found",
        )
    return method


@router.get("", response_model=PaymentMethodListResponse)
async def list_methods(
    include_inactive: bool = Query(default=False),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> PaymentMethodListResponse:
    stmt = select(PaymentMethod).where(PaymentMethod.household_id == access.household.id)
    if not include_inactive:
        stmt = stmt.where(PaymentMethod.is_active.is_(True))
    stmt = stmt.order_by(PaymentMethod.is_default.desc(), PaymentMethod.name.asc())
    result = await session.execute(stmt)
    return PaymentMethodListResponse(
        built_in=list(BUILT_IN_PAYMENT_METHODS),
        items=[_to_payment_method_response(method) for method in result.scalars().all()],
    )


@router.post("", response_model=PaymentMethodResponse, status_code=status.HTTP_201_CREATED)
async def create_method(
    payload: PaymentMethodCreateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> PaymentMethodResponse:
    name = _clean_name(payload.name)
    if await _name_taken(session, access, name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME_DETAIL)
    if payload.is_default:
        await _clear_default(session, access)

    method = PaymentMethod(
        household_id=access.household.id,
        name=name,
        description=payload.description or None,
        icon=payload.icon or None,
        color=payload.color.lower() if payload.color else None,
        is_default=payload.is_default,
        created_by=access.user.id,
        updated_by=access.user.id,
    )
    session.add(method)
    await session.commit()
    await session.refresh(method)
    return _to_payment_method_response(method)


@router.patch("/{method_id}", response_model=PaymentMethodResponse)
async def update_method(
    method_id: str,
    payload: PaymentMethodUpdateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> PaymentMethodResponse:
    method = await _load_method(session, access, method_id)
    changes = payload.model_fields_set

    if "name" in changes and payload.name is not None:
        name = _clean_name(payload.name)
        if await _name_taken(session, access, name, exclude_id=method.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_NAME_DETAIL)
        method.name = name
    if "description" in changes:
        method.description = payload.description or None
    if "icon" in changes:
        method.icon = payload.icon or None
    if "color" in changes:
        method.color = payload.color.lower() if payload.color else None
    if "is_active" in changes and payload.is_active is not None:
        method.is_active = payload.is_active
    if "is_default" in changes and payload.is_default is not None:
        if payload.is_default:
            await _clear_default(session, access)
        method.is_default = payload.is_default

    method.updated_by = access.user.id
    method.updated_at = utc_now_naive()
    session.add(method)
    await session.commit()
    await session.refresh(method)
    return _to_payment_method_response(method)


@router.post("/{method_id}/default", response_model=PaymentMethodResponse)
async def set_default(
    method_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> PaymentMethodResponse:
    method = await _load_method(session, access, method_id)
    await _clear_default(session, access)
    method.is_default = True
    method.updated_by = access.user.id
    method.updated_at = utc_now_naive()
    session.add(method)
    await session.commit()
    await session.refresh(method)
    return _to_payment_method_response(method)


@router.delete("/{method_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_method(
    method_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> None:
    method = await _load_method(session, access, method_id)
    usage = await session.execute(
        select(func.count())
        .select_from(Transaction)
        .where(
            Transaction.household_id == access.household.id,
            Transaction.payment_method == method.name,
        )
    )
    if int(usage.scalar_one() or 0) > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Payment method is used by existing transactions",
        )
    await session.delete(method)
    await session.commit()
