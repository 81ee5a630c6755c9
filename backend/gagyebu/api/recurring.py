from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.api.deps import HouseholdAccess, get_household_access, parse_optional_uuid, parse_uuid
from gagyebu.api.transactions import build_transaction_responses
from gagyebu.core.db import get_session
from gagyebu.models.recurring_transaction import (
    RecurringFrequency,
    RecurringTransaction,
    utc_now_naive,
)
from gagyebu.models.transaction import PersonType, TransactionType
from gagyebu.schemas.recurring import (
    ProcessDueResponse,
    RecurringCreateRequest,
    RecurringResponse,
    RecurringUpdateRequest,
)
from gagyebu.services.dates import today_utc
from gagyebu.services.recurring_service import list_recurring, process_due
from gagyebu.services.transaction_service import (
    TransactionValidationError,
    clean_optional_text,
    normalize_tags,
    validate_person,
)

router = APIRouter(prefix="/households/{household_id}/recurring", tags=["recurring"])


def _to_recurring_response(template: RecurringTransaction) -> RecurringResponse:
    return RecurringResponse(
        id=str(template.id),
        type=template.type.value,
        amount=template.amount,
        description=template.description,
        frequency=template.frequency.value,
        person_type=template.person_type.value,
        person_id=str(template.person_id) if template.person_id else None,
        payment_method=template.payment_method or "",
        tags=list(template.tags or []),
        start_date=template.start_date.isoformat(),
        next_date=template.next_date.isoformat(),
        is_active=template.is_active,
        created_at=template.created_at.isoformat(),
    )


async def _load_template(
    session: AsyncSession,
    access: HouseholdAccess,
    recurring_id: str,
) -> RecurringTransaction:
    result = await session.execute(
        select(RecurringTransaction).where(
            RecurringTransaction.id == parse_uuid(recurring_id, "recurring_id"),
            RecurringTransaction.household_id == access.household.id,
        )
    )
    template = result.scalar_one_or_none()
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recurring transaction not found",
        )
    return template


@router.get("", response_model=list[RecurringResponse])
async def list_templates(
    include_inactive: bool = Query(default=False),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> list[RecurringResponse]:
    templates = await list_recurring(session, access.household.id, include_inactive)
    return [_to_recurring_response(template) for template in templates]


@router.post("", response_model=RecurringResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: RecurringCreateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> RecurringResponse:
    person_type = PersonType(payload.person_type)
    try:
        tags = normalize_tags(payload.tags)
        person_id = await validate_person(
            session,
            household_id=access.household.id,
            person_type=person_type,
            person_id=parse_optional_uuid(payload.person_id, "person_id"),
        )
    except TransactionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    template = RecurringTransaction(
        household_id=access.household.id,
        type=TransactionType(payload.type),
        amount=payload.amount,
        description=clean_optional_text(payload.description),
        frequency=RecurringFrequency(payload.frequency),
        person_type=person_type,
        person_id=person_id,
        payment_method=payload.payment_method,
        tags=tags,
        start_date=payload.start_date,
        next_date=payload.start_date,
        created_by=access.user.id,
    )
    session.add(template)
    await session.commit()
    await session.refresh(template)
    return _to_recurring_response(template)


@router.post("/process", response_model=ProcessDueResponse)
async def process_due_templates(
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> ProcessDueResponse:
    created = await process_due(session, access.household.id, today_utc())
    await session.commit()
    return ProcessDueResponse(
        created_count=len(created),
        transactions=await build_transaction_responses(session, created),
    )


@router.patch("/{recurring_id}", response_model=RecurringResponse)
async def update_template(
    recurring_id: str,
    payload: RecurringUpdateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> RecurringResponse:
    template = await _load_template(session, access, recurring_id)
    changes = payload.model_fields_set
    if "amount" in changes and payload.amount is not None:
        template.amount = payload.amount
    if "description" in changes:
        template.description = clean_optional_text(payload.description)
    if "payment_method" in changes:
        template.payment_method = payload.payment_method or ""
    if "tags" in changes and payload.tags is not None:
        try:
            template.tags = normalize_tags(payload.tags)
        except TransactionValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            ) from exc
    if "is_active" in changes and payload.is_active is not None:
        template.is_active = payload.is_active
    template.updated_at = utc_now_naive()
    session.add(template)
    await session.commit()
    await session.refresh(template)
    return _to_recurring_response(template)


@router.post("/{recurring_id}/deactivate", response_model=RecurringResponse)
async def deactivate_template(
    recurring_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> RecurringResponse:
    template = await _load_template(session, access, recurring_id)
    template.is_active = False
    template.updated_at = utc_now_naive()
    session.add(template)
    await session.commit()
    await session.refresh(template)
    return _to_recurring_response(template)


@router.delete("/{recurring_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    recurring_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> None:
    template = await _load_template(session, access, recurring_id)
    await session.delete(template)
    await session.commit()
