import math
from datetime import UTC, date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from gagyebu.api.deps import (
    HouseholdAccess,
    get_household_access,
    get_receipts,
    parse_optional_uuid,
    parse_uuid,
)
from gagyebu.core.db import get_session
from gagyebu.core.logging import get_logger
from gagyebu.models.transaction import PersonType, Transaction, TransactionType, utc_now_naive
from gagyebu.schemas.transaction import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    DuplicateMatchResponse,
    TransactionCreateRequest,
    TransactionCreateResponse,
    TransactionPageResponse,
    TransactionResponse,
    TransactionUpdateRequest,
    TransactionWindowResponse,
)
from gagyebu.services.duplicate_detection import (
    DuplicateMatch,
    TransactionSnapshot,
    get_duplicate_warning,
    has_likely_duplicate,
)
from gagyebu.services.receipt_storage import ReceiptStorage, ReceiptStorageError
from gagyebu.services.report_service import content_disposition, report_filename, transactions_csv
from gagyebu.services.transaction_service import (
    TransactionFilter,
    TransactionValidationError,
    clean_optional_text,
    count_transactions,
    delete_transaction,
    find_duplicate_matches,
    get_transaction,
    list_transactions,
    load_tags,
    normalize_tags,
    replace_tags,
    resolve_user_names,
    to_snapshot,
    validate_person,
)
from gagyebu.services.virtual_window import DEFAULT_OVERSCAN, compute_virtual_window

router = APIRouter(prefix="/households/{household_id}/transactions", tags=["transactions"])
logger = get_logger(__name__)


def transaction_filter_params(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    type: TransactionType | None = Query(default=None),
    person_type: PersonType | None = Query(default=None),
    person_id: str | None = Query(default=None),
    tags: list[str] = Query(default=[]),
    payment_method: str | None = Query(default=None),
    min_amount: int | None = Query(default=None, ge=0),
    max_amount: int | None = Query(default=None, ge=0),
    search: str | None = Query(default=None, max_length=255),
) -> TransactionFilter:
    return TransactionFilter(
        start_date=start_date,
        end_date=end_date,
        type=type,
        person_type=person_type,
        person_id=parse_optional_uuid(person_id, "person_id"),
        tags=tags,
        payment_method=clean_optional_text(payment_method),
        min_amount=min_amount,
        max_amount=max_amount,
        search=search,
    )


def _validation_error(exc: TransactionValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


async def build_transaction_responses(
    session: AsyncSession,
    transactions: list[Transaction],
) -> list[TransactionResponse]:
    tags = await load_tags(session, [transaction.id for transaction in transactions])
    names = await resolve_user_names(
        session,
        {transaction.person_id for transaction in transactions if transaction.person_id},
    )
    return [
        TransactionResponse(
            id=str(transaction.id),
            household_id=str(transaction.household_id),
            type=transaction.type.value,
            amount=transaction.amount,
            description=transaction.description,
            date=transaction.date.isoformat(),
            person_type=transaction.person_type.value,
            person_id=str(transaction.person_id) if transaction.person_id else None,
            person_name=names.get(transaction.person_id) if transaction.person_id else None,
            payment_method=transaction.payment_method or "",
            receipt_url=transaction.receipt_url,
            tags=tags.get(transaction.id, []),
            created_by=str(transaction.created_by),
            updated_by=str(transaction.updated_by),
            created_at=transaction.created_at.isoformat(),
            updated_at=transaction.updated_at.isoformat(),
        )
        for transaction in transactions
    ]


def to_duplicate_responses(matches: list[DuplicateMatch]) -> list[DuplicateMatchResponse]:
    return [
        DuplicateMatchResponse(
            transaction_id=str(match.transaction.id) if match.transaction.id else None,
            amount=match.transaction.amount,
            date=match.transaction.date.isoformat(),
            description=match.transaction.description,
            similarity=round(match.similarity, 3),
            reasons=match.reasons,
        )
        for match in matches
    ]


async def load_transaction_or_404(
    session: AsyncSession,
    access: HouseholdAccess,
    transaction_id: str,
) -> Transaction:
    transaction = await get_transaction(
        session,
        household_id=access.household.id,
        transaction_id=parse_uuid(transaction_id, "transaction_id"),
    )
    if transaction is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found",
        )
    return transaction


@router.get("", response_model=TransactionPageResponse)
async def list_page(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    filters: TransactionFilter = Depends(transaction_filter_params),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TransactionPageResponse:
    try:
        total = await count_transactions(session, access.household.id, filters)
        transactions = await list_transactions(
            session,
            access.household.id,
            filters,
            offset=(page - 1) * per_page,
            limit=per_page,
        )
    except TransactionValidationError as exc:
        raise _validation_error(exc) from exc
    return TransactionPageResponse(
        items=await build_transaction_responses(session, transactions),
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page) if total else 0,
    )


@router.get("/window", response_model=TransactionWindowResponse)
async def list_window(
    item_height: int = Query(default=72, ge=1),
    viewport_height: int = Query(default=600, ge=0),
    scroll_top: int = Query(default=0, ge=0),
    overscan: int = Query(default=DEFAULT_OVERSCAN, ge=0, le=50),
    filters: TransactionFilter = Depends(transaction_filter_params),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TransactionWindowResponse:
    try:
        total = await count_transactions(session, access.household.id, filters)
    except TransactionValidationError as exc:
        raise _validation_error(exc) from exc
    window = compute_virtual_window(total, item_height, viewport_height, scroll_top, overscan)
    transactions: list[Transaction] = []
    if not window.is_empty:
        start, stop = window.slice_bounds()
        transactions = await list_transactions(
            session,
            access.household.id,
            filters,
            offset=start,
            limit=stop - start,
        )
    return TransactionWindowResponse(
        start_index=window.start_index,
        end_index=window.end_index,
        offset_y=window.offset_y,
        total_height=window.total_height,
        total_count=total,
        items=await build_transaction_responses(session, transactions),
    )


@router.get("/export.csv")
async def export_csv(
    filters: TransactionFilter = Depends(transaction_filter_params),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> Response:
    try:
        transactions = await list_transactions(session, access.household.id, filters)
    except TransactionValidationError as exc:
        raise _validation_error(exc) from exc
    tags = await load_tags(session, [transaction.id for transaction in transactions])

    today = datetime.now(UTC).date()
    dates = [transaction.date for transaction in transactions]
    start = filters.start_date or (min(dates) if dates else today)
    end = filters.end_date or (max(dates) if dates else today)
    filename = report_filename(
        access.household.name,
        start,
        end,
        "csv",
        datetime.now(UTC),
    )
    return Response(
        content=transactions_csv(transactions, tags),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.post("/check-duplicates", response_model=DuplicateCheckResponse)
async def check_duplicates(
    payload: DuplicateCheckRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> DuplicateCheckResponse:
    candidate = TransactionSnapshot(
        id=parse_optional_uuid(payload.exclude_id, "exclude_id"),
        type=payload.type,
        amount=payload.amount,
        date=payload.date,
        description=clean_optional_text(payload.description),
        payment_method=payload.payment_method,
        person_type=payload.person_type,
        person_id=parse_optional_uuid(payload.person_id, "person_id"),
    )
    matches = await find_duplicate_matches(session, access.household.id, candidate)
    likely = has_likely_duplicate(candidate, [match.transaction for match in matches])
    return DuplicateCheckResponse(
        has_duplicates=bool(matches),
        likely_duplicate=likely,
        warning=get_duplicate_warning(matches) or None,
        matches=to_duplicate_responses(matches),
    )


@router.post("", response_model=TransactionCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TransactionCreateResponse:
    household_id = access.household.id
    person_type = PersonType(payload.person_type)
    try:
        tags = normalize_tags(payload.tags)
        person_id = await validate_person(
            session,
            household_id=household_id,
            person_type=person_type,
            person_id=parse_optional_uuid(payload.person_id, "person_id"),
        )
    except TransactionValidationError as exc:
        raise _validation_error(exc) from exc

    transaction = Transaction(
        household_id=household_id,
        type=TransactionType(payload.type),
        amount=payload.amount,
        description=clean_optional_text(payload.description),
        date=payload.date,
        person_type=person_type,
        person_id=person_id,
        payment_method=payload.payment_method,
        receipt_url=payload.receipt_url or None,
        created_by=access.user.id,
        updated_by=access.user.id,
    )
    matches = await find_duplicate_matches(session, household_id, to_snapshot(transaction))

    session.add(transaction)
    await session.flush()
    await replace_tags(session, transaction.id, tags)
    await session.commit()
    await session.refresh(transaction)

    if matches:
        logger.info(
            "transaction_possible_duplicate",
            transaction_id=str(transaction.id),
            matches=len(matches),
        )
    items = await build_transaction_responses(session, [transaction])
    return TransactionCreateResponse(
        transaction=items[0],
        duplicate_warning=get_duplicate_warning(matches) or None,
        duplicates=to_duplicate_responses(matches),
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_one(
    transaction_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TransactionResponse:
    transaction = await load_transaction_or_404(session, access, transaction_id)
    items = await build_transaction_responses(session, [transaction])
    return items[0]


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: str,
    payload: TransactionUpdateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TransactionResponse:
    transaction = await load_transaction_or_404(session, access, transaction_id)
    changes = payload.model_fields_set

    if "type" in changes and payload.type is not None:
        transaction.type = TransactionType(payload.type)
    if "amount" in changes and payload.amount is not None:
        transaction.amount = payload.amount
    if "description" in changes:
        transaction.description = clean_optional_text(payload.description)
    if "date" in changes and payload.date is not None:
        transaction.date = payload.date
    if "payment_method" in changes:
        transaction.payment_method = payload.payment_method or ""
    if "receipt_url" in changes:
        transaction.receipt_url = payload.receipt_url or None

    try:
        if {"person_type", "person_id"} & changes:
            person_type = (
                PersonType(payload.person_type)
                if payload.person_type is not None
                else transaction.person_type
            )
            person_id = (
                parse_optional_uuid(payload.person_id, "person_id")
                if "person_id" in changes
                else transaction.person_id
            )
            transaction.person_id = await validate_person(
                session,
                household_id=access.household.id,
                person_type=person_type,
                person_id=person_id,
            )
            transaction.person_type = person_type
        if "tags" in changes and payload.tags is not None:
            await replace_tags(session, transaction.id, normalize_tags(payload.tags))
    except TransactionValidationError as exc:
        raise _validation_error(exc) from exc

    transaction.updated_by = access.user.id
    transaction.updated_at = utc_now_naive()
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction)
    items = await build_transaction_responses(session, [transaction])
    return items[0]


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_one(
    transaction_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
    storage: ReceiptStorage = Depends(get_receipts),
) -> Response:
    transaction = await load_transaction_or_404(session, access, transaction_id)
    receipt_path = storage.path_from_public_url(transaction.receipt_url)
    await delete_transaction(session, transaction)
    await session.commit()
    if receipt_path:
        try:
            storage.delete(receipt_path)
        except ReceiptStorageError as exc:
            logger.warning("transaction_receipt_cleanup_failed", path=receipt_path, error=str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
