import datetime as dt
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.models.transaction import PersonType, Transaction, TransactionTag, TransactionType
from gagyebu.models.user import User
from gagyebu.services.duplicate_detection import (
    DuplicateDetectionOptions,
    DuplicateMatch,
    TransactionSnapshot,
    detect_duplicates,
)
from gagyebu.services.household_service import get_active_membership

MAX_TAGS_PER_TRANSACTION = 5
MAX_TAG_LENGTH = 50
DUPLICATE_LOOKBACK_DAYS = 7


class TransactionValidationError(ValueError):
    """Raised when transaction input breaks a ledger rule."""


@dataclass
class TransactionFilter:
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    type: TransactionType | None = None
    person_type: PersonType | None = None
    person_id: UUID | None = None
    tags: list[str] = field(default_factory=list)
    payment_method: str | None = None
    min_amount: int | None = None
    max_amount: int | None = None
    search: str | None = None


def clean_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.strip().split())
    return cleaned or None


def normalize_tags(tags: list[str] | None) -> list[str]:
    normalized: list[str] = []
    for tag in tags or []:
        cleaned = " ".join(str(tag or "").strip().split())
        if not cleaned or cleaned in normalized:
            continue
        if len(cleaned) > MAX_TAG_LENGTH:
            raise TransactionValidationError(
                f"Tag names must be at most {MAX_TAG_LENGTH} characters"
            )
        normalized.append(cleaned)
    if len(normalized) > MAX_TAGS_PER_TRANSACTION:
        raise TransactionValidationError(
            f"A transaction can have at most {MAX_TAGS_PER_TRANSACTION} tags"
        )
    return normalized


async def validate_person(
    session: AsyncSession,
    *,
    household_id: UUID,
    person_type: PersonType,
    person_id: UUID | None,
) -> UUID | None:
    if person_type == PersonType.HOUSEHOLD:
        return None
    if person_id is None:
        raise TransactionValidationError("person_id is required when person_type is member")
    membership = await get_active_membership(session, household_id=household_id, user_id=person_id)
    if membership is None:
        raise TransactionValidationError("person_id is not an active household member")
    return person_id


def build_transaction_filters(household_id: UUID, filters: TransactionFilter | None) -> list:
    clauses = [Transaction.household_id == household_id]
    if filters is None:
        return clauses
    if filters.start_date:
        clauses.append(Transaction.date >= filters.start_date)
    if filters.end_date:
        clauses.append(Transaction.date <= filters.end_date)
    if filters.type:
        clauses.append(Transaction.type == filters.type)
    if filters.person_type:
        clauses.append(Transaction.person_type == filters.person_type)
    if filters.person_id:
        clauses.append(Transaction.person_id == filters.person_id)
    if filters.payment_method:
        clauses.append(Transaction.payment_method == filters.payment_method)
    if filters.min_amount is not None:
        clauses.append(Transaction.amount >= filters.min_amount)
    if filters.max_amount is not None:
        clauses.append(Transaction.amount <= filters.max_amount)
    tags = normalize_tags(filters.tags) if filters.tags else []
    if tags:
        clauses.append(
            Transaction.id.in_(
                select(TransactionTag.transaction_id).where(TransactionTag.tag_name.in_(tags))
            )
        )
    search = clean_optional_text(filters.search)
    if search:
        clauses.append(Transaction.description.ilike(f"%{search}%"))
    return clauses


async def count_transactions(
    session: AsyncSession,
    household_id: UUID,
    filters: TransactionFilter | None = None,
) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(Transaction)
        .where(*build_transaction_filters(household_id, filters))
    )
    return int(result.scalar_one() or 0)


async def list_transactions(
    session: AsyncSession,
    household_id: UUID,
    filters: TransactionFilter | None = None,
    *,
    offset: int = 0,
    limit: int | None = None,
) -> list[Transaction]:
    stmt = (
        select(Transaction)
        .where(*build_transaction_filters(household_id, filters))
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .offset(offset)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_transaction(
    session: AsyncSession,
    *,
    household_id: UUID,
    transaction_id: UUID,
) -> Transaction | None:
    result = await session.execute(
        select(Transaction).where(
            Transaction.id == transaction_id,
            Transaction.household_id == household_id,
        )
    )
    return result.scalar_one_or_none()


async def load_tags(session: AsyncSession, transaction_ids: list[UUID]) -> dict[UUID, list[str]]:
    if not transaction_ids:
        return {}
    result = await session.execute(
        select(TransactionTag)
        .where(TransactionTag.transaction_id.in_(transaction_ids))
        .order_by(TransactionTag.tag_name.asc())
    )
    tags_by_transaction: dict[UUID, list[str]] = {}
    for row in result.scalars().all():
        tags_by_transaction.setdefault(row.transaction_id, []).append(row.tag_name)
    return tags_by_transaction


async def replace_tags(session: AsyncSession, transaction_id: UUID, tags: list[str]) -> None:
    await session.execute(
        delete(TransactionTag).where(TransactionTag.transaction_id == transaction_id)
    )
    for tag_name in tags:
        session.add(TransactionTag(transaction_id=transaction_id, tag_name=tag_name))
    await session.flush()


async def delete_transaction(session: AsyncSession, transaction: Transaction) -> None:
    await session.execute(
        delete(TransactionTag).where(TransactionTag.transaction_id == transaction.id)
    )
    await session.delete(transaction)
    await session.flush()


async def resolve_user_names(session: AsyncSession, user_ids: set[UUID]) -> dict[UUID, str]:
    if not user_ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(list(user_ids))))
    return {user.id: user.name for user in result.scalars().all()}


def to_snapshot(transaction: Transaction) -> TransactionSnapshot:
    return TransactionSnapshot(
        id=transaction.id,
        type=transaction.type.value if hasattr(transaction.type, "value") else str(transaction.type),
        amount=transaction.amount,
        date=transaction.date,
        description=transaction.description,
        payment_method=transaction.payment_method or "",
        person_type=(
            transaction.person_type.value
            if hasattr(transaction.person_type, "value")
            else str(transaction.person_type)
        ),
        person_id=transaction.person_id,
    )


async def find_duplicate_matches(
    session: AsyncSession,
    household_id: UUID,
    candidate: TransactionSnapshot,
    options: DuplicateDetectionOptions | None = None,
) -> list[DuplicateMatch]:
    window = dt.timedelta(days=DUPLICATE_LOOKBACK_DAYS)
    nearby = await list_transactions(
        session,
        household_id,
        TransactionFilter(
            start_date=candidate.date - window,
            end_date=candidate.date + window,
            type=TransactionType(candidate.type),
        ),
    )
    existing = [to_snapshot(transaction) for transaction in nearby]
    if options is None:
        return detect_duplicates(candidate, existing)
    return detect_duplicates(candidate, existing, options)
