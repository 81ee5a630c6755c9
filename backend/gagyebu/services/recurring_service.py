from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.core.logging import get_logger
from gagyebu.models.recurring_transaction import RecurringFrequency, RecurringTransaction
from gagyebu.models.transaction import Transaction, TransactionTag, utc_now_naive
from gagyebu.services.dates import add_months_anchored

logger = get_logger(__name__)

FREQUENCY_MONTHS = {
    RecurringFrequency.MONTHLY: 1,
    RecurringFrequency.YEARLY: 12,
}


def next_occurrence(template: RecurringTransaction, current: date | None = None) -> date:
    base = current or template.next_date
    months = FREQUENCY_MONTHS[RecurringFrequency(template.frequency)]
    return add_months_anchored(base, months, template.start_date.day)


async def list_recurring(
    session: AsyncSession,
    household_id: UUID,
    include_inactive: bool = False,
) -> list[RecurringTransaction]:
    stmt = select(RecurringTransaction).where(RecurringTransaction.household_id == household_id)
    if not include_inactive:
        stmt = stmt.where(RecurringTransaction.is_active.is_(True))
    stmt = stmt.order_by(RecurringTransaction.next_date.asc(), RecurringTransaction.created_at.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


def materialize(template: RecurringTransaction, occurrence: date) -> Transaction:
    return Transaction(
        household_id=template.household_id,
        type=template.type,
        amount=template.amount,
        description=template.description,
        date=occurrence,
        person_type=template.person_type,
        person_id=template.person_id,
        payment_method=template.payment_method or "",
        created_by=template.created_by,
        updated_by=template.created_by,
    )


async def process_due(
    session: AsyncSession,
    household_id: UUID,
    today: date,
) -> list[Transaction]:
    """Create every occurrence due on or before ``today`` and move templates forward."""
    result = await session.execute(
        select(RecurringTransaction).where(
            RecurringTransaction.household_id == household_id,
            RecurringTransaction.is_active.is_(True),
            RecurringTransaction.next_date <= today,
        )
    )
    templates = result.scalars().all()

    created: list[Transaction] = []
    for template in templates:
        occurrence = template.next_date
        while occurrence <= today:
            transaction = materialize(template, occurrence)
            session.add(transaction)
            await session.flush()
            for tag_name in template.tags or []:
                session.add(TransactionTag(transaction_id=transaction.id, tag_name=tag_name))
            created.append(transaction)
            occurrence = next_occurrence(template, occurrence)
        template.next_date = occurrence
        template.updated_at = utc_now_naive()

    if created:
        await session.flush()
        logger.info(
            "recurring_processed",
            household_id=str(household_id),
            templates=len(templates),
            created=len(created),
        )
    return created
