from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.models.budget_goal import BudgetGoal
from gagyebu.models.tag_color import TagColor
from gagyebu.models.transaction import Transaction, TransactionTag, TransactionType
from gagyebu.services.ai.types import CategoryTotal, MonthlyTotal
from gagyebu.services.dates import first_day_of_month, last_day_of_month, shift_months


@dataclass
class PeriodComparison:
    current: MonthlyTotal
    previous: MonthlyTotal
    expense_change_percent: float | None
    income_change_percent: float | None
    net_change: int


@dataclass
class BudgetProgress:
    tag_name: str
    monthly_limit: int
    spent_amount: int
    remaining_amount: int
    usage_percent: float
    is_over_budget: bool
    color_hex: str | None = None


def percent_change(current: int, previous: int) -> float | None:
    if previous == 0:
        return None
    return round((current - previous) / previous * 100, 1)


def usage_percent(spent: int, limit: int) -> float:
    if limit <= 0:
        return 0.0
    return round(spent / limit * 100, 1)


async def _fetch_rows(
    session: AsyncSession,
    household_id: UUID,
    start_date: date | None,
    end_date: date | None,
) -> list[tuple[TransactionType, int, date]]:
    stmt = select(Transaction.type, Transaction.amount, Transaction.date).where(
        Transaction.household_id == household_id
    )
    if start_date:
        stmt = stmt.where(Transaction.date >= start_date)
    if end_date:
        stmt = stmt.where(Transaction.date <= end_date)
    result = await session.execute(stmt)
    return [(row[0], row[1], row[2]) for row in result.all()]


def summarize_month(month: str, rows: list[tuple[TransactionType, int, date]]) -> MonthlyTotal:
    expense = sum(amount for kind, amount, _ in rows if kind == TransactionType.EXPENSE)
    income = sum(amount for kind, amount, _ in rows if kind == TransactionType.INCOME)
    return MonthlyTotal(
        month=month,
        total_expense=expense,
        total_income=income,
        net_income=income - expense,
    )


async def get_monthly_totals(
    session: AsyncSession,
    household_id: UUID,
    year: int,
) -> list[MonthlyTotal]:
    rows = await _fetch_rows(session, household_id, date(year, 1, 1), date(year, 12, 31))
    by_month: dict[str, list[tuple[TransactionType, int, date]]] = defaultdict(list)
    for row in rows:
        by_month[row[2].strftime("%Y-%m")].append(row)
    return [summarize_month(month, by_month[month]) for month in sorted(by_month)]


async def get_tag_color_map(session: AsyncSession, household_id: UUID) -> dict[str, str]:
    result = await session.execute(select(TagColor).where(TagColor.household_id == household_id))
    return {row.tag_name: row.color_hex for row in result.scalars().all()}


async def get_category_totals(
    session: AsyncSession,
    household_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
    transaction_type: TransactionType | None = TransactionType.EXPENSE,
) -> list[CategoryTotal]:
    stmt = (
        select(TransactionTag.tag_name, Transaction.amount)
        .join(Transaction, Transaction.id == TransactionTag.transaction_id)
        .where(Transaction.household_id == household_id)
    )
    if transaction_type is not None:
        stmt = stmt.where(Transaction.type == transaction_type)
    if start_date:
        stmt = stmt.where(Transaction.date >= start_date)
    if end_date:
        stmt = stmt.where(Transaction.date <= end_date)
    result = await session.execute(stmt)

    totals: dict[str, int] = defaultdict(int)
    counts: dict[str, int] = defaultdict(int)
    for tag_name, amount in result.all():
        totals[tag_name] += amount
        counts[tag_name] += 1

    colors = await get_tag_color_map(session, household_id)
    return [
        CategoryTotal(
            tag_name=tag_name,
            total_amount=total,
            transaction_count=counts[tag_name],
            color_hex=colors.get(tag_name),
        )
        for tag_name, total in sorted(totals.items(), key=lambda item: item[1], reverse=True)
    ]


async def get_month_spending_by_tag(
    session: AsyncSession,
    household_id: UUID,
    month: date,
) -> dict[str, int]:
    categories = await get_category_totals(
        session,
        household_id,
        first_day_of_month(month),
        last_day_of_month(month),
    )
    return {category.tag_name: category.total_amount for category in categories}


async def get_month_total(session: AsyncSession, household_id: UUID, month: date) -> MonthlyTotal:
    rows = await _fetch_rows(
        session,
        household_id,
        first_day_of_month(month),
        last_day_of_month(month),
    )
    return summarize_month(month.strftime("%Y-%m"), rows)


async def get_period_comparison(
    session: AsyncSession,
    household_id: UUID,
    month: date,
) -> PeriodComparison:
    current = await get_month_total(session, household_id, month)
    previous = await get_month_total(session, household_id, shift_months(month, -1))
    return PeriodComparison(
        current=current,
        previous=previous,
        expense_change_percent=percent_change(current.total_expense, previous.total_expense),
        income_change_percent=percent_change(current.total_income, previous.total_income),
        net_change=current.net_income - previous.net_income,
    )


async def get_budget_progress(
    session: AsyncSession,
    household_id: UUID,
    month: date,
) -> list[BudgetProgress]:
    goals_result = await session.execute(
        select(BudgetGoal)
        .where(BudgetGoal.household_id == household_id)
        .order_by(BudgetGoal.tag_name.asc())
    )
    goals = goals_result.scalars().all()
    if not goals:
        return []
    spending = await get_month_spending_by_tag(session, household_id, month)
    colors = await get_tag_color_map(session, household_id)
    progress: list[BudgetProgress] = []
    for goal in goals:
        spent = spending.get(goal.tag_name, 0)
        progress.append(
            BudgetProgress(
                tag_name=goal.tag_name,
                monthly_limit=goal.monthly_limit,
                spent_amount=spent,
                remaining_amount=goal.monthly_limit - spent,
                usage_percent=usage_percent(spent, goal.monthly_limit),
                is_over_budget=spent > goal.monthly_limit,
                color_hex=colors.get(goal.tag_name),
            )
        )
    return progress
