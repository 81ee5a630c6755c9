from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gagyebu.api.budgets import month_param
from gagyebu.api.deps import HouseholdAccess, get_household_access
from gagyebu.core.db import get_session
from gagyebu.models.transaction import TransactionType
from gagyebu.schemas.analytics import (
    CategoryTotalsResponse,
    MonthlyTotalsResponse,
    MonthSpendingResponse,
    PeriodComparisonResponse,
)
from gagyebu.services.analytics_service import (
    get_category_totals,
    get_month_spending_by_tag,
    get_monthly_totals,
    get_period_comparison,
)
from gagyebu.services.dates import today_utc

router = APIRouter(prefix="/households/{household_id}/analytics", tags=["analytics"])


@router.get("/monthly", response_model=MonthlyTotalsResponse)
async def monthly_totals(
    year: int | None = Query(default=None, ge=1900, le=9999),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> MonthlyTotalsResponse:
    target_year = year or today_utc().year
    months = await get_monthly_totals(session, access.household.id, target_year)
    return MonthlyTotalsResponse(year=target_year, months=months)


@router.get("/categories", response_model=CategoryTotalsResponse)
async def category_totals(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    type: TransactionType = Query(default=TransactionType.EXPENSE),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> CategoryTotalsResponse:
    items = await get_category_totals(session, access.household.id, start_date, end_date, type)
    return CategoryTotalsResponse(
        start_date=start_date.isoformat() if start_date else None,
        end_date=end_date.isoformat() if end_date else None,
        type=type.value,
        items=items,
    )


@router.get("/spending-by-tag", response_model=MonthSpendingResponse)
async def spending_by_tag(
    month: date = Depends(month_param),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> MonthSpendingResponse:
    spending = await get_month_spending_by_tag(session, access.household.id, month)
    return MonthSpendingResponse(month=month.strftime("%Y-%m"), spending=spending)


@router.get("/comparison", response_model=PeriodComparisonResponse)
async def comparison(
    month: date = Depends(month_param),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> PeriodComparisonResponse:
    result = await get_period_comparison(session, access.household.id, month)
    return PeriodComparisonResponse(
        current=result.current,
        previous=result.previous,
        expense_change_percent=result.expense_change_percent,
        income_change_percent=result.income_change_percent,
        net_change=result.net_change,
    )
