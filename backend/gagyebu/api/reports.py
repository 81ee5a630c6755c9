from datetime import UTC, date, datetime

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gagyebu.api.budgets import month_param, to_progress_item
from gagyebu.api.deps import HouseholdAccess, get_household_access
from gagyebu.api.transactions import build_transaction_responses
from gagyebu.core.db import get_session
from gagyebu.schemas.report import (
    MonthlyReportResponse,
    ReportSummaryResponse,
    YearlyReportResponse,
)
from gagyebu.services.analytics_service import (
    get_budget_progress,
    get_category_totals,
    get_monthly_totals,
)
from gagyebu.services.dates import last_day_of_month, today_utc
from gagyebu.services.report_service import (
    XLSX_MEDIA_TYPE,
    ReportSummary,
    budgets_csv,
    build_yearly_report,
    content_disposition,
    excel_report,
    report_filename,
    summarize,
    transactions_csv,
)
from gagyebu.services.transaction_service import (
    TransactionFilter,
    count_transactions,
    list_transactions,
    load_tags,
)

router = APIRouter(prefix="/households/{household_id}/reports", tags=["reports"])


def _to_summary_response(summary: ReportSummary) -> ReportSummaryResponse:
    return ReportSummaryResponse(
        total_income=summary.total_income,
        total_expense=summary.total_expense,
        net_amount=summary.net_amount,
        savings_rate=summary.savings_rate,
        transaction_count=summary.transaction_count,
    )


@router.get("/monthly", response_model=MonthlyReportResponse)
async def monthly_report(
    month: date = Depends(month_param),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> MonthlyReportResponse:
    household_id = access.household.id
    period_start = month
    period_end = last_day_of_month(month)
    transactions = await list_transactions(
        session,
        household_id,
        TransactionFilter(start_date=period_start, end_date=period_end),
    )
    categories = await get_category_totals(session, household_id, period_start, period_end)
    budgets = await get_budget_progress(session, household_id, month)
    return MonthlyReportResponse(
        household_name=access.household.name,
        month=month.strftime("%Y-%m"),
        period_start=period_start.isoformat(),
        period_end=period_end.isoformat(),
        generated_at=datetime.now(UTC).isoformat(),
        summary=_to_summary_response(summarize(transactions)),
        categories=categories,
        budgets=[to_progress_item(item) for item in budgets],
        transactions=await build_transaction_responses(session, transactions),
    )


@router.get("/yearly", response_model=YearlyReportResponse)
async def yearly_report(
    year: int | None = Query(default=None, ge=1900, le=9999),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> YearlyReportResponse:
    household_id = access.household.id
    target_year = year or today_utc().year
    months = await get_monthly_totals(session, household_id, target_year)
    previous_months = await get_monthly_totals(session, household_id, target_year - 1)
    top_categories = await get_category_totals(
        session,
        household_id,
        date(target_year, 1, 1),
        date(target_year, 12, 31),
    )
    count = await count_transactions(
        session,
        household_id,
        TransactionFilter(start_date=date(target_year, 1, 1), end_date=date(target_year, 12, 31)),
    )
    previous_count = await count_transactions(
        session,
        household_id,
        TransactionFilter(
            start_date=date(target_year - 1, 1, 1),
            end_date=date(target_year - 1, 12, 31),
        ),
    )
    report = build_yearly_report(
        target_year,
        months,
        previous_months,
        top_categories[:10],
        transaction_count=count,
        previous_transaction_count=previous_count,
    )
    return YearlyReportResponse(
        household_name=access.household.name,
        year=report.year,
        generated_at=datetime.now(UTC).isoformat(),
        summary=_to_summary_response(report.summary),
        previous_year_summary=_to_summary_response(report.previous_summary),
        expense_growth_percent=report.expense_growth_percent,
        income_growth_percent=report.income_growth_percent,
        months=report.months,
        top_categories=report.top_categories,
    )


@router.get("/export.csv")
async def export_report_csv(
    start_date: date = Query(...),
    end_date: date = Query(...),
    kind: str = Query(default="transactions", pattern="^(transactions|budgets)$"),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> Response:
    household_id = access.household.id
    if kind == "budgets":
        progress = await get_budget_progress(session, household_id, start_date.replace(day=1))
        content = budgets_csv(progress)
    else:
        transactions = await list_transactions(
            session,
            household_id,
            TransactionFilter(start_date=start_date, end_date=end_date),
        )
        tags = await load_tags(session, [transaction.id for transaction in transactions])
        content = transactions_csv(transactions, tags)

    filename = report_filename(access.household.name, start_date, end_date, "csv", datetime.now(UTC))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.get("/export.xlsx")
async def export_report_xlsx(
    start_date: date = Query(...),
    end_date: date = Query(...),
    include_transactions: bool = Query(default=True),
    include_budgets: bool = Query(default=True),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> Response:
    household_id = access.household.id
    transactions = await list_transactions(
        session,
        household_id,
        TransactionFilter(start_date=start_date, end_date=end_date),
    )
    tags = await load_tags(session, [transaction.id for transaction in transactions])
    progress = await get_budget_progress(session, household_id, start_date.replace(day=1))
    generated_at = datetime.now(UTC)

    content = excel_report(
        access.household.name,
        start_date,
        end_date,
        generated_at,
        transactions,
        tags,
        progress,
        include_transactions=include_transactions,
        include_budgets=include_budgets,
    )
    filename = report_filename(access.household.name, start_date, end_date, "xlsx", generated_at)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )
