import csv
import io
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from urllib.parse import quote

from openpyxl import Workbook

from gagyebu.models.transaction import Transaction, TransactionType
from gagyebu.services.ai.types import CategoryTotal, MonthlyTotal
from gagyebu.services.analytics_service import BudgetProgress, percent_change

UTF8_BOM = "\ufeff"
TRANSACTION_CSV_HEADER = ["날짜", "유형", "설명", "카테고리", "금액", "결제방법"]
BUDGET_CSV_HEADER = ["카테고리", "예산", "지출", "잔여", "사용률"]
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SUMMARY_SHEET = "요약"
TRANSACTIONS_SHEET = "거래내역"
BUDGETS_SHEET = "예산분석"

# Characters that would break the quoted filename parameter.
_UNSAFE_FILENAME_CHARS = re.compile(r"[\"\\/]")


@dataclass
class ReportSummary:
    total_income: int
    total_expense: int
    net_amount: int
    savings_rate: float
    transaction_count: int


@dataclass
class YearlyReport:
    year: int
    summary: ReportSummary
    months: list[MonthlyTotal]
    previous_summary: ReportSummary
    expense_growth_percent: float | None
    income_growth_percent: float | None
    top_categories: list[CategoryTotal] = field(default_factory=list)


def type_label(transaction_type: TransactionType | str) -> str:
    value = transaction_type.value if hasattr(transaction_type, "value") else str(transaction_type)
    return "수입" if value == TransactionType.INCOME.value else "지출"


def savings_rate(total_income: int, total_expense: int) -> float:
    if total_income <= 0:
        return 0.0
    return round((total_income - total_expense) / total_income * 100, 1)


def summarize(transactions: list[Transaction]) -> ReportSummary:
    income = sum(t.amount for t in transactions if t.type == TransactionType.INCOME)
    expense = sum(t.amount for t in transactions if t.type == TransactionType.EXPENSE)
    return ReportSummary(
        total_income=income,
        total_expense=expense,
        net_amount=income - expense,
        savings_rate=savings_rate(income, expense),
        transaction_count=len(transactions),
    )


def summarize_months(months: list[MonthlyTotal], transaction_count: int = 0) -> ReportSummary:
    income = sum(month.total_income for month in months)
    expense = sum(month.total_expense for month in months)
    return ReportSummary(
        total_income=income,
        total_expense=expense,
        net_amount=income - expense,
        savings_rate=savings_rate(income, expense),
        transaction_count=transaction_count,
    )


def fill_year(year: int, months: list[MonthlyTotal]) -> list[MonthlyTotal]:
    by_month = {month.month: month for month in months}
    series: list[MonthlyTotal] = []
    for index in range(1, 13):
        key = f"{year}-{index:02d}"
        series.append(by_month.get(key) or MonthlyTotal(month=key))
    return series


def build_yearly_report(
    year: int,
    months: list[MonthlyTotal],
    previous_months: list[MonthlyTotal],
    top_categories: list[CategoryTotal],
    transaction_count: int = 0,
    previous_transaction_count: int = 0,
) -> YearlyReport:
    summary = summarize_months(months, transaction_count)
    previous = summarize_months(previous_months, previous_transaction_count)
    return YearlyReport(
        year=year,
        summary=summary,
        months=fill_year(year, months),
        previous_summary=previous,
        expense_growth_percent=percent_change(summary.total_expense, previous.total_expense),
        income_growth_percent=percent_change(summary.total_income, previous.total_income),
        top_categories=top_categories,
    )


def _write_csv(rows: list[list]) -> str:
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer)
    writer.writerows(rows)
    return UTF8_BOM + buffer.getvalue()


def transaction_rows(
    transactions: list[Transaction],
    tags_by_transaction: dict,
) -> list[list]:
    rows: list[list] = [TRANSACTION_CSV_HEADER]
    for transaction in transactions:
        tags = tags_by_transaction.get(transaction.id) or []
        rows.append(
            [
                transaction.date.isoformat(),
                type_label(transaction.type),
                transaction.description or "",
                tags[0] if tags else "기타",
                transaction.amount,
                transaction.payment_method or "",
            ]
        )
    return rows


def budget_rows(progress: list[BudgetProgress]) -> list[list]:
    rows: list[list] = [BUDGET_CSV_HEADER]
    for item in progress:
        rows.append(
            [
                item.tag_name,
                item.monthly_limit,
                item.spent_amount,
                item.remaining_amount,
                f"{item.usage_percent:.1f}%",
            ]
        )
    return rows


def transactions_csv(
    transactions: list[Transaction],
    tags_by_transaction: dict,
) -> str:
    return _write_csv(transaction_rows(transactions, tags_by_transaction))


def budgets_csv(progress: list[BudgetProgress]) -> str:
    return _write_csv(budget_rows(progress))


def summary_rows(
    household_name: str,
    start_date: date,
    end_date: date,
    generated_at: datetime,
    summary: ReportSummary,
) -> list[list]:
    return [
        ["가구명", household_name],
        ["기간", f"{start_date.isoformat()} - {end_date.isoformat()}"],
        ["생성일", generated_at.date().isoformat()],
        [],
        ["재정 요약"],
        ["총 수입", summary.total_income],
        ["총 지출", summary.total_expense],
        ["순 잔액", summary.net_amount],
    ]


def excel_report(
    household_name: str,
    start_date: date,
    end_date: date,
    generated_at: datetime,
    transactions: list[Transaction],
    tags_by_transaction: dict,
    progress: list[BudgetProgress],
    include_transactions: bool = True,
    include_budgets: bool = True,
) -> bytes:
    """Workbook with a summary sheet plus optional transaction and budget sheets.

    The budget sheet is left out when there is no budget to report.
    """
    workbook = Workbook()
    summary_sheet = workbook.active
    summary_sheet.title = SUMMARY_SHEET
    rows = summary_rows(household_name, start_date, end_date, generated_at, summarize(transactions))
    for row in rows:
        summary_sheet.append(row)

    if include_transactions:
        sheet = workbook.create_sheet(TRANSACTIONS_SHEET)
        for row in transaction_rows(transactions, tags_by_transaction):
            sheet.append(row)

    if include_budgets and progress:
        sheet = workbook.create_sheet(BUDGETS_SHEET)
        for row in budget_rows(progress):
            sheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def report_filename(
    household_name: str,
    start_date: date,
    end_date: date,
    extension: str,
    generated_at: datetime,
) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", household_name)
    safe_name = "_".join(cleaned.split()) or "household"
    stamp = generated_at.strftime("%Y-%m-%dT%H-%M")
    return f"{safe_name}_가계부_{start_date.isoformat()}_{end_date.isoformat()}_{stamp}.{extension}"


def content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii")
    ascii_name = _UNSAFE_FILENAME_CHARS.sub("_", ascii_name).strip("_") or "report"
    if "." not in ascii_name and "." in filename:
        ascii_name = f"report.{filename.rsplit('.', 1)[1]}"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
