from pydantic import BaseModel

from gagyebu.schemas.budget import BudgetProgressItem
from gagyebu.schemas.transaction import TransactionResponse
from gagyebu.services.ai.types import CategoryTotal, MonthlyTotal


class ReportSummaryResponse(BaseModel):
    total_income: int
    total_expense: int
    net_amount: int
    savings_rate: float
    transaction_count: int


class MonthlyReportResponse(BaseModel):
    household_name: str
    month: str
    period_start: str
    period_end: str
    generated_at: str
    summary: ReportSummaryResponse
    categories: list[CategoryTotal]
    budgets: list[BudgetProgressItem]
    transactions: list[TransactionResponse]


class YearlyReportResponse(BaseModel):
    household_name: str
    year: int
    generated_at: str
    summary: ReportSummaryResponse
    previous_year_summary: ReportSummaryResponse
    expense_growth_percent: float | None = None
    income_growth_percent: float | None = None
    months: list[MonthlyTotal]
    top_categories: list[CategoryTotal]
