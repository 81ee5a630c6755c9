from pydantic import BaseModel

from gagyebu.services.ai.types import CategoryTotal, MonthlyTotal


class MonthlyTotalsResponse(BaseModel):
    year: int
    months: list[MonthlyTotal]


class CategoryTotalsResponse(BaseModel):
    start_date: str | None = None
    end_date: str | None = None
    type: str
    items: list[CategoryTotal]


class MonthSpendingResponse(BaseModel):
    month: str
    spending: dict[str, int]


class PeriodComparisonResponse(BaseModel):
    current: MonthlyTotal
    previous: MonthlyTotal
    expense_change_percent: float | None = None
    income_change_percent: float | None = None
    net_change: int
