from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MonthlyTotal(BaseModel):
    month: str
    total_expense: int = 0
    total_income: int = 0
    net_income: int = 0


class CategoryTotal(BaseModel):
    tag_name: str
    total_amount: int = 0
    transaction_count: int = 0
    color_hex: str | None = None


class TransactionDigest(BaseModel):
    type: Literal["expense", "income"]
    amount: int
    date: str
    description: str | None = None
    category: str = "기타"


class BudgetSnapshot(BaseModel):
    category: str
    budget_amount: int
    spent_amount: int = 0


class SpendingPattern(BaseModel):
    category: str
    amount: float
    frequency: float
    trend: Literal["increasing", "decreasing", "stable"]


class BudgetRecommendation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: str
    recommended_amount: float = Field(alias="recommendedAmount")
    reason: str
    priority: Literal["high", "medium", "low"]


class FinancialAdvice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    action_items: list[str] = Field(default_factory=list, alias="actionItems")
    impact: Literal["high", "medium", "low"]
    category: Literal["saving", "budgeting", "spending", "investment"]
