from pydantic import BaseModel, ConfigDict, Field

from gagyebu.services.ai.types import (
    BudgetRecommendation,
    CategoryTotal,
    FinancialAdvice,
    MonthlyTotal,
    SpendingPattern,
)


class AIRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    household_id: str | None = Field(default=None, alias="householdId")


class SuggestTagsRequest(AIRequest):
    description: str | None = None


class AnalysisRequest(AIRequest):
    months: int = Field(default=3, ge=1, le=12)


class CategorizeRequest(AIRequest):
    description: str | None = None


class InsightData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    monthly_totals: list[MonthlyTotal] = Field(alias="monthlyTotals")
    category_totals: list[CategoryTotal] = Field(alias="categoryTotals")


class InsightsResponse(BaseModel):
    insights: list[str]
    data: InsightData


class SuggestTagsResponse(BaseModel):
    suggestions: list[str]


class CategorizeResponse(BaseModel):
    category: str


class SpendingPatternsResponse(BaseModel):
    patterns: list[SpendingPattern]


class BudgetRecommendationsResponse(BaseModel):
    recommendations: list[BudgetRecommendation]


class AdviceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    savings_rate: float = Field(alias="savingsRate")
    advice: list[FinancialAdvice]
