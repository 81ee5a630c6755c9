from abc import ABC, abstractmethod

from gagyebu.services.ai.types import (
    BudgetRecommendation,
    BudgetSnapshot,
    CategoryTotal,
    FinancialAdvice,
    MonthlyTotal,
    SpendingPattern,
    TransactionDigest,
)


class AssistantProviderError(RuntimeError):
    """Raised when a provider call fails or returns an unusable answer."""


class FinancialAssistantProvider(ABC):
    @abstractmethod
    async def suggest_tags(self, description: str, available_tags: list[str]) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    async def generate_insights(
        self,
        monthly: list[MonthlyTotal],
        categories: list[CategoryTotal],
    ) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    async def categorize(self, description: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def analyze_spending_patterns(
        self,
        transactions: list[TransactionDigest],
    ) -> list[SpendingPattern]:
        raise NotImplementedError

    @abstractmethod
    async def recommend_budget(
        self,
        transactions: list[TransactionDigest],
        budgets: list[BudgetSnapshot],
    ) -> list[BudgetRecommendation]:
        raise NotImplementedError

    @abstractmethod
    async def generate_financial_advice(
        self,
        transactions: list[TransactionDigest],
        budgets: list[BudgetSnapshot],
        savings_rate: float,
    ) -> list[FinancialAdvice]:
        raise NotImplementedError
