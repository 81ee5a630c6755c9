"""Entry points for the AI helper.

Every call goes to the configured provider first. Provider failures are logged
and answered with the keyword/rule fallback or an empty result, never raised.
"""

from gagyebu.core.logging import get_logger
from gagyebu.services.ai.base import AssistantProviderError, FinancialAssistantProvider
from gagyebu.services.ai.keyword_provider import keyword_tag_suggestions, rule_based_insights
from gagyebu.services.ai.types import (
    BudgetRecommendation,
    BudgetSnapshot,
    CategoryTotal,
    FinancialAdvice,
    MonthlyTotal,
    SpendingPattern,
    TransactionDigest,
)
from gagyebu.services.colors import SUGGESTION_TAGS

logger = get_logger(__name__)


def merge_available_tags(existing_tags: list[str]) -> list[str]:
    merged: list[str] = []
    for tag in [*SUGGESTION_TAGS, *existing_tags]:
        cleaned = tag.strip()
        if cleaned and cleaned not in merged:
            merged.append(cleaned)
    return merged


async def suggest_tags(
    provider: FinancialAssistantProvider,
    description: str,
    existing_tags: list[str] | None = None,
) -> list[str]:
    if not description.strip():
        return []
    available = merge_available_tags(existing_tags or [])
    try:
        return await provider.suggest_tags(description, available)
    except AssistantProviderError as exc:
        logger.warning("ai_suggest_tags_failed", error=str(exc))
        return keyword_tag_suggestions(description)


async def generate_insights(
    provider: FinancialAssistantProvider,
    monthly: list[MonthlyTotal],
    categories: list[CategoryTotal],
) -> list[str]:
    if not monthly and not categories:
        return []
    try:
        return await provider.generate_insights(monthly, categories)
    except AssistantProviderError as exc:
        logger.warning("ai_insights_failed", error=str(exc))
        return rule_based_insights(monthly, categories)


async def categorize_transaction(provider: FinancialAssistantProvider, description: str) -> str:
    if not description.strip():
        return "기타"
    try:
        return await provider.categorize(description)
    except AssistantProviderError as exc:
        logger.warning("ai_categorize_failed", error=str(exc))
        return "기타"


async def analyze_spending_patterns(
    provider: FinancialAssistantProvider,
    transactions: list[TransactionDigest],
) -> list[SpendingPattern]:
    try:
        return await provider.analyze_spending_patterns(transactions)
    except AssistantProviderError as exc:
        logger.warning("ai_spending_patterns_failed", error=str(exc))
        return []


async def recommend_budget(
    provider: FinancialAssistantProvider,
    transactions: list[TransactionDigest],
    budgets: list[BudgetSnapshot],
) -> list[BudgetRecommendation]:
    try:
        return await provider.recommend_budget(transactions, budgets)
    except AssistantProviderError as exc:
        logger.warning("ai_budget_recommendation_failed", error=str(exc))
        return []


async def generate_financial_advice(
    provider: FinancialAssistantProvider,
    transactions: list[TransactionDigest],
    budgets: list[BudgetSnapshot],
    savings_rate: float,
) -> list[FinancialAdvice]:
    try:
        return await provider.generate_financial_advice(transactions, budgets, savings_rate)
    except AssistantProviderError as exc:
        logger.warning("ai_advice_failed", error=str(exc))
        return []
