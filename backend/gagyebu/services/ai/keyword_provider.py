from gagyebu.services.ai.base import FinancialAssistantProvider
from gagyebu.services.ai.types import (
    BudgetRecommendation,
    BudgetSnapshot,
    CategoryTotal,
    FinancialAdvice,
    MonthlyTotal,
    SpendingPattern,
    TransactionDigest,
)
from gagyebu.services.currency import format_krw

TAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "식비": ("음식", "식당", "배달", "카페", "커피", "점심", "저녁", "아침", "맥주", "술"),
    "교통비": ("버스", "지하철", "택시", "기차", "항공", "주유", "기름", "교통"),
    "생활용품": ("마트", "쇼핑", "생활", "용품", "청소", "세제"),
    "공과금": ("전기", "가스", "수도", "인터넷", "통신", "관리비"),
    "의료비": ("병원", "약국", "의료", "치료", "건강"),
    "엔터테인먼트": ("영화", "게임", "여행", "놀이", "오락"),
}

KEYWORD_SUGGESTION_LIMIT = 2
EXPENSE_CHANGE_THRESHOLD = 10.0


def keyword_tag_suggestions(description: str) -> list[str]:
    lowered = description.lower()
    suggestions = [
        tag
        for tag, keywords in TAG_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]
    return suggestions[:KEYWORD_SUGGESTION_LIMIT]


def rule_based_insights(
    monthly: list[MonthlyTotal],
    categories: list[CategoryTotal],
) -> list[str]:
    insights: list[str] = []
    if len(monthly) >= 2:
        latest, previous = monthly[-1], monthly[-2]
        # A zero baseline has no meaningful percentage change.
        if previous.total_expense > 0:
            change = (latest.total_expense - previous.total_expense) / previous.total_expense * 100
            if change > EXPENSE_CHANGE_THRESHOLD:
                insights.append(f"이번 달 지출이 지난 달 대비 {change:.1f}% 증가했습니다.")
            elif change < -EXPENSE_CHANGE_THRESHOLD:
                insights.append(f"이번 달 지출이 지난 달 대비 {abs(change):.1f}% 감소했습니다.")
    if categories:
        top = categories[0]
        insights.append(
            f"{top.tag_name} 카테고리에서 가장 많이 지출했습니다. ({format_krw(top.total_amount)})"
        )
    return insights[:3]


class KeywordAssistantProvider(FinancialAssistantProvider):
    """Offline provider used when no language-model key is configured."""

    async def suggest_tags(self, description: str, available_tags: list[str]) -> list[str]:
        return keyword_tag_suggestions(description)

    async def generate_insights(
        self,
        monthly: list[MonthlyTotal],
        categories: list[CategoryTotal],
    ) -> list[str]:
        return rule_based_insights(monthly, categories)

    async def categorize(self, description: str) -> str:
        return "기타"

    async def analyze_spending_patterns(
        self,
        transactions: list[TransactionDigest],
    ) -> list[SpendingPattern]:
        return []

    async def recommend_budget(
        self,
        transactions: list[TransactionDigest],
        budgets: list[BudgetSnapshot],
    ) -> list[BudgetRecommendation]:
        return []

    async def generate_financial_advice(
        self,
        transactions: list[TransactionDigest],
        budgets: list[BudgetSnapshot],
        savings_rate: float,
    ) -> list[FinancialAdvice]:
        return []
