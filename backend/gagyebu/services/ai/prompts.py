import json

from gagyebu.services.ai.types import (
    BudgetSnapshot,
    CategoryTotal,
    MonthlyTotal,
    TransactionDigest,
)

CATEGORIZE_CATEGORIES = [
    "식비",
    "교통비",
    "문화생활",
    "쇼핑",
    "의료비",
    "교육비",
    "주거비",
    "통신비",
    "보험료",
    "기타",
]

TAG_SYSTEM_PROMPT = """
You suggest expense categories for a Korean household ledger.
Answer with at most 3 tag names separated by commas and nothing else.
Only use tag names from the list you are given.
"""

INSIGHT_SYSTEM_PROMPT = """
You are a friendly Korean household finance analyst.
Write up to 3 short, concrete insights in Korean, one per line.
Mention amounts in Korean won and do not use bullet markers.
"""

CATEGORIZE_SYSTEM_PROMPT = """
You classify a single household transaction description.
Answer with exactly one category name from the list you are given and nothing else.
"""

ANALYSIS_SYSTEM_PROMPT = """
You are a household finance analyst for Korean families.
Return valid JSON only: a root array and no surrounding prose.
Write every human-readable string in Korean.
"""


def build_tag_prompt(description: str, available_tags: list[str]) -> str:
    return (
        f"available_tags: {', '.join(available_tags)}\n"
        f"description: {description}"
    )


def build_insight_prompt(monthly: list[MonthlyTotal], categories: list[CategoryTotal]) -> str:
    monthly_lines = [
        f"{row.month}: expense {row.total_expense}, income {row.total_income}"
        for row in monthly
    ]
    category_lines = [f"{row.tag_name}: {row.total_amount}" for row in categories[:5]]
    return (
        "monthly_totals (KRW):\n"
        + "\n".join(monthly_lines)
        + "\ncategory_totals (KRW):\n"
        + "\n".join(category_lines)
    )


def build_categorize_prompt(description: str) -> str:
    return (
        f"categories: {', '.join(CATEGORIZE_CATEGORIES)}\n"
        f"description: {description}"
    )


def _dump(rows: list) -> str:
    return json.dumps([row.model_dump() for row in rows], ensure_ascii=False)


def build_spending_pattern_prompt(transactions: list[TransactionDigest]) -> str:
    return (
        "Find spending patterns per category in these transactions.\n"
        'Each element: {"category": string, "amount": number, "frequency": number, '
        '"trend": "increasing"|"decreasing"|"stable"}\n'
        f"transactions: {_dump(transactions)}"
    )


def build_budget_prompt(transactions: list[TransactionDigest], budgets: list[BudgetSnapshot]) -> str:
    return (
        "Recommend monthly budget amounts per category.\n"
        'Each element: {"category": string, "recommendedAmount": number, "reason": string, '
        '"priority": "high"|"medium"|"low"}\n'
        f"current_budgets: {_dump(budgets)}\n"
        f"transactions: {_dump(transactions)}"
    )


def build_advice_prompt(
    transactions: list[TransactionDigest],
    budgets: list[BudgetSnapshot],
    savings_rate: float,
) -> str:
    return (
        "Give practical financial advice for this household.\n"
        'Each element: {"title": string, "description": string, "actionItems": [string], '
        '"impact": "high"|"medium"|"low", '
        '"category": "saving"|"budgeting"|"spending"|"investment"}\n'
        f"savings_rate_percent: {savings_rate}\n"
        f"current_budgets: {_dump(budgets)}\n"
        f"transactions: {_dump(transactions)}"
    )
