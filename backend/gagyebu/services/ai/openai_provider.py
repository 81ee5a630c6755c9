import httpx

from gagyebu.services.ai.base import AssistantProviderError, FinancialAssistantProvider
from gagyebu.services.ai.parser_utils import (
    parse_json_list,
    split_insight_lines,
    split_tag_answer,
)
from gagyebu.services.ai.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    CATEGORIZE_CATEGORIES,
    CATEGORIZE_SYSTEM_PROMPT,
    INSIGHT_SYSTEM_PROMPT,
    TAG_SYSTEM_PROMPT,
    build_advice_prompt,
    build_budget_prompt,
    build_categorize_prompt,
    build_insight_prompt,
    build_spending_pattern_prompt,
    build_tag_prompt,
)
from gagyebu.services.ai.types import (
    BudgetRecommendation,
    BudgetSnapshot,
    CategoryTotal,
    FinancialAdvice,
    MonthlyTotal,
    SpendingPattern,
    TransactionDigest,
)


class OpenAIAssistantProvider(FinancialAssistantProvider):
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        headers = {"Authorization": f"Bearer {self.api_key}"}
        timeout = httpx.Timeout(self.timeout_seconds, connect=10.0)
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise AssistantProviderError(f"OpenAI request failed: {exc}") from exc
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AssistantProviderError("OpenAI response had no message content") from exc
        return content or ""

    async def suggest_tags(self, description: str, available_tags: list[str]) -> list[str]:
        content = await self._complete(
            TAG_SYSTEM_PROMPT,
            build_tag_prompt(description, available_tags),
            temperature=0.3,
            max_tokens=50,
        )
        return split_tag_answer(content, limit=3)

    async def generate_insights(
        self,
        monthly: list[MonthlyTotal],
        categories: list[CategoryTotal],
    ) -> list[str]:
        content = await self._complete(
            INSIGHT_SYSTEM_PROMPT,
            build_insight_prompt(monthly, categories),
            temperature=0.7,
            max_tokens=300,
        )
        return split_insight_lines(content, limit=3)

    async def categorize(self, description: str) -> str:
        content = await self._complete(
            CATEGORIZE_SYSTEM_PROMPT,
            build_categorize_prompt(description),
            temperature=0.1,
            max_tokens=20,
        )
        category = content.strip()
        return category if category in CATEGORIZE_CATEGORIES else "기타"

    async def analyze_spending_patterns(
        self,
        transactions: list[TransactionDigest],
    ) -> list[SpendingPattern]:
        content = await self._complete(
            ANALYSIS_SYSTEM_PROMPT,
            build_spending_pattern_prompt(transactions),
            temperature=0.3,
        )
        return parse_json_list(content, SpendingPattern)

    async def recommend_budget(
        self,
        transactions: list[TransactionDigest],
        budgets: list[BudgetSnapshot],
    ) -> list[BudgetRecommendation]:
        content = await self._complete(
            ANALYSIS_SYSTEM_PROMPT,
            build_budget_prompt(transactions, budgets),
            temperature=0.3,
        )
        return parse_json_list(content, BudgetRecommendation)

    async def generate_financial_advice(
        self,
        transactions: list[TransactionDigest],
        budgets: list[BudgetSnapshot],
        savings_rate: float,
    ) -> list[FinancialAdvice]:
        content = await self._complete(
            ANALYSIS_SYSTEM_PROMPT,
            build_advice_prompt(transactions, budgets, savings_rate),
            temperature=0.5,
        )
        return parse_json_list(content, FinancialAdvice)
