import json

import httpx
import pytest

from gagyebu.services.ai import assistant
from gagyebu.services.ai.base import AssistantProviderError
from gagyebu.services.ai.keyword_provider import (
    KeywordAssistantProvider,
    keyword_tag_suggestions,
    rule_based_insights,
)
from gagyebu.services.ai.openai_provider import OpenAIAssistantProvider
from gagyebu.services.ai.parser_utils import parse_json_list, split_insight_lines, split_tag_answer
from gagyebu.services.ai.types import (
    BudgetRecommendation,
    CategoryTotal,
    FinancialAdvice,
    MonthlyTotal,
    SpendingPattern,
)
from gagyebu.services.colors import SUGGESTION_TAGS


class DummyResponse:
    def __init__(self, content: object, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
            raise httpx.HTTPStatusError(
                "server error",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )

    def json(self) -> dict[str, object]:
        return {"choices": [{"message": {"content": self.content}}]}


class DummyClient:
    def __init__(self, response: DummyResponse, captured: list[dict]) -> None:
        self.response = response
        self.captured = captured

    async def __aenter__(self) -> "DummyClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    async def post(self, url: str, **kwargs: object) -> DummyResponse:
        self.captured.append({"url": url, **kwargs})
        return self.response


def patch_client(
    monkeypatch: pytest.MonkeyPatch,
    content: object,
    status_code: int = 200,
) -> list[dict]:
    captured: list[dict] = []
    monkeypatch.setattr(
        "gagyebu.services.ai.openai_provider.httpx.AsyncClient",
        lambda *args, **kwargs: DummyClient(DummyResponse(content, status_code), captured),
    )
    return captured


def make_provider() -> OpenAIAssistantProvider:
    return OpenAIAssistantProvider(api_key="test-key", model="gpt-3.5-turbo", base_url="https://api.openai.com/v1/")


def test_keyword_suggestions_are_limited_and_from_vocabulary() -> None:
    assert keyword_tag_suggestions("스타벅스 커피") == ["식비"]
    assert keyword_tag_suggestions("택시 타고 마트 다녀옴") == ["교통비", "생활용품"]
    assert keyword_tag_suggestions("배달 음식 먹고 택시 타고 영화 봄") == ["식비", "교통비"]
    assert keyword_tag_suggestions("알 수 없음") == []
    for description in ["전기 요금", "병원 진료", "게임 결제", "주유소"]:
        assert set(keyword_tag_suggestions(description)) <= set(SUGGESTION_TAGS)


def test_rule_based_insights() -> None:
    monthly = [
        MonthlyTotal(month="2024-02", total_expense=200000),
        MonthlyTotal(month="2024-03", total_expense=150000),
    ]
    categories = [CategoryTotal(tag_name="식비", total_amount=300000, transaction_count=12)]
    assert rule_based_insights(monthly, categories) == [
        "이번 달 지출이 지난 달 대비 25.0% 감소했습니다.",
        "식비 카테고리에서 가장 많이 지출했습니다. (₩300,000)",
    ]

    steady = [
        MonthlyTotal(month="2024-02", total_expense=100000),
        MonthlyTotal(month="2024-03", total_expense=105000),
    ]
    assert rule_based_insights(steady, []) == []

    zero_baseline = [
        MonthlyTotal(month="2024-02", total_expense=0),
        MonthlyTotal(month="2024-03", total_expense=105000),
    ]
    assert rule_based_insights(zero_baseline, []) == []


def test_parser_utils() -> None:
    fenced = 'Here you go:\n```json\n[{"category": "식비", "amount": 1000, "frequency": 3, "trend": "stable"}]\n```'
    patterns = parse_json_list(fenced, SpendingPattern)
    assert patterns == [SpendingPattern(category="식비", amount=1000, frequency=3, trend="stable")]

    with pytest.raises(AssistantProviderError):
        parse_json_list("not json at all", SpendingPattern)
    with pytest.raises(AssistantProviderError):
        parse_json_list('[{"category": "식비"}]', SpendingPattern)
    with pytest.raises(AssistantProviderError):
        parse_json_list('{"category": "식비"}', SpendingPattern)

    assert split_tag_answer('"식비", 교통비 ,, 생활용품, 의류') == ["식비", "교통비", "생활용품"]
    assert split_insight_lines("첫째\n\n 둘째 \n셋째\n넷째") == ["첫째", "둘째", "셋째"]


@pytest.mark.asyncio
async def test_openai_suggest_tags_posts_chat_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = patch_client(monkeypatch, "식비, 외식")

    tags = await make_provider().suggest_tags("강남 고깃집", ["식비", "외식"])

    assert tags == ["식비", "외식"]
    request = captured[0]
    assert request["url"] == "https://api.openai.com/v1/chat/completions"
    assert request["headers"] == {"Authorization": "Bearer test-key"}
    assert request["json"]["model"] == "gpt-3.5-turbo"
    assert request["json"]["temperature"] == 0.3
    assert request["json"]["max_tokens"] == 50
    assert "강남 고깃집" in request["json"]["messages"][1]["content"]


@pytest.mark.asyncio
async def test_openai_categorize_rejects_unknown_category(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_client(monkeypatch, "반려동물")
    assert await make_provider().categorize("강아지 사료") == "기타"

    patch_client(monkeypatch, " 교통비 ")
    assert await make_provider().categorize("버스") == "교통비"


@pytest.mark.asyncio
async def test_openai_structured_answers(monkeypatch: pytest.MonkeyPatch) -> None:
    recommendations = [
        {"category": "식비", "recommendedAmount": 400000, "reason": "외식 감소", "priority": "high"},
    ]
    patch_client(monkeypatch, json.dumps(recommendations, ensure_ascii=False))
    result = await make_provider().recommend_budget([], [])
    assert result == [
        BudgetRecommendation(category="식비", recommended_amount=400000, reason="외식 감소", priority="high")
    ]

    advice = [
        {
            "title": "비상금 마련",
            "description": "3개월치 생활비를 모으세요",
            "actionItems": ["자동이체 설정"],
            "impact": "high",
            "category": "saving",
        }
    ]
    patch_client(monkeypatch, json.dumps(advice, ensure_ascii=False))
    items = await make_provider().generate_financial_advice([], [], 12.5)
    assert isinstance(items[0], FinancialAdvice)
    assert items[0].action_items == ["자동이체 설정"]
    assert items[0].model_dump(by_alias=True)["actionItems"] == ["자동이체 설정"]


@pytest.mark.asyncio
async def test_openai_http_errors_become_provider_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_client(monkeypatch, "", status_code=500)
    with pytest.raises(AssistantProviderError):
        await make_provider().suggest_tags("커피", ["식비"])


@pytest.mark.asyncio
async def test_assistant_falls_back_to_keywords_on_provider_error(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_client(monkeypatch, "", status_code=503)
    provider = make_provider()

    assert await assistant.suggest_tags(provider, "지하철 정기권") == ["교통비"]
    assert await assistant.categorize_transaction(provider, "지하철") == "기타"
    assert await assistant.analyze_spending_patterns(provider, []) == []
    assert await assistant.recommend_budget(provider, [], []) == []
    insights = await assistant.generate_insights(
        provider,
        [MonthlyTotal(month="2024-03", total_expense=1000)],
        [CategoryTotal(tag_name="교통비", total_amount=1000, transaction_count=1)],
    )
    assert insights == ["교통비 카테고리에서 가장 많이 지출했습니다. (₩1,000)"]


@pytest.mark.asyncio
async def test_assistant_short_circuits_empty_input() -> None:
    provider = KeywordAssistantProvider()
    assert await assistant.suggest_tags(provider, "   ") == []
    assert await assistant.categorize_transaction(provider, "") == "기타"
    assert await assistant.generate_insights(provider, [], []) == []
    assert assistant.merge_available_tags(["식비", " 반려동물 ", ""])[-1] == "반려동물"
