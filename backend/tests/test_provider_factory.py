from collections.abc import Iterator
from pathlib import Path

import pytest
from httpx import AsyncClient

from gagyebu.api.deps import get_assistant
from gagyebu.core.config import get_settings
from gagyebu.services.ai.keyword_provider import KeywordAssistantProvider
from gagyebu.services.ai.openai_provider import OpenAIAssistantProvider
from gagyebu.services.ai.provider_factory import get_assistant_provider
from gagyebu.services.colors import SUGGESTION_TAGS


@pytest.fixture
def fresh_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[pytest.MonkeyPatch]:
    # Keep a stray .env in the working directory from leaking a key in.
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_missing_key_uses_keyword_provider(fresh_settings: pytest.MonkeyPatch) -> None:
    assert get_settings().ai_enabled is False
    assert isinstance(get_assistant_provider(), KeywordAssistantProvider)


def test_blank_key_uses_keyword_provider(fresh_settings: pytest.MonkeyPatch) -> None:
    fresh_settings.setenv("OPENAI_API_KEY", "   ")
    get_settings.cache_clear()

    assert get_settings().ai_enabled is False
    assert isinstance(get_assistant_provider(), KeywordAssistantProvider)


def test_configured_key_uses_openai_provider(fresh_settings: pytest.MonkeyPatch) -> None:
    fresh_settings.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()

    provider = get_assistant_provider()

    assert isinstance(provider, OpenAIAssistantProvider)
    assert provider.api_key == "sk-test"


@pytest.mark.asyncio
async def test_suggest_tags_without_key_falls_back_to_keywords(
    client: AsyncClient, fresh_settings: pytest.MonkeyPatch
) -> None:
    from gagyebu.main import app

    app.dependency_overrides.pop(get_assistant, None)

    register_res = await client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": "testpass123", "name": "김민수"},
    )
    headers = {"Authorization": f"Bearer {register_res.json()['token']['access_token']}"}
    household_res = await client.post("/api/households", json={"name": "우리집"}, headers=headers)
    household_id = household_res.json()["id"]

    res = await client.post(
        "/api/ai/suggest-tags",
        json={"description": "택시 타고 마트", "householdId": household_id},
        headers=headers,
    )

    assert res.status_code == 200
    suggestions = res.json()["suggestions"]
    assert set(suggestions) <= set(SUGGESTION_TAGS)
    assert suggestions == ["교통비", "생활용품"]

    anonymous_res = await client.post(
        "/api/ai/suggest-tags",
        json={"description": "택시", "householdId": household_id},
    )
    assert anonymous_res.status_code == 401
