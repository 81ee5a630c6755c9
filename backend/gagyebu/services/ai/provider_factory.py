from gagyebu.core.config import get_settings
from gagyebu.services.ai.base import FinancialAssistantProvider
from gagyebu.services.ai.keyword_provider import KeywordAssistantProvider
from gagyebu.services.ai.openai_provider import OpenAIAssistantProvider


def get_assistant_provider() -> FinancialAssistantProvider:
    settings = get_settings()
    if not settings.ai_enabled:
        return KeywordAssistantProvider()
    return OpenAIAssistantProvider(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.ai_request_timeout_seconds,
    )
