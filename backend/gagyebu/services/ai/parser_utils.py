import json
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from gagyebu.services.ai.base import AssistantProviderError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _extract_first_json_array(text: str) -> str:
    text = text.strip()
    if text.startswith("[") and text.endswith("]"):
        return text
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end <= start:
        return text
    return text[start : end + 1]


def parse_json_list(text: str, model: type[ModelT]) -> list[ModelT]:
    candidate = _extract_first_json_array(text)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise AssistantProviderError("Assistant answer was not valid JSON") from exc
    if not isinstance(data, list):
        raise AssistantProviderError("Assistant answer was not a JSON array")
    try:
        return [model.model_validate(item) for item in data]
    except ValidationError as exc:
        raise AssistantProviderError("Assistant answer did not match the expected shape") from exc


def split_tag_answer(text: str, limit: int = 3) -> list[str]:
    tags = [tag.strip().strip('"').strip() for tag in text.split(",")]
    return [tag for tag in tags if tag][:limit]


def split_insight_lines(text: str, limit: int = 3) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()][:limit]
