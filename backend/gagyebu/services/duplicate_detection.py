"""Heuristic duplicate detection for newly entered transactions.

A candidate is scored against each existing transaction of the same type:
amount closeness (weight 0.4), date proximity (0.3) and description
similarity (0.3), plus 0.1 each for the same payment method and the same
person when smart detection is on. A pair counts as a likely duplicate
when the score exceeds 0.6 and at least two signals agreed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date
from uuid import UUID

_NON_WORD_PATTERN = re.compile(r"[^\w\s]")
_SPACE_PATTERN = re.compile(r"\s+")

# Descriptions that fall in the same group get a similarity bonus.
COMMON_MERCHANT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"마트|슈퍼|편의점"),
    re.compile(r"카페|커피|스타벅스|이디야"),
    re.compile(r"식당|음식점|치킨|피자|한식|중식|일식|양식"),
    re.compile(r"주유소|기름|연료"),
    re.compile(r"병원|의원|약국|의료"),
    re.compile(r"교통|버스|지하철|택시|기차"),
    re.compile(r"쇼핑|온라인|배송|택배"),
)
PATTERN_BONUS = 0.2
MATCH_THRESHOLD = 0.6


@dataclass(frozen=True)
class DuplicateDetectionOptions:
    amount_tolerance: float = 0.02
    date_tolerance: int = 3
    description_threshold: float = 0.7
    enable_smart_detection: bool = True


DEFAULT_DETECTION_OPTIONS = DuplicateDetectionOptions()


@dataclass(frozen=True)
class TransactionSnapshot:
    type: str
    amount: int
    date: date
    description: str | None = None
    payment_method: str = ""
    person_type: str = "household"
    person_id: UUID | None = None
    id: UUID | None = None


@dataclass
class DuplicateMatch:
    transaction: TransactionSnapshot
    similarity: float
    reasons: list[str] = field(default_factory=list)


def levenshtein_distance(left: str, right: str) -> int:
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(left: str, right: str) -> float:
    a = left.lower().strip()
    b = right.lower().strip()
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1 - levenshtein_distance(a, b) / max(len(a), len(b))


def _normalize_description(text: str) -> str:
    lowered = _SPACE_PATTERN.sub(" ", text.lower())
    return _NON_WORD_PATTERN.sub("", lowered).strip()


def description_similarity(left: str, right: str) -> float:
    a = _normalize_description(left)
    b = _normalize_description(right)
    if a == b:
        return 1.0
    bonus = 0.0
    for pattern in COMMON_MERCHANT_PATTERNS:
        if pattern.search(a) and pattern.search(b):
            bonus = PATTERN_BONUS
            break
    return min(1.0, string_similarity(a, b) + bonus)


def amount_similarity(left: int, right: int, tolerance: float) -> float:
    if left == right:
        return 1.0
    average = (left + right) / 2
    percent_diff = abs(left - right) / average
    if tolerance <= 0 or percent_diff > tolerance:
        return 0.0
    return 1 - (percent_diff / tolerance)


def _format_won(amount: int) -> str:
    return f"{amount:,}원"


def detect_duplicates(
    candidate: TransactionSnapshot,
    existing: list[TransactionSnapshot],
    options: DuplicateDetectionOptions = DEFAULT_DETECTION_OPTIONS,
) -> list[DuplicateMatch]:
    matches: list[DuplicateMatch] = []
    for other in existing:
        if other.type != candidate.type:
            continue
        if candidate.id is not None and other.id == candidate.id:
            continue

        reasons: list[str] = []
        score = 0.0
        factors = 0

        amount_sim = amount_similarity(other.amount, candidate.amount, options.amount_tolerance)
        if amount_sim > 0:
            score += amount_sim * 0.4
            factors += 1
            if amount_sim > 0.9:
                reasons.append(f"동일한 금액 ({_format_won(other.amount)})")
            else:
                diff = abs(other.amount - candidate.amount)
                reasons.append(f"유사한 금액 (차이: {_format_won(diff)})")

        day_gap = abs((other.date - candidate.date).days)
        if day_gap <= options.date_tolerance:
            date_sim = 1 - (day_gap / options.date_tolerance) if options.date_tolerance else 1.0
            score += date_sim * 0.3
            factors += 1
            reasons.append("같은 날짜" if day_gap == 0 else f"{day_gap}일 차이")

        left_text = other.description or ""
        right_text = candidate.description or ""
        desc_sim = (
            description_similarity(left_text, right_text)
            if options.enable_smart_detection
            else string_similarity(left_text, right_text)
        )
        if desc_sim >= options.description_threshold:
            score += desc_sim * 0.3
            factors += 1
            if desc_sim > 0.95:
                reasons.append("동일한 설명")
            else:
                reasons.append(f"유사한 설명 ({round(desc_sim * 100)}% 일치)")

        if options.enable_smart_detection:
            if other.payment_method and other.payment_method == candidate.payment_method:
                score += 0.1
                reasons.append(f"동일한 결제 방법 ({other.payment_method})")
            if (
                other.person_type == candidate.person_type
                and other.person_id == candidate.person_id
            ):
                score += 0.1
                reasons.append("동일한 사용자")

        final_score = score if factors > 0 else 0.0
        if final_score > MATCH_THRESHOLD and len(reasons) >= 2:
            matches.append(
                DuplicateMatch(transaction=other, similarity=final_score, reasons=reasons)
            )

    return sorted(matches, key=lambda match: match.similarity, reverse=True)


def has_likely_duplicate(
    candidate: TransactionSnapshot,
    existing: list[TransactionSnapshot],
) -> bool:
    strict = replace(
        DEFAULT_DETECTION_OPTIONS,
        amount_tolerance=0.01,
        date_tolerance=1,
        description_threshold=0.8,
    )
    matches = detect_duplicates(candidate, existing, strict)
    return bool(matches) and matches[0].similarity > 0.8


def get_duplicate_warning(matches: list[DuplicateMatch]) -> str:
    if not matches:
        return ""
    top = matches[0]
    confidence = round(top.similarity * 100)
    return f"{confidence}% 확률로 중복 거래일 수 있습니다. {', '.join(top.reasons)}"
