from datetime import date
from uuid import uuid4

import pytest

from gagyebu.services.duplicate_detection import (
    DuplicateDetectionOptions,
    TransactionSnapshot,
    amount_similarity,
    description_similarity,
    detect_duplicates,
    get_duplicate_warning,
    has_likely_duplicate,
    levenshtein_distance,
    string_similarity,
)


def snapshot(**overrides) -> TransactionSnapshot:
    values = {
        "id": uuid4(),
        "type": "expense",
        "amount": 15000,
        "date": date(2024, 3, 10),
        "description": "스타벅스 강남점",
        "payment_method": "신용카드",
    }
    values.update(overrides)
    return TransactionSnapshot(**values)


def test_identical_transaction_is_reported_with_reasons() -> None:
    existing = snapshot()
    candidate = snapshot()

    matches = detect_duplicates(candidate, [existing])

    assert len(matches) == 1
    assert matches[0].transaction == existing
    assert matches[0].similarity > 0.8
    assert matches[0].reasons == [
        "동일한 금액 (15,000원)",
        "같은 날짜",
        "동일한 설명",
        "동일한 결제 방법 (신용카드)",
        "동일한 사용자",
    ]
    assert has_likely_duplicate(candidate, [existing]) is True


def test_other_type_and_same_id_are_skipped() -> None:
    existing = snapshot(type="income")
    assert detect_duplicates(snapshot(), [existing]) == []

    same = snapshot()
    assert detect_duplicates(same, [same]) == []


def test_unrelated_transaction_is_not_a_duplicate() -> None:
    existing = snapshot(amount=3000000, date=date(2024, 3, 25), description="월급", payment_method="계좌이체")
    assert detect_duplicates(snapshot(), [existing]) == []
    assert get_duplicate_warning([]) == ""


def test_near_amount_and_similar_description_match() -> None:
    existing = snapshot(amount=15200, date=date(2024, 3, 11))
    candidate = snapshot(description="스타벅스 강남역점")

    matches = detect_duplicates(candidate, [existing])

    assert len(matches) == 1
    assert matches[0].reasons[0].startswith("유사한 금액 (차이: 200원)")
    assert "1일 차이" in matches[0].reasons
    assert has_likely_duplicate(candidate, [existing]) is False


def test_warning_mentions_confidence_and_reasons() -> None:
    matches = detect_duplicates(snapshot(), [snapshot()])
    warning = get_duplicate_warning(matches)
    assert warning.endswith("같은 날짜, 동일한 설명, 동일한 결제 방법 (신용카드), 동일한 사용자")
    assert "% 확률로 중복 거래일 수 있습니다." in warning


def test_similarity_helpers() -> None:
    assert amount_similarity(10000, 10000, 0.02) == 1.0
    assert amount_similarity(10000, 20000, 0.02) == 0.0
    assert description_similarity("GS25 편의점!", "gs25   편의점") == 1.0
    assert description_similarity("이마트", "홈플러스 마트") >= 0.2


def test_smart_detection_off_ignores_payment_and_person() -> None:
    options = DuplicateDetectionOptions(enable_smart_detection=False)
    matches = detect_duplicates(snapshot(), [snapshot()], options)
    assert matches[0].reasons == ["동일한 금액 (15,000원)", "같은 날짜", "동일한 설명"]


def test_string_similarity_uses_edit_distance() -> None:
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert string_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
    assert string_similarity("Coupang", "coupang ") == 1.0
    assert string_similarity("", "coupang") == 0.0


def test_appended_words_lower_description_similarity() -> None:
    existing = snapshot(amount=25000, date=date(2024, 3, 1), description="쿠팡 주문")
    candidate = snapshot(
        amount=25000,
        date=date(2024, 3, 4),
        description="쿠팡 주문 반품",
        payment_method="현금",
    )

    assert description_similarity("쿠팡 주문", "쿠팡 주문 반품") == pytest.approx(0.625)
    assert detect_duplicates(candidate, [existing]) == []
