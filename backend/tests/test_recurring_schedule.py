from datetime import date
from uuid import uuid4

from gagyebu.models.recurring_transaction import RecurringFrequency, RecurringTransaction
from gagyebu.models.transaction import TransactionType
from gagyebu.services.dates import (
    add_months_anchored,
    last_day_of_month,
    parse_month,
    shift_months,
)
from gagyebu.services.recurring_service import materialize, next_occurrence


def make_template(start: date, frequency: RecurringFrequency = RecurringFrequency.MONTHLY) -> RecurringTransaction:
    return RecurringTransaction(
        household_id=uuid4(),
        type=TransactionType.EXPENSE,
        amount=850000,
        description="월세",
        frequency=frequency,
        tags=["주거비"],
        start_date=start,
        next_date=start,
        created_by=uuid4(),
    )


def test_month_helpers() -> None:
    assert shift_months(date(2024, 12, 15), 1) == date(2025, 1, 1)
    assert shift_months(date(2024, 1, 31), -1) == date(2023, 12, 1)
    assert last_day_of_month(date(2023, 2, 10)) == date(2023, 2, 28)
    assert last_day_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert parse_month("2024-03") == date(2024, 3, 1)


def test_anchored_months_keep_the_original_day() -> None:
    assert add_months_anchored(date(2024, 1, 31), 1, 31) == date(2024, 2, 29)
    assert add_months_anchored(date(2024, 2, 29), 1, 31) == date(2024, 3, 31)
    assert add_months_anchored(date(2024, 3, 31), 1, 31) == date(2024, 4, 30)


def test_next_occurrence_monthly_does_not_drift() -> None:
    template = make_template(date(2024, 1, 31))
    occurrences = [template.next_date]
    for _ in range(4):
        occurrences.append(next_occurrence(template, occurrences[-1]))
    assert occurrences == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 31),
    ]


def test_next_occurrence_yearly_from_leap_day() -> None:
    template = make_template(date(2024, 2, 29), RecurringFrequency.YEARLY)
    assert next_occurrence(template) == date(2025, 2, 28)
    assert next_occurrence(template, date(2027, 2, 28)) == date(2028, 2, 29)


def test_materialize_copies_template_fields() -> None:
    template = make_template(date(2024, 5, 1))
    transaction = materialize(template, date(2024, 6, 1))
    assert transaction.household_id == template.household_id
    assert transaction.amount == 850000
    assert transaction.description == "월세"
    assert transaction.date == date(2024, 6, 1)
    assert transaction.created_by == template.created_by
    assert transaction.updated_by == template.created_by
