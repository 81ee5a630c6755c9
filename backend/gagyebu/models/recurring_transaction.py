from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, String
from sqlmodel import Field, SQLModel

from gagyebu.models.transaction import PersonType, TransactionType


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class RecurringFrequency(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurringTransaction(SQLModel, table=True):
    __tablename__ = "recurring_transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    type: TransactionType = Field(nullable=False)
    amount: int = Field(nullable=False, ge=0)
    description: str | None = Field(default=None, max_length=255)
    frequency: RecurringFrequency = Field(default=RecurringFrequency.MONTHLY, nullable=False)
    person_type: PersonType = Field(default=PersonType.HOUSEHOLD, nullable=False)
    person_id: UUID | None = Field(default=None, foreign_key="users.id")
    payment_method: str = Field(
        default="",
        sa_column=Column(String(80), nullable=False, default=""),
    )
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    start_date: date = Field(nullable=False)
    next_date: date = Field(nullable=False, index=True)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_by: UUID = Field(foreign_key="users.id", nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
