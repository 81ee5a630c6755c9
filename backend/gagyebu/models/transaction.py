import datetime as dt
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class PersonType(str, Enum):
    MEMBER = "member"
    HOUSEHOLD = "household"


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    type: TransactionType = Field(nullable=False, index=True)
    amount: int = Field(nullable=False, ge=0)
    description: str | None = Field(default=None, max_length=255)
    date: dt.date = Field(nullable=False, index=True)
    person_type: PersonType = Field(default=PersonType.HOUSEHOLD, nullable=False)
    person_id: UUID | None = Field(default=None, foreign_key="users.id", index=True)
    payment_method: str = Field(
        default="",
        sa_column=Column(String(80), nullable=False, default="", index=True),
    )
    receipt_url: str | None = Field(default=None, max_length=1024)
    created_by: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    updated_by: UUID = Field(foreign_key="users.id", nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)


class TransactionTag(SQLModel, table=True):
    __tablename__ = "transaction_tags"
    __table_args__ = (
        UniqueConstraint("transaction_id", "tag_name", name="uq_transaction_tag"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    transaction_id: UUID = Field(foreign_key="transactions.id", nullable=False, index=True)
    tag_name: str = Field(sa_column=Column(String(50), nullable=False, index=True))
