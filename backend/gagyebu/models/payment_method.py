from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


BUILT_IN_PAYMENT_METHODS = ["현금", "신용카드", "체크카드", "계좌이체", "기타"]


class PaymentMethod(SQLModel, table=True):
    __tablename__ = "payment_methods"
    __table_args__ = (
        UniqueConstraint("household_id", "name", name="uq_payment_method_household_name"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    name: str = Field(sa_column=Column(String(80), nullable=False))
    description: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=40)
    color: str | None = Field(default=None, max_length=7)
    is_default: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_by: UUID = Field(foreign_key="users.id", nullable=False)
    updated_by: UUID = Field(foreign_key="users.id", nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
