from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class BudgetGoal(SQLModel, table=True):
    __tablename__ = "budget_goals"
    __table_args__ = (
        UniqueConstraint("household_id", "tag_name", name="uq_budget_goal_household_tag"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    tag_name: str = Field(sa_column=Column(String(50), nullable=False))
    monthly_limit: int = Field(nullable=False, ge=0)
    created_by: UUID = Field(foreign_key="users.id", nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
