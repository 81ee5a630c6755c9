from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from gagyebu.schemas.transaction import TransactionResponse


class RecurringCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Literal["expense", "income"]
    amount: int = Field(ge=0)
    description: str | None = Field(default=None, max_length=255)
    frequency: Literal["monthly", "yearly"] = "monthly"
    person_type: Literal["member", "household"] = "household"
    person_id: str | None = None
    payment_method: str = Field(default="", max_length=80)
    tags: list[str] = Field(default_factory=list)
    start_date: date


class RecurringUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=255)
    payment_method: str | None = Field(default=None, max_length=80)
    tags: list[str] | None = None
    is_active: bool | None = None


class RecurringResponse(BaseModel):
    id: str
    type: str
    amount: int
    description: str | None = None
    frequency: str
    person_type: str
    person_id: str | None = None
    payment_method: str
    tags: list[str]
    start_date: str
    next_date: str
    is_active: bool
    created_at: str


class ProcessDueResponse(BaseModel):
    created_count: int
    transactions: list[TransactionResponse]
