import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TransactionKind = Literal["expense", "income"]
PersonKind = Literal["member", "household"]


class TransactionCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionKind
    amount: int = Field(ge=0)
    description: str | None = Field(default=None, max_length=255)
    date: dt.date
    person_type: PersonKind = "household"
    person_id: str | None = None
    payment_method: str = Field(default="", max_length=80)
    tags: list[str] = Field(default_factory=list)
    receipt_url: str | None = Field(default=None, max_length=1024)


class TransactionUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionKind | None = None
    amount: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=255)
    date: dt.date | None = None
    person_type: PersonKind | None = None
    person_id: str | None = None
    payment_method: str | None = Field(default=None, max_length=80)
    tags: list[str] | None = None
    receipt_url: str | None = Field(default=None, max_length=1024)


class TransactionResponse(BaseModel):
    id: str
    household_id: str
    type: str
    amount: int
    description: str | None = None
    date: str
    person_type: str
    person_id: str | None = None
    person_name: str | None = None
    payment_method: str
    receipt_url: str | None = None
    tags: list[str]
    created_by: str
    updated_by: str
    created_at: str
    updated_at: str


class DuplicateMatchResponse(BaseModel):
    transaction_id: str | None = None
    amount: int
    date: str
    description: str | None = None
    similarity: float
    reasons: list[str]


class TransactionCreateResponse(BaseModel):
    transaction: TransactionResponse
    duplicate_warning: str | None = None
    duplicates: list[DuplicateMatchResponse] = Field(default_factory=list)


class DuplicateCheckRequest(BaseModel):
    type: TransactionKind
    amount: int = Field(ge=0)
    date: dt.date
    description: str | None = Field(default=None, max_length=255)
    payment_method: str = Field(default="", max_length=80)
    person_type: PersonKind = "household"
    person_id: str | None = None
    exclude_id: str | None = None


class DuplicateCheckResponse(BaseModel):
    has_duplicates: bool
    likely_duplicate: bool
    warning: str | None = None
    matches: list[DuplicateMatchResponse]


class TransactionPageResponse(BaseModel):
    items: list[TransactionResponse]
    total: int
    page: int
    per_page: int
    total_pages: int


class TransactionWindowResponse(BaseModel):
    start_index: int
    end_index: int
    offset_y: int
    total_height: int
    total_count: int
    items: list[TransactionResponse]


class ReceiptResponse(BaseModel):
    path: str
    public_url: str
    transaction_id: str | None = None
