from pydantic import BaseModel, ConfigDict, Field


class PaymentMethodCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=80)
    description: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=40)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    is_default: bool = False


class PaymentMethodUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=80)
    description: str | None = Field(default=None, max_length=255)
    icon: str | None = Field(default=None, max_length=40)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    is_default: bool | None = None
    is_active: bool | None = None


class PaymentMethodResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    is_default: bool
    is_active: bool
    created_at: str
    updated_at: str


class PaymentMethodListResponse(BaseModel):
    built_in: list[str]
    items: list[PaymentMethodResponse]
