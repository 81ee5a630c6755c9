from pydantic import BaseModel, ConfigDict, EmailStr, Field


class HouseholdCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=120)


class HouseholdRenameRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=120)


class JoinHouseholdRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    invite_code: str = Field(min_length=6, max_length=32)


class HouseholdMemberResponse(BaseModel):
    user_id: str
    name: str
    email: EmailStr
    avatar_url: str | None = None
    joined_at: str
    is_creator: bool


class HouseholdResponse(BaseModel):
    id: str
    name: str
    invite_code: str
    created_by: str
    created_at: str


class HouseholdDetailResponse(HouseholdResponse):
    members: list[HouseholdMemberResponse]
    max_members: int


class InviteResponse(BaseModel):
    invite_code: str
    message: str


class MessageResponse(BaseModel):
    message: str
