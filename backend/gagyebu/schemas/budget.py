from pydantic import BaseModel, ConfigDict, Field


class BudgetGoalUpsertRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    tag_name: str = Field(min_length=1, max_length=50)
    monthly_limit: int = Field(ge=0)


class BudgetGoalUpdateRequest(BaseModel):
    monthly_limit: int = Field(ge=0)


class BudgetGoalResponse(BaseModel):
    id: str
    tag_name: str
    monthly_limit: int
    created_by: str
    created_at: str
    updated_at: str


class BudgetProgressItem(BaseModel):
    tag_name: str
    monthly_limit: int
    spent_amount: int
    remaining_amount: int
    usage_percent: float
    is_over_budget: bool
    color_hex: str | None = None


class BudgetProgressResponse(BaseModel):
    month: str
    total_limit: int
    total_spent: int
    items: list[BudgetProgressItem]
