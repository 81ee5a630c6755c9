from pydantic import BaseModel, ConfigDict, Field


class TagColorResponse(BaseModel):
    tag_name: str
    color_hex: str


class TagColorUpsertRequest(BaseModel):
    color_hex: str = Field(pattern=r"^#[0-9a-fA-F]{6}$")


class TagCreateRequest(TagColorUpsertRequest):
    model_config = ConfigDict(str_strip_whitespace=True)

    tag_name: str = Field(min_length=1, max_length=50)


class PaletteColorResponse(BaseModel):
    id: str
    name: str
    hex: str
    bg: str
    text: str
