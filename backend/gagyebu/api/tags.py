from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.api.deps import HouseholdAccess, get_household_access
from gagyebu.core.db import get_session
from gagyebu.models.tag_color import TagColor, utc_now_naive
from gagyebu.schemas.tag import (
    PaletteColorResponse,
    TagColorResponse,
    TagColorUpsertRequest,
    TagCreateRequest,
)
from gagyebu.services.colors import (
    TAG_COLORS,
    PaletteColor,
    get_next_available_color,
    get_tag_color_by_hex,
)

router = APIRouter(prefix="/households/{household_id}/tags", tags=["tags"])


def _to_tag_response(row: TagColor) -> TagColorResponse:
    return TagColorResponse(tag_name=row.tag_name, color_hex=row.color_hex)


def _to_palette_response(color: PaletteColor) -> PaletteColorResponse:
    return PaletteColorResponse(id=color.id, name=color.name, hex=color.hex, bg=color.bg, text=color.text)


def _clean_tag_name(tag_name: str) -> str:
    cleaned = " ".join(tag_name.strip().split())
    if not cleaned or len(cleaned) > 50:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Tag name must be between 1 and 50 characters",
        )
    return cleaned


async def _list_tag_colors(session: AsyncSession, access: HouseholdAccess) -> list[TagColor]:
    result = await session.execute(
        select(TagColor)
        .where(TagColor.household_id == access.household.id)
        .order_by(TagColor.created_at.asc(), TagColor.tag_name.asc())
    )
    return list(result.scalars().all())


async def _get_tag_color(session: AsyncSession, access: HouseholdAccess, tag_name: str) -> TagColor | None:
    result = await session.execute(
        select(TagColor).where(
            TagColor.household_id == access.household.id,
            TagColor.tag_name == tag_name,
        )
    )
    return result.scalar_one_or_none()


async def _upsert(
    session: AsyncSession,
    access: HouseholdAccess,
    tag_name: str,
    color_hex: str,
) -> TagColor:
    row = await _get_tag_color(session, access, tag_name)
    if row is None:
        row = TagColor(household_id=access.household.id, tag_name=tag_name, color_hex=color_hex.lower())
    else:
        row.color_hex = color_hex.lower()
        row.updated_at = utc_now_naive()
    session.add(row)
    await session.commit()
    await session.refresh(row)
    return row


@router.get("", response_model=list[TagColorResponse])
async def list_tags(
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> list[TagColorResponse]:
    return [_to_tag_response(row) for row in await _list_tag_colors(session, access)]


@router.get("/palette", response_model=list[PaletteColorResponse])
async def palette(
    access: HouseholdAccess = Depends(get_household_access),
) -> list[PaletteColorResponse]:
    _ = access
    return [_to_palette_response(color) for color in TAG_COLORS]


@router.get("/next-color", response_model=PaletteColorResponse)
async def next_color(
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> PaletteColorResponse:
    used_ids = set()
    for row in await _list_tag_colors(session, access):
        color = get_tag_color_by_hex(row.color_hex)
        if color is not None:
            used_ids.add(color.id)
    return _to_palette_response(get_next_available_color(used_ids))


@router.post("", response_model=TagColorResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    payload: TagCreateRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TagColorResponse:
    tag_name = _clean_tag_name(payload.tag_name)
    if await _get_tag_color(session, access, tag_name) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tag already exists",
        )
    return _to_tag_response(await _upsert(session, access, tag_name, payload.color_hex))


@router.put("/{tag_name}", response_model=TagColorResponse)
async def set_tag_color(
    tag_name: str,
    payload: TagColorUpsertRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> TagColorResponse:
    cleaned = _clean_tag_name(tag_name)
    return _to_tag_response(await _upsert(session, access, cleaned, payload.color_hex))


@router.delete("/{tag_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag_color(
    tag_name: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> None:
    row = await _get_tag_color(session, access, _clean_tag_name(tag_name))
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tag not found",
        )
    await session.delete(row)
    await session.commit()
