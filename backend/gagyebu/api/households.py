from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from gagyebu.api.deps import (
    HouseholdAccess,
    get_current_user,
    get_household_access,
    get_household_owner,
    parse_uuid,
)
from gagyebu.core.config import get_settings
from gagyebu.core.db import get_session
from gagyebu.models.household import Household, utc_now_naive
from gagyebu.models.user import User
from gagyebu.schemas.household import (
    HouseholdCreateRequest,
    HouseholdDetailResponse,
    HouseholdMemberResponse,
    HouseholdRenameRequest,
    HouseholdResponse,
    InviteResponse,
    JoinHouseholdRequest,
    MessageResponse,
)
from gagyebu.services.household_service import (
    AlreadyMemberError,
    HouseholdFullError,
    InviteCodeGenerationError,
    clean_household_name,
    create_household,
    find_household_by_invite_code,
    generate_unique_invite_code,
    get_active_membership,
    join_household,
    list_active_members,
    list_user_households,
    remove_membership,
    soft_delete_household,
)

router = APIRouter(prefix="/households", tags=["households"])
settings = get_settings()


def to_household_response(household: Household) -> HouseholdResponse:
    return HouseholdResponse(
        id=str(household.id),
        name=household.name,
        invite_code=household.invite_code,
        created_by=str(household.created_by),
        created_at=household.created_at.isoformat(),
    )


async def to_household_detail(session: AsyncSession, household: Household) -> HouseholdDetailResponse:
    members = await list_active_members(session, household.id)
    return HouseholdDetailResponse(
        **to_household_response(household).model_dump(),
        members=[
            HouseholdMemberResponse(
                user_id=str(user.id),
                name=user.name,
                email=user.email,
                avatar_url=user.avatar_url,
                joined_at=member.joined_at.isoformat(),
                is_creator=user.id == household.created_by,
            )
            for member, user in members
        ],
        max_members=settings.household_max_members,
    )


def _invite_code_unavailable(exc: InviteCodeGenerationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.post("", response_model=HouseholdDetailResponse, status_code=status.HTTP_201_CREATED)
async def create(
    payload: HouseholdCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HouseholdDetailResponse:
    try:
        household = await create_household(session, name=payload.name, creator=user)
    except InviteCodeGenerationError as exc:
        raise _invite_code_unavailable(exc) from exc
    await session.commit()
    await session.refresh(household)
    return await to_household_detail(session, household)


@router.get("", response_model=list[HouseholdResponse])
async def list_mine(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[HouseholdResponse]:
    households = await list_user_households(session, user.id)
    return [to_household_response(household) for household in households]


@router.post("/join", response_model=HouseholdDetailResponse)
async def join(
    payload: JoinHouseholdRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HouseholdDetailResponse:
    household = await find_household_by_invite_code(session, payload.invite_code)
    if household is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid invite code",
        )
    try:
        await join_household(session, household=household, user=user)
    except (AlreadyMemberError, HouseholdFullError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    await session.commit()
    return await to_household_detail(session, household)


@router.get("/{household_id}", response_model=HouseholdDetailResponse)
async def get_household(
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> HouseholdDetailResponse:
    return await to_household_detail(session, access.household)


@router.patch("/{household_id}", response_model=HouseholdDetailResponse)
async def rename(
    payload: HouseholdRenameRequest,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> HouseholdDetailResponse:
    household = access.household
    household.name = clean_household_name(payload.name)
    household.updated_at = utc_now_naive()
    session.add(household)
    await session.commit()
    return await to_household_detail(session, household)


@router.delete("/{household_id}", response_model=MessageResponse)
async def delete(
    access: HouseholdAccess = Depends(get_household_owner),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    soft_delete_household(access.household)
    session.add(access.household)
    await session.commit()
    return MessageResponse(message="Household deleted successfully.")


@router.post("/{household_id}/invite", response_model=InviteResponse)
async def regenerate_invite_code(
    access: HouseholdAccess = Depends(get_household_owner),
    session: AsyncSession = Depends(get_session),
) -> InviteResponse:
    household = access.household
    try:
        household.invite_code = await generate_unique_invite_code(session)
    except InviteCodeGenerationError as exc:
        raise _invite_code_unavailable(exc) from exc
    household.updated_at = utc_now_naive()
    session.add(household)
    await session.commit()
    return InviteResponse(
        invite_code=household.invite_code,
        message="Share this code with family members to join your household.",
    )


@router.post("/{household_id}/leave", response_model=MessageResponse)
async def leave(
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    remove_membership(access.membership)
    session.add(access.membership)
    await session.commit()
    return MessageResponse(message="You left the household.")


@router.delete("/{household_id}/members/{user_id}", response_model=MessageResponse)
async def remove_member(
    user_id: str,
    access: HouseholdAccess = Depends(get_household_owner),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    member_uuid = parse_uuid(user_id, "user_id")
    if member_uuid == access.user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove yourself. Leave the household instead.",
        )
    membership = await get_active_membership(
        session,
        household_id=access.household.id,
        user_id=member_uuid,
    )
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found in this household.",
        )
    remove_membership(membership)
    session.add(membership)
    await session.commit()
    return MessageResponse(message="Member removed successfully.")
