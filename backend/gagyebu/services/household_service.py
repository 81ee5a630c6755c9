import secrets
import string
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.core.config import get_settings
from gagyebu.core.logging import get_logger
from gagyebu.models.household import Household, HouseholdMember, utc_now_naive
from gagyebu.models.tag_color import TagColor
from gagyebu.models.user import User
from gagyebu.services.colors import DEFAULT_HOUSEHOLD_TAGS, get_default_tag_color, get_tag_color

logger = get_logger(__name__)

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 7


class InviteCodeGenerationError(RuntimeError):
    """Raised when no free invite code could be drawn."""


class HouseholdFullError(RuntimeError):
    """Raised when a household already has the maximum number of members."""


class AlreadyMemberError(RuntimeError):
    """Raised when a user joins a household they already belong to."""


def clean_household_name(name: str) -> str:
    return " ".join(str(name or "").strip().split())


def new_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


async def generate_unique_invite_code(session: AsyncSession) -> str:
    for _ in range(10):
        candidate = new_invite_code()
        result = await session.execute(
            select(Household).where(Household.invite_code == candidate)
        )
        if result.scalar_one_or_none() is None:
            return candidate
    raise InviteCodeGenerationError("Unable to generate invite code. Try again.")


async def seed_default_tag_colors(session: AsyncSession, *, household_id: UUID) -> int:
    existing_result = await session.execute(
        select(TagColor.tag_name).where(TagColor.household_id == household_id)
    )
    existing = set(existing_result.scalars().all())
    created = 0
    for tag_name, color_id in DEFAULT_HOUSEHOLD_TAGS:
        if tag_name in existing:
            continue
        color = get_tag_color(color_id) or get_default_tag_color()
        session.add(TagColor(household_id=household_id, tag_name=tag_name, color_hex=color.hex))
        created += 1
    if created:
        await session.flush()
    return created


async def create_household(session: AsyncSession, *, name: str, creator: User) -> Household:
    household = Household(
        name=clean_household_name(name),
        created_by=creator.id,
        invite_code=await generate_unique_invite_code(session),
    )
    session.add(household)
    await session.flush()
    session.add(HouseholdMember(household_id=household.id, user_id=creator.id))
    await seed_default_tag_colors(session, household_id=household.id)
    logger.info("household_created", household_id=str(household.id), user_id=str(creator.id))
    return household


async def get_active_household(session: AsyncSession, household_id: UUID) -> Household | None:
    result = await session.execute(
        select(Household).where(
            Household.id == household_id,
            Household.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def get_active_membership(
    session: AsyncSession,
    *,
    household_id: UUID,
    user_id: UUID,
) -> HouseholdMember | None:
    result = await session.execute(
        select(HouseholdMember).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id == user_id,
            HouseholdMember.removed_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def count_active_members(session: AsyncSession, household_id: UUID) -> int:
    result = await session.execute(
        select(func.count(HouseholdMember.id)).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.removed_at.is_(None),
        )
    )
    return int(result.scalar_one())


async def list_user_households(session: AsyncSession, user_id: UUID) -> list[Household]:
    result = await session.execute(
        select(Household)
        .join(HouseholdMember, HouseholdMember.household_id == Household.id)
        .where(
            HouseholdMember.user_id == user_id,
            HouseholdMember.removed_at.is_(None),
            Household.deleted_at.is_(None),
        )
        .order_by(Household.created_at.asc())
    )
    return list(result.scalars().all())


async def list_active_members(
    session: AsyncSession,
    household_id: UUID,
) -> list[tuple[HouseholdMember, User]]:
    result = await session.execute(
        select(HouseholdMember, User)
        .join(User, User.id == HouseholdMember.user_id)
        .where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.removed_at.is_(None),
        )
        .order_by(HouseholdMember.joined_at.asc())
    )
    return [(member, user) for member, user in result.all()]


async def find_household_by_invite_code(session: AsyncSession, invite_code: str) -> Household | None:
    result = await session.execute(
        select(Household).where(
            Household.invite_code == invite_code.upper().strip(),
            Household.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def join_household(session: AsyncSession, *, household: Household, user: User) -> HouseholdMember:
    if await get_active_membership(session, household_id=household.id, user_id=user.id):
        raise AlreadyMemberError("Already a member of this household")
    max_members = get_settings().household_max_members
    if await count_active_members(session, household.id) >= max_members:
        raise HouseholdFullError(f"Household already has {max_members} members")
    member = HouseholdMember(household_id=household.id, user_id=user.id)
    session.add(member)
    await session.flush()
    logger.info("household_joined", household_id=str(household.id), user_id=str(user.id))
    return member


def remove_membership(member: HouseholdMember) -> None:
    member.removed_at = utc_now_naive()


def soft_delete_household(household: Household) -> None:
    now = utc_now_naive()
    household.deleted_at = now
    household.updated_at = now
