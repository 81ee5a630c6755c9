from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.core.db import get_session
from gagyebu.core.security import decode_access_token
from gagyebu.models.household import Household, HouseholdMember
from gagyebu.models.user import User
from gagyebu.services.ai.base import FinancialAssistantProvider
from gagyebu.services.ai.provider_factory import get_assistant_provider
from gagyebu.services.household_service import get_active_household, get_active_membership
from gagyebu.services.receipt_storage import ReceiptStorage, get_receipt_storage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


@dataclass
class HouseholdAccess:
    household: Household
    membership: HouseholdMember
    user: User

    @property
    def is_creator(self) -> bool:
        return self.household.created_by == self.user.id


def parse_uuid(value: str | None, field_name: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {field_name}",
        ) from exc


def parse_optional_uuid(value: str | None, field_name: str) -> UUID | None:
    if value is None or not str(value).strip():
        return None
    return parse_uuid(value, field_name)


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    token: str = Depends(oauth2_scheme),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id = UUID(str(payload.get("sub")))
    except (ValueError, TypeError):
        raise unauthorized

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise unauthorized
    return user


async def load_household_access(
    session: AsyncSession,
    household_id: UUID,
    user: User,
) -> HouseholdAccess:
    household = await get_active_household(session, household_id)
    if household is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Household not found",
        )
    membership = await get_active_membership(session, household_id=household.id, user_id=user.id)
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this household",
        )
    return HouseholdAccess(household=household, membership=membership, user=user)


async def get_household_access(
    household_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> HouseholdAccess:
    return await load_household_access(session, parse_uuid(household_id, "household_id"), user)


async def get_household_owner(
    access: HouseholdAccess = Depends(get_household_access),
) -> HouseholdAccess:
    if not access.is_creator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the household creator can perform this action",
        )
    return access


def get_assistant() -> FinancialAssistantProvider:
    return get_assistant_provider()


def get_receipts() -> ReceiptStorage:
    return get_receipt_storage()
