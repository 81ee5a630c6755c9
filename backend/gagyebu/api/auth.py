from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from gagyebu.api.deps import get_current_user
from gagyebu.core.db import get_session
from gagyebu.core.security import create_access_token, hash_password, verify_password
from gagyebu.models.user import User, utc_now_naive
from gagyebu.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        email=user.email,
        name=user.name,
        avatar_url=user.avatar_url,
        created_at=user.created_at.isoformat(),
    )


def issue_token(user: User) -> TokenResponse:
    return TokenResponse(access_token=create_access_token(str(user.id), email=user.email, name=user.name))


async def authenticate_user(
    session: AsyncSession,
    email: str,
    password: str,
) -> User:
    result = await session.execute(select(User).where(User.email == email.lower().strip()))
    user = result.scalar_one_or_none()
    verified, upgraded_hash = False, None
    if user and user.is_active:
        verified, upgraded_hash = verify_password(password, user.hashed_password)
    if not user or not verified:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if upgraded_hash:
        user.hashed_password = upgraded_hash
        session.add(user)
        await session.commit()
        await session.refresh(user)
    return user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    email = payload.email.lower().strip()
    existing = await session.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already exists",
        )

    user = User(
        email=email,
        hashed_password=hash_password(payload.password),
        name=" ".join(payload.name.split()),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    return AuthResponse(token=issue_token(user), user=to_user_response(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    user = await authenticate_user(session, payload.email, payload.password)
    return AuthResponse(token=issue_token(user), user=to_user_response(user))


@router.post("/token", response_model=TokenResponse)
async def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    # OAuth2 password flow carries the email in the username field.
    user = await authenticate_user(session, form_data.username, form_data.password)
    return issue_token(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return to_user_response(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    if payload.name is not None:
        current_user.name = " ".join(payload.name.split())
    if "avatar_url" in payload.model_fields_set:
        current_user.avatar_url = payload.avatar_url or None
    current_user.updated_at = utc_now_naive()
    session.add(current_user)
    await session.commit()
    await session.refresh(current_user)
    return to_user_response(current_user)
