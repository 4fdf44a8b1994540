from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arkom.api.deps import get_current_user
from arkom.core.config import get_settings
from arkom.core.db import get_session
from arkom.core.security import create_access_token, hash_password, verify_password
from arkom.models.user import User, UserRole
from arkom.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _role_value(user: User) -> str:
    return user.role.value if hasattr(user.role, "value") else str(user.role)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        role=_role_value(user),
    )


def _issue_token(user: User) -> TokenResponse:
    return TokenResponse(access_token=create_access_token(str(user.id), role=_role_value(user)))


async def authenticate_user(
    session: AsyncSession,
    email: str,
    password: str,
) -> User:
    result = await session.execute(select(User).where(User.email == email.lower().strip()))
    user = result.scalar_one_or_none()
    if not user or not user.is_active or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
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

    role = UserRole.ADMIN if email in get_settings().admin_email_list else UserRole.MEMBER
    user = User(
        email=email,
        hashed_password=hash_password(payload.password),
        full_name=payload.full_name.strip(),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    return AuthResponse(token=_issue_token(user), user=to_user_response(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    user = await authenticate_user(session, payload.email, payload.password)
    return AuthResponse(token=_issue_token(user), user=to_user_response(user))


@router.post("/token", response_model=TokenResponse)
async def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    # For OAuth2 password flow, username field is used to carry email.
    user = await authenticate_user(session, form_data.username, form_data.password)
    return _issue_token(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return to_user_response(current_user)
