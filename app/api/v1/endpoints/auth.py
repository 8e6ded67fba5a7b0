"""Authentication endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.database import get_db
from app.core.authorization import AuthContext
from app.core.exceptions import UnauthorizedException
from app.core.security import (
    access_token_expires_in,
    create_access_token,
    create_refresh_token,
    verify_token,
)
from app.core.token_validator import TokenValidator
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    Identity,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from app.schemas.common import MessageResponse
from app.schemas.session import EntityLimit, Session
from app.services import users as user_service
from app.services.quota import QuotaChecker
from app.services.session import SessionBuilder, find_active_user
from app.api.deps import (
    get_current_identity,
    get_current_token,
    get_current_user_id,
    get_company_scope,
    get_token_validator,
    public_route,
)

router = APIRouter()


async def _issue_tokens(db: AsyncSession, user: User) -> AuthResponse:
    session = await SessionBuilder(db).build_session(user.id)

    access_token = create_access_token(
        subject=str(user.id),
        email=user.email,
        company_id=str(user.company_id),
        role=user.role,
    )
    refresh_token = create_refresh_token(subject=str(user.id))

    return AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=access_token_expires_in(),
        session=session,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    _: AuthContext = Depends(public_route),
) -> AuthResponse:
    """Login with email and password."""
    user = await user_service.authenticate(db, request.email, request.password)
    return await _issue_tokens(db, user)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    _: AuthContext = Depends(public_route),
) -> AuthResponse:
    """Register a user in an existing company and log them in."""
    user = await user_service.register_user(
        db,
        email=request.email,
        password=request.password,
        name=request.name,
        company_id=request.company_id,
        role=request.role,
    )
    return await _issue_tokens(db, user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
    _: AuthContext = Depends(public_route),
) -> AuthResponse:
    """Exchange a refresh token for a new token pair."""
    payload = verify_token(request.refresh_token, token_type="refresh")
    if not payload:
        raise UnauthorizedException(detail="Invalid refresh token")

    user = await find_active_user(db, payload["sub"])
    if not user or not user.is_active:
        raise UnauthorizedException(detail="User not found or inactive")

    return await _issue_tokens(db, user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    _: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Stateless tokens: nothing is revoked, the client drops its tokens."""
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=Session)
async def get_profile(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Session:
    """Current user's session."""
    return await SessionBuilder(db).build_session(user_id)


@router.get("/session", response_model=Session)
async def get_session(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Session:
    """Rebuild the caller's session from the database."""
    return await SessionBuilder(db).build_session(user_id)


@router.get("/limits/{entity}", response_model=EntityLimit)
async def get_entity_limit(
    entity: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> EntityLimit:
    """Quota status of an entity for the caller's company."""
    company_id = get_company_scope(identity, None)
    return await QuotaChecker(db).check_entity_limit(company_id, entity)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Change the caller's password."""
    await user_service.change_password(
        db, user_id, request.current_password, request.new_password
    )
    return MessageResponse(message="Password changed successfully")


@router.post("/verify-token", response_model=VerifyTokenResponse)
async def verify_access_token(
    request: VerifyTokenRequest,
    validator: TokenValidator = Depends(get_token_validator),
    _: AuthContext = Depends(public_route),
) -> VerifyTokenResponse:
    """Check a token with the configured validator."""
    try:
        identity = await validator.validate(request.token)
    except UnauthorizedException as exc:
        return VerifyTokenResponse(valid=False, message="Token is invalid", error=exc.detail)

    return VerifyTokenResponse(valid=True, user=identity, message="Token is valid")


@router.get("/userinfo", response_model=Identity)
async def get_user_info(
    token: str = Depends(get_current_token),
    validator: TokenValidator = Depends(get_token_validator),
) -> Identity:
    """Identity as reported by the token authority."""
    return await validator.get_user_info(token)
