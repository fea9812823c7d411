"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from fixcity.config import Settings, get_settings
from fixcity.database import get_db
from fixcity.dependencies import (
    REFRESH_COOKIE_NAME,
    clear_refresh_cookie,
    get_auth_service,
    get_current_user,
    set_refresh_cookie,
)
from fixcity.errors import InvalidRefreshToken
from fixcity.models.user import User
from fixcity.rate_limit import (
    FORGOT_PASSWORD_LIMIT,
    LOGIN_LIMIT,
    REFRESH_LIMIT,
    REGISTER_LIMIT,
    RESET_PASSWORD_LIMIT,
    limiter,
)
from fixcity.schemas.auth import (
    AccessTokenData,
    AuthData,
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileData,
    ProfileResponse,
    RefreshResponse,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserPublic,
)
from fixcity.services.auth import AuthService

logger = logging.getLogger("fixcity")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(REGISTER_LIMIT)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Register a new citizen account."""
    result = auth_service.register(db, body.name, body.email, body.phone, body.password)
    set_refresh_cookie(response, result.refresh_token, settings)
    return AuthResponse(
        message="User registered successfully",
        data=AuthData(user=result.user, access_token=result.access_token),
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Authenticate and receive an access token plus refresh cookie.

    A body missing email or password is a 400 validation error. Wrong
    credentials and locked accounts are 401.
    """
    result = auth_service.login(db, body.email, body.password)
    set_refresh_cookie(response, result.refresh_token, settings)
    return AuthResponse(
        message="Login successful",
        data=AuthData(user=result.user, access_token=result.access_token),
    )


@router.post("/refresh-token", response_model=RefreshResponse)
@limiter.limit(REFRESH_LIMIT)
def refresh_token(
    request: Request,
    response: Response,
    body: RefreshTokenRequest | None = None,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> RefreshResponse:
    """Exchange the refresh token (cookie first, then body) for a new pair."""
    token = request.cookies.get(REFRESH_COOKIE_NAME) or (body.refresh_token if body else None)
    if not token:
        raise InvalidRefreshToken("Refresh token required")

    pair = auth_service.refresh(db, token)
    set_refresh_cookie(response, pair.refresh_token, settings)
    return RefreshResponse(data=AccessTokenData(access_token=pair.access_token))


@router.post("/logout", response_model=MessageResponse, response_model_exclude_none=True)
def logout(
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Log out the current user and drop the refresh cookie."""
    message = auth_service.logout(db, user.id)
    clear_refresh_cookie(response)
    return MessageResponse(message=message)


@router.post("/forgot-password", response_model=MessageResponse, response_model_exclude_none=True)
@limiter.limit(FORGOT_PASSWORD_LIMIT)
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """Request a password reset. The response is identical whether or not the email exists."""
    result = auth_service.forgot_password(db, body.email)

    # Delivery of the token is handled out of band; development builds echo it back.
    reset_token = result.reset_token if settings.APP_ENV == "development" else None
    return MessageResponse(message=result.message, reset_token=reset_token)


@router.post("/reset-password", response_model=MessageResponse, response_model_exclude_none=True)
@limiter.limit(RESET_PASSWORD_LIMIT)
def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Set a new password using a valid reset token."""
    message = auth_service.reset_password(db, body.token, body.password)
    return MessageResponse(message=message)


@router.get("/profile", response_model=ProfileResponse)
def profile(user: User = Depends(get_current_user)) -> ProfileResponse:
    """Return the authenticated user's public profile."""
    return ProfileResponse(data=ProfileData(user=UserPublic.from_user(user)))
