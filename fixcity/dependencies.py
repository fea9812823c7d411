"""Authentication dependencies for FastAPI routes."""

from collections.abc import Callable, Iterable
from functools import lru_cache

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from fixcity.config import Settings, get_settings
from fixcity.database import get_db
from fixcity.errors import Forbidden, InvalidToken, InvalidUser, MissingToken, TokenExpired, TokenInvalid, Unauthenticated
from fixcity.models.user import User
from fixcity.services.auth import AuthService, issued_before_password_change
from fixcity.services.jwt import TokenService
from fixcity.services.user_store import UserStore

REFRESH_COOKIE_NAME = "refreshToken"
BEARER_PREFIX = "Bearer "


@lru_cache
def get_token_service() -> TokenService:
    """Token service wired with the process settings. Raises ConfigurationError on missing secrets."""
    return TokenService(get_settings())


@lru_cache
def get_auth_service() -> AuthService:
    return AuthService(get_settings(), get_token_service())


def extract_bearer_token(authorization: str | None) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingToken()
    token = authorization[len(BEARER_PREFIX) :].strip()
    if not token:
        raise MissingToken()
    return token


def authenticate(db: Session, authorization: str | None, tokens: TokenService, settings: Settings) -> User:
    """Resolve a bearer header to an active user.

    Expired tokens raise TokenExpired so clients know to refresh; every other
    verification failure is reported as InvalidToken.
    """
    token = extract_bearer_token(authorization)
    try:
        payload = tokens.verify_access(token)
    except TokenExpired:
        raise
    except TokenInvalid:
        raise InvalidToken() from None

    user = UserStore(db, settings).find_by_id(payload["userId"])
    if not user or not user.is_active:
        raise InvalidUser()
    if issued_before_password_change(user, payload):
        raise InvalidUser("Password changed since this token was issued")
    return user


def authorize(user: User | None, allowed_roles: Iterable[str]) -> User:
    """Check that an authenticated user holds one of the allowed roles."""
    if user is None:
        raise Unauthenticated()
    if user.role not in set(allowed_roles):
        raise Forbidden()
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> User:
    """Bearer-protected route dependency. Raises an AuthError subclass if not authenticated."""
    return authenticate(db, request.headers.get("Authorization"), tokens, settings)


def require_roles(*roles: str) -> Callable[..., User]:
    """Build a dependency that admits only users holding one of ``roles``."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        return authorize(user, roles)

    return dependency


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    """Set the http-only refresh token cookie."""
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
        max_age=settings.REFRESH_COOKIE_MAX_AGE_DAYS * 24 * 60 * 60,
    )


def clear_refresh_cookie(response: Response) -> None:
    """Clear the refresh token cookie."""
    response.delete_cookie(key=REFRESH_COOKIE_NAME)
