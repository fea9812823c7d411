"""Authentication service."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from fixcity.config import Settings
from fixcity.database import utcnow
from fixcity.errors import (
    AccountLocked,
    AuthError,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidRefreshToken,
    UserNotFound,
)
from fixcity.models.user import User
from fixcity.schemas.auth import UserPublic
from fixcity.services.jwt import TokenPair, TokenService
from fixcity.services.user_store import UserStore

logger = logging.getLogger("fixcity")

FORGOT_PASSWORD_MESSAGE = "If the email exists, you will receive instructions to reset your password"
RESET_PASSWORD_MESSAGE = "Password updated successfully"
LOGOUT_MESSAGE = "Logout successful"


@dataclass
class AuthResult:
    """Outcome of a successful register or login."""

    user: UserPublic
    access_token: str
    refresh_token: str


@dataclass
class ForgotPasswordResult:
    """Generic message, plus the raw reset token when an account matched."""

    message: str
    reset_token: str | None = None


def issued_before_password_change(user: User, payload: dict) -> bool:
    """True if a token's ``iat`` predates the user's last password change (whole seconds)."""
    if user.password_changed_at is None:
        return False
    issued_at = payload.get("iat")
    if issued_at is None:
        return True
    changed_at = int(user.password_changed_at.replace(tzinfo=timezone.utc).timestamp())
    return int(issued_at) < changed_at


class AuthService:
    """Handles registration, login with lockout, token refresh and password recovery."""

    def __init__(self, settings: Settings, tokens: TokenService) -> None:
        self.settings = settings
        self.tokens = tokens
        self.max_login_attempts = settings.MAX_LOGIN_ATTEMPTS
        self.lock_time = timedelta(minutes=settings.LOCK_TIME_MINUTES)
        self.reset_token_lifetime = timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)

    def _store(self, db: Session) -> UserStore:
        return UserStore(db, self.settings)

    def _auth_result(self, user: User) -> AuthResult:
        pair = self.tokens.issue_token_pair(user.id)
        return AuthResult(
            user=UserPublic.from_user(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )

    def register(self, db: Session, name: str, email: str, phone: str, password: str) -> AuthResult:
        """Create a citizen account and sign it in. Raises DuplicateField."""
        user = self._store(db).create(name=name, email=email, phone=phone, password=password)
        logger.info("Registered user %s", user.id)
        return self._auth_result(user)

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate by email and password, enforcing the lockout policy."""
        store = self._store(db)
        user = store.find_by_email(email, active_only=True)
        if not user:
            raise InvalidCredentials()

        # Checked before the password so a locked account reveals nothing about it.
        if user.is_locked:
            logger.warning("Login attempt on locked account %s", user.id)
            raise AccountLocked()

        if not store.compare_password(user, password):
            self._handle_failed_login(store, user)
            raise InvalidCredentials()

        self._handle_successful_login(store, user)
        return self._auth_result(user)

    def _handle_failed_login(self, store: UserStore, user: User) -> None:
        user.failed_login_count = (user.failed_login_count or 0) + 1
        if user.failed_login_count >= self.max_login_attempts:
            user.locked_until = utcnow() + self.lock_time
            logger.warning(
                "Locking account %s until %s after %d failed logins",
                user.id,
                user.locked_until.isoformat(),
                user.failed_login_count,
            )
        else:
            logger.info("Failed login %d for user %s", user.failed_login_count, user.id)
        store.save(user)

    def _handle_successful_login(self, store: UserStore, user: User) -> None:
        user.failed_login_count = 0
        user.locked_until = None
        user.last_login_at = utcnow()
        store.save(user)

    def refresh(self, db: Session, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair. Every failure is InvalidRefreshToken."""
        try:
            payload = self.tokens.verify_refresh(refresh_token)
            user = self._store(db).find_by_id(payload["userId"])
            if not user or not user.is_active:
                raise InvalidRefreshToken()
            if issued_before_password_change(user, payload):
                raise InvalidRefreshToken()
        except AuthError as e:
            logger.info("Refresh rejected: %s", e.code)
            raise InvalidRefreshToken() from None
        return self.tokens.issue_token_pair(user.id)

    def logout(self, db: Session, user_id: str) -> str:
        """Confirm the user exists. Tokens are stateless, so nothing is revoked."""
        if not self._store(db).find_by_id(user_id):
            raise UserNotFound()
        return LOGOUT_MESSAGE

    def forgot_password(self, db: Session, email: str) -> ForgotPasswordResult:
        """Start password recovery without revealing whether the account exists."""
        store = self._store(db)
        user = store.find_by_email(email, active_only=True)
        if not user:
            return ForgotPasswordResult(message=FORGOT_PASSWORD_MESSAGE)

        reset_token = self.tokens.generate_reset_token()
        user.password_reset_token_hash = self.tokens.hash_token(reset_token)
        user.password_reset_expires_at = utcnow() + self.reset_token_lifetime
        store.save(user)
        logger.info("Issued password reset token for user %s", user.id)
        return ForgotPasswordResult(message=FORGOT_PASSWORD_MESSAGE, reset_token=reset_token)

    def reset_password(self, db: Session, token: str, new_password: str, now: datetime | None = None) -> str:
        """Set a new password from a valid reset token. The token works once."""
        store = self._store(db)
        user = store.find_by_reset_token_hash(self.tokens.hash_token(token), now or utcnow())
        if not user:
            raise InvalidOrExpiredToken()

        store.set_password(user, new_password)
        user.password_reset_token_hash = None
        user.password_reset_expires_at = None
        user.failed_login_count = 0
        user.locked_until = None
        store.save(user)
        logger.info("Password reset for user %s", user.id)
        return RESET_PASSWORD_MESSAGE
