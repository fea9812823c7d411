"""JWT Token Service."""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from fixcity.config import Settings
from fixcity.errors import ConfigurationError, TokenExpired, TokenInvalid

RESET_TOKEN_BYTES = 32


@dataclass
class TokenPair:
    """Freshly issued access and refresh tokens."""

    access_token: str
    refresh_token: str


class _SigningContext:
    """One secret + lifetime pair. Access and refresh tokens each get their own."""

    def __init__(self, name: str, secret: str, lifetime: timedelta, algorithm: str) -> None:
        if not secret:
            raise ConfigurationError(f"Secret for {name} tokens is not configured")
        self.name = name
        self.secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm

    def sign(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpired(f"{self.name.capitalize()} token expired") from e
        except JWTError as e:
            raise TokenInvalid(f"Invalid {self.name} token") from e
        if not payload.get("userId"):
            raise TokenInvalid(f"Invalid {self.name} token")
        return payload


class TokenService:
    """Issues and verifies access/refresh JWTs, and mints opaque reset tokens."""

    def __init__(self, settings: Settings) -> None:
        self._access = _SigningContext(
            "access",
            settings.JWT_SECRET,
            timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
            settings.JWT_ALGORITHM,
        )
        self._refresh = _SigningContext(
            "refresh",
            settings.JWT_REFRESH_SECRET,
            timedelta(days=settings.JWT_REFRESH_EXPIRES_DAYS),
            settings.JWT_ALGORITHM,
        )

    def issue_token_pair(self, user_id: str) -> TokenPair:
        """Sign a new access/refresh pair for the given user."""
        return TokenPair(
            access_token=self._access.sign(user_id),
            refresh_token=self._refresh.sign(user_id),
        )

    def verify_access(self, token: str) -> dict[str, Any]:
        """Decode an access token. Raises TokenExpired or TokenInvalid."""
        return self._access.verify(token)

    def verify_refresh(self, token: str) -> dict[str, Any]:
        """Decode a refresh token. Raises TokenExpired or TokenInvalid."""
        return self._refresh.verify(token)

    @staticmethod
    def generate_reset_token() -> str:
        """64 hex characters from the OS CSPRNG."""
        return secrets.token_hex(RESET_TOKEN_BYTES)

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hex digest; only this form of a reset token is stored."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
