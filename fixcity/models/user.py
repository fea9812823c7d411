"""User model."""

import re
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import validates

from fixcity.database import Base, utcnow

ROLES = ("citizen", "admin", "operator")
DEFAULT_ROLE = "citizen"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(Base):
    """Registered account.

    ``password_hash``, the reset token fields, ``failed_login_count``,
    ``locked_until`` and ``password_changed_at`` are internal and must never be
    sent to clients; use ``fixcity.schemas.auth.UserPublic`` at the boundary.
    """

    __tablename__ = "user"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    phone = Column(String(17), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(16), nullable=False, default=DEFAULT_ROLE, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_email_verified = Column(Boolean, nullable=False, default=True)
    password_reset_token_hash = Column(String(64), nullable=True, index=True)
    password_reset_expires_at = Column(DateTime, nullable=True)
    password_changed_at = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    failed_login_count = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @validates("name")
    def validate_name(self, key: str, value: str) -> str:
        value = value.strip()
        if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
            raise ValueError(f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
        return value

    @validates("email")
    def validate_email(self, key: str, value: str) -> str:
        value = normalize_email(value)
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please provide a valid email")
        return value

    @validates("phone")
    def validate_phone(self, key: str, value: str) -> str:
        value = value.strip()
        if not PHONE_PATTERN.match(value):
            raise ValueError("Please provide a valid phone number")
        return value

    @validates("role")
    def validate_role(self, key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
        return value

    @property
    def is_locked(self) -> bool:
        """True while a lockout is in effect. Derived, never stored."""
        return self.locked_until is not None and self.locked_until > utcnow()

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} role={self.role}>"
