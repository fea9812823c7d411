"""Credential store: user persistence and password hashing."""

import logging
from datetime import datetime

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fixcity.config import Settings
from fixcity.database import utcnow
from fixcity.errors import DuplicateField
from fixcity.models.user import DEFAULT_ROLE, User, normalize_email

logger = logging.getLogger("fixcity")

# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class UserStore:
    """Loads and persists users for one database session."""

    def __init__(self, db: Session, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    def find_by_email(self, email: str, active_only: bool = False) -> User | None:
        query = self.db.query(User).filter(User.email == normalize_email(email))
        if active_only:
            query = query.filter(User.is_active.is_(True))
        return query.first()

    def find_by_phone(self, phone: str) -> User | None:
        return self.db.query(User).filter(User.phone == phone.strip()).first()

    def find_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def find_by_reset_token_hash(self, token_hash: str, now: datetime) -> User | None:
        """Match a stored reset-token hash whose expiry is still in the future."""
        return (
            self.db.query(User)
            .filter(
                User.password_reset_token_hash == token_hash,
                User.password_reset_expires_at > now,
            )
            .first()
        )

    def create(self, name: str, email: str, phone: str, password: str, role: str = DEFAULT_ROLE) -> User:
        """Insert a new user. Raises DuplicateField if email or phone is taken."""
        if self.find_by_email(email):
            raise DuplicateField("email", "Email is already registered")
        if self.find_by_phone(phone):
            raise DuplicateField("phone", "Phone is already registered")

        user = User(name=name, email=email, phone=phone, role=role, is_active=True)
        self.set_password(user, password)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration.
            self.db.rollback()
            field = "phone" if "phone" in str(e.orig).lower() else "email"
            raise DuplicateField(field, f"{field.capitalize()} is already registered") from e
        self.db.refresh(user)
        return user

    def save(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def set_password(self, user: User, password: str) -> None:
        """Hash and assign a new password. The only path that writes password_hash."""
        salt = bcrypt.gensalt(rounds=self.settings.BCRYPT_ROUNDS)
        user.password_hash = bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")
        user.password_changed_at = utcnow()

    @staticmethod
    def compare_password(user: User, candidate: str) -> bool:
        if not user.password_hash:
            return False
        try:
            return bcrypt.checkpw(_password_bytes(candidate), user.password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash for user %s is malformed", user.id)
            return False
