"""
Credential store: user records and bcrypt password hashes.

hashed_password is written in exactly one place, set_password(), so a
password value is hashed once when it is set and never again on unrelated
profile updates. Plaintext passwords are never stored.
"""

import logging
from functools import lru_cache
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from easylaptop.core.database import parse_row_id
from easylaptop.core.errors import DuplicateEmail, FieldError, ValidationError
from easylaptop.models.user import USER_TYPES, User

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes; longer input is rejected
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache
def _dummy_hash(rounds: int) -> str:
    return hash_password("easylaptop_timing_dummy", rounds)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class CredentialStore:
    """Repository for User records.

    Usage:
        store = CredentialStore(db, rounds=settings.bcrypt_rounds)
        user = store.create("Ana", "ana@example.com", "secret1")
        store.verify_password(user, "secret1")  # True
    """

    def __init__(self, db: Session, rounds: int = DEFAULT_ROUNDS) -> None:
        self.db = db
        self.rounds = rounds

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, user_id) -> Optional[User]:
        pk = parse_row_id(user_id)
        if pk is None:
            return None
        return self.db.get(User, pk)

    # ------------------------------------------------------------------
    # passwords
    # ------------------------------------------------------------------

    def set_password(self, user: User, raw_password: str) -> None:
        errors = self._password_errors(raw_password)
        if errors:
            raise ValidationError(errors[0].message, errors=errors)
        user.hashed_password = hash_password(raw_password, self.rounds)

    def verify_password(self, user: User, raw_password: str) -> bool:
        if not user.hashed_password:
            return False
        return check_password(raw_password, user.hashed_password)

    def authenticate(self, email: str, raw_password: str) -> Optional[User]:
        """Return the user for a correct email/password pair, else None.

        bcrypt runs even for unknown emails so response time does not reveal
        whether an account exists.
        """
        user = self.find_by_email(email)
        if user is None:
            check_password(raw_password, _dummy_hash(self.rounds))
            return None
        if not self.verify_password(user, raw_password):
            return None
        return user

    @staticmethod
    def _password_errors(raw_password: Optional[str]) -> list:
        if not raw_password:
            return [FieldError("password", "Please provide a password")]
        if len(raw_password) < MIN_PASSWORD_LENGTH:
            return [FieldError("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")]
        if len(raw_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return [FieldError("password", f"Password must be at most {MAX_PASSWORD_BYTES} bytes")]
        return []

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def create(
        self,
        name: Optional[str],
        email: Optional[str],
        raw_password: Optional[str],
        phone: Optional[str] = None,
        college: Optional[str] = None,
        user_type: Optional[str] = None,
    ) -> User:
        name = _clean(name)
        email = normalize_email(email) if email else None
        if not name or not email or not raw_password:
            raise ValidationError("Please provide name, email, and password")

        user_type = _clean(user_type) or "both"
        if user_type not in USER_TYPES:
            raise ValidationError("Invalid user type. Must be seller, customer, or both")

        if self.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(
            name=name,
            email=email,
            phone=_clean(phone),
            college=_clean(college),
            user_type=user_type,
            role="student",
        )
        self.set_password(user, raw_password)

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # another request inserted the same email between check and commit
            self.db.rollback()
            raise DuplicateEmail()
        self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    def update_profile(
        self,
        user: User,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        college: Optional[str] = None,
        user_type: Optional[str] = None,
    ) -> User:
        """Apply the provided non-empty profile fields.

        Email, role and password cannot be changed here.
        """
        user_type = _clean(user_type)
        if user_type is not None and user_type not in USER_TYPES:
            raise ValidationError("Invalid user type. Must be seller, customer, or both")

        changes = {
            "name": _clean(name),
            "phone": _clean(phone),
            "college": _clean(college),
            "user_type": user_type,
        }
        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
