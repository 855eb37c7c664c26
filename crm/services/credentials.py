"""Credential store: user records in the relational database."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crm.exceptions import ConflictError, InvalidCredentialsError
from crm.models.user import User
from crm.services.auth import get_password_hash, verify_password

logger = logging.getLogger(__name__)

EMAIL_EXISTS_MESSAGE = "User with this email already exists"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Creates, looks up and verifies users.

    Email uniqueness is enforced by the unique index on ``users.email``; an
    ``IntegrityError`` from a racing insert is reported as a conflict.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, email: str, password: str) -> User:
        """Create a new user with a hashed password."""
        user = User(email=normalize_email(email), password_hash=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(EMAIL_EXISTS_MESSAGE) from e
        self.db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return verify_password(plain_password, hashed_password)

    def authenticate(self, email: str, password: str) -> User:
        """Return the user for these credentials or raise InvalidCredentialsError."""
        user = self.find_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            logger.info("Rejected login with invalid credentials")
            raise InvalidCredentialsError()
        return user

    def update(self, user_id: int, email: str | None = None, password: str | None = None) -> User | None:
        """Change email and/or password. With no changes, returns the current record."""
        user = self.find_by_id(user_id)
        if user is None:
            return None
        if email is None and password is None:
            return user

        if email is not None:
            user.email = normalize_email(email)
        if password is not None:
            user.password_hash = get_password_hash(password)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(EMAIL_EXISTS_MESSAGE) from e
        self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> bool:
        deleted = self.db.query(User).filter(User.id == user_id).delete()
        self.db.commit()
        return deleted > 0
