"""
ClientHub Backend - Administrator Authentication Service
=========================================================

What:  Login, logout and password change for rows in `supermasters`.
How:   Parameterized SQLAlchemy statements against the request's AsyncSession,
       PasswordHasher for digests, TokenService for session tokens.
Who:   Called by routes/auth.py; `find_admin` is also used by the auth gate.

Flows:
    login(username, password)
        → validate presence → SELECT admin → verify hash → issue token
    logout(username)
        → UPDATE logged_out_at = now  (no existence check)
    change_password(username, current, new)
        → validate presence + length (before any query) → SELECT admin
        → verify current → UPDATE password
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clienthub.exceptions import (
    DatabaseError,
    InvalidCredentialsError,
    MissingFieldsError,
    NotFoundError,
    ValidationError,
)
from clienthub.models.admin import Supermaster
from clienthub.schemas.auth import LoginResponse
from clienthub.services.security import (
    PasswordHasher,
    TokenService,
    password_hasher,
    token_service,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService:
    """
    Administrator credential operations.

    Stateless apart from the hasher and token service it is given; the
    database session is passed to every call.
    """

    def __init__(self, hasher: PasswordHasher, tokens: TokenService):
        self.hasher = hasher
        self.tokens = tokens

    async def find_admin(self, db: AsyncSession, username: str) -> Optional[Supermaster]:
        try:
            result = await db.execute(
                select(Supermaster).where(Supermaster.username == username)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error loading administrator: %s", str(e))
            raise DatabaseError(context={"reason": str(e)})

    async def login(self, db: AsyncSession, username: Optional[str], password: Optional[str]) -> LoginResponse:
        if not username or not password:
            raise MissingFieldsError(
                [name for name, value in (("username", username), ("password", password)) if not value],
                message="Username and password are required",
            )

        admin = await self.find_admin(db, username)
        if admin is None or not self.hasher.verify(password, admin.password):
            logger.info("Failed login attempt for username=%s", username)
            raise InvalidCredentialsError()

        token = self.tokens.issue(admin.username)
        logger.info("Administrator %s logged in", admin.username)
        return LoginResponse(message="Login successful", token=token, username=admin.username)

    async def logout(self, db: AsyncSession, username: Optional[str]) -> None:
        """Stamp the logout time; tokens issued earlier stop passing the auth gate."""
        if not username:
            raise MissingFieldsError(["username"], message="Username is required")

        try:
            await db.execute(
                update(Supermaster)
                .where(Supermaster.username == username)
                .values(logged_out_at=datetime.now(timezone.utc))
            )
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Logout error for %s: %s", username, str(e))
            raise DatabaseError(context={"reason": str(e)})

        logger.info("Administrator %s logged out", username)

    async def change_password(
        self,
        db: AsyncSession,
        username: str,
        current_password: Optional[str],
        new_password: Optional[str],
    ) -> None:
        if not current_password or not new_password:
            raise MissingFieldsError(
                [
                    name
                    for name, value in (
                        ("currentPassword", current_password),
                        ("newPassword", new_password),
                    )
                    if not value
                ],
                message="Current password and new password are required",
            )
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                message=f"New password must be at least {MIN_PASSWORD_LENGTH} characters long",
                field="newPassword",
                context={"min_length": MIN_PASSWORD_LENGTH},
            )

        admin = await self.find_admin(db, username)
        if admin is None:
            raise NotFoundError(resource="user", resource_id=username, message="User not found")

        if not self.hasher.verify(current_password, admin.password):
            raise InvalidCredentialsError(message="Current password is incorrect")

        digest = self.hasher.hash(new_password)
        try:
            await db.execute(
                update(Supermaster)
                .where(Supermaster.username == username)
                .values(password=digest)
            )
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Change password error for %s: %s", username, str(e))
            raise DatabaseError(context={"reason": str(e)})

        logger.info("Administrator %s changed password", username)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService(hasher=password_hasher, tokens=token_service)
