"""
ClientHub Backend - Password Hashing and Session Tokens
========================================================

What:  PasswordHasher (salted one-way hashing) and TokenService (signed bearer tokens).
How:   passlib's CryptContext with PBKDF2-SHA256 at a fixed round count;
       PyJWT HS256 tokens carrying the administrator's username.
Who:   AuthService (login, change-password) and the auth gate in dependencies.py.

Token claims:
    username   the authenticated administrator
    iat        issue time in fractional seconds, compared against logged_out_at
    exp        only when JWT_EXPIRE_MINUTES > 0
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from clienthub.config import settings
from clienthub.exceptions import InvalidTokenError, MissingTokenError

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted PBKDF2-SHA256 hashing with a fixed work factor."""

    def __init__(self, rounds: int = 29000):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        if not plaintext:
            raise ValueError("password must not be empty")
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check a candidate password against a stored digest.

        Returns False (never raises) for empty input or digests passlib
        does not recognise, so a corrupt row reads as a failed login.
        """
        if not plaintext or not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False


@dataclass(frozen=True)
class TokenIdentity:
    """Decoded content of a verified session token."""

    username: str
    issued_at: float
    expires_at: Optional[float] = None

    def issued_before(self, moment: datetime) -> bool:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return self.issued_at < moment.timestamp()


class TokenService:
    """
    Issues and verifies signed session tokens.

    The secret, algorithm and lifetime are passed in explicitly; the module
    singleton below is built from settings.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 0):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, username: str) -> str:
        now = time.time()
        payload: Dict[str, Any] = {"username": username, "iat": now}
        if self.expire_minutes > 0:
            payload["exp"] = int(now + self.expire_minutes * 60)
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> TokenIdentity:
        """
        Validate signature (and expiry, when present) and return the identity.

        Raises:
            MissingTokenError: no token at all
            InvalidTokenError: anything else that prevents trusting the token
        """
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(reason="expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(reason=type(e).__name__)

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise InvalidTokenError(reason="missing_username")

        return TokenIdentity(
            username=username,
            issued_at=float(payload["iat"]),
            expires_at=float(payload["exp"]) if "exp" in payload else None,
        )


# ── Singleton Instances ───────────────────────────────────────────────────
password_hasher = PasswordHasher(rounds=settings.password_hash_rounds)
token_service = TokenService(
    secret=settings.jwt_secret,
    algorithm=settings.jwt_algorithm,
    expire_minutes=settings.jwt_expire_minutes,
)
