"""
JobTrail Backend — Account Service
====================================

What:  Registration, login and bearer-token authentication.
How:
    - PINs are hashed with bcrypt. The cost factor is part of the stored
      hash, so it can be raised later without breaking old hashes.
    - Tokens are opaque random strings (secrets.token_urlsafe). Only their
      sha256 digest is stored, with an expiry; a leaked table row cannot be
      replayed as a credential.
    - Every lookup failure during login produces the same
      "Invalid credentials" error; the response never tells an unknown
      username apart from a wrong PIN.

Never logged: PINs, raw tokens, hashes.
"""

import hashlib
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.database import store_errors
from jobtrail.exceptions import UnauthorizedError, ValidationError
from jobtrail.models.auth_token import AuthToken
from jobtrail.models.user import User
from jobtrail.timestamps import as_utc, utc_now

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"^\d{4}$")
MIN_USERNAME_LENGTH = 3


def hash_pin(pin: str, rounds: int) -> str:
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_pin(pin: str, encoded: str) -> bool:
    try:
        return bcrypt.checkpw(pin.encode("utf-8"), encoded.encode("ascii"))
    except ValueError:
        logger.warning("Unreadable PIN hash encountered")
        return False


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IssuedToken:
    token: str
    user_id: str
    expires_at: datetime


class AuthService:
    """
    Account operations.

    Args:
        token_ttl_days: Lifetime of issued tokens.
        pin_hash_rounds: bcrypt cost factor for new hashes.
    """

    def __init__(self, token_ttl_days: int = 30, pin_hash_rounds: int = 10):
        self.token_ttl = timedelta(days=token_ttl_days)
        self.pin_hash_rounds = pin_hash_rounds

    @staticmethod
    def _check_credentials(username: Optional[str], pin: Optional[str]) -> str:
        if not username or not pin:
            raise ValidationError(message="Username and PIN required")
        if len(username) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                message=f"Username must be at least {MIN_USERNAME_LENGTH} characters",
                field="username",
            )
        if not PIN_PATTERN.match(pin):
            raise ValidationError(message="PIN must be exactly 4 digits", field="pin")
        return username.lower()

    async def register(self, db: AsyncSession, username: str, pin: str) -> IssuedToken:
        """
        Creates an account and issues its first token.

        Raises:
            ValidationError: bad username/PIN format, or username taken.
        """
        normalized = self._check_credentials(username, pin)

        with store_errors("auth.register"):
            taken = await db.scalar(select(User.id).where(User.username == normalized))
            if taken is not None:
                raise ValidationError(message="Username already taken", field="username")

            user = User(
                username=normalized,
                pin_hash=hash_pin(pin, self.pin_hash_rounds),
                created_at=utc_now(),
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent registration of the same name.
                raise ValidationError(message="Username already taken", field="username") from e

            issued = await self._issue(db, user.id)

        logger.info("Registered user %s (%s)", user.id, normalized)
        return issued

    async def login(self, db: AsyncSession, username: str, pin: str) -> IssuedToken:
        """
        Raises:
            ValidationError: bad username/PIN format.
            UnauthorizedError: unknown username or wrong PIN.
        """
        normalized = self._check_credentials(username, pin)

        with store_errors("auth.login"):
            user = await db.scalar(select(User).where(User.username == normalized))
            if user is None or not verify_pin(pin, user.pin_hash):
                logger.info("Failed login for %s", normalized)
                raise UnauthorizedError(message="Invalid credentials")

            issued = await self._issue(db, user.id)

        logger.info("User %s logged in", user.id)
        return issued

    async def authenticate(self, db: AsyncSession, token: Optional[str]) -> str:
        """
        Resolves a bearer token to its owner id.

        Raises:
            UnauthorizedError: token missing, unknown or expired.
        """
        if not token:
            raise UnauthorizedError()

        with store_errors("auth.authenticate"):
            row = await db.scalar(
                select(AuthToken).where(AuthToken.token_hash == hash_token(token))
            )

        if row is None:
            raise UnauthorizedError()
        if as_utc(row.expires_at) <= utc_now():
            logger.debug("Expired token presented for %s", row.user_id)
            raise UnauthorizedError()
        return row.user_id

    async def _issue(self, db: AsyncSession, user_id: str) -> IssuedToken:
        token = secrets.token_urlsafe(32)
        now = utc_now()
        expires_at = now + self.token_ttl
        db.add(
            AuthToken(
                token_hash=hash_token(token),
                user_id=user_id,
                created_at=now,
                expires_at=expires_at,
            )
        )
        await db.flush()
        return IssuedToken(token=token, user_id=user_id, expires_at=expires_at)

