from passlib.context import CryptContext
from passlib.exc import PasswordValueError
from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

ALGORITHM = "HS256"


class HashingError(Exception):
    """Raised when a password cannot be hashed or a stored digest is unreadable."""


class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


class PasswordHasher:
    """bcrypt with a fixed cost factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plaintext: str) -> str:
        try:
            return self._context.hash(plaintext)
        except (ValueError, TypeError, RuntimeError) as exc:
            raise HashingError("Password hashing failed") from exc

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Compare a plaintext password against a stored digest.

        Returns False on mismatch, including plaintexts bcrypt cannot accept.
        Raises HashingError only when the digest itself is malformed.
        """
        if not self.is_acceptable(plaintext):
            self.dummy_verify()
            return False
        try:
            return self._context.verify(plaintext, digest)
        except PasswordValueError:
            return False
        except (ValueError, TypeError) as exc:
            raise HashingError("Stored password digest is malformed") from exc

    def dummy_verify(self) -> None:
        """Spend the same time as a real verify when there is no digest to check."""
        self._context.dummy_verify()

    @staticmethod
    def is_acceptable(plaintext: str) -> bool:
        # bcrypt cannot represent NUL bytes
        return "\x00" not in plaintext


class TokenIssuer:
    """
    Signs and verifies short-lived HS256 bearer tokens.

    Session and reset tokens use separate secrets so that one can never be
    accepted in place of the other.
    """

    def __init__(
        self,
        session_secret: str,
        reset_secret: str,
        session_ttl: timedelta = timedelta(hours=24),
        reset_ttl: timedelta = timedelta(minutes=15),
    ):
        self.session_secret = session_secret
        self.reset_secret = reset_secret
        self.session_ttl = session_ttl
        self.reset_ttl = reset_ttl

    @staticmethod
    def issue(claims: dict[str, Any], secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + ttl
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    @staticmethod
    def verify(token: str, secret: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["exp", "iat"]})
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid("Token is invalid") from exc

    def issue_session_token(self, user) -> str:
        return self.issue({"userId": user.id, "email": user.email}, self.session_secret, self.session_ttl)

    def verify_session_token(self, token: str) -> dict[str, Any]:
        claims = self.verify(token, self.session_secret)
        if not isinstance(claims.get("userId"), str):
            raise TokenInvalid("Token is missing userId")
        return claims

    def issue_reset_token(self, user) -> str:
        return self.issue({"id": user.id}, self.reset_secret, self.reset_ttl)

    def verify_reset_token(self, token: str) -> str:
        """Return the user id carried by a reset token."""
        claims = self.verify(token, self.reset_secret)
        user_id = claims.get("id")
        if not isinstance(user_id, str) or not user_id:
            raise TokenInvalid("Token is missing id")
        return user_id
