"""
Signup, signin and password reset flows.

AuthService holds no state between calls; the only state it changes is the
user row's password hash.
"""
import logging
from typing import Any, Callable, Optional

from .auth import PasswordHasher, TokenExpired, TokenError, TokenIssuer
from .errors import Conflict, NotFound, Unauthorized, ValidationError
from .mailer import MailDeliveryError
from .store import UserStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

GENERIC_RESET_MESSAGE = "If the email is registered, a reset link will be sent."
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_RESET_TOKEN = "Invalid or expired token"
EXPIRED_RESET_TOKEN = "Reset link has expired. Please request again."
RESET_EMAIL_SUBJECT = "Reset Your Password"
INVALID_PASSWORD_CHARACTERS = "Password must not contain null characters"


def normalize_email(email: Any) -> str:
    return str(email).strip().lower()


class AuthService:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        mailer,
        frontend_url: str,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.mailer = mailer
        self.frontend_url = frontend_url.rstrip("/")

    def signup(self, email: Optional[str], password: Optional[str], name: Optional[str] = None) -> str:
        if not email or not password:
            raise ValidationError("Email and password are required")
        if not self.hasher.is_acceptable(password):
            raise ValidationError(INVALID_PASSWORD_CHARACTERS)
        email = normalize_email(email)

        if self.store.find_by_email(email):
            raise Conflict("Email already registered")

        password_hash = self.hasher.hash(password)
        # A concurrent signup that wins the race surfaces here as Conflict
        user = self.store.create(email=email, password_hash=password_hash, name=name or None)
        logger.info("[Signup] user_id=%s email=%s", user.id, user.email)
        return user.id

    def signin(self, email: Optional[str], password: Optional[str]) -> dict:
        if not email or not password:
            raise ValidationError("Email and password are required")
        email = normalize_email(email)

        user = self.store.find_by_email(email)
        if not user:
            # Keep unknown-email failures as slow as wrong-password ones
            self.hasher.dummy_verify()
        # Same error for unknown email and wrong password
        if not user or not self.hasher.verify(password, user.password_hash):
            logger.warning("[Signin] Failed login for email=%s", email)
            raise Unauthorized(INVALID_CREDENTIALS)

        token = self.tokens.issue_session_token(user)
        logger.info("[Signin] Successful login: user_id=%s", user.id)
        return {"token": token, "user": user.to_public()}

    def forgot_password(self, email: Optional[str], schedule: Callable[..., Any]) -> str:
        """
        Start a password reset.

        The returned message is identical whether or not the address is
        registered. When it is, delivery of the reset email is handed to
        ``schedule`` (e.g. ``BackgroundTasks.add_task``) and its outcome never
        reaches the client.
        """
        if not email:
            raise ValidationError("Email is required")
        email = normalize_email(email)

        user = self.store.find_by_email(email)
        if not user:
            logger.info("[Reset] Request for unknown email=%s", email)
            return GENERIC_RESET_MESSAGE

        token = self.tokens.issue_reset_token(user)
        link = self.reset_link(token)
        schedule(self.deliver, user.email, RESET_EMAIL_SUBJECT, self.reset_email_html(link))
        logger.info("[Reset] Reset link issued: user_id=%s", user.id)
        return GENERIC_RESET_MESSAGE

    def reset_password(self, token: Optional[str], new_password: Optional[str]) -> str:
        if not token or not new_password:
            raise ValidationError("Token and newPassword are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if not self.hasher.is_acceptable(new_password):
            raise ValidationError(INVALID_PASSWORD_CHARACTERS)

        try:
            user_id = self.tokens.verify_reset_token(token)
        except TokenExpired as exc:
            raise Unauthorized(EXPIRED_RESET_TOKEN, status_code=400) from exc
        except TokenError as exc:
            raise Unauthorized(INVALID_RESET_TOKEN, status_code=400) from exc

        user = self.store.find_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        # Outstanding reset and session tokens stay valid until they expire
        self.store.update_password(user, self.hasher.hash(new_password))
        logger.info("[Reset] Password reset: user_id=%s", user.id)
        return "Password reset successful. Please log in again."

    def current_user(self, token: str) -> dict:
        try:
            claims = self.tokens.verify_session_token(token)
        except TokenError as exc:
            raise Unauthorized("Invalid token") from exc
        user = self.store.find_by_id(claims["userId"])
        if not user:
            raise Unauthorized("User not found")
        return user.to_public()

    def reset_link(self, token: str) -> str:
        return f"{self.frontend_url}/auth/reset-password?token={token}"

    def reset_email_html(self, link: str) -> str:
        minutes = int(self.tokens.reset_ttl.total_seconds() // 60)
        return (
            f'<p>Click <a href="{link}">here</a> to reset your password.</p>'
            f"<p>This link expires in {minutes} minutes.</p>"
        )

    async def deliver(self, to: str, subject: str, html: str) -> bool:
        """
        Send one email, once. Failures are logged and swallowed so that the
        forgot-password response cannot reveal whether an account exists.
        """
        try:
            await self.mailer.send(to, subject, html)
        except MailDeliveryError as exc:
            logger.warning("[Reset] Email delivery failed for %s: %s", to, exc)
            return False
        return True
