"""
Shared fixtures: a test Settings object, a temporary SQLite database,
a recording mailer and a TestClient bound to a fresh app.
"""
import pytest
from fastapi.testclient import TestClient

from perennis_auth.auth_service.auth import PasswordHasher, TokenIssuer
from perennis_auth.auth_service.config import Settings
from perennis_auth.auth_service.db import Database
from perennis_auth.auth_service.mailer import MailDeliveryError
from perennis_auth.auth_service.main import create_app

SESSION_SECRET = "test-session-secret-0123456789abcdef"
RESET_SECRET = "test-reset-secret-fedcba9876543210"


class RecordingMailer:
    """Collects sent messages; optionally fails every send."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to, subject, html):
        if self.fail:
            raise MailDeliveryError("SMTP server unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET=SESSION_SECRET,
        JWT_RESET_SECRET=RESET_SECRET,
        BCRYPT_ROUNDS=4,
        FRONTEND_URL="https://frontend.example.com",
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, mailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database(settings):
    db = Database(settings.DATABASE_URL)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenIssuer(session_secret=SESSION_SECRET, reset_secret=RESET_SECRET)
