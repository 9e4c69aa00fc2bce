"""Tests for the user store and concurrent signups."""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from perennis_auth.auth_service.errors import Conflict
from perennis_auth.auth_service.models import User
from perennis_auth.auth_service.service import AuthService
from perennis_auth.auth_service.store import UserStore


def test_create_and_find(database):
    session = database.session()
    try:
        store = UserStore(session)
        user = store.create(email="bob@example.com", password_hash="digest", name="Bob")

        assert len(user.id) == 36
        assert store.find_by_email("bob@example.com").id == user.id
        assert store.find_by_id(user.id).email == "bob@example.com"
        assert store.find_by_email("nobody@example.com") is None
        assert store.find_by_id("missing") is None
    finally:
        session.close()


def test_create_duplicate_email_raises_conflict(database):
    session = database.session()
    try:
        store = UserStore(session)
        store.create(email="bob@example.com", password_hash="digest")
        with pytest.raises(Conflict):
            store.create(email="bob@example.com", password_hash="other")
        # Session is still usable after the rollback
        assert session.query(User).count() == 1
    finally:
        session.close()


def test_update_password_only_touches_target_user(database):
    session = database.session()
    try:
        store = UserStore(session)
        bob = store.create(email="bob@example.com", password_hash="bob-old")
        store.create(email="carol@example.com", password_hash="carol-old")

        store.update_password(bob, "bob-new")

        assert store.find_by_email("bob@example.com").password_hash == "bob-new"
        assert store.find_by_email("carol@example.com").password_hash == "carol-old"
    finally:
        session.close()


def test_concurrent_signups_same_email(database, hasher, tokens, mailer):
    workers = 6
    barrier = threading.Barrier(workers)

    def attempt(i):
        session = database.session()
        try:
            service = AuthService(
                store=UserStore(session),
                hasher=hasher,
                tokens=tokens,
                mailer=mailer,
                frontend_url="https://frontend.example.com",
            )
            barrier.wait()
            try:
                service.signup("Race@Example.com", f"password-{i}")
                return "created"
            except Conflict:
                return "conflict"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count("created") == 1
    assert results.count("conflict") == workers - 1

    session = database.session()
    try:
        assert session.query(User).filter(User.email == "race@example.com").count() == 1
    finally:
        session.close()


@pytest.mark.asyncio
async def test_startup_fails_when_database_unreachable(settings, mailer, tmp_path):
    from perennis_auth.auth_service.main import create_app, lifespan

    unreachable = settings.model_copy(
        update={"DATABASE_URL": f"sqlite:///{tmp_path / 'missing-dir' / 'app.db'}"}
    )
    app = create_app(unreachable, mailer=mailer)

    with pytest.raises(RuntimeError, match="Database connection failed"):
        async with lifespan(app):
            pass
    assert not hasattr(app.state, "database")


def test_check_connection(database):
    assert database.check_connection() is True
