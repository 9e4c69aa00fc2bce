"""
auth_service tests

Covers the password hasher and token issuer (`test_auth.py`), the user store
and concurrent signups (`test_store.py`), the HTTP flows for signup/signin
(`test_signup_signin.py`) and password reset (`test_password_reset.py`),
configuration validation (`test_config.py`) and mail delivery
(`test_mailer.py`).
"""
