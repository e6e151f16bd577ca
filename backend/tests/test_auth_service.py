"""
Auth service tests.

Verifies:
- Signup always creates an admin and enforces the password policy
- Login issues tokens, rejects bad credentials and blocked accounts
- Refresh / logout follow the single stored refresh token
- Password change and the reset-code flow (hash-only storage, expiry, single use)
"""

from datetime import timedelta

import pytest

from orderdesk.errors import (
    AccountBlockedError,
    ConflictError,
    InvalidCredentialsError,
    InvalidOrExpiredCodeError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    WeakPasswordError,
)
from orderdesk.extensions import db
from orderdesk.models import User
from orderdesk.permissions import Role
from orderdesk.services import auth_service, notification_service, token_service
from orderdesk.time_utils import utcnow

from conftest import ADMIN_EMAIL, PASSWORD, SALESMAN_EMAIL


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""
    sent = []

    def fake_send(to, subject, text, html=None):
        sent.append({"to": to, "subject": subject, "text": text, "html": html})

    monkeypatch.setattr(notification_service, "send_email", fake_send)
    return sent


# =============================================================================
# PASSWORD POLICY
# =============================================================================


class TestPasswordPolicy:

    @pytest.mark.parametrize("password", ["short1!", "noDigits!!", "NoSymbol123", "12345678!"])
    def test_rejects_weak_passwords(self, password):
        with pytest.raises(WeakPasswordError):
            auth_service.validate_password_strength(password)

    def test_accepts_policy_password(self):
        auth_service.validate_password_strength("abc12345!")

    def test_hash_is_bcrypt_and_verifies(self, app):
        hashed = auth_service.hash_password(PASSWORD)
        assert hashed.startswith("$2")
        assert auth_service.verify_password(PASSWORD, hashed)
        assert not auth_service.verify_password("Wrong123!", hashed)

    def test_verify_handles_malformed_hash(self):
        assert auth_service.verify_password(PASSWORD, "not-a-hash") is False


# =============================================================================
# SIGNUP
# =============================================================================


class TestSignup:

    def test_signup_creates_admin(self, app):
        user = auth_service.signup(
            name="Owner", phone="0300", address="HQ",
            email="Owner@Example.com", password=PASSWORD,
        )
        assert user.role is Role.ADMIN
        assert user.email == "owner@example.com"
        assert user.password_hash != PASSWORD

    def test_signup_without_email(self, app):
        user = auth_service.signup(name="Owner", phone="0300", address="HQ", password=PASSWORD)
        assert user.email is None

    def test_signup_requires_fields(self, app):
        with pytest.raises(ValidationError, match="All fields except email are required"):
            auth_service.signup(name="Owner", phone="", address="HQ", password=PASSWORD)

    def test_signup_weak_password(self, app):
        with pytest.raises(WeakPasswordError):
            auth_service.signup(name="Owner", phone="0300", address="HQ", password="weak")

    def test_duplicate_email_conflicts(self, app, admin):
        with pytest.raises(ConflictError, match="User already exists"):
            auth_service.signup(
                name="Other", phone="0300", address="HQ",
                email=ADMIN_EMAIL.upper(), password=PASSWORD,
            )


# =============================================================================
# LOGIN / REFRESH / LOGOUT
# =============================================================================


class TestLogin:

    def test_login_returns_tokens_and_stores_refresh(self, app, admin):
        tokens = auth_service.login(ADMIN_EMAIL, PASSWORD)

        assert set(tokens) == {"accessToken", "refreshToken"}
        claims = token_service.decode_access_token(tokens["accessToken"])
        assert claims["id"] == admin.id
        assert claims["role"] == "admin"
        assert db.session.get(User, admin.id).refresh_token == tokens["refreshToken"]

    def test_unknown_email(self, app):
        with pytest.raises(InvalidCredentialsError):
            auth_service.login("nobody@orderdesk.test", PASSWORD)

    def test_wrong_password(self, app, admin):
        with pytest.raises(InvalidCredentialsError):
            auth_service.login(ADMIN_EMAIL, "Wrong123!")

    def test_missing_fields(self, app):
        with pytest.raises(ValidationError):
            auth_service.login("", "")

    def test_blocked_user_cannot_login(self, app, salesman):
        salesman.is_active = False
        db.session.commit()

        with pytest.raises(AccountBlockedError):
            auth_service.login(SALESMAN_EMAIL, PASSWORD)

    def test_second_login_replaces_refresh_token(self, app, admin):
        first = auth_service.login(ADMIN_EMAIL, PASSWORD)["refreshToken"]
        second = auth_service.login(ADMIN_EMAIL, PASSWORD)["refreshToken"]

        assert first != second
        with pytest.raises(InvalidTokenError):
            auth_service.refresh_access_token(first)
        assert auth_service.refresh_access_token(second)


class TestRefreshAndLogout:

    def test_refresh_requires_token(self, app):
        with pytest.raises(UnauthorizedError):
            auth_service.refresh_access_token(None)

    def test_refresh_unknown_token(self, app, admin):
        with pytest.raises(InvalidTokenError):
            auth_service.refresh_access_token("not-a-stored-token")

    def test_refresh_expired_token(self, app, admin):
        expired = token_service.issue_refresh_token(admin, expires_in=timedelta(seconds=-5))
        admin.refresh_token = expired
        db.session.commit()

        with pytest.raises(InvalidTokenError):
            auth_service.refresh_access_token(expired)

    def test_refresh_blocked_user(self, app, salesman):
        refresh = auth_service.login(SALESMAN_EMAIL, PASSWORD)["refreshToken"]
        salesman.is_active = False
        db.session.commit()

        with pytest.raises(AccountBlockedError):
            auth_service.refresh_access_token(refresh)

    def test_logout_clears_refresh_token(self, app, admin):
        refresh = auth_service.login(ADMIN_EMAIL, PASSWORD)["refreshToken"]

        assert auth_service.logout(refresh) is True
        assert db.session.get(User, admin.id).refresh_token is None
        with pytest.raises(InvalidTokenError):
            auth_service.refresh_access_token(refresh)

    def test_logout_unknown_token_is_noop(self, app):
        assert auth_service.logout("unknown") is False
        assert auth_service.logout(None) is False


# =============================================================================
# TOKENS
# =============================================================================


class TestTokens:

    def test_refresh_token_is_not_an_access_token(self, app, admin):
        refresh = token_service.issue_refresh_token(admin)
        with pytest.raises(InvalidTokenError):
            token_service.decode_access_token(refresh)

    def test_expired_access_token(self, app, admin):
        token = token_service.issue_access_token(admin, expires_in=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenError):
            token_service.decode_access_token(token)

    def test_tampered_signature(self, app, admin):
        token = token_service.issue_access_token(admin)
        app.config["ACCESS_TOKEN_SECRET"] = "a-different-secret-of-enough-length-000"
        with pytest.raises(InvalidTokenError):
            token_service.decode_access_token(token)


# =============================================================================
# PASSWORD CHANGE
# =============================================================================


class TestChangePassword:

    def test_change_password(self, app, admin, admin_ctx):
        auth_service.login(ADMIN_EMAIL, PASSWORD)
        auth_service.change_password(admin_ctx, PASSWORD, "N3w-password")

        user = db.session.get(User, admin.id)
        assert user.refresh_token is None
        assert auth_service.login(ADMIN_EMAIL, "N3w-password")["accessToken"]

    def test_wrong_old_password(self, app, admin_ctx):
        with pytest.raises(InvalidCredentialsError, match="Old password is incorrect"):
            auth_service.change_password(admin_ctx, "Wrong123!", "N3w-password")

    def test_new_password_policy(self, app, admin_ctx):
        with pytest.raises(WeakPasswordError):
            auth_service.change_password(admin_ctx, PASSWORD, "weak")

    def test_fields_required(self, app, admin_ctx):
        with pytest.raises(ValidationError):
            auth_service.change_password(admin_ctx, "", "N3w-password")


# =============================================================================
# PASSWORD RESET
# =============================================================================


class TestPasswordReset:

    def _code_from(self, sent_emails) -> str:
        text = sent_emails[-1]["text"]
        return next(token for token in text.split() if token.isdigit() and len(token) == 6)

    def test_forgot_password_sends_code_and_stores_hash(self, app, admin, sent_emails):
        auth_service.request_password_reset(ADMIN_EMAIL)

        assert len(sent_emails) == 1
        assert sent_emails[0]["to"] == ADMIN_EMAIL
        assert sent_emails[0]["subject"] == notification_service.RESET_SUBJECT

        code = self._code_from(sent_emails)
        user = db.session.get(User, admin.id)
        assert 100000 <= int(code) <= 999999
        assert user.reset_code_hash == auth_service.hash_reset_code(code)
        assert code not in user.reset_code_hash
        assert user.reset_code_expires_at > utcnow()

    def test_forgot_password_unknown_email(self, app, sent_emails):
        with pytest.raises(NotFoundError, match="User not found"):
            auth_service.request_password_reset("ghost@orderdesk.test")
        assert sent_emails == []

    def test_verify_and_reset_round_trip(self, app, admin, sent_emails):
        auth_service.login(ADMIN_EMAIL, PASSWORD)
        auth_service.request_password_reset(ADMIN_EMAIL)
        code = self._code_from(sent_emails)

        auth_service.verify_reset_code(ADMIN_EMAIL, code)
        auth_service.reset_password(ADMIN_EMAIL, code, "Reset-0k!")

        user = db.session.get(User, admin.id)
        assert user.reset_code_hash is None
        assert user.reset_code_expires_at is None
        assert user.refresh_token is None
        assert auth_service.login(ADMIN_EMAIL, "Reset-0k!")["accessToken"]

        # Single use
        with pytest.raises(InvalidOrExpiredCodeError):
            auth_service.verify_reset_code(ADMIN_EMAIL, code)

    def test_wrong_code(self, app, admin, sent_emails):
        auth_service.request_password_reset(ADMIN_EMAIL)
        code = self._code_from(sent_emails)
        wrong = "100000" if code != "100000" else "100001"

        with pytest.raises(InvalidOrExpiredCodeError):
            auth_service.verify_reset_code(ADMIN_EMAIL, wrong)

    def test_expired_code(self, app, admin, sent_emails):
        auth_service.request_password_reset(ADMIN_EMAIL)
        code = self._code_from(sent_emails)

        user = db.session.get(User, admin.id)
        user.reset_code_expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

        with pytest.raises(InvalidOrExpiredCodeError):
            auth_service.reset_password(ADMIN_EMAIL, code, "Reset-0k!")

    def test_no_code_requested(self, app, admin):
        with pytest.raises(InvalidOrExpiredCodeError):
            auth_service.verify_reset_code(ADMIN_EMAIL, "123456")

    def test_unknown_user_on_verify(self, app):
        with pytest.raises(InvalidOrExpiredCodeError):
            auth_service.verify_reset_code("ghost@orderdesk.test", "123456")

    def test_reset_enforces_policy(self, app, admin, sent_emails):
        auth_service.request_password_reset(ADMIN_EMAIL)
        code = self._code_from(sent_emails)

        with pytest.raises(WeakPasswordError):
            auth_service.reset_password(ADMIN_EMAIL, code, "weak")
