# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every action must be attributable. Uses bcrypt for password hashing,
JWTs for access/refresh tokens, and hashed one-time codes for password reset.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 10)
- Password policy: 8+ characters, at least one letter, digit and symbol
- Login runs a bcrypt comparison even for unknown emails (constant effort)
- Reset codes are stored only as SHA-256 digests and compared with
  hmac.compare_digest; they expire after RESET_CODE_TTL and are single use
- One refresh token per user: a new login overwrites it, logout / password
  change / password reset clear it
"""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import (
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
from ..models import User
from ..permissions import Role
from ..time_utils import utcnow
from ..validation import clean_str, normalize_email
from . import notification_service, token_service
from .token_service import AuthContext


_dummy_hash_cache: dict[int, bytes] = {}


def validate_password_strength(password: str) -> None:
    """
    Validate password meets the policy.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    - At least one special character (anything not a letter or digit)

    Raises WeakPasswordError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise WeakPasswordError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise WeakPasswordError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise WeakPasswordError("Password must contain at least one digit")

    if not re.search(r'[^A-Za-z0-9]', password):
        raise WeakPasswordError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with the configured cost factor.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 10)
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() compares in constant time.
    """
    if not isinstance(password, str) or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def _dummy_hash() -> bytes:
    rounds = current_app.config.get("BCRYPT_ROUNDS", 10)
    if rounds not in _dummy_hash_cache:
        _dummy_hash_cache[rounds] = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds))
    return _dummy_hash_cache[rounds]


def generate_reset_code() -> str:
    """Six-digit numeric code, 100000-999999, from a CSPRNG."""
    return str(100000 + secrets.randbelow(900000))


def hash_reset_code(code: str) -> str:
    return hashlib.sha256(code.encode('utf-8')).hexdigest()


def get_user_by_email(email: str | None) -> User | None:
    if not email:
        return None
    return db.session.query(User).filter_by(email=email).first()


def ensure_unique_identity(
    email: str | None,
    id_card_number: str | None,
    exclude_user_id: int | None = None,
) -> None:
    """Email and ID card number are unique across all users when present."""
    if email:
        query = db.session.query(User).filter(User.email == email)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        if query.first():
            raise ConflictError("User already exists")

    if id_card_number:
        query = db.session.query(User).filter(User.id_card_number == id_card_number)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        if query.first():
            raise ConflictError("A user with this ID card number already exists")


def create_user(
    *,
    name: str,
    phone: str | None,
    address: str | None,
    password: str,
    role: Role,
    email: str | None = None,
    id_card_number: str | None = None,
) -> User:
    """
    Create a user with a bcrypt password hash.

    Raises WeakPasswordError for policy failures and ConflictError when the
    email or ID card number is already taken.
    """
    name = clean_str(name, "name", max_length=120)
    phone = clean_str(phone, "phone", max_length=32)
    address = clean_str(address, "address")
    email = normalize_email(email)
    id_card_number = clean_str(id_card_number, "idCardNumber", max_length=64) or None

    validate_password_strength(password)
    ensure_unique_identity(email, id_card_number)

    user = User(
        name=name,
        phone=phone,
        address=address,
        email=email,
        id_card_number=id_card_number,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race against a concurrent signup with the same identity
        db.session.rollback()
        raise ConflictError("User already exists")
    return user


def signup(
    *,
    name: str,
    phone: str,
    address: str,
    password: str,
    email: str | None = None,
) -> User:
    """
    Self-service signup. Always creates an admin; salesmen are created by
    admins through user_service.create_salesman.
    """
    if not all(isinstance(v, str) and v.strip() for v in (name, phone, address)) or not password:
        raise ValidationError("All fields except email are required")

    return create_user(
        name=name,
        phone=phone,
        address=address,
        email=email,
        password=password,
        role=Role.ADMIN,
    )


def login(email: str, password: str) -> dict:
    """
    Authenticate by email and password and start a session.

    Returns {"accessToken", "refreshToken"}. The refresh token replaces any
    earlier one stored on the user.
    """
    if not email or not password:
        raise ValidationError("Email and password required")

    email = normalize_email(email)
    user = get_user_by_email(email)

    if not user:
        # Spend the same bcrypt effort as a real comparison
        bcrypt.checkpw(str(password).encode('utf-8'), _dummy_hash())
        raise InvalidCredentialsError("Invalid credentials")

    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid credentials")

    if not user.is_active:
        current_app.logger.warning("Blocked user %s attempted to log in", user.id)
        raise AccountBlockedError("Your account is blocked. Please contact the administrator.")

    access_token = token_service.issue_access_token(user)
    refresh_token = token_service.issue_refresh_token(user)

    user.refresh_token = refresh_token
    db.session.commit()

    return {"accessToken": access_token, "refreshToken": refresh_token}


def refresh_access_token(refresh_token: str | None) -> str:
    """Mint a new access token from a stored, valid refresh token."""
    if not refresh_token:
        raise UnauthorizedError("Refresh token required")

    user = db.session.query(User).filter_by(refresh_token=refresh_token).first()
    if not user:
        raise InvalidTokenError("Invalid refresh token")

    claims = token_service.decode_refresh_token(refresh_token)
    if claims["id"] != user.id:
        raise InvalidTokenError("Invalid refresh token")

    if not user.is_active:
        raise AccountBlockedError("Your account is blocked. Please contact the administrator.")

    return token_service.issue_access_token(user)


def logout(refresh_token: str | None) -> bool:
    """
    Clear the stored refresh token.

    Returns False (nothing to do) when no user holds this token.
    """
    if not refresh_token:
        return False

    user = db.session.query(User).filter_by(refresh_token=refresh_token).first()
    if not user:
        return False

    user.refresh_token = None
    db.session.commit()
    return True


def get_profile(actor: AuthContext) -> User:
    user = db.session.get(User, actor.user_id)
    if not user:
        raise UnauthorizedError("User not found")
    return user


def change_password(actor: AuthContext, old_password: str, new_password: str) -> None:
    """Change the acting user's password and end their session."""
    if not old_password or not new_password:
        raise ValidationError("Old password and new password are required")

    user = get_profile(actor)

    if not verify_password(old_password, user.password_hash):
        raise InvalidCredentialsError("Old password is incorrect")

    user.password_hash = hash_password(new_password)
    user.refresh_token = None
    db.session.commit()


def request_password_reset(email: str) -> None:
    """
    Generate a reset code, store its hash and expiry, and email the code.

    The plaintext code only ever exists in memory and in the outgoing email.
    """
    if not email:
        raise ValidationError("Email is required")

    user = get_user_by_email(normalize_email(email))
    if not user:
        raise NotFoundError("User not found")

    code = generate_reset_code()
    ttl = current_app.config["RESET_CODE_TTL"]

    user.reset_code_hash = hash_reset_code(code)
    user.reset_code_expires_at = utcnow() + ttl
    db.session.commit()

    text, html = notification_service.password_reset_message(
        code, ttl_minutes=int(ttl.total_seconds() // 60)
    )
    notification_service.send_email(user.email, notification_service.RESET_SUBJECT, text, html)
    current_app.logger.info("Password reset code issued for user %s", user.id)


def _match_reset_code(email: str, code) -> User:
    if not email or code is None or code == "":
        raise ValidationError("Email and code are required")

    try:
        user = get_user_by_email(normalize_email(email))
    except ValidationError:
        user = None

    supplied = hash_reset_code(str(code).strip())
    has_code = bool(user and user.reset_code_hash)
    stored = user.reset_code_hash if has_code else "0" * 64

    # Always run the comparison so timing does not reveal whether a code exists
    matches = hmac.compare_digest(supplied, stored) and has_code

    if (
        not user
        or not matches
        or user.reset_code_expires_at is None
        or user.reset_code_expires_at < utcnow()
    ):
        raise InvalidOrExpiredCodeError("Invalid or expired code")
    return user


def verify_reset_code(email: str, code) -> None:
    _match_reset_code(email, code)


def reset_password(email: str, code, new_password: str) -> None:
    """Consume a valid reset code and set a new password."""
    if not email or code is None or code == "" or not new_password:
        raise ValidationError("Email, code, and newPassword are required")

    user = _match_reset_code(email, code)

    user.password_hash = hash_password(new_password)
    user.reset_code_hash = None
    user.reset_code_expires_at = None
    user.refresh_token = None
    db.session.commit()
