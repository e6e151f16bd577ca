# Overview: Admin management of salesman accounts.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User
from ..permissions import Role
from ..validation import clean_str, normalize_email
from .auth_service import create_user, ensure_unique_identity
from .token_service import AuthContext


def create_salesman(
    *,
    name: str,
    phone: str,
    address: str,
    password: str,
    id_card_number: str,
    email: str | None = None,
) -> User:
    values = (name, phone, address, password, id_card_number)
    if not all(isinstance(v, str) and v.strip() for v in values):
        raise ValidationError(
            "All fields except email are required and ID card number is mandatory"
        )

    return create_user(
        name=name,
        phone=phone,
        address=address,
        email=email,
        password=password,
        id_card_number=id_card_number,
        role=Role.SALESMAN,
    )


def list_salesmen() -> list[User]:
    return (
        db.session.query(User)
        .filter(User.role == Role.SALESMAN)
        .order_by(User.name.asc(), User.id.asc())
        .all()
    )


def get_salesman(user_id: int) -> User:
    user = db.session.query(User).filter_by(id=user_id, role=Role.SALESMAN).first()
    if not user:
        raise NotFoundError("Salesman not found")
    return user


def update_salesman(user_id: int, patch: dict) -> User:
    """
    Partial update of profile fields.

    Only keys present in `patch` change. Password, role and status have their
    own flows and are ignored here.
    """
    user = get_salesman(user_id)

    if "email" in patch:
        email = normalize_email(patch["email"])
    else:
        email = user.email
    if "idCardNumber" in patch:
        id_card_number = clean_str(patch["idCardNumber"], "idCardNumber", max_length=64)
        if not id_card_number:
            raise ValidationError("idCardNumber cannot be blank")
    else:
        id_card_number = user.id_card_number

    ensure_unique_identity(email, id_card_number, exclude_user_id=user.id)

    for key, attr, max_length in (
        ("name", "name", 120),
        ("phone", "phone", 32),
        ("address", "address", 255),
    ):
        if key in patch:
            value = clean_str(patch[key], key, max_length=max_length)
            if not value:
                raise ValidationError(f"{key} cannot be blank")
            setattr(user, attr, value)

    user.email = email
    user.id_card_number = id_card_number

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("User already exists")
    return user


def delete_salesman(user_id: int) -> None:
    """Remove the account. Orders keep their lines; their salesman becomes null."""
    user = get_salesman(user_id)
    db.session.delete(user)
    db.session.commit()


def set_salesman_status(actor: AuthContext, user_id: int, is_active: bool) -> User:
    """
    Block or unblock a salesman.

    Blocking also clears the refresh token so the session cannot be renewed;
    outstanding access tokens are rejected by the gate's active check.
    """
    user = get_salesman(user_id)
    user.is_active = is_active
    if not is_active:
        user.refresh_token = None
    db.session.commit()

    current_app.logger.info(
        "Admin %s %s salesman %s",
        actor.user_id,
        "activated" if is_active else "blocked",
        user.id,
    )
    return user
