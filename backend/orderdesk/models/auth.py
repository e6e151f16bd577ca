from __future__ import annotations

from ..extensions import db
from ..permissions import Role
from ..time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Admins and salesmen share this table; `role` decides what they may do.
    Email and ID card number are optional but unique when present (NULLs do
    not collide in a UNIQUE index).

    Secrets kept here:
    - password_hash: bcrypt hash, never the password
    - reset_code_hash: SHA-256 of the current one-time reset code
    - refresh_token: the single active refresh token (one session per user)
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_role", "role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True, unique=True)
    id_card_number = db.Column(db.String(64), nullable=True, unique=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(
        db.Enum(Role, name="user_role", values_callable=lambda enum: [r.value for r in enum]),
        nullable=False,
        default=Role.SALESMAN,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    reset_code_hash = db.Column(db.String(64), nullable=True)
    reset_code_expires_at = db.Column(db.DateTime, nullable=True)

    refresh_token = db.Column(db.String(512), nullable=True, unique=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role.value if self.role else None}>"

    def to_dict(self) -> dict:
        """Public representation; never includes secrets."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "email": self.email,
            "idCardNumber": self.id_card_number,
            "role": self.role.value if self.role else None,
            "isActive": self.is_active,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }

    def to_summary(self) -> dict:
        """Subset shown on orders."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
        }
