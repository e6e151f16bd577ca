from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Shop(db.Model):
    """
    Retail shops that salesmen place orders for.

    CNIC (owner's national ID) identifies a shop uniquely. Disabled shops
    (is_active=False) stay listed but cannot receive new orders.
    """
    __tablename__ = "shops"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shop_name = db.Column(db.String(120), nullable=False)
    owner_name = db.Column(db.String(120), nullable=False, index=True)
    cnic = db.Column(db.String(32), nullable=False, unique=True)
    phone_number = db.Column(db.String(32), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(120), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Shop id={self.id} name={self.shop_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shopName": self.shop_name,
            "ownerName": self.owner_name,
            "cnic": self.cnic,
            "phoneNumber": self.phone_number,
            "address": self.address,
            "city": self.city,
            "isActive": self.is_active,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "shopName": self.shop_name,
            "ownerName": self.owner_name,
            "address": self.address,
            "city": self.city,
        }
