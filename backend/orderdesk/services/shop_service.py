from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Shop
from ..validation import clean_str


# wire name -> (column, max length)
SHOP_FIELDS = {
    "shopName": ("shop_name", 120),
    "ownerName": ("owner_name", 120),
    "cnic": ("cnic", 32),
    "phoneNumber": ("phone_number", 32),
    "address": ("address", 255),
    "city": ("city", 120),
}


def _clean_patch(payload: dict, *, partial: bool) -> dict:
    patch = {}
    for key, (column, max_length) in SHOP_FIELDS.items():
        if key not in payload:
            if not partial:
                raise ValidationError("All fields are required")
            continue
        value = clean_str(payload[key], key, max_length=max_length)
        if not value:
            if not partial:
                raise ValidationError("All fields are required")
            raise ValidationError(f"{key} cannot be blank")
        patch[column] = value
    return patch


def _ensure_unique_cnic(cnic: str, exclude_shop_id: int | None = None) -> None:
    query = db.session.query(Shop).filter(Shop.cnic == cnic)
    if exclude_shop_id is not None:
        query = query.filter(Shop.id != exclude_shop_id)
    if query.first():
        if exclude_shop_id is None:
            raise ConflictError("Shop with this CNIC already exists")
        raise ConflictError("Another shop with this CNIC already exists")


def create_shop(payload: dict) -> Shop:
    patch = _clean_patch(payload, partial=False)
    _ensure_unique_cnic(patch["cnic"])

    shop = Shop(**patch)
    db.session.add(shop)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Shop with this CNIC already exists")
    return shop


def list_shops(owner_name: str | None = None, city: str | None = None) -> list[Shop]:
    """All shops, optionally filtered by case-insensitive owner/city substrings."""
    query = db.session.query(Shop)
    if owner_name:
        query = query.filter(Shop.owner_name.ilike(f"%{owner_name}%"))
    if city:
        query = query.filter(Shop.city.ilike(f"%{city}%"))
    return query.order_by(Shop.shop_name.asc(), Shop.id.asc()).all()


def list_active_shops() -> list[Shop]:
    return (
        db.session.query(Shop)
        .filter(Shop.is_active.is_(True))
        .order_by(Shop.shop_name.asc(), Shop.id.asc())
        .all()
    )


def get_shop(shop_id: int) -> Shop:
    shop = db.session.get(Shop, shop_id)
    if not shop:
        raise NotFoundError("Shop not found")
    return shop


def update_shop(shop_id: int, payload: dict) -> Shop:
    shop = get_shop(shop_id)
    patch = _clean_patch(payload, partial=True)

    if "cnic" in patch:
        _ensure_unique_cnic(patch["cnic"], exclude_shop_id=shop.id)

    for column, value in patch.items():
        setattr(shop, column, value)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Another shop with this CNIC already exists")
    return shop


def delete_shop(shop_id: int) -> None:
    """Delete the shop. Existing orders are kept with their shop set to null."""
    shop = get_shop(shop_id)
    db.session.delete(shop)
    db.session.commit()


def set_shop_status(shop_id: int, is_active: bool) -> Shop:
    shop = get_shop(shop_id)
    shop.is_active = is_active
    db.session.commit()
    return shop
