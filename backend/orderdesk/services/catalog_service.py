# backend/orderdesk/services/catalog_service.py
"""
Catalog Service: categories and items (products).

Items carry the current price and stock. Stock only goes down through
decrement_stock(), which is a single conditional UPDATE; concurrent orders
therefore cannot oversell, and quantity never drops below zero.
"""
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from ..models import Category, Item
from ..validation import clean_str, coerce_quantity, parse_amount_cents, parse_id
from .concurrency import conditional_decrement


def create_category(name) -> Category:
    name = clean_str(name, "name", max_length=120)
    if not name:
        raise ValidationError("Category name is required")

    if db.session.query(Category).filter_by(name=name).first():
        raise ConflictError("Category already exists")

    category = Category(name=name)
    db.session.add(category)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Category already exists")
    return category


def list_categories() -> list[Category]:
    return (
        db.session.query(Category)
        .order_by(Category.created_at.desc(), Category.id.desc())
        .all()
    )


def _resolve_category(value) -> Category:
    try:
        category_id = parse_id(value, "categoryType")
    except ValidationError:
        raise ValidationError("Invalid category ID")
    category = db.session.get(Category, category_id)
    if not category:
        raise ValidationError("Invalid category ID")
    return category


def _clean_item_patch(payload: dict, *, partial: bool) -> dict:
    required = ("name", "categoryType", "price", "quantity")
    if not partial:
        for key in required:
            value = payload.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError("All fields are required")

    patch = {}
    if payload.get("name") is not None:
        name = clean_str(payload["name"], "name")
        if not name:
            raise ValidationError("name cannot be blank")
        patch["name"] = name
    if payload.get("categoryType") is not None:
        patch["category"] = _resolve_category(payload["categoryType"])
    if payload.get("price") is not None:
        patch["price_cents"] = parse_amount_cents(payload["price"], "price")
    if payload.get("quantity") is not None:
        patch["quantity"] = coerce_quantity(payload["quantity"], "quantity", minimum=0)
    return patch


def create_item(payload: dict) -> Item:
    patch = _clean_item_patch(payload, partial=False)
    item = Item(**patch)
    db.session.add(item)
    db.session.commit()
    return item


def list_items(
    name: str | None = None,
    category_id=None,
    category_name: str | None = None,
) -> list[Item]:
    """
    Items with optional filters.

    - name: case-insensitive substring
    - category_id: exact category
    - category_name: case-insensitive substring of the category name
      (ignored when category_id is given)
    """
    query = db.session.query(Item)
    if name:
        query = query.filter(Item.name.ilike(f"%{name}%"))
    if category_id:
        query = query.filter(Item.category_id == parse_id(category_id, "categoryId"))
    elif category_name:
        query = query.join(Category).filter(Category.name.ilike(f"%{category_name}%"))
    return query.order_by(Item.name.asc(), Item.id.asc()).all()


def count_items() -> int:
    return db.session.query(Item).count()


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if not item:
        raise NotFoundError("Product not found")
    return item


def update_item(item_id: int, payload: dict) -> Item:
    item = get_item(item_id)
    patch = _clean_item_patch(payload, partial=True)
    for key, value in patch.items():
        setattr(item, key, value)
    db.session.commit()
    return item


def delete_item(item_id: int) -> None:
    """Delete the item; order lines keep their snapshots with item set to null."""
    item = get_item(item_id)
    db.session.delete(item)
    db.session.commit()


def decrement_stock(item: Item, quantity: int) -> None:
    """
    Take `quantity` units out of stock in one atomic statement.

    Raises InsufficientStockError if the row no longer holds enough units.
    Does not commit.
    """
    if not conditional_decrement(Item, item.id, Item.quantity, quantity):
        raise InsufficientStockError(f"Insufficient stock for product {item.name}")
    db.session.expire(item, ["quantity"])
