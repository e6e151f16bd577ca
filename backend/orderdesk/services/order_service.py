# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Service - order placement, payment bookkeeping and shop summaries

PLACEMENT SEQUENCE (place_order):
1. Validate request shape (shop, lines, payment type, payment amount)
2. Resolve paymentType -> paymentTypeId
3. Load shop; must exist and be active
4. For each line, in order: validate, load item, check stock, snapshot
   name/price, then take the stock with an atomic conditional decrement
   before looking at the next line
5. Insert the order with its lines
6. Commit once

All decrements and the order insert share one transaction. A failure on any
line rolls back the decrements already applied for earlier lines, so a
rejected order never consumes stock.

MONEY: integer cents throughout; totals are exact integer sums.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import case, func

from ..extensions import db
from ..errors import InsufficientStockError, NotFoundError, ServiceError, ValidationError
from ..models import Item, Order, OrderLine, Shop
from ..validation import MAX_QUANTITY, cents_to_amount, coerce_int, parse_amount_cents, parse_id
from .catalog_service import decrement_stock
from .concurrency import lock_for_update
from .token_service import AuthContext


PAYMENT_TYPES = [
    {"id": 1, "type": "half"},
    {"id": 2, "type": "full"},
    {"id": 3, "type": "cashOnDelivery"},
]
PAYMENT_TYPE_IDS = {entry["type"]: entry["id"] for entry in PAYMENT_TYPES}


class OrderError(ServiceError):
    """Order could not be placed (shop/product state)."""


def _validate_request(shop_id, items, payment_type, payment_amount) -> tuple[int, list, int]:
    if not shop_id or not isinstance(items, list) or not items:
        raise ValidationError(
            "shopId, paymentType, paymentAmount, and at least one item "
            "(productId, quantity) are required"
        )
    if not isinstance(payment_type, str) or payment_type not in PAYMENT_TYPE_IDS:
        raise ValidationError("paymentType must be one of: half, full, cashOnDelivery")

    amount_cents = parse_amount_cents(payment_amount, "paymentAmount")

    try:
        shop_pk = parse_id(shop_id, "shopId")
    except ValidationError:
        raise OrderError("Shop not found")

    return shop_pk, items, amount_cents


def _validate_line(line) -> tuple[int, int]:
    message = "Each item must have productId and quantity (min 1)"
    if not isinstance(line, dict):
        raise ValidationError(message)

    product_id = line.get("productId")
    quantity = line.get("quantity")
    if not product_id or quantity is None:
        raise ValidationError(message)
    try:
        quantity = coerce_int(quantity, "quantity")
    except ValidationError:
        raise ValidationError(message)
    if quantity < 1 or quantity > MAX_QUANTITY:
        raise ValidationError(message)

    try:
        product_pk = parse_id(product_id, "productId")
    except ValidationError:
        raise OrderError(f"Product not found: {product_id}")
    return product_pk, quantity


def place_order(
    actor: AuthContext,
    *,
    shop_id,
    items,
    payment_type,
    payment_amount,
) -> Order:
    """
    Place an order for `actor` and return it with shop and salesman loaded.

    Raises ValidationError for malformed input, OrderError for missing or
    inactive shops and unknown products, InsufficientStockError when a line
    asks for more than is in stock. Nothing is persisted on failure.
    """
    shop_pk, items, amount_cents = _validate_request(shop_id, items, payment_type, payment_amount)
    payment_type_id = PAYMENT_TYPE_IDS[payment_type]

    shop = db.session.get(Shop, shop_pk)
    if not shop:
        raise OrderError("Shop not found")
    if not shop.is_active:
        raise OrderError("Shop is not active")

    order_lines: list[OrderLine] = []
    total_cents = 0

    try:
        for line_number, line in enumerate(items, start=1):
            product_pk, quantity = _validate_line(line)

            product = db.session.get(Item, product_pk)
            if not product:
                raise OrderError(f"Product not found: {line.get('productId')}")

            if product.quantity < quantity:
                raise InsufficientStockError(f"Insufficient stock for product {product.name}")

            unit_price_cents = product.price_cents
            line_total_cents = quantity * unit_price_cents

            order_lines.append(OrderLine(
                line_number=line_number,
                item_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price_cents=unit_price_cents,
                line_total_cents=line_total_cents,
            ))
            total_cents += line_total_cents

            # Check-and-take in one statement; loses cleanly to a concurrent order
            decrement_stock(product, quantity)

        order = Order(
            shop_id=shop.id,
            salesman_id=actor.user_id,
            total_cents=total_cents,
            payment_type=payment_type,
            payment_type_id=payment_type_id,
            payment_amount_cents=amount_cents,
            amount_paid_cents=0,
            lines=order_lines,
        )
        db.session.add(order)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return order


def list_orders() -> list[Order]:
    """All orders, newest first."""
    return (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order(order_id) -> Order:
    order_pk = parse_id(order_id, "order ID")
    order = db.session.get(Order, order_pk)
    if not order:
        raise NotFoundError("Order not found")
    return order


def record_payment(actor: AuthContext, order_id, amount_paid) -> Order:
    """
    Replace the order's paid amount.

    Replacing (not adding) makes the call idempotent. The new value may not
    exceed the order total.
    """
    order_pk = parse_id(order_id, "order ID")
    if amount_paid is None:
        raise ValidationError("amountPaid must be a number >= 0")
    amount_cents = parse_amount_cents(amount_paid, "amountPaid")

    order = lock_for_update(db.session.query(Order).filter_by(id=order_pk)).first()
    if not order:
        raise NotFoundError("Order not found")

    if amount_cents > order.total_cents:
        db.session.rollback()
        raise ValidationError("amountPaid cannot exceed order totalAmount")

    order.amount_paid_cents = amount_cents
    db.session.commit()

    current_app.logger.info(
        "Admin %s set amount paid on order %s to %s cents", actor.user_id, order.id, amount_cents
    )
    return order


def shop_orders_summary() -> list[dict]:
    """
    Per-shop order count, order total, and tendered amounts by payment type.

    Every shop appears; shops without orders get zeroes.
    """
    def _tendered(payment_type: str):
        return func.coalesce(func.sum(case(
            (Order.payment_type == payment_type, Order.payment_amount_cents),
            else_=0,
        )), 0)

    rows = (
        db.session.query(
            Order.shop_id,
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_cents), 0),
            _tendered("half"),
            _tendered("full"),
            _tendered("cashOnDelivery"),
        )
        .filter(Order.shop_id.isnot(None))
        .group_by(Order.shop_id)
        .all()
    )
    by_shop = {row[0]: row[1:] for row in rows}

    shops = db.session.query(Shop).order_by(Shop.shop_name.asc(), Shop.id.asc()).all()

    result = []
    for shop in shops:
        count, total, half, full, cod = by_shop.get(shop.id, (0, 0, 0, 0, 0))
        result.append({
            "shop": shop.to_dict(),
            "orderCount": int(count),
            "totalOrderAmount": cents_to_amount(int(total)),
            "paymentSummary": {
                "half": cents_to_amount(int(half)),
                "full": cents_to_amount(int(full)),
                "cashOnDelivery": cents_to_amount(int(cod)),
            },
        })
    return result
