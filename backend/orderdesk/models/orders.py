from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from ..validation import cents_to_amount


class Order(db.Model):
    """
    Order placed by a salesman (or admin) for a shop.

    All amounts in cents:
    - total_cents: sum of line_total_cents, fixed at creation
    - payment_amount_cents: amount tendered when the order was placed
    - amount_paid_cents: running paid total, replaced by admin payment updates,
      never above total_cents

    shop_id / salesman_id are nulled if the shop or salesman is deleted later;
    the order and its line snapshots are kept as the historical record.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("amount_paid_cents >= 0", name="ck_orders_amount_paid_non_negative"),
        db.CheckConstraint("payment_amount_cents >= 0", name="ck_orders_payment_amount_non_negative"),
        db.Index("ix_orders_shop_created", "shop_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id", ondelete="SET NULL"), nullable=True, index=True)
    salesman_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    total_cents = db.Column(db.BigInteger, nullable=False)

    # half | full | cashOnDelivery, paired with 1 | 2 | 3
    payment_type = db.Column(db.String(16), nullable=False, index=True)
    payment_type_id = db.Column(db.Integer, nullable=False)
    payment_amount_cents = db.Column(db.Integer, nullable=False)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    shop = db.relationship("Shop", backref=db.backref("orders", lazy=True))
    salesman = db.relationship("User", backref=db.backref("orders", lazy=True))
    lines = db.relationship(
        "OrderLine",
        backref="order",
        lazy=True,
        order_by="OrderLine.line_number",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} shop_id={self.shop_id} total_cents={self.total_cents}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop": self.shop.to_summary() if self.shop else None,
            "salesman": self.salesman.to_summary() if self.salesman else None,
            "orderLines": [line.to_dict() for line in self.lines],
            "totalAmount": cents_to_amount(self.total_cents),
            "paymentType": self.payment_type,
            "paymentTypeId": self.payment_type_id,
            "paymentAmount": cents_to_amount(self.payment_amount_cents),
            "amountPaid": cents_to_amount(self.amount_paid_cents),
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class OrderLine(db.Model):
    """
    One product line on an order.

    product_name and unit_price_cents are snapshots taken when the order was
    placed; later catalog edits never touch them.
    """
    __tablename__ = "order_lines"
    __table_args__ = (
        db.UniqueConstraint("order_id", "line_number", name="uq_order_lines_order_line"),
        db.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    line_number = db.Column(db.Integer, nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id", ondelete="SET NULL"), nullable=True, index=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.BigInteger, nullable=False)

    # Deleting the item nulls item_id here; the snapshot columns stay
    item = db.relationship("Item", backref=db.backref("order_lines", lazy=True))

    def to_dict(self) -> dict:
        return {
            "product": self.item_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": cents_to_amount(self.unit_price_cents),
            "lineTotal": cents_to_amount(self.line_total_cents),
        }
