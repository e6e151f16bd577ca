# Overview: Flask API routes for orders operations; parses input and returns JSON responses.

"""
Order API routes

- GET  /api/payment-types                     admin, salesman
- POST /api/order                             admin, salesman
- GET  /api/admin/orders                      admin
- GET  /api/admin/order/<orderId>             admin
- PATCH /api/admin/order/<orderId>/payment    admin
- GET  /api/admin/shop-orders-summary         admin

Order IDs in the path are taken as strings so that malformed IDs produce a
400 "Invalid order ID" instead of a routing 404.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import ServiceError, error_response, internal_error_response
from ..permissions import ADMIN_ONLY, STAFF
from ..services import order_service
from ..validation import require_json_object


orders_bp = Blueprint("orders", __name__, url_prefix="/api")


@orders_bp.get("/payment-types")
@require_auth
@require_role(STAFF)
def payment_types_route():
    return jsonify(order_service.PAYMENT_TYPES), 200


@orders_bp.post("/order")
@require_auth
@require_role(STAFF)
def place_order_route():
    """
    Place an order for the calling user.

    Body: {shopId, items: [{productId, quantity}], paymentType, paymentAmount}
    Stock is taken for every line or for none.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        order = order_service.place_order(
            g.auth,
            shop_id=data.get("shopId"),
            items=data.get("items"),
            payment_type=data.get("paymentType"),
            payment_amount=data.get("paymentAmount"),
        )
        return jsonify({"message": "Order created successfully", "order": order.to_dict()}), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to place order")


@orders_bp.get("/admin/orders")
@require_auth
@require_role(ADMIN_ONLY)
def list_orders_route():
    try:
        orders = order_service.list_orders()
        return jsonify([order.to_dict() for order in orders]), 200
    except Exception:
        return internal_error_response("Failed to list orders")


@orders_bp.get("/admin/order/<order_id>")
@require_auth
@require_role(ADMIN_ONLY)
def get_order_route(order_id: str):
    try:
        order = order_service.get_order(order_id)
        return jsonify(order.to_dict()), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to get order")


@orders_bp.patch("/admin/order/<order_id>/payment")
@require_auth
@require_role(ADMIN_ONLY)
def record_payment_route(order_id: str):
    """Replace the order's amountPaid. Body: {amountPaid}."""
    try:
        data = require_json_object(request.get_json(silent=True) or {})
        order = order_service.record_payment(g.auth, order_id, data.get("amountPaid"))
        return jsonify({
            "message": "Payment amount updated successfully",
            "order": order.to_dict(),
        }), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to record payment")


@orders_bp.get("/admin/shop-orders-summary")
@require_auth
@require_role(ADMIN_ONLY)
def shop_orders_summary_route():
    try:
        return jsonify(order_service.shop_orders_summary()), 200
    except Exception:
        return internal_error_response("Failed to build shop orders summary")
