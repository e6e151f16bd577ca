# Overview: Flask API routes for shop operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_role
from ..errors import ServiceError, error_response, internal_error_response
from ..permissions import ADMIN_ONLY, STAFF
from ..services import shop_service
from ..validation import coerce_strict_bool, require_json_object


shops_bp = Blueprint("shops", __name__, url_prefix="/api")


@shops_bp.post("/admin/add-shop")
@require_auth
@require_role(ADMIN_ONLY)
def create_shop_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        shop = shop_service.create_shop(data)
        return jsonify({"message": "Shop created successfully", "shop": shop.to_dict()}), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to create shop")


@shops_bp.get("/admin/shops")
@require_auth
@require_role(ADMIN_ONLY)
def list_shops_route():
    """Query params: ownerName, city (case-insensitive substring)."""
    try:
        shops = shop_service.list_shops(
            owner_name=request.args.get("ownerName"),
            city=request.args.get("city"),
        )
        return jsonify([shop.to_dict() for shop in shops]), 200
    except Exception:
        return internal_error_response("Failed to list shops")


@shops_bp.get("/admin/shop/<int:shop_id>")
@require_auth
@require_role(ADMIN_ONLY)
def get_shop_route(shop_id: int):
    try:
        shop = shop_service.get_shop(shop_id)
        return jsonify(shop.to_dict()), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to get shop")


@shops_bp.put("/admin/shop/<int:shop_id>")
@require_auth
@require_role(ADMIN_ONLY)
def update_shop_route(shop_id: int):
    try:
        data = require_json_object(request.get_json(silent=True))
        shop = shop_service.update_shop(shop_id, data)
        return jsonify({"message": "Shop updated successfully", "shop": shop.to_dict()}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to update shop")


@shops_bp.delete("/admin/shop/<int:shop_id>")
@require_auth
@require_role(ADMIN_ONLY)
def delete_shop_route(shop_id: int):
    try:
        shop_service.delete_shop(shop_id)
        return jsonify({"message": "Shop deleted successfully"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to delete shop")


@shops_bp.patch("/admin/shop/<int:shop_id>/status")
@require_auth
@require_role(ADMIN_ONLY)
def shop_status_route(shop_id: int):
    try:
        data = require_json_object(request.get_json(silent=True) or {})
        is_active = coerce_strict_bool(data.get("isActive"), "isActive")
        shop = shop_service.set_shop_status(shop_id, is_active)
        return jsonify({
            "message": f"Shop has been {'activated' if is_active else 'disabled'}",
            "shop": shop.to_dict(),
        }), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to update shop status")


@shops_bp.get("/shops")
@require_auth
@require_role(STAFF)
def list_active_shops_route():
    """Active shops only; used when entering an order."""
    try:
        shops = shop_service.list_active_shops()
        return jsonify([shop.to_dict() for shop in shops]), 200
    except Exception:
        return internal_error_response("Failed to list active shops")
