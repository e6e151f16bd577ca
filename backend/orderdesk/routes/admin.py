# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

"""
Admin API routes for salesman management.

All routes require the admin role.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import ServiceError, error_response, internal_error_response
from ..permissions import ADMIN_ONLY
from ..services import user_service
from ..validation import coerce_strict_bool, require_json_object


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.post("/create-salesman")
@require_auth
@require_role(ADMIN_ONLY)
def create_salesman_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        user = user_service.create_salesman(
            name=data.get("name"),
            phone=data.get("phone"),
            address=data.get("address"),
            email=data.get("email"),
            password=data.get("password"),
            id_card_number=data.get("idCardNumber"),
        )
        return jsonify({"message": "Salesman created successfully", "user": user.to_dict()}), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to create salesman")


@admin_bp.get("/salesmen")
@require_auth
@require_role(ADMIN_ONLY)
def list_salesmen_route():
    try:
        users = user_service.list_salesmen()
        return jsonify([user.to_dict() for user in users]), 200
    except Exception:
        return internal_error_response("Failed to list salesmen")


@admin_bp.get("/salesman/<int:user_id>")
@require_auth
@require_role(ADMIN_ONLY)
def get_salesman_route(user_id: int):
    try:
        user = user_service.get_salesman(user_id)
        return jsonify(user.to_dict()), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to get salesman")


@admin_bp.put("/salesman/<int:user_id>")
@require_auth
@require_role(ADMIN_ONLY)
def update_salesman_route(user_id: int):
    """Partial profile update: name, phone, address, email, idCardNumber."""
    try:
        data = require_json_object(request.get_json(silent=True))
        user = user_service.update_salesman(user_id, data)
        return jsonify({"message": "Salesman updated successfully", "user": user.to_dict()}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to update salesman")


@admin_bp.delete("/salesman/<int:user_id>")
@require_auth
@require_role(ADMIN_ONLY)
def delete_salesman_route(user_id: int):
    try:
        user_service.delete_salesman(user_id)
        return jsonify({"message": "Salesman deleted successfully"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to delete salesman")


@admin_bp.patch("/salesman/<int:user_id>/status")
@require_auth
@require_role(ADMIN_ONLY)
def salesman_status_route(user_id: int):
    """Block ({"isActive": false}) or unblock ({"isActive": true}) a salesman."""
    try:
        data = require_json_object(request.get_json(silent=True) or {})
        is_active = coerce_strict_bool(data.get("isActive"), "isActive")
        user = user_service.set_salesman_status(g.auth, user_id, is_active)
        return jsonify({
            "message": f"Salesman has been {'activated' if is_active else 'blocked'}",
            "user": user.to_dict(),
        }), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to update salesman status")
