# Overview: Flask API routes for categories and items (products); parses input and returns JSON responses.

"""
Catalog API routes

Admins create categories and items and edit or delete items; admins and
salesmen can browse. "Item" and "product" name the same records: the
/item routes are the plain list/create pair, the /product routes add
filtering, counting, update and delete.
"""

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_role
from ..errors import ServiceError, error_response, internal_error_response
from ..permissions import ADMIN_ONLY, STAFF
from ..services import catalog_service
from ..validation import require_json_object


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


# Categories

@catalog_bp.post("/admin/category")
@require_auth
@require_role(ADMIN_ONLY)
def create_category_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        category = catalog_service.create_category(data.get("name"))
        return jsonify({
            "message": "Category created successfully",
            "category": category.to_dict(),
        }), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to create category")


@catalog_bp.get("/category")
@require_auth
@require_role(STAFF)
def list_categories_route():
    try:
        categories = catalog_service.list_categories()
        return jsonify({
            "count": len(categories),
            "categories": [category.to_dict() for category in categories],
        }), 200
    except Exception:
        return internal_error_response("Failed to list categories")


# Items

@catalog_bp.post("/admin/item")
@require_auth
@require_role(ADMIN_ONLY)
def create_item_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        item = catalog_service.create_item(data)
        return jsonify({"message": "Item created successfully", "item": item.to_dict()}), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to create item")


@catalog_bp.get("/item")
@require_auth
@require_role(STAFF)
def list_items_route():
    try:
        items = catalog_service.list_items()
        return jsonify([item.to_dict() for item in items]), 200
    except Exception:
        return internal_error_response("Failed to list items")


# Products

@catalog_bp.post("/admin/add-product")
@require_auth
@require_role(ADMIN_ONLY)
def create_product_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        item = catalog_service.create_item(data)
        return jsonify({"message": "Product created successfully", "product": item.to_dict()}), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to create product")


@catalog_bp.put("/admin/product/<int:item_id>")
@require_auth
@require_role(ADMIN_ONLY)
def update_product_route(item_id: int):
    """Partial update of name, categoryType, price, quantity."""
    try:
        data = require_json_object(request.get_json(silent=True))
        item = catalog_service.update_item(item_id, data)
        return jsonify({"message": "Product updated successfully", "product": item.to_dict()}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to update product")


@catalog_bp.delete("/admin/product/<int:item_id>")
@require_auth
@require_role(ADMIN_ONLY)
def delete_product_route(item_id: int):
    try:
        catalog_service.delete_item(item_id)
        return jsonify({"message": "Product deleted successfully"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to delete product")


@catalog_bp.get("/product/count")
@require_auth
@require_role(STAFF)
def count_products_route():
    try:
        return jsonify({"count": catalog_service.count_items()}), 200
    except Exception:
        return internal_error_response("Failed to count products")


@catalog_bp.get("/product")
@require_auth
@require_role(STAFF)
def list_products_route():
    """Query params: name, categoryId, categoryName (ignored when categoryId is set)."""
    try:
        items = catalog_service.list_items(
            name=request.args.get("name"),
            category_id=request.args.get("categoryId"),
            category_name=request.args.get("categoryName"),
        )
        return jsonify([item.to_dict() for item in items]), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to list products")


@catalog_bp.get("/product/<int:item_id>")
@require_auth
@require_role(STAFF)
def get_product_route(item_id: int):
    try:
        item = catalog_service.get_item(item_id)
        return jsonify(item.to_dict()), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to get product")
