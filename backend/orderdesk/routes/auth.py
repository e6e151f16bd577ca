# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/orderdesk/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Password policy enforced on signup, change and reset
- Short-lived access tokens, single-slot refresh tokens
- Password reset through a hashed, expiring one-time code sent by email
- Blocked accounts cannot log in or refresh
"""

from flask import Blueprint, request, jsonify, g

from ..errors import ServiceError, error_response, internal_error_response
from ..services import auth_service
from ..validation import require_json_object
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/signup")
def signup_route():
    """
    Self-service signup.

    Always creates an admin account. Salesmen are created by admins via
    POST /api/admin/create-salesman.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        user = auth_service.signup(
            name=data.get("name"),
            phone=data.get("phone"),
            address=data.get("address"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify({"message": "Admin user created successfully", "user": user.to_dict()}), 201
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to sign up user")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email and password.

    Returns {accessToken, refreshToken}. The access token goes in the
    Authorization header; the refresh token is exchanged at /refresh-token.
    """
    try:
        data = require_json_object(request.get_json(silent=True))
        tokens = auth_service.login(data.get("email"), data.get("password"))
        return jsonify(tokens), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to login user")


@auth_bp.post("/refresh-token")
def refresh_token_route():
    try:
        data = require_json_object(request.get_json(silent=True) or {})
        access_token = auth_service.refresh_access_token(data.get("refreshToken"))
        return jsonify({"accessToken": access_token}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to refresh access token")


@auth_bp.post("/logout")
def logout_route():
    """200 when a session was ended, 204 when the token matched nobody."""
    try:
        data = require_json_object(request.get_json(silent=True) or {})
        if not auth_service.logout(data.get("refreshToken")):
            return "", 204
        return jsonify({"message": "Logged out successfully"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to logout user")


@auth_bp.post("/forgot-password")
def forgot_password_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        auth_service.request_password_reset(data.get("email"))
        return jsonify({"message": "Verification code sent to email"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to send password reset code")


@auth_bp.post("/verify-code")
def verify_code_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        auth_service.verify_reset_code(data.get("email"), data.get("code"))
        return jsonify({"message": "Code verified"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to verify reset code")


@auth_bp.post("/reset-password")
def reset_password_route():
    try:
        data = require_json_object(request.get_json(silent=True))
        auth_service.reset_password(data.get("email"), data.get("code"), data.get("newPassword"))
        return jsonify({"message": "Password reset successful"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to reset password")


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    """Change the caller's password. Ends the caller's refresh session."""
    try:
        data = require_json_object(request.get_json(silent=True))
        auth_service.change_password(g.auth, data.get("oldPassword"), data.get("newPassword"))
        return jsonify({"message": "Password changed successfully"}), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to change password")


@auth_bp.get("/profile")
@require_auth
def profile_route():
    try:
        user = auth_service.get_profile(g.auth)
        return jsonify(user.to_dict()), 200
    except ServiceError as exc:
        return error_response(exc)
    except Exception:
        return internal_error_response("Failed to load profile")
