# Overview: Flask API routes for account operations; parses input and returns JSON responses.

# backend/warehouse/routes/auth.py
"""
Authentication API routes

- Registration creates an unverified account and emails a verification link
- Login requires verified email; returns a bearer token
- Password reset is a forgot/reset pair of single-use, time-boxed tokens
"""

from flask import Blueprint, request, jsonify, current_app, redirect, g

from ..services import auth_service
from ..services import token_service
from ..services.auth_service import (
    ForbiddenError,
    InvalidTokenError,
    UnauthorizedError,
)
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@auth_bp.post("/register")
def register_route():
    """
    Register a new account.

    Body: {email, password, name, warehouseName}
    The account stays unverified until the emailed link is followed.
    """
    try:
        data = _json_body()
        auth_service.register_user(
            email=data.get("email"),
            password=data.get("password"),
            name=data.get("name"),
            warehouse_name=data.get("warehouseName") or data.get("warehouse_name"),
        )
        return jsonify({
            "message": "Registration successful. Please check your email to verify your account."
        }), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/verify/<token>")
def verify_email_route(token: str):
    """
    Verify email from the emailed link, then send the browser to the login page.
    """
    try:
        auth_service.verify_email(token)
    except InvalidTokenError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to verify email")
        return jsonify({"error": "Internal server error"}), 500

    frontend_url = current_app.config["FRONTEND_URL"].rstrip("/")
    return redirect(f"{frontend_url}/login?verified=true")


@auth_bp.post("/resend-verification")
def resend_verification_route():
    """Issue a fresh verification link for an unverified account."""
    try:
        data = _json_body()
        auth_service.resend_verification(data.get("email"))
        return jsonify({"message": "Verification email sent"}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to resend verification")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue a bearer token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = _json_body()
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(email, password)
        token = token_service.create_access_token(user)

        return jsonify({
            "user": user.to_dict(),
            "token": token,
        }), 200

    except (UnauthorizedError, ForbiddenError) as e:
        return jsonify({"error": str(e)}), 401
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/forgot-password")
def forgot_password_route():
    try:
        data = _json_body()
        auth_service.request_password_reset(data.get("email"))
        return jsonify({"message": "Password reset email sent"}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to start password reset")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/reset-password/<token>")
def reset_password_route(token: str):
    try:
        data = _json_body()
        auth_service.reset_password(token, data.get("password"))
        return jsonify({"message": "Password reset successful"}), 200

    except (InvalidTokenError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to reset password")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Profile of the token's owner."""
    return jsonify({"user": g.current_user.to_dict()}), 200
