# Overview: Flask API routes for inventory items; parses input and returns JSON responses.

# backend/warehouse/routes/items.py
"""
Inventory item routes.

SECURITY: All routes require authentication and are scoped to the caller.
Another user's item answers 404, the same as a missing one.
"""
from flask import Blueprint, request, g, current_app

from ..models import Item
from ..services import inventory_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_item,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_auth

ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"name", "quantity", "price"},
    required_on_create={"name", "quantity", "price"},
)

items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
@require_auth
def list_items():
    """Caller's items, newest first."""
    items = inventory_service.list_items(g.current_user.id)
    return [item.to_dict() for item in items], 200


@items_bp.post("")
@require_auth
def create_item():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=Item,
            payload=payload,
            policy=ITEM_POLICY,
            partial=False,
        )
        enforce_rules_item(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        item = inventory_service.create_item(g.current_user.id, **patch)
    except Exception:
        current_app.logger.exception("Failed to create item")
        return {"error": "Internal server error"}, 500

    return item.to_dict(), 201


@items_bp.delete("/<int:item_id>")
@require_auth
def delete_item(item_id: int):
    try:
        inventory_service.delete_item(g.current_user.id, item_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to delete item")
        return {"error": "Internal server error"}, 500

    return {"message": "Item deleted successfully"}, 200


@items_bp.patch("/<int:item_id>")
@require_auth
def adjust_item_stock(item_id: int):
    """
    Add stock to an item.

    Body: {"quantity": <non-negative number>} - added to the current quantity.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}

    try:
        item = inventory_service.adjust_stock(g.current_user.id, item_id, payload.get("quantity"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to adjust item stock")
        return {"error": "Internal server error"}, 500

    return item.to_dict(), 200
