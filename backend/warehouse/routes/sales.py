# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/warehouse/routes/sales.py
"""Sales API routes: record a sale, per-item summary, daily trend."""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import sales_service, reporting_service
from ..services.sales_service import InsufficientStockError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def record_sale_route():
    """
    Record a sale and decrement stock in one transaction.

    Body: {itemId, quantity}
    Insufficient stock and unknown items both answer 400; nothing is written.
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        item_id = data.get("itemId", data.get("item_id"))

        sale, item = sales_service.record_sale(g.current_user.id, item_id, data.get("quantity"))

        return jsonify({"sale": sale.to_dict(), "updatedItem": item.to_dict()}), 201

    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except (NotFoundError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/summary")
@require_auth
def sales_summary_route():
    """Per-item quantity and revenue totals."""
    try:
        return jsonify(reporting_service.sales_summary(g.current_user.id)), 200
    except Exception:
        current_app.logger.exception("Failed to build sales summary")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/trend")
@require_auth
def sales_trend_route():
    """Revenue per day, ascending."""
    try:
        return jsonify(reporting_service.sales_trend(g.current_user.id)), 200
    except Exception:
        current_app.logger.exception("Failed to build sales trend")
        return jsonify({"error": "Internal server error"}), 500
