# Overview: Flask API routes for checkout and transaction history.

from flask import Blueprint, g, jsonify, request

from ..decorators import json_object, require_auth, require_pos
from ..services import approval_service, checkout_service, receipt_service

checkout_bp = Blueprint("checkout", __name__, url_prefix="/api")


@checkout_bp.post("/checkout")
@require_auth
@require_pos
def checkout():
    """
    Body:
    - items: [{"product_id": int, "quantity": int, "name"?: str}, ...]
    - payment_method: "cash" | "card"
    - subtotal / tax / total (optional, advisory; server figures win)

    Returns the persisted transaction (201), 400 for malformed or empty
    orders, 409 with product_name for insufficient stock.
    """
    payload = json_object()
    client_totals = {key: payload.get(key) for key in ("subtotal", "tax", "total") if key in payload}

    transaction = checkout_service.checkout(
        pos_id=g.principal.id,
        items=payload.get("items"),
        payment_method=payload.get("payment_method"),
        client_totals=client_totals or None,
    )
    return jsonify(transaction.to_dict()), 201


@checkout_bp.get("/transactions")
@require_auth
@require_pos
def list_transactions():
    """
    Query params:
    - limit: int (optional)
    """
    limit = request.args.get("limit", type=int)
    if limit is not None and limit <= 0:
        return jsonify({"error": "limit must be > 0"}), 400
    transactions = checkout_service.list_transactions(g.principal.id, limit=limit)
    return jsonify({
        "items": [t.to_dict() for t in transactions],
        "count": len(transactions),
    }), 200


@checkout_bp.get("/transactions/<int:transaction_id>")
@require_auth
@require_pos
def get_transaction(transaction_id: int):
    transaction = checkout_service.get_transaction(transaction_id, g.principal.id)
    return jsonify(transaction.to_dict()), 200


@checkout_bp.get("/transactions/<int:transaction_id>/receipt")
@require_auth
@require_pos
def get_receipt(transaction_id: int):
    transaction = checkout_service.get_transaction(transaction_id, g.principal.id)
    business = approval_service.get_business(g.principal.id)
    return jsonify(receipt_service.build_receipt(transaction, business)), 200
