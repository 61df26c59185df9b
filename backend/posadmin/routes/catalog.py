# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

"""
Product catalog routes.

TENANCY: All operations are scoped to the calling business (g.principal.id).
Products of other businesses answer 404 so their ids are not disclosed.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import json_object, require_auth, require_pos
from ..errors import AuthorizationError
from ..services import catalog_service

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


def _not_found():
    return jsonify({"error": "Product not found"}), 404


@catalog_bp.get("")
@require_auth
@require_pos
def list_products():
    """
    Query params:
    - include_inactive: bool (default false)
    """
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    products = catalog_service.list_products(g.principal.id, include_inactive=include_inactive)
    return jsonify({
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }), 200


@catalog_bp.post("")
@require_auth
@require_pos
def create_product():
    payload = json_object()
    product = catalog_service.create_product(g.principal.id, payload)
    return jsonify(product.to_dict()), 201


@catalog_bp.put("/<int:product_id>")
@require_auth
@require_pos
def update_product(product_id: int):
    payload = json_object()
    try:
        product = catalog_service.update_product(product_id, g.principal.id, payload)
    except AuthorizationError:
        return _not_found()
    return jsonify(product.to_dict()), 200


@catalog_bp.delete("/<int:product_id>")
@require_auth
@require_pos
def delete_product(product_id: int):
    try:
        deleted = catalog_service.delete_product(product_id, g.principal.id)
    except AuthorizationError:
        return _not_found()
    if not deleted:
        return _not_found()
    return jsonify({"ok": True}), 200


@catalog_bp.put("/<int:product_id>/stock")
@require_auth
@require_pos
def set_stock(product_id: int):
    payload = json_object()
    if "stock" not in payload:
        return jsonify({"error": "stock is required"}), 400
    try:
        product = catalog_service.set_stock(product_id, g.principal.id, payload["stock"])
    except AuthorizationError:
        return _not_found()
    return jsonify(product.to_dict()), 200
