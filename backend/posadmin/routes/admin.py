# Overview: Flask API routes for admin operations over POS businesses.

"""
Admin routes

Provides endpoints for:
- Reviewing POS business registrations (list, approve, reject/revoke)
- Hard-deleting a business with all of its data
- Dashboard counts

All endpoints require an admin session.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..services import approval_service, reporting_service

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/pos-businesses")
@require_auth
@require_admin
def list_businesses():
    """
    List every business.

    Query params:
    - status: pending | approved | rejected (optional)
    """
    status = request.args.get("status") or None
    businesses = approval_service.list_businesses(status=status)
    return jsonify({
        "items": [b.to_dict() for b in businesses],
        "count": len(businesses),
    }), 200


@admin_bp.post("/pos-businesses/<int:business_id>/approve")
@require_auth
@require_admin
def approve_business(business_id: int):
    business = approval_service.approve(business_id, admin_id=g.principal.id)
    return jsonify({
        "message": "POS system approved successfully",
        "business": business.to_dict(),
    }), 200


@admin_bp.post("/pos-businesses/<int:business_id>/reject")
@require_auth
@require_admin
def reject_business(business_id: int):
    business = approval_service.reject(business_id, admin_id=g.principal.id)
    return jsonify({
        "message": "POS system rejected successfully",
        "business": business.to_dict(),
    }), 200


@admin_bp.delete("/pos-businesses/<int:business_id>")
@require_auth
@require_admin
def delete_business(business_id: int):
    if not approval_service.delete(business_id):
        return jsonify({"error": "POS business not found"}), 404
    return jsonify({"message": "POS system deleted successfully"}), 200


@admin_bp.get("/stats")
@require_auth
@require_admin
def stats():
    return jsonify(reporting_service.admin_stats()), 200
