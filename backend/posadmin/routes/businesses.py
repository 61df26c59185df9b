# Overview: Public POS business routes (directory and registration).

from flask import Blueprint, jsonify

from ..decorators import json_object
from ..services import approval_service

businesses_bp = Blueprint("businesses", __name__, url_prefix="/api/pos-businesses")


@businesses_bp.get("")
def list_approved_businesses():
    """Approved businesses only, for the register picker."""
    businesses = approval_service.list_approved()
    return jsonify({
        "items": [b.to_public_dict() for b in businesses],
        "count": len(businesses),
    }), 200


@businesses_bp.get("/<int:business_id>")
def get_business(business_id: int):
    business = approval_service.get_business(business_id)
    return jsonify(business.to_public_dict()), 200


@businesses_bp.post("")
def register_business():
    """
    Request a POS account. The business starts as pending and cannot sign in
    until an admin approves it.
    """
    payload = json_object()
    business = approval_service.request_create(payload)
    return jsonify({
        "message": "POS system request submitted successfully. Awaiting admin approval.",
        "business": business.to_public_dict(),
    }), 201
