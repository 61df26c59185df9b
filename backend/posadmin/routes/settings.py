# Overview: Flask API routes for business self-service settings.

from flask import Blueprint, g, jsonify

from ..decorators import json_object, require_auth, require_pos
from ..services import approval_service, settings_service

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
@require_pos
def get_settings():
    return jsonify(approval_service.get_business(g.principal.id).to_dict()), 200


@settings_bp.put("/currency")
@require_auth
@require_pos
def update_currency():
    payload = json_object()
    business = settings_service.update_currency(g.principal.id, payload.get("currency_symbol"))
    return jsonify({
        "message": "Currency symbol updated successfully",
        "business": business.to_dict(),
    }), 200


@settings_bp.put("/business-info")
@require_auth
@require_pos
def update_business_info():
    """
    Body (all optional): business_name, business_address, business_phone,
    receipt_footer, tax_rate (0-100).
    """
    payload = json_object()
    business = settings_service.update_business_info(g.principal.id, payload)
    return jsonify({
        "message": "Business information updated successfully",
        "business": business.to_dict(),
    }), 200
