# Overview: Request guards for API routes.

from functools import wraps

from flask import g, jsonify, request

from .errors import ValidationError
from .services import session_service
from .services.session_service import AdminPrincipal, PosPrincipal


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def json_object() -> dict:
    """Request body as a JSON object; an absent body reads as {}."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def _is_authenticated() -> bool:
    return getattr(g, "principal", None) is not None


def require_auth(f):
    """
    Require a valid session and attach the principal.

    Sets the following Flask g attributes:
    - g.principal: AdminPrincipal | PosPrincipal, re-resolved from the database
    - g.session_context: the full SessionContext

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - The principal was deleted, or is a business that is no longer approved
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired session"}), 401

        g.principal = context.principal
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require the authenticated principal to be an admin. Use after @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not isinstance(g.principal, AdminPrincipal):
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, **kwargs)
    return decorated_function


def require_pos(f):
    """
    Require the authenticated principal to be an approved POS business.
    Use after @require_auth (which already refuses unapproved businesses).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not isinstance(g.principal, PosPrincipal):
            return jsonify({"error": "POS access required"}), 403
        return f(*args, **kwargs)
    return decorated_function
