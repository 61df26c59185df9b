# Overview: Flask API routes for sessions (login, logout, current principal).

"""
Authentication API routes

Two independent login flows: admins against admin_users, businesses against
pos_businesses (approved only). Both answer with a bearer token that must be
sent as "Authorization: Bearer <token>".
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import bearer_token, json_object, require_auth
from ..errors import AuthenticationError, ValidationError
from ..services import approval_service, auth_service, session_service
from ..services.session_service import PosPrincipal

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _credentials() -> tuple[str, str]:
    data = json_object()
    username = data.get("username")
    password = data.get("password")
    if not isinstance(username, str) or not username.strip() or not isinstance(password, str) or not password:
        raise ValidationError("username and password required")
    return username.strip(), password


def _login_response(principal, record: dict):
    session, token = session_service.create_session(
        principal,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({
        "principal": principal.to_dict(),
        "account": record,
        "token": token,
        "session": session.to_dict(),
        "message": "Login successful",
    }), 200


@auth_bp.post("/sessions/admin")
def admin_login_route():
    """Authenticate an admin and create a session token."""
    username, password = _credentials()
    admin = auth_service.authenticate_admin(username, password)
    if not admin:
        current_app.logger.warning("Failed admin login for %r from %s", username, request.remote_addr)
        raise AuthenticationError("Invalid admin credentials")

    return _login_response(session_service.principal_for_admin(admin), admin.to_dict())


@auth_bp.post("/sessions/pos")
def pos_login_route():
    """Authenticate an approved POS business and create a session token."""
    username, password = _credentials()
    business = auth_service.authenticate_pos(username, password)
    if not business:
        current_app.logger.warning("Failed POS login for %r from %s", username, request.remote_addr)
        raise AuthenticationError("Invalid POS credentials or system not approved")

    return _login_response(session_service.principal_for_business(business), business.to_dict())


@auth_bp.delete("/session")
def logout_route():
    """
    Revoke the presented session token (logout).

    Expects Authorization header: Bearer <token>
    """
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    if not session_service.revoke_session(token, reason="Logout"):
        return jsonify({"error": "Invalid or expired session"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/session/principal")
@require_auth
def principal_route():
    """Current identity, freshly loaded, or 401."""
    principal = g.principal
    body = {"principal": principal.to_dict()}
    if isinstance(principal, PosPrincipal):
        body["account"] = approval_service.get_business(principal.id).to_dict()
    else:
        body["account"] = principal.to_dict()
    return jsonify(body), 200
