# Overview: Service-layer operations for POS business registration and admin approval.

"""
Approval Workflow

States and allowed transitions:

    pending  -> approved      (approve)
    pending  -> rejected      (reject)
    approved -> rejected      (reject, i.e. revocation)
    rejected -> approved      (approve, i.e. re-approval)

Nothing ever returns to pending. Registration always creates a pending
business with the configured defaults, whatever the request contains.

Revocation also revokes every live session of the business; the session
layer independently refuses unapproved businesses on each request.
"""

from __future__ import annotations

import re

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import AdminUser, PosBusiness, BUSINESS_STATUSES
from ..time_utils import utcnow
from . import receipt_service, session_service
from .auth_service import hash_password, validate_password_strength

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

APPROVABLE_FROM = {"pending", "rejected"}
REJECTABLE_FROM = {"pending", "approved"}


def _required_text(payload: dict, key: str, max_length: int) -> str:
    value = payload.get(key)
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{key} is required")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return value


def request_create(payload: dict) -> PosBusiness:
    """
    Register a new POS business (status=pending).

    Expected keys: business_name, contact_email, username, password,
    confirm_password. Any status or configuration keys are ignored.

    Raises:
        ValidationError: missing/invalid fields, password mismatch
        ConflictError: username already taken by another business
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    business_name = _required_text(payload, "business_name", 255)
    contact_email = _required_text(payload, "contact_email", 255)
    username = _required_text(payload, "username", 64)
    password = payload.get("password")
    confirm_password = payload.get("confirm_password")

    if not EMAIL_RE.match(contact_email):
        raise ValidationError("contact_email must be a valid email address")
    if not isinstance(password, str) or not password:
        raise ValidationError("password is required")
    if confirm_password != password:
        raise ValidationError("Passwords don't match")
    validate_password_strength(password)

    if db.session.query(PosBusiness).filter_by(username=username).first():
        raise ConflictError("Username already exists")

    config = current_app.config
    business = PosBusiness(
        business_name=business_name,
        contact_email=contact_email,
        username=username,
        password_hash=hash_password(password),
        status="pending",
        currency_symbol=config["DEFAULT_CURRENCY_SYMBOL"],
        tax_rate=config["DEFAULT_TAX_RATE"],
        receipt_footer=config["DEFAULT_RECEIPT_FOOTER"],
        business_address=config["DEFAULT_BUSINESS_ADDRESS"],
        business_phone=config["DEFAULT_BUSINESS_PHONE"],
        created_at=utcnow(),
    )
    db.session.add(business)
    try:
        db.session.flush()
        receipt_service.ensure_sequence(business.id)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username already exists")

    current_app.logger.info("POS business %s (%s) registered, awaiting approval", business.id, username)
    return business


def get_business(business_id: int) -> PosBusiness:
    business = db.session.get(PosBusiness, business_id)
    if business is None:
        raise NotFoundError("POS business not found")
    return business


def list_businesses(status: str | None = None) -> list[PosBusiness]:
    query = db.session.query(PosBusiness)
    if status is not None:
        if status not in BUSINESS_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(BUSINESS_STATUSES)}")
        query = query.filter(PosBusiness.status == status)
    return query.order_by(PosBusiness.created_at.desc(), PosBusiness.id.desc()).all()


def list_approved() -> list[PosBusiness]:
    return list_businesses(status="approved")


def approve(business_id: int, admin_id: int) -> PosBusiness:
    """pending|rejected -> approved; stamps approved_at and approved_by_admin_id."""
    business = get_business(business_id)
    if db.session.get(AdminUser, admin_id) is None:
        raise NotFoundError("Admin not found")

    if business.status not in APPROVABLE_FROM:
        raise ConflictError(f"Cannot approve a business that is {business.status}")

    business.status = "approved"
    business.approved_at = utcnow()
    business.approved_by_admin_id = admin_id
    db.session.commit()

    current_app.logger.info("POS business %s approved by admin %s", business.id, admin_id)
    return business


def reject(business_id: int, admin_id: int) -> PosBusiness:
    """pending|approved -> rejected; clears approval stamps and ends live sessions."""
    business = get_business(business_id)

    if business.status not in REJECTABLE_FROM:
        raise ConflictError(f"Cannot reject a business that is {business.status}")

    was_approved = business.status == "approved"
    business.status = "rejected"
    business.approved_at = None
    business.approved_by_admin_id = None

    revoked = session_service.revoke_principal_sessions(
        session_service.POS, business.id, reason="Business rejected", commit=False
    )
    db.session.commit()

    current_app.logger.info(
        "POS business %s %s by admin %s (%d sessions revoked)",
        business.id, "revoked" if was_approved else "rejected", admin_id, revoked,
    )
    return business


def delete(business_id: int) -> bool:
    """
    Hard-delete a business with all of its products, transactions, receipt
    sequence and sessions. Irreversible. Returns False if the id is unknown.
    """
    business = db.session.get(PosBusiness, business_id)
    if business is None:
        return False

    session_service.delete_principal_sessions(session_service.POS, business.id)
    db.session.delete(business)
    db.session.commit()

    current_app.logger.info("POS business %s deleted with its catalog and sales", business_id)
    return True


def status_counts() -> dict:
    rows = (
        db.session.query(PosBusiness.status, func.count(PosBusiness.id))
        .group_by(PosBusiness.status)
        .all()
    )
    counts = {status: 0 for status in BUSINESS_STATUSES}
    for status, count in rows:
        counts[status] = count
    return counts
