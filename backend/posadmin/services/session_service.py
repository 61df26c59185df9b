# Overview: Service-layer operations for session; encapsulates business logic and database work.

"""
Session Token Management Service

WHY: Secure session management with automatic timeout and revocation.
Tokens are cryptographically secure, hashed in database, and time-limited.

PRINCIPALS: A session belongs to either an admin or a POS business. Every
validation re-loads that record from the database, so a business whose
approval is revoked loses access on its very next request even though its
token has not expired.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, default 24h)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, default 2h)
- Revocable on logout or on approval changes
- Tracks client IP and user agent for security monitoring
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import ClassVar, Union

from flask import current_app

from ..extensions import db
from ..models import AdminUser, PosBusiness, SessionToken
from ..time_utils import utcnow

ADMIN = "admin"
POS = "pos"


@dataclass(frozen=True)
class AdminPrincipal:
    id: int
    username: str
    role: ClassVar[str] = ADMIN

    def to_dict(self) -> dict:
        return {"role": self.role, "id": self.id, "username": self.username}


@dataclass(frozen=True)
class PosPrincipal:
    id: int
    username: str
    business_name: str
    role: ClassVar[str] = POS

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "id": self.id,
            "username": self.username,
            "business_name": self.business_name,
        }


Principal = Union[AdminPrincipal, PosPrincipal]


@dataclass
class SessionContext:
    """Result of a successful validate_session call."""
    principal: Principal
    session: SessionToken


def principal_for_admin(admin: AdminUser) -> AdminPrincipal:
    return AdminPrincipal(id=admin.id, username=admin.username)


def principal_for_business(business: PosBusiness) -> PosPrincipal:
    return PosPrincipal(id=business.id, username=business.username, business_name=business.business_name)


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_IDLE_TIMEOUT_HOURS", 2))


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy (unlike passwords), so a fast hash is enough.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    principal: Principal,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create new session token for an authenticated principal.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        principal_kind=principal.role,
        principal_id=principal.id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def _resolve_principal(session: SessionToken) -> tuple[Principal | None, str | None]:
    """Load the principal behind a session. Returns (principal, revoke_reason)."""
    if session.principal_kind == ADMIN:
        admin = db.session.get(AdminUser, session.principal_id)
        if admin is None:
            return None, "Admin account removed"
        return principal_for_admin(admin), None

    if session.principal_kind == POS:
        business = db.session.get(PosBusiness, session.principal_id)
        if business is None:
            return None, "Business removed"
        if business.status != "approved":
            return None, f"Business status is {business.status}"
        return principal_for_business(business), None

    return None, f"Unknown principal kind {session.principal_kind!r}"


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is invalid, expired, or revoked
    - The principal no longer exists
    - The principal is a POS business that is no longer approved

    Updates last_used_at on successful validation (activity tracking).
    """
    if not token:
        return None

    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    # Check absolute timeout
    if session.expires_at < now:
        return None

    # Check idle timeout
    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        return None

    principal, reason = _resolve_principal(session)
    if principal is None:
        _revoke(session, reason)
        current_app.logger.info(
            "Session %s for %s:%s revoked on use: %s",
            session.id, session.principal_kind, session.principal_id, reason,
        )
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(principal=principal, session=session)


def revoke_session(token: str, reason: str = "Logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    return True


def revoke_principal_sessions(principal_kind: str, principal_id: int, reason: str, *, commit: bool = True) -> int:
    """
    Revoke all active sessions for a principal.

    Returns count of sessions revoked.
    """
    now = utcnow()
    count = (
        db.session.query(SessionToken)
        .filter_by(principal_kind=principal_kind, principal_id=principal_id, is_revoked=False)
        .update(
            {
                SessionToken.is_revoked: True,
                SessionToken.revoked_at: now,
                SessionToken.revoked_reason: reason,
            },
            synchronize_session=False,
        )
    )
    if commit:
        db.session.commit()
    return count


def delete_principal_sessions(principal_kind: str, principal_id: int) -> int:
    """Remove every session row for a principal (used when the principal is deleted). Caller commits."""
    return (
        db.session.query(SessionToken)
        .filter_by(principal_kind=principal_kind, principal_id=principal_id)
        .delete(synchronize_session=False)
    )


def cleanup_expired_sessions(retention_days: int = 30) -> int:
    """
    Delete expired and revoked sessions older than the retention window.

    Returns count of sessions deleted.
    """
    now = utcnow()
    cutoff = now - timedelta(days=retention_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True),
        ),
        SessionToken.created_at < cutoff,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
