# Overview: Service-layer operations for auth; credential hashing and principal authentication.

"""
Credential Store

Two principal kinds (platform admins, POS businesses) authenticate
against separate tables. Neither can sign in with the other's credentials.

SECURITY NOTES:
- Passwords hashed with scrypt (memory-hard), 16-byte random salt per hash
- Stored as "<hash hex>:<salt hex>" in a single column
- Verification re-derives with the stored salt and compares with
  hmac.compare_digest (timing-safe)
- A malformed stored value verifies as False; it never raises
- POS businesses authenticate only while status == "approved"
"""

import hashlib
import hmac
import secrets

from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, ValidationError
from ..extensions import db
from ..models import AdminUser, PosBusiness


# scrypt work factors: N=2**14, r=8, p=1 uses ~16 MiB per hash
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_DKLEN = 64
SALT_BYTES = 16

MIN_PASSWORD_LENGTH = 8


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_DKLEN,
        maxmem=64 * 1024 * 1024,
    )


def hash_password(password: str) -> str:
    """Return "<hash hex>:<salt hex>" for a fresh random salt."""
    salt = secrets.token_bytes(SALT_BYTES)
    derived = _derive(password, salt)
    return f"{derived.hex()}:{salt.hex()}"


def verify_password(password: str, stored: str | None) -> bool:
    """
    Verify password against a stored "<hash>:<salt>" value.

    Returns False for any malformed stored value.
    """
    if not stored or not isinstance(password, str):
        return False

    parts = stored.split(":")
    if len(parts) != 2:
        return False

    try:
        expected = bytes.fromhex(parts[0])
        salt = bytes.fromhex(parts[1])
    except ValueError:
        return False

    if not expected or not salt:
        return False

    try:
        supplied = _derive(password, salt)
    except (ValueError, MemoryError):
        return False

    return hmac.compare_digest(expected, supplied)


def create_admin(username: str, password: str) -> AdminUser:
    """
    Create a platform admin. Admins are only created via CLI/bootstrap.

    Raises:
        ValidationError: blank username or weak password
        ConflictError: username already taken by another admin
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")
    validate_password_strength(password)

    if db.session.query(AdminUser).filter_by(username=username).first():
        raise ConflictError("Admin username already exists")

    admin = AdminUser(username=username, password_hash=hash_password(password))
    db.session.add(admin)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Admin username already exists")
    return admin


def authenticate_admin(username: str, password: str) -> AdminUser | None:
    """Check credentials against admin_users only. Returns None on any failure."""
    admin = db.session.query(AdminUser).filter_by(username=username).first()
    if not admin:
        return None
    if not verify_password(password, admin.password_hash):
        return None
    return admin


def authenticate_pos(username: str, password: str) -> PosBusiness | None:
    """
    Check credentials against pos_businesses only.

    A pending or rejected business is refused even with the right password.
    """
    business = db.session.query(PosBusiness).filter_by(username=username).first()
    if not business:
        return None
    if business.status != "approved":
        return None
    if not verify_password(password, business.password_hash):
        return None
    return business
