"""
Credential store tests.

Verifies:
- scrypt hash format and verification
- Malformed stored values verify as False
- Admin and POS credentials are checked against separate tables
- Unapproved businesses cannot authenticate
"""

import pytest

from posadmin.errors import ConflictError, ValidationError
from posadmin.services.auth_service import (
    PasswordValidationError,
    authenticate_admin,
    authenticate_pos,
    create_admin,
    hash_password,
    validate_password_strength,
    verify_password,
)

from conftest import ADMIN_PASSWORD, PASSWORD


class TestPasswordHashing:

    def test_hash_has_hash_and_salt_parts(self):
        stored = hash_password("correct horse")
        digest, salt = stored.split(":")
        assert len(digest) == 128
        assert len(salt) == 32
        int(digest, 16)
        int(salt, 16)

    def test_same_password_gets_different_salts(self):
        assert hash_password("correct horse") != hash_password("correct horse")

    def test_verify_accepts_correct_password(self):
        stored = hash_password("correct horse")
        assert verify_password("correct horse", stored) is True

    def test_verify_rejects_wrong_password(self):
        stored = hash_password("correct horse")
        assert verify_password("wrong horse", stored) is False

    @pytest.mark.parametrize("stored", [
        None,
        "",
        "no-colon-here",
        "a:b:c",
        "zz:11",
        "abcd:",
        ":abcd",
    ])
    def test_malformed_stored_value_is_false(self, stored):
        assert verify_password("anything", stored) is False

    def test_short_password_rejected(self):
        with pytest.raises(PasswordValidationError):
            validate_password_strength("short")


class TestAuthenticate:

    def test_admin_login_with_admin_credentials(self, admin):
        assert authenticate_admin("superadmin", ADMIN_PASSWORD).id == admin.id

    def test_admin_wrong_password(self, admin):
        assert authenticate_admin("superadmin", "not-the-password") is None

    def test_business_credentials_do_not_work_for_admin(self, cafe):
        assert authenticate_admin("cafe_a", PASSWORD) is None

    def test_admin_credentials_do_not_work_for_pos(self, admin):
        assert authenticate_pos("superadmin", ADMIN_PASSWORD) is None

    def test_approved_business_authenticates(self, cafe):
        assert authenticate_pos("cafe_a", PASSWORD).id == cafe.id

    def test_pending_business_refused(self, pending_business):
        assert authenticate_pos("newshop", PASSWORD) is None

    def test_rejected_business_refused(self, db_session, cafe):
        cafe.status = "rejected"
        db_session.commit()
        assert authenticate_pos("cafe_a", PASSWORD) is None


class TestCreateAdmin:

    def test_duplicate_username_conflicts(self, admin):
        with pytest.raises(ConflictError):
            create_admin("superadmin", "another-password")

    def test_blank_username_rejected(self, db_session):
        with pytest.raises(ValidationError):
            create_admin("   ", "long-enough-password")
