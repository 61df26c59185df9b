"""
Session lifecycle tests.

Verifies:
- Both login flows return a bearer token and principal
- Logout revokes the token
- Sessions expire on idle and absolute timeouts
- Rejecting a business ends its sessions on the next request
"""

from datetime import timedelta

from posadmin.models import SessionToken
from posadmin.services import session_service
from posadmin.services.session_service import AdminPrincipal, PosPrincipal

from conftest import ADMIN_PASSWORD, PASSWORD, auth_headers, get_auth_token


class TestLogin:

    def test_admin_login_returns_token(self, client, admin):
        resp = client.post("/api/sessions/admin", json={
            "username": "superadmin",
            "password": ADMIN_PASSWORD,
        })
        assert resp.status_code == 200
        body = resp.json
        assert len(body["token"]) == 64
        assert body["principal"] == {"role": "admin", "id": admin.id, "username": "superadmin"}
        assert "password_hash" not in body["account"]

    def test_pos_login_returns_token(self, client, cafe):
        resp = client.post("/api/sessions/pos", json={
            "username": "cafe_a",
            "password": PASSWORD,
        })
        assert resp.status_code == 200
        assert resp.json["principal"]["role"] == "pos"
        assert resp.json["principal"]["business_name"] == "Cafe A"
        assert resp.json["account"]["tax_rate"] == "8.5"

    def test_wrong_password_is_401(self, client, cafe):
        resp = client.post("/api/sessions/pos", json={
            "username": "cafe_a",
            "password": "wrong-password",
        })
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid POS credentials or system not approved"

    def test_pending_business_cannot_login(self, client, pending_business):
        resp = client.post("/api/sessions/pos", json={
            "username": "newshop",
            "password": PASSWORD,
        })
        assert resp.status_code == 401

    def test_missing_fields_is_400(self, client, db_session):
        resp = client.post("/api/sessions/admin", json={"username": "superadmin"})
        assert resp.status_code == 400

    def test_token_stored_as_hash(self, client, db_session, cafe):
        token = get_auth_token(client, "pos", "cafe_a", PASSWORD)
        stored = db_session.query(SessionToken).one()
        assert stored.token_hash == session_service.hash_token(token)
        assert stored.token_hash != token


class TestPrincipal:

    def test_principal_for_pos(self, client, cafe, cafe_headers):
        resp = client.get("/api/session/principal", headers=cafe_headers)
        assert resp.status_code == 200
        assert resp.json["principal"]["id"] == cafe.id
        assert resp.json["account"]["business_name"] == "Cafe A"

    def test_principal_for_admin(self, client, admin_headers):
        resp = client.get("/api/session/principal", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["principal"]["role"] == "admin"

    def test_no_token_is_401(self, client, db_session):
        resp = client.get("/api/session/principal")
        assert resp.status_code == 401
        assert resp.json["error"] == "Authentication required"

    def test_garbage_token_is_401(self, client, db_session):
        resp = client.get("/api/session/principal", headers=auth_headers("not-a-real-token"))
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired session"


class TestLogout:

    def test_logout_revokes_token(self, client, cafe_headers):
        resp = client.delete("/api/session", headers=cafe_headers)
        assert resp.status_code == 200

        resp = client.get("/api/session/principal", headers=cafe_headers)
        assert resp.status_code == 401

    def test_logout_twice_is_401(self, client, cafe_headers):
        client.delete("/api/session", headers=cafe_headers)
        resp = client.delete("/api/session", headers=cafe_headers)
        assert resp.status_code == 401

    def test_logout_without_header_is_401(self, client, db_session):
        resp = client.delete("/api/session")
        assert resp.status_code == 401


class TestTimeouts:

    def test_idle_session_is_revoked(self, app, db_session, cafe):
        principal = session_service.principal_for_business(cafe)
        session, token = session_service.create_session(principal)

        session.last_used_at = session.last_used_at - timedelta(hours=3)
        db_session.commit()

        assert session_service.validate_session(token) is None
        db_session.refresh(session)
        assert session.is_revoked is True
        assert session.revoked_reason == "Idle timeout"

    def test_expired_session_is_refused(self, app, db_session, admin):
        principal = session_service.principal_for_admin(admin)
        session, token = session_service.create_session(principal)

        session.expires_at = session.created_at - timedelta(seconds=1)
        db_session.commit()

        assert session_service.validate_session(token) is None

    def test_valid_session_resolves_typed_principal(self, app, db_session, admin, cafe):
        _, admin_token = session_service.create_session(session_service.principal_for_admin(admin))
        _, pos_token = session_service.create_session(session_service.principal_for_business(cafe))

        assert isinstance(session_service.validate_session(admin_token).principal, AdminPrincipal)
        pos_principal = session_service.validate_session(pos_token).principal
        assert isinstance(pos_principal, PosPrincipal)
        assert pos_principal.business_name == "Cafe A"


class TestRevocationOnRejection:

    def test_rejected_business_loses_access_next_request(self, client, cafe, cafe_headers, admin_headers):
        assert client.get("/api/catalog", headers=cafe_headers).status_code == 200

        resp = client.post(f"/api/admin/pos-businesses/{cafe.id}/reject", headers=admin_headers)
        assert resp.status_code == 200

        assert client.get("/api/catalog", headers=cafe_headers).status_code == 401

    def test_status_change_outside_workflow_still_blocks(self, client, db_session, cafe, cafe_headers):
        cafe.status = "rejected"
        db_session.commit()

        assert client.get("/api/catalog", headers=cafe_headers).status_code == 401
        session = db_session.query(SessionToken).one()
        assert session.is_revoked is True
        assert session.revoked_reason == "Business status is rejected"


class TestCleanup:

    def test_cleanup_removes_old_revoked_sessions(self, app, db_session, admin):
        principal = session_service.principal_for_admin(admin)
        old, old_token = session_service.create_session(principal)
        _, fresh_token = session_service.create_session(principal)

        session_service.revoke_session(old_token)
        old.created_at = old.created_at - timedelta(days=40)
        db_session.commit()

        assert session_service.cleanup_expired_sessions(retention_days=30) == 1
        assert session_service.validate_session(fresh_token) is not None
