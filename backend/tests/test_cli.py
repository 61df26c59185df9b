"""
CLI command tests (flask system/admins/businesses/maintenance groups).
"""

from posadmin.models import AdminUser, PosBusiness


class TestAdminsCommands:

    def test_create_admin(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["admins", "create", "--username", "ops", "--password", "ops-password-1"])
        assert result.exit_code == 0, result.output
        assert "PASS Created admin: ops" in result.output
        assert db_session.query(AdminUser).filter_by(username="ops").count() == 1

    def test_create_duplicate_admin_fails(self, app, admin):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["admins", "create", "--username", "superadmin", "--password", "whatever-123"])
        assert result.exit_code == 1
        assert "FAIL Admin username already exists" in result.output

    def test_create_admin_weak_password_fails(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["admins", "create", "--username", "ops", "--password", "short"])
        assert result.exit_code == 1
        assert "FAIL Password must be at least 8 characters long" in result.output

    def test_list_admins(self, app, admin):
        result = app.test_cli_runner().invoke(args=["admins", "list"])
        assert result.exit_code == 0
        assert "superadmin" in result.output


class TestBusinessesCommands:

    def test_list_with_status(self, app, cafe, pending_business):
        result = app.test_cli_runner().invoke(args=["businesses", "list", "--status", "pending"])
        assert result.exit_code == 0
        assert "newshop" in result.output
        assert "cafe_a" not in result.output

    def test_approve(self, app, db_session, admin, pending_business):
        result = app.test_cli_runner().invoke(
            args=["businesses", "approve", str(pending_business.id), "--admin", "superadmin"]
        )
        assert result.exit_code == 0, result.output
        db_session.expire_all()
        assert db_session.get(PosBusiness, pending_business.id).status == "approved"

    def test_approve_unknown_admin(self, app, pending_business):
        result = app.test_cli_runner().invoke(
            args=["businesses", "approve", str(pending_business.id), "--admin", "nobody"]
        )
        assert result.exit_code == 1
        assert "FAIL Admin 'nobody' not found" in result.output


class TestSystemCommands:

    def test_reset_requires_confirmation(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "reset-db"])
        assert result.exit_code == 1
        assert "FAIL Refusing to reset without --yes" in result.output

    def test_init_db_is_idempotent(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "init-db"])
        assert result.exit_code == 0
        assert "PASS" in result.output


class TestMaintenanceCommands:

    def test_cleanup_sessions(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["maintenance", "cleanup-sessions", "--retention-days", "7"])
        assert result.exit_code == 0
        assert "PASS Deleted 0 expired or revoked sessions" in result.output
