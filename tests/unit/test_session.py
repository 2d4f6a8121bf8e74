"""Unit tests for the persisted client session."""
import json

import pytest

from gymclient import SessionContext, SessionStore, Shell, resolve_shell

GYM_ADMIN_LOGIN = {
    "token": "abc.def.ghi",
    "user": {"id": 4, "email": "admin@fitzone.com", "name": "Admin", "role": "gym_admin", "gymId": 2},
}


class TestSessionContext:
    """Test building a session from a login body."""

    def test_from_login_payload(self):
        """Test the gym admin tenant is taken from the user."""
        context = SessionContext.from_payload(GYM_ADMIN_LOGIN)
        assert context.role == "gym_admin"
        assert context.tenant_id == 2
        assert context.to_payload() == GYM_ADMIN_LOGIN

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {"user": GYM_ADMIN_LOGIN["user"]},
            {"token": "", "user": GYM_ADMIN_LOGIN["user"]},
            {"token": "t", "user": {"role": "janitor"}},
            {"token": "t", "user": {"role": "gym_admin"}},
        ],
    )
    def test_malformed_payloads(self, payload):
        """Test malformed sessions are refused."""
        with pytest.raises(ValueError):
            SessionContext.from_payload(payload)


class TestResolveShell:
    """The role picks the console."""

    def test_logged_out(self):
        assert resolve_shell(None) is Shell.MARKETPLACE

    def test_roles(self):
        operator = SessionContext(role="platform_operator", token="t")
        admin = SessionContext.from_payload(GYM_ADMIN_LOGIN)
        member = SessionContext(role="member", token="t")

        assert resolve_shell(operator) is Shell.PLATFORM_ADMIN
        assert resolve_shell(admin) is Shell.GYM_ADMIN
        assert resolve_shell(member) is Shell.MARKETPLACE


class TestSessionStore:
    """Test the session file."""

    def test_save_and_load(self, tmp_path):
        """Test a saved session is restored."""
        store = SessionStore(tmp_path / "nested" / "session.json")
        store.save(SessionContext.from_payload(GYM_ADMIN_LOGIN))

        restored = store.load()
        assert restored == SessionContext.from_payload(GYM_ADMIN_LOGIN)
        assert restored.user["email"] == "admin@fitzone.com"

    def test_missing_file(self, tmp_path):
        """Test no file means logged out."""
        assert SessionStore(tmp_path / "session.json").load() is None

    @pytest.mark.parametrize("content", ["{not json", json.dumps({"token": "t", "user": {"role": "gym_admin"}})])
    def test_malformed_file_is_cleared(self, tmp_path, content):
        """Test an unreadable session is removed."""
        path = tmp_path / "session.json"
        path.write_text(content, encoding="utf-8")

        assert SessionStore(path).load() is None
        assert not path.exists()

    def test_clear_without_file(self, tmp_path):
        """Test clearing twice is harmless."""
        store = SessionStore(tmp_path / "session.json")
        store.clear()
        store.clear()
