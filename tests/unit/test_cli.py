"""Unit tests for the operator provisioning command."""
import pytest

from gymapi.cli import create_operator, main
from gymcore.auth import verify_password
from gymcore.models import Account, RoleEnum


class TestCreateOperator:
    """Test provisioning the first platform operator."""

    def test_creates_operator(self, db_session):
        """Test the account is stored with a hashed password."""
        account = create_operator("Root@Example.com", "longenough", "Root")

        stored = db_session.query(Account).filter(Account.id == account.id).one()
        assert stored.email == "root@example.com"
        assert stored.role == RoleEnum.PLATFORM_OPERATOR
        assert verify_password("longenough", stored.hashed_password)

    def test_short_password(self):
        """Test weak passwords are refused."""
        with pytest.raises(ValueError):
            create_operator("root@example.com", "short", "Root")

    def test_duplicate(self):
        """Test the same email cannot be provisioned twice."""
        create_operator("root@example.com", "longenough", "Root")
        with pytest.raises(ValueError):
            create_operator("ROOT@example.com", "longenough", "Root")

    def test_main_exit_codes(self, capsys):
        """Test the command line reports success and failure."""
        assert main(["root@example.com", "--password", "longenough"]) == 0
        assert "Created platform operator root@example.com" in capsys.readouterr().out

        assert main(["root@example.com", "--password", "longenough"]) == 1
        assert "already exists" in capsys.readouterr().err
