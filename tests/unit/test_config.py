"""Unit tests for configuration and settings."""
import pytest

from gymcore.config import DEVELOPMENT_JWT_SECRET, Settings, get_settings, reset_settings_cache


class TestSettings:
    """Test configuration management."""

    def test_get_settings_returns_same_instance(self):
        """Test that get_settings returns cached instance."""
        assert get_settings() is get_settings()

    def test_reset_settings_cache(self):
        """Test that cache can be reset."""
        before = get_settings()
        reset_settings_cache()
        assert get_settings() is not before

    def test_defaults(self):
        """Test the documented defaults."""
        settings = Settings(_env_file=None)

        assert settings.port == 3001
        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_expire_minutes == 24 * 60
        assert settings.database_url.startswith("sqlite")

    def test_frontend_url_is_allowed_origin(self):
        """The deployed frontend joins the CORS allow list once."""
        settings = Settings(_env_file=None, frontend_url="https://gyms.example.com")

        assert "https://gyms.example.com" in settings.allowed_origins
        assert "http://localhost:5173" in settings.allowed_origins

        again = Settings(_env_file=None, frontend_url="http://localhost:5173")
        assert again.allowed_origins.count("http://localhost:5173") == 1

    def test_environment_variables_override(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")

        settings = Settings(_env_file=None)
        assert settings.port == 8080
        assert settings.access_token_expire_minutes == 15


class TestStartupValidation:
    """Production deployments must not run on development secrets."""

    def test_production_requires_secret(self):
        """Test the default secret is refused in production."""
        settings = Settings(_env_file=None, environment="production", jwt_secret=DEVELOPMENT_JWT_SECRET)
        with pytest.raises(RuntimeError):
            settings.validate_for_startup()

    def test_production_with_secret(self):
        """Test an explicit secret passes."""
        Settings(_env_file=None, environment="Production", jwt_secret="s3cr3t-value").validate_for_startup()

    def test_development_allows_default(self):
        """Test development keeps working out of the box."""
        Settings(_env_file=None, environment="development").validate_for_startup()
