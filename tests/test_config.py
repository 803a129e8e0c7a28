"""
Tests for environment-based configuration
"""

import bank_portal.config
from bank_portal.config import PortalConfig, get_config, reload_config


class TestPortalConfig:
    """Test settings defaults and environment overrides"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BANK_PORTAL_BACKEND", raising=False)
        settings = PortalConfig(_env_file=None)

        assert settings.backend == "memory"
        assert settings.statement_months == 3
        assert settings.transfer_failure_rate == 0.3
        assert settings.jwt_audience == "authenticated"
        assert settings.forecast_months == 12
        assert settings.bank_name == "Lovable Bank Inc."

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("BANK_PORTAL_BACKEND", "http")
        monkeypatch.setenv("BANK_PORTAL_BACKEND_URL", "https://example.supabase.co")
        monkeypatch.setenv("BANK_PORTAL_TRANSFER_FAILURE_RATE", "0")
        monkeypatch.setenv("bank_portal_auth_enabled", "false")

        settings = PortalConfig(_env_file=None)

        assert settings.backend == "http"
        assert settings.backend_url == "https://example.supabase.co"
        assert settings.transfer_failure_rate == 0.0
        assert settings.auth_enabled is False

    def test_reload_replaces_global(self, monkeypatch):
        original = get_config()
        monkeypatch.setenv("BANK_PORTAL_STATEMENT_MONTHS", "6")
        try:
            reloaded = reload_config()
            assert reloaded.statement_months == 6
            assert get_config() is reloaded
        finally:
            bank_portal.config.config = original
