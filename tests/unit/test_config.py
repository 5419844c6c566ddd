"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Default aggregation knobs match the documented defaults
- Property methods parse comma-separated values
- Validation catches invalid configurations

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest
from core.config import Settings, settings, validate_configuration


class TestConfigurationDefaults:
    """Test documented defaults of a fresh Settings instance"""

    def test_request_timeout_default(self):
        """Per-call timeout defaults to 4 seconds"""
        assert Settings().request_timeout == 4.0

    def test_highlight_threshold_default(self):
        """Highlight threshold defaults to 0.5%"""
        assert Settings().highlight_threshold == 0.5

    def test_default_symbol(self):
        """Fallback symbol is BTC"""
        assert Settings().default_symbol.upper() == "BTC"

    def test_app_port_is_valid_integer(self):
        """Verify app port is a valid integer"""
        assert isinstance(settings.app_port, int)
        assert 1 <= settings.app_port <= 65535


class TestListParsing:
    """Test that comma-separated settings are parsed correctly"""

    def test_direct_venues_list(self):
        """Direct venues are lowercased and stripped"""
        config = Settings(direct_access_venues=" Binance , BYBIT ,")
        assert config.direct_venues_list == ["binance", "bybit"]

    def test_direct_venues_can_be_empty(self):
        """Empty string disables the direct path entirely"""
        assert Settings(direct_access_venues="").direct_venues_list == []

    def test_cors_origins_list(self):
        """CORS origins are split on commas"""
        config = Settings(cors_origins="http://a.test, http://b.test")
        assert config.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_tzinfo_resolves(self):
        """Display timezone resolves to a tzinfo"""
        assert Settings(display_timezone="UTC").tzinfo is not None


class TestConfigurationValidation:
    """Test validate_configuration rejects invalid settings"""

    def test_valid_configuration_passes(self):
        """Defaults validate cleanly"""
        validate_configuration(Settings(direct_access_venues="binance,bybit", display_timezone="UTC"))

    @pytest.mark.parametrize("timeout", [0, -1.0, 30.0])
    def test_rejects_out_of_range_timeout(self, timeout):
        """Timeout must be positive and stay under serverless limits"""
        with pytest.raises(ValueError):
            validate_configuration(Settings(request_timeout=timeout, display_timezone="UTC"))

    def test_rejects_negative_threshold(self):
        with pytest.raises(ValueError):
            validate_configuration(Settings(highlight_threshold=-0.1, display_timezone="UTC"))

    def test_rejects_unknown_timezone(self):
        with pytest.raises(ValueError):
            validate_configuration(Settings(display_timezone="Mars/Olympus_Mons"))

    def test_rejects_direct_venue_without_client(self):
        """Only venues with a hand-written REST client may use direct access"""
        with pytest.raises(ValueError, match="okx"):
            validate_configuration(Settings(direct_access_venues="binance,okx", display_timezone="UTC"))

    def test_rejects_non_alphanumeric_default_symbol(self):
        with pytest.raises(ValueError):
            validate_configuration(Settings(default_symbol="BTC/USDT", display_timezone="UTC"))

    def test_rejects_non_ascii_default_symbol(self):
        with pytest.raises(ValueError):
            validate_configuration(Settings(default_symbol="ＢＴＣ", display_timezone="UTC"))

    def test_rejects_invalid_log_level(self):
        with pytest.raises(ValueError):
            validate_configuration(Settings(log_level="LOUD", display_timezone="UTC"))
