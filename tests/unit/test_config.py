"""Unit tests for Settings parsing."""

import pytest
from pydantic import ValidationError

from core.config import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("API_SECRET_KEYS", raising=False)
        settings = Settings()
        assert settings.default_ttl_hours == 24
        assert settings.min_ttl_hours == 1
        assert settings.max_ttl_hours == 168
        assert settings.max_content_length == 1_000_000
        assert settings.id_length == 12
        assert settings.id_min_length == 8
        assert settings.id_max_length == 20
        assert settings.api_secret_keys == frozenset()

    @pytest.mark.parametrize("raw,expected", [("true", True), ("false", False), ("1", True)])
    def test_debug_flag_from_env(self, monkeypatch, raw, expected):
        monkeypatch.setenv("DEBUG", raw)
        settings = Settings()
        assert settings.debug is expected
        assert not hasattr(settings, "is_development")

    def test_comma_separated_keys_from_env(self, monkeypatch):
        monkeypatch.setenv("API_SECRET_KEYS", " alpha, beta ,,gamma ")
        settings = Settings()
        assert settings.api_secret_keys == frozenset({"alpha", "beta", "gamma"})

    def test_legacy_single_key_is_merged(self, monkeypatch):
        monkeypatch.setenv("API_SECRET_KEYS", "alpha")
        monkeypatch.setenv("API_SECRET_KEY", "legacy")
        settings = Settings()
        assert settings.accepted_api_keys == frozenset({"alpha", "legacy"})

    def test_default_ttl_outside_bounds_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(default_ttl_hours=200)

    def test_id_length_outside_range_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(id_length=10, id_min_length=11, id_max_length=20)
