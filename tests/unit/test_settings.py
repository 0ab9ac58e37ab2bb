"""Unit tests for Settings."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import Settings
from src.core.constants import SUPPORTED_CHAINS


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.supported_chains == ["arbitrum", "base", "optimism", "polygon"]
        assert settings.supported_chains == list(SUPPORTED_CHAINS)
        assert settings.platform_fee == Decimal("0.1")
        assert settings.pool_weighting == "fixed"
        assert settings.default_borrow_apr == Decimal("5.2")

    def test_chains_from_env(self, monkeypatch):
        monkeypatch.setenv("SUPPORTED_CHAINS", "Arbitrum, base ,")
        settings = Settings(_env_file=None)

        assert settings.supported_chains == ["arbitrum", "base"]

    def test_fee_fraction(self, monkeypatch):
        monkeypatch.setenv("PLATFORM_FEE_PERCENT", "12.5")
        assert Settings(_env_file=None).platform_fee == Decimal("0.125")

    def test_cache_dir(self, tmp_path):
        settings = Settings(cache_dir=str(tmp_path / "c"), _env_file=None)

        assert isinstance(settings.cache_dir, Path)
        assert settings.ensure_cache_dir().exists()

    def test_invalid_weighting(self):
        with pytest.raises(ValidationError):
            Settings(pool_weighting="tvl", _env_file=None)
