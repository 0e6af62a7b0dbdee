"""Tests for aurora.config and aurora.utils.logger."""

import logging

import pytest
import yaml

from aurora.config import (
    PROJECT_ROOT,
    ActiveManagerConfig,
    PortfolioConfig,
    load_settings,
    settings_path,
)
from aurora.utils.logger import setup_logger


class TestSettings:

    def test_default_path_points_at_configs(self, monkeypatch):
        monkeypatch.delenv("AURORA_SETTINGS", raising=False)
        assert settings_path() == PROJECT_ROOT / "configs" / "settings.yaml"

    def test_env_override(self, monkeypatch, tmp_path):
        custom = tmp_path / "custom.yaml"
        monkeypatch.setenv("AURORA_SETTINGS", str(custom))
        assert settings_path() == custom

    def test_missing_file_is_empty(self, tmp_path):
        assert load_settings(tmp_path / "absent.yaml") == {}

    def test_shipped_settings_match_defaults(self):
        settings = load_settings(PROJECT_ROOT / "configs" / "settings.yaml")
        assert ActiveManagerConfig.from_settings(settings) == ActiveManagerConfig()
        assert settings["pipeline"]["max_workers"] == 4


class TestConfigObjects:

    def test_from_yaml_overrides(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "portfolio": {"sell_weight_pct": 30, "trim_weight_pct": 22, "unknown_key": 1},
                    "active_manager": {"high_risk_score": 7, "portfolio": "ignored"},
                }
            )
        )
        config = ActiveManagerConfig.from_settings(load_settings(path))
        assert config.high_risk_score == 7
        assert config.portfolio.sell_weight_pct == 30
        assert config.portfolio.trim_weight_pct == 22
        assert config.positive_return_pct == 6.0

    def test_empty_settings_give_defaults(self):
        assert PortfolioConfig.from_settings({}) == PortfolioConfig()

    def test_trim_above_sell_rejected(self):
        with pytest.raises(ValueError, match="trim_weight_pct"):
            PortfolioConfig(trim_weight_pct=30, sell_weight_pct=25)

    def test_conviction_order_rejected(self):
        with pytest.raises(ValueError, match="conviction"):
            PortfolioConfig(low_conviction=70)


class TestLogger:

    def test_namespaced_under_aurora(self):
        assert setup_logger("valuation").name == "aurora.valuation"
        assert setup_logger("aurora.custom").name == "aurora.custom"

    def test_no_duplicate_handlers(self):
        first = setup_logger("dup_check")
        second = setup_logger("dup_check")
        assert first is second
        assert len(second.handlers) == 1

    def test_explicit_level(self):
        assert setup_logger("quiet", level="warning").level == logging.WARNING
