"""Central configuration loader for the AuroraInvest engine.

Settings live in ``configs/settings.yaml`` (override the path with
``$AURORA_SETTINGS``). The engine never reads them implicitly: callers build
a :class:`PortfolioConfig` / :class:`ActiveManagerConfig` value and pass it in.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Project root is the parent of the aurora/ directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


def settings_path() -> Path:
    override = os.getenv("AURORA_SETTINGS")
    if override:
        return Path(override)
    return PROJECT_ROOT / "configs" / "settings.yaml"


def load_settings(path: Path | str | None = None) -> dict:
    """Load settings from YAML; a missing file yields an empty dict."""
    path = Path(path) if path is not None else settings_path()
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _known_fields(cls, section: dict[str, Any] | None) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (section or {}).items() if k in names}


# --- Portfolio action engine thresholds ---
@dataclass(frozen=True)
class PortfolioConfig:
    max_single_position_pct: float = 25.0
    concentration_watch_pct: float = 20.0
    trim_weight_pct: float = 20.0
    sell_weight_pct: float = 25.0
    min_meaningful_weight_pct: float = 3.0
    high_conviction: float = 60.0
    moderate_conviction: float = 50.0
    low_conviction: float = 40.0

    def __post_init__(self) -> None:
        if self.trim_weight_pct > self.sell_weight_pct:
            raise ValueError("trim_weight_pct must not exceed sell_weight_pct")
        if not self.low_conviction <= self.moderate_conviction <= self.high_conviction:
            raise ValueError("conviction thresholds must be ordered low <= moderate <= high")

    @classmethod
    def from_settings(cls, settings: dict | None = None) -> PortfolioConfig:
        settings = load_settings() if settings is None else settings
        return cls(**_known_fields(cls, settings.get("portfolio")))


# --- Active manager recommendation thresholds ---
@dataclass(frozen=True)
class ActiveManagerConfig:
    positive_return_pct: float = 6.0
    negative_return_pct: float = -4.0
    sell_return_pct: float = -8.0
    high_risk_score: float = 8.0
    moderate_risk_score: float = 6.0
    guardrail_hold_weight_pct: float = 20.0
    guardrail_trim_weight_pct: float = 25.0
    default_conviction: float = 50.0
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)

    @classmethod
    def from_settings(cls, settings: dict | None = None) -> ActiveManagerConfig:
        settings = load_settings() if settings is None else settings
        values = _known_fields(cls, settings.get("active_manager"))
        values.pop("portfolio", None)
        return cls(portfolio=PortfolioConfig.from_settings(settings), **values)
