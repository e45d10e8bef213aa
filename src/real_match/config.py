"""Configuration loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .models import AccessParams, AnalyticsParams, MatchThresholds, ScoringWeights


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load config from YAML file."""
    path = Path(config_path) if config_path else Path(__file__).parent.parent.parent / "config.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}


def get_scoring_weights(config: dict[str, Any]) -> ScoringWeights:
    """Extract overall-score weights from config."""
    w = config.get("weights", {})
    weights = ScoringWeights(
        financial=float(w.get("financial", 0.30)),
        urgency=float(w.get("urgency", 0.20)),
        location=float(w.get("location", 0.20)),
        motivation=float(w.get("motivation", 0.15)),
        closing=float(w.get("closing", 0.15)),
    )
    if abs(weights.total() - 1.0) > 1e-6:
        raise ConfigError(f"Scoring weights must sum to 1.0, got {weights.total():.4f}")
    return weights


def get_match_thresholds(config: dict[str, Any]) -> MatchThresholds:
    """Extract score thresholds from config."""
    th = config.get("thresholds", {})
    return MatchThresholds(
        min_overall=int(th.get("min_overall", 40)),
        high_probability=int(th.get("high_probability", 85)),
        offer=int(th.get("offer", 70)),
        same_city_location=int(th.get("same_city_location", 100)),
        same_state_location=int(th.get("same_state_location", 60)),
    )


def get_access_params(config: dict[str, Any]) -> AccessParams:
    """Extract per-tier unlock counts from config."""
    ac = config.get("access", {})
    premium = ac.get("premium_unlocked")
    return AccessParams(
        trial_unlocked=int(ac.get("trial_unlocked", 1)),
        expired_unlocked=int(ac.get("expired_unlocked", 1)),
        basic_unlocked=int(ac.get("basic_unlocked", 5)),
        premium_unlocked=int(premium) if premium is not None else None,
    )


def get_analytics_params(config: dict[str, Any]) -> AnalyticsParams:
    """Extract marketplace-health params from config."""
    an = config.get("analytics", {})
    floors = an.get("healthy_floors", {})
    return AnalyticsParams(
        activity_window_days=int(an.get("activity_window_days", 30)),
        liquidity_threshold=float(an.get("liquidity_threshold", 2.0)),
        max_seller_buyer_ratio=float(an.get("max_seller_buyer_ratio", 2.0)),
        healthy_inquiry_rate=int(floors.get("inquiry", 25)),
        healthy_offer_rate=int(floors.get("offer", 15)),
        healthy_close_rate=int(floors.get("close", 10)),
        min_profile_completion=int(an.get("min_profile_completion", 60)),
    )
