"""High-probability match alerts."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List

from .config import get_match_thresholds, load_config
from .models import MatchAlert, MatchScore, utcnow
from .repositories import AlertRepository

logger = logging.getLogger(__name__)


def alert_message(match: MatchScore) -> str:
    msg = f"High-probability match ({match.overall_score}%)"
    if match.key_alignment_factors:
        msg += f": {match.key_alignment_factors[0]}"
    return msg


class AlertGenerator:
    """
    Emits one alert per pair the first time its overall score reaches the
    high-probability threshold. The prior committed snapshot decides what
    counts as a crossing, so a pair that stays above it stays quiet.
    """

    def __init__(
        self,
        alerts: AlertRepository,
        threshold: int | None = None,
        config: dict | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.alerts = alerts
        if threshold is None:
            cfg = config if config is not None else load_config()
            threshold = get_match_thresholds(cfg).high_probability
        self.threshold = threshold
        self._clock = clock

    def on_recompute(
        self,
        user_id: str,
        previous: List[MatchScore],
        current: List[MatchScore],
    ) -> List[MatchAlert]:
        """Store and return alerts for pairs that just crossed the threshold."""
        before = {m.pair_key: m.overall_score for m in previous}
        now = self._clock()
        fresh: list[MatchAlert] = []
        for m in current:
            if m.overall_score < self.threshold:
                continue
            if before.get(m.pair_key, 0) >= self.threshold:
                continue
            fresh.append(
                MatchAlert(
                    id=f"{user_id}:{m.id}:{now:%Y%m%dT%H%M%S%f}",
                    user_id=user_id,
                    buyer_id=m.buyer_id,
                    counterparty_id=m.counterparty_id,
                    match_id=m.id,
                    overall_score=m.overall_score,
                    message=alert_message(m),
                    created_at=now,
                )
            )
        if fresh:
            self.alerts.add_alerts(fresh)
            logger.info("Emitted %d match alert(s) for %s", len(fresh), user_id)
        return fresh

    def unread(self, user_id: str) -> List[MatchAlert]:
        return [a for a in self.alerts.list_alerts(user_id) if not a.read]

    def mark_read(self, alert_id: str) -> MatchAlert | None:
        return self.alerts.mark_read(alert_id)
