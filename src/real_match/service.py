"""In-process matchmaking API for dashboards and the CLI."""

from __future__ import annotations

import logging
import threading
import weakref
from datetime import datetime
from typing import Callable

from .access import AccessController, AccessResult, trial_days_left
from .alerts import AlertGenerator
from .analytics import MarketplaceAnalytics
from .config import (
    get_access_params,
    get_analytics_params,
    get_match_thresholds,
    get_scoring_weights,
    load_config,
)
from .indexer import MatchIndexer, RecomputeResult
from .models import (
    BuyerProfile,
    MatchAlert,
    MatchScore,
    OwnerDashboardMetrics,
    SellerProfile,
    SubscriptionStatus,
    utcnow,
)
from .repositories import AlertRepository, MatchRepository, ProfileRepository
from .scoring import ScoringEngine

logger = logging.getLogger(__name__)


class MatchmakingService:
    """
    Wires the scoring engine, indexer, access gate, alerts and analytics over
    injected repositories. Recompute and the alert diff for one user run
    under that user's lock, so the diff always sees the prior committed set.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        matches: MatchRepository,
        alerts: AlertRepository,
        config: dict | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        cfg = config if config is not None else load_config()
        thresholds = get_match_thresholds(cfg)
        self.profiles = profiles
        self.matches = matches
        self.clock = clock
        self.engine = ScoringEngine(weights=get_scoring_weights(cfg), thresholds=thresholds)
        self.indexer = MatchIndexer(profiles, matches, engine=self.engine, clock=clock)
        self.access = AccessController(profiles, params=get_access_params(cfg), clock=clock)
        self.alert_generator = AlertGenerator(alerts, threshold=thresholds.high_probability, clock=clock)
        self.analytics = MarketplaceAnalytics(
            profiles,
            matches,
            params=get_analytics_params(cfg),
            thresholds=thresholds,
            clock=clock,
        )
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        """Lock shared by concurrent callers; dropped once none holds it."""
        with self._locks_guard:
            return self._locks.setdefault(user_id, threading.Lock())

    # commands

    def compute_matches(self, user_id: str) -> list[MatchScore]:
        """Recompute, store and alert on the user's ranked matches."""
        return self.compute_matches_with_stats(user_id).matches

    def compute_matches_with_stats(self, user_id: str) -> RecomputeResult:
        with self._user_lock(user_id):
            result = self.indexer.recompute_with_stats(user_id)
            self.alert_generator.on_recompute(user_id, result.previous, result.matches)
        return result

    def compute_all(self) -> dict[str, int]:
        """Recompute every user with a profile; returns match counts by user."""
        user_ids = {u.user_id for u in self.profiles.list_users()}
        user_ids.update(p.user_id for p in self.profiles.list_buyer_profiles())
        user_ids.update(p.user_id for p in self.profiles.list_seller_profiles())
        counts = {}
        for user_id in sorted(user_ids):
            counts[user_id] = len(self.compute_matches(user_id))
        logger.info("Recomputed %d user(s)", len(counts))
        return counts

    def save_buyer_profile(self, profile: BuyerProfile) -> list[MatchScore]:
        """Replace the buyer's profile and recompute their matches."""
        self.profiles.save_buyer_profile(profile)
        return self.compute_matches(profile.user_id)

    def save_seller_profile(self, profile: SellerProfile) -> list[MatchScore]:
        """Replace the seller's profile and recompute their matches."""
        self.profiles.save_seller_profile(profile)
        return self.compute_matches(profile.user_id)

    # queries

    def get_matches_for_user(self, user_id: str) -> list[MatchScore]:
        return self.matches.get_matches(user_id)

    def get_visible_matches(self, user_id: str) -> AccessResult:
        return self.access.view(user_id, self.matches.get_matches(user_id))

    def can_access_matches(self, user_id: str) -> bool:
        return self.access.can_access(self.profiles.get_user(user_id))

    def is_trial_expired(self, user_id: str) -> bool:
        user = self.profiles.get_user(user_id)
        return user is not None and self.access.is_trial_expired(user)

    def trial_days_left(self, user_id: str) -> int:
        """Days left for a user still on trial; 0 otherwise."""
        user = self.profiles.get_user(user_id)
        if user is None or user.subscription_status is not SubscriptionStatus.TRIAL:
            return 0
        return trial_days_left(user, self.clock())

    def get_unread_alerts(self, user_id: str) -> list[MatchAlert]:
        return self.alert_generator.unread(user_id)

    def mark_alert_read(self, alert_id: str) -> MatchAlert | None:
        return self.alert_generator.mark_read(alert_id)

    def get_owner_dashboard_metrics(self) -> OwnerDashboardMetrics:
        return self.analytics.owner_metrics()
