"""Marketplace-health metrics for the operator dashboard."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Iterable

from .access import is_trial_expired
from .config import get_analytics_params, get_match_thresholds, load_config
from .errors import ValidationError
from .models import (
    AlertSeverity,
    AnalyticsParams,
    BuyerProfile,
    ListingStatus,
    MatchScore,
    MatchSnapshot,
    MatchThresholds,
    OwnerAlert,
    OwnerDashboardMetrics,
    Role,
    SellerProfile,
    SubscriptionStatus,
    User,
    utcnow,
)
from .repositories import MatchRepository, ProfileRepository

INFINITE_RATIO = "∞"
SCALE_RECOMMENDATION = "scale seller marketing"
PAUSE_RECOMMENDATION = "pause seller marketing"


def _pct(part: int, whole: int) -> int:
    """Whole-percent share, rounded half up; 0 for an empty denominator."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


def _is_complete(profile: SellerProfile) -> bool:
    try:
        profile.validate()
    except ValidationError:
        return False
    return True


def dedupe_matches(matches: Iterable[MatchScore]) -> list[MatchScore]:
    """One entry per pair; a pair stored under both buyer and seller keeps the newest."""
    latest: dict[tuple, MatchScore] = {}
    for m in matches:
        seen = latest.get(m.pair_key)
        if seen is None or m.updated_at > seen.updated_at:
            latest[m.pair_key] = m
    return list(latest.values())


def current_matches(snapshots: Iterable[MatchSnapshot]) -> list[MatchScore]:
    """
    Resolve each pair from the most recently computed snapshot of either
    party. A newer snapshot that no longer holds a pair removes it, even if
    the other party's older snapshot still lists it.
    """
    pairs: dict[tuple, MatchScore] = {}
    by_party: dict[str, set[tuple]] = {}
    for snap in sorted(snapshots, key=lambda s: s.computed_at):
        for key in by_party.pop(snap.owner_id, set()):
            pairs.pop(key, None)
        for m in snap.matches:
            pairs[m.pair_key] = m
            for party in (m.buyer_id, m.seller_id):
                if party is not None:
                    by_party.setdefault(party, set()).add(m.pair_key)
    return list(pairs.values())


def liquidity_score(active_pros: int, avg_offers_per_pro: float, active_sellers: int) -> float:
    """(active pros x avg offers per pro) / active sellers; 0.0 with no sellers."""
    if active_sellers <= 0:
        return 0.0
    return (active_pros * avg_offers_per_pro) / active_sellers


def liquidity_recommendation(score: float, threshold: float) -> str:
    return SCALE_RECOMMENDATION if score >= threshold else PAUSE_RECOMMENDATION


def owner_metrics(
    users: list[User],
    buyer_profiles: list[BuyerProfile],
    seller_profiles: list[SellerProfile],
    matches: list[MatchScore],
    params: AnalyticsParams,
    thresholds: MatchThresholds,
    now: datetime,
) -> OwnerDashboardMetrics:
    """Aggregate the whole corpus into dashboard KPIs. Pure; no side effects."""
    window_start = now - timedelta(days=params.activity_window_days)
    users_by_id = {u.user_id: u for u in users}

    def active(user_id: str, profile_updated: datetime | None) -> bool:
        user = users_by_id.get(user_id)
        stamps = [profile_updated]
        if user is not None:
            stamps.append(user.last_active_at)
        return any(ts is not None and ts >= window_start for ts in stamps)

    seller_ids = {u.user_id for u in users if u.role is Role.SELLER}
    seller_ids.update(p.user_id for p in seller_profiles)
    completed = [p for p in seller_profiles if _is_complete(p)]
    active_sellers = {
        p.user_id
        for p in completed
        if p.listing_status is not ListingStatus.SOLD and active(p.user_id, p.updated_at)
    }

    buyer_ids = {u.user_id for u in users if u.is_buyer_side}
    buyer_ids.update(p.user_id for p in buyer_profiles)
    profile_updated = {p.user_id: p.updated_at for p in buyer_profiles}
    pros = set()
    for user in users:
        if not user.is_buyer_side:
            continue
        paying = user.subscription_status is SubscriptionStatus.ACTIVE or (
            user.subscription_status is SubscriptionStatus.TRIAL and not is_trial_expired(user, now)
        )
        if paying and active(user.user_id, profile_updated.get(user.user_id)):
            pros.add(user.user_id)

    unique = dedupe_matches(matches)
    best_by_seller: dict[str, int] = {}
    offers_by_pros = 0
    for m in unique:
        if m.seller_id is not None:
            best_by_seller[m.seller_id] = max(best_by_seller.get(m.seller_id, 0), m.overall_score)
        if m.buyer_id in pros and m.overall_score >= thresholds.offer:
            offers_by_pros += 1

    n_sellers = len(active_sellers)
    n_pros = len(pros)
    with_match = [best_by_seller[s] for s in active_sellers if s in best_by_seller]
    inquiry_rate = _pct(len(with_match), n_sellers)
    offer_rate = _pct(sum(1 for s in with_match if s >= thresholds.offer), n_sellers)
    close_rate = _pct(sum(1 for s in with_match if s >= thresholds.high_probability), n_sellers)

    avg_offers = offers_by_pros / n_pros if n_pros else 0.0
    liquidity = liquidity_score(n_pros, avg_offers, n_sellers)
    ratio: float | str = n_sellers / n_pros if n_pros else INFINITE_RATIO

    registered = len(seller_ids)
    completion = _pct(len(completed), registered) if registered else 100

    metrics = OwnerDashboardMetrics(
        active_sellers=n_sellers,
        active_professional_buyers=n_pros,
        seller_buyer_ratio=ratio,
        total_sellers=registered,
        total_buyers=len(buyer_ids),
        total_matches=len(unique),
        inquiry_rate=inquiry_rate,
        offer_rate=offer_rate,
        close_rate=close_rate,
        avg_offers_per_pro=avg_offers,
        liquidity_score=liquidity,
        liquidity_threshold=params.liquidity_threshold,
        liquidity_recommendation=liquidity_recommendation(liquidity, params.liquidity_threshold),
        profile_completion_rate=completion,
        drop_off_rate=100 - completion,
    )
    metrics.alerts = imbalance_alerts(metrics, params, now)
    return metrics


def imbalance_alerts(
    metrics: OwnerDashboardMetrics,
    params: AnalyticsParams,
    now: datetime,
) -> list[OwnerAlert]:
    """Critical supply/demand alerts first, then funnel and completion warnings."""
    alerts: list[OwnerAlert] = []

    def add(key: str, severity: AlertSeverity, message: str) -> None:
        alerts.append(OwnerAlert(id=f"owner:{key}", severity=severity, message=message, created_at=now))

    if metrics.active_professional_buyers == 0:
        add(
            "no-pros",
            AlertSeverity.CRITICAL,
            "No active professional buyers. Sellers are not being matched to paying demand.",
        )
    elif isinstance(metrics.seller_buyer_ratio, float) and (
        metrics.seller_buyer_ratio > params.max_seller_buyer_ratio
    ):
        add(
            "ratio",
            AlertSeverity.CRITICAL,
            f"Seller:buyer ratio {metrics.seller_buyer_ratio_display}:1 exceeds "
            f"{params.max_seller_buyer_ratio:g}:1. Pause seller acquisition.",
        )

    if metrics.active_sellers > 0:
        funnel = (
            ("inquiry", "Inquiry", metrics.inquiry_rate, params.healthy_inquiry_rate),
            ("offer", "Offer", metrics.offer_rate, params.healthy_offer_rate),
            ("close", "Close", metrics.close_rate, params.healthy_close_rate),
        )
        for key, label, value, floor in funnel:
            if value < floor:
                add(
                    f"{key}-rate",
                    AlertSeverity.WARNING,
                    f"{label} rate {value}% is below the healthy floor of {floor}%.",
                )

    if metrics.profile_completion_rate < params.min_profile_completion:
        add(
            "completion",
            AlertSeverity.WARNING,
            f"Seller profile completion {metrics.profile_completion_rate}% is below "
            f"{params.min_profile_completion}%.",
        )
    return alerts


class MarketplaceAnalytics:
    """Reads the full corpus on demand and computes owner metrics."""

    def __init__(
        self,
        profiles: ProfileRepository,
        matches: MatchRepository,
        params: AnalyticsParams | None = None,
        thresholds: MatchThresholds | None = None,
        config: dict | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.profiles = profiles
        self.matches = matches
        if params is None or thresholds is None:
            cfg = config if config is not None else load_config()
            params = params or get_analytics_params(cfg)
            thresholds = thresholds or get_match_thresholds(cfg)
        self.params = params
        self.thresholds = thresholds
        self._clock = clock

    def owner_metrics(self) -> OwnerDashboardMetrics:
        return owner_metrics(
            users=self.profiles.list_users(),
            buyer_profiles=self.profiles.list_buyer_profiles(),
            seller_profiles=self.profiles.list_seller_profiles(),
            matches=current_matches(self.matches.snapshots()),
            params=self.params,
            thresholds=self.thresholds,
            now=self._clock(),
        )
