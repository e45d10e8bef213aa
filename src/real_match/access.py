"""Subscription-tier gating and redaction of ranked matches."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable

from .config import get_access_params, load_config
from .models import (
    AccessParams,
    MatchScore,
    Plan,
    Role,
    SocialLink,
    SubscriptionStatus,
    User,
    utcnow,
)
from .repositories import ProfileRepository

_LOCKED_MATCH_FIELDS = (
    "overall_score",
    "financial_score",
    "urgency_score",
    "motivation_score",
    "closing_probability_score",
    "location_score",
)


def _locked_match_dict(match: MatchScore) -> dict[str, Any]:
    """Scores and factors only; ids would name the counterparty."""
    data: dict[str, Any] = {name: getattr(match, name) for name in _LOCKED_MATCH_FIELDS}
    data["key_alignment_factors"] = list(match.key_alignment_factors)
    data["off_platform"] = match.off_platform_seller_id is not None
    return data


@dataclass(frozen=True)
class MatchView:
    """One ranked match as a particular viewer is allowed to see it."""

    rank: int
    match: MatchScore
    locked: bool = False
    counterparty_name: str | None = None
    counterparty_email: str | None = None
    address: str | None = None
    zip_code: str | None = None
    social_links: tuple[SocialLink, ...] = ()
    city: str | None = None
    state: str | None = None
    asking_price: float | None = None
    bedrooms: int | None = None
    property_type: str | None = None
    listing_status: str | None = None

    def redacted(self) -> MatchView:
        """Locked copy with identifying fields removed."""
        return replace(
            self,
            locked=True,
            counterparty_name=None,
            counterparty_email=None,
            address=None,
            zip_code=None,
            social_links=(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "locked": self.locked,
            "match": _locked_match_dict(self.match) if self.locked else self.match.to_dict(),
            "counterparty_name": self.counterparty_name,
            "counterparty_email": self.counterparty_email,
            "address": self.address,
            "zip_code": self.zip_code,
            "social_links": [
                {"platform": s.platform, "username": s.username, "url": s.url}
                for s in self.social_links
            ],
            "city": self.city,
            "state": self.state,
            "asking_price": self.asking_price,
            "bedrooms": self.bedrooms,
            "property_type": self.property_type,
            "listing_status": self.listing_status,
        }


@dataclass
class AccessResult:
    unlocked: list[MatchView] = field(default_factory=list)
    locked: list[MatchView] = field(default_factory=list)

    @property
    def locked_count(self) -> int:
        return len(self.locked)

    @property
    def views(self) -> list[MatchView]:
        return self.unlocked + self.locked


def is_trial_expired(user: User, now: datetime) -> bool:
    """Trial is over once now passes trial_end_date."""
    return user.trial_end_date is not None and now > user.trial_end_date


def trial_days_left(user: User, now: datetime) -> int:
    """Whole days left in the trial, rounded up and floored at zero."""
    if user.trial_end_date is None:
        return 0
    remaining = (user.trial_end_date - now).total_seconds() / 86400
    return max(0, math.ceil(remaining))


class AccessController:
    """
    Decides how many of a viewer's ranked matches are unlocked and strips
    counterparty identity from the rest. Trial expiry is evaluated on every
    call against the injected clock.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        params: AccessParams | None = None,
        config: dict | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.profiles = profiles
        if params is None:
            params = get_access_params(config if config is not None else load_config())
        self.params = params
        self._clock = clock

    def is_trial_expired(self, user: User) -> bool:
        return is_trial_expired(user, self._clock())

    def can_access(self, user: User | None) -> bool:
        """True when the user has live (trial or paid) match access."""
        if user is None:
            return False
        if user.role in (Role.SELLER, Role.OWNER):
            return True
        if user.subscription_status is SubscriptionStatus.ACTIVE:
            return True
        return user.subscription_status is SubscriptionStatus.TRIAL and not self.is_trial_expired(user)

    def unlocked_limit(self, user: User | None) -> int | None:
        """Number of top matches the user may see in full; None means all."""
        if user is None:
            return 0
        if user.role in (Role.SELLER, Role.OWNER):
            return None
        if user.subscription_status is SubscriptionStatus.ACTIVE:
            if user.plan is Plan.PREMIUM:
                return self.params.premium_unlocked
            return self.params.basic_unlocked
        if user.subscription_status is SubscriptionStatus.TRIAL and not self.is_trial_expired(user):
            return self.params.trial_unlocked
        return self.params.expired_unlocked

    def view(self, user_id: str, matches: list[MatchScore]) -> AccessResult:
        """Split ranked matches into unlocked views and redacted locked views."""
        user = self.profiles.get_user(user_id)
        limit = self.unlocked_limit(user)
        viewer_is_seller = user is not None and user.role is Role.SELLER
        result = AccessResult()
        for rank, match in enumerate(matches, 1):
            view = self._resolve(rank, match, viewer_is_seller)
            if limit is None or rank <= limit:
                result.unlocked.append(view)
            else:
                result.locked.append(view.redacted())
        return result

    def visible(self, user_id: str, matches: list[MatchScore]) -> tuple[list[MatchView], int]:
        """Unlocked views plus the number of locked matches."""
        result = self.view(user_id, matches)
        return result.unlocked, result.locked_count

    def _resolve(self, rank: int, match: MatchScore, viewer_is_seller: bool) -> MatchView:
        if viewer_is_seller:
            buyer_user = self.profiles.get_user(match.buyer_id)
            buyer = self.profiles.get_buyer_profile(match.buyer_id)
            loc = buyer.primary_location if buyer else None
            return MatchView(
                rank=rank,
                match=match,
                counterparty_name=buyer_user.name if buyer_user else None,
                counterparty_email=buyer_user.email if buyer_user else None,
                city=loc.city if loc else None,
                state=loc.state if loc else None,
                zip_code=loc.zip_code if loc else None,
            )

        if match.off_platform_seller_id is not None:
            ext = self.profiles.get_off_platform_seller(match.off_platform_seller_id)
            if ext is None:
                return MatchView(rank=rank, match=match)
            return MatchView(
                rank=rank,
                match=match,
                counterparty_name=ext.name,
                counterparty_email=ext.email,
                address=ext.address,
                zip_code=ext.location.zip_code if ext.location else None,
                social_links=ext.social_links,
                city=ext.location.city if ext.location else None,
                state=ext.location.state if ext.location else None,
                asking_price=ext.asking_price,
                bedrooms=ext.bedrooms,
                property_type=ext.property_type.value,
                listing_status=ext.listing_status.value,
            )

        seller_user = self.profiles.get_user(match.seller_id or "")
        seller = self.profiles.get_seller_profile(match.seller_id or "")
        if seller is None:
            return MatchView(
                rank=rank,
                match=match,
                counterparty_name=seller_user.name if seller_user else None,
                counterparty_email=seller_user.email if seller_user else None,
            )
        return MatchView(
            rank=rank,
            match=match,
            counterparty_name=seller_user.name if seller_user else None,
            counterparty_email=seller_user.email if seller_user else None,
            address=seller.address,
            zip_code=seller.location.zip_code if seller.location else None,
            city=seller.location.city if seller.location else None,
            state=seller.location.state if seller.location else None,
            asking_price=seller.asking_price,
            bedrooms=seller.bedrooms,
            property_type=seller.property_type.value,
            listing_status=seller.listing_status.value,
        )
