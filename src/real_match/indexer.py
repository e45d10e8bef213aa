"""Match enumeration, ranking and snapshot replacement per user."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Generic, Iterable, List, TypeVar

from .errors import InvariantViolation, ValidationError
from .models import (
    BuyerProfile,
    Candidate,
    ListingStatus,
    Location,
    MatchScore,
    Role,
    utcnow,
)
from .repositories import MatchRepository, ProfileRepository
from .scoring import ScoringEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RecomputeResult:
    """Outcome of one recompute, with diagnostic counts."""

    user_id: str
    matches: list[MatchScore] = field(default_factory=list)
    previous: list[MatchScore] = field(default_factory=list)
    candidates: int = 0
    skipped_invalid: int = 0
    rejected: int = 0


class LocationIndex(Generic[T]):
    """
    Items bucketed by state, so a buyer only scores candidates that can
    overlap one of their preferred locations. Catalog order is preserved.
    """

    def __init__(self, items: Iterable[T], locate: Callable[[T], Location | None]) -> None:
        self._by_state: dict[str, list[tuple[int, T]]] = {}
        self.size = 0
        for pos, item in enumerate(items):
            self.size += 1
            loc = locate(item)
            if loc is None or not loc.state_key:
                continue
            self._by_state.setdefault(loc.state_key, []).append((pos, item))

    def lookup(self, locations: Iterable[Location]) -> list[T]:
        """Items in any state named by ``locations``, in catalog order."""
        states = {loc.state_key for loc in locations if loc.state_key}
        hits = [pair for st in states for pair in self._by_state.get(st, [])]
        hits.sort(key=lambda pair: pair[0])
        return [item for _, item in hits]


def rank_matches(matches: List[MatchScore]) -> List[MatchScore]:
    """Presentation order: overall, closing probability, urgency (all desc), then input order."""
    return sorted(
        matches,
        key=lambda m: (-m.overall_score, -m.closing_probability_score, -m.urgency_score),
    )


def carry_timestamps(
    previous: List[MatchScore],
    current: List[MatchScore],
    now: datetime,
) -> List[MatchScore]:
    """Keep created_at for known pairs; bump updated_at only when scores changed."""
    prev_by_key = {m.pair_key: m for m in previous}
    result = []
    for m in current:
        old = prev_by_key.get(m.pair_key)
        if old is None:
            result.append(m.with_timestamps(now, now))
        elif old.same_scores(m):
            result.append(m.with_timestamps(old.created_at, old.updated_at))
        else:
            result.append(m.with_timestamps(old.created_at, now))
    return result


def _wants_type(buyer: BuyerProfile, candidate: Candidate) -> bool:
    return not buyer.property_types or candidate.property_type in buyer.property_types


def _shares_state(buyer: BuyerProfile, location: Location | None) -> bool:
    if location is None:
        return False
    return any(location.same_state(p) for p in buyer.location_preferences)


class MatchIndexer:
    """
    Recomputes a user's ranked match set from current profile state and
    atomically replaces the stored snapshot. Deterministic and idempotent.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        matches: MatchRepository,
        engine: ScoringEngine | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.profiles = profiles
        self.matches = matches
        self.engine = engine or ScoringEngine()
        self._clock = clock
        self._index_lock = threading.Lock()
        self._index: tuple[int, LocationIndex] | None = None

    def recompute(self, user_id: str) -> List[MatchScore]:
        """Recompute and store the user's matches; returns the ranked set."""
        return self.recompute_with_stats(user_id).matches

    def recompute_with_stats(self, user_id: str) -> RecomputeResult:
        result = RecomputeResult(user_id=user_id)
        result.previous = self.matches.get_matches(user_id)
        now = self._clock()

        role = self._role_for(user_id)
        if role in (Role.BUYER, Role.INVESTOR):
            scored = self._score_for_buyer(user_id, result, now)
        elif role is Role.SELLER:
            scored = self._score_for_seller(user_id, result, now)
        else:
            logger.debug("No matchable profile for %s", user_id)
            return result

        result.matches = carry_timestamps(result.previous, rank_matches(scored), now)
        self.matches.replace_matches(user_id, result.matches, computed_at=now)

        if result.skipped_invalid:
            logger.warning(
                "Recompute %s: skipped %d invalid profile(s)", user_id, result.skipped_invalid
            )
        logger.info(
            "Recompute %s: %d candidates, %d matches", user_id, result.candidates, len(result.matches)
        )
        return result

    def off_platform_index(self) -> LocationIndex:
        """State index over the off-platform catalog, rebuilt when the catalog changes."""
        version = self.profiles.catalog_version()
        with self._index_lock:
            if self._index is None or self._index[0] != version:
                catalog = self.profiles.list_off_platform_sellers()
                self._index = (version, LocationIndex(catalog, lambda s: s.location))
                logger.debug("Indexed %d off-platform listings (v%d)", len(catalog), version)
            return self._index[1]

    def _role_for(self, user_id: str) -> Role | None:
        user = self.profiles.get_user(user_id)
        if user is not None:
            return user.role
        if self.profiles.get_buyer_profile(user_id) is not None:
            return Role.BUYER
        if self.profiles.get_seller_profile(user_id) is not None:
            return Role.SELLER
        return None

    def _score_for_buyer(self, user_id: str, result: RecomputeResult, now: datetime) -> list[MatchScore]:
        buyer = self.profiles.get_buyer_profile(user_id)
        if buyer is None:
            return []
        try:
            buyer.validate()
        except ValidationError as e:
            result.skipped_invalid += 1
            logger.warning("Buyer profile unusable: %s", e)
            return []

        candidates: list[Candidate] = [
            s for s in self.profiles.list_seller_profiles() if s.user_id != buyer.user_id
        ]
        candidates.extend(self.off_platform_index().lookup(buyer.location_preferences))

        scored = []
        for candidate in candidates:
            if candidate.listing_status is ListingStatus.SOLD or not _wants_type(buyer, candidate):
                continue
            try:
                candidate.validate()
            except ValidationError as e:
                result.skipped_invalid += 1
                logger.debug("Skipping candidate: %s", e)
                continue
            result.candidates += 1
            match = self._score(buyer, candidate, result, now)
            if match is not None:
                scored.append(match)
        return scored

    def _score_for_seller(self, user_id: str, result: RecomputeResult, now: datetime) -> list[MatchScore]:
        seller = self.profiles.get_seller_profile(user_id)
        if seller is None:
            return []
        try:
            seller.validate()
        except ValidationError as e:
            result.skipped_invalid += 1
            logger.warning("Seller profile unusable: %s", e)
            return []
        if seller.listing_status is ListingStatus.SOLD:
            return []

        scored = []
        for buyer in self.profiles.list_buyer_profiles():
            if buyer.user_id == seller.user_id:
                continue
            try:
                buyer.validate()
            except ValidationError as e:
                result.skipped_invalid += 1
                logger.debug("Skipping buyer: %s", e)
                continue
            if not _wants_type(buyer, seller) or not _shares_state(buyer, seller.location):
                continue
            result.candidates += 1
            match = self._score(buyer, seller, result, now)
            if match is not None:
                scored.append(match)
        return scored

    def _score(
        self,
        buyer: BuyerProfile,
        candidate: Candidate,
        result: RecomputeResult,
        now: datetime,
    ) -> MatchScore | None:
        try:
            return self.engine.score(buyer, candidate, now=now)
        except InvariantViolation as e:
            result.rejected += 1
            logger.error("Rejected score for %s/%s: %s", buyer.user_id, candidate.candidate_id, e)
            return None
