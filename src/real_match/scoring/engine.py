"""Compatibility scoring engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from ..config import get_match_thresholds, get_scoring_weights, load_config
from ..models import (
    BuyerProfile,
    Candidate,
    MatchScore,
    MatchThresholds,
    ScoringWeights,
    utcnow,
)
from .factors import FactorContext, key_alignment_factors
from .tables import (
    FLEXIBILITY_BONUS,
    MOTIVATION_BASE,
    financing_adjustment,
    renovation_penalty,
)

BOTH_URGENT_LEVEL = 7
BOTH_URGENT_BONUS = 10
URGENCY_GAP_PENALTY = 8
OVER_BUDGET_SLOPE = 150
MOTIVATION_URGENCY_MULTIPLIER = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(min(high, max(low, value)))


def match_id(buyer_id: str, candidate: Candidate) -> str:
    """Stable id for a buyer/candidate pair."""
    kind = "op" if candidate.is_off_platform else "seller"
    return f"{buyer_id}:{kind}:{candidate.candidate_id}"


@dataclass(frozen=True)
class ScoreBreakdown:
    """All sub-scores for a pair, before the visibility floor is applied."""

    location: int
    financial: int
    urgency: int
    motivation: int
    closing_probability: int
    overall: int
    factors: tuple[str, ...]


class ScoringEngine:
    """
    Pure buyer/candidate compatibility scorer.
    Location is a hard filter (city = full credit, state = partial credit);
    pairs below the minimum overall score are dropped.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        thresholds: MatchThresholds | None = None,
        config: dict | None = None,
    ) -> None:
        cfg = config if config is not None else load_config()
        self.weights = weights or get_scoring_weights(cfg)
        self.thresholds = thresholds or get_match_thresholds(cfg)

    def score(
        self,
        buyer: BuyerProfile,
        candidate: Candidate,
        now: datetime | None = None,
    ) -> MatchScore | None:
        """Score a pair. Returns None when excluded by location or the score floor."""
        b = self.breakdown(buyer, candidate)
        if b is None or b.overall < self.thresholds.min_overall:
            return None
        ts = now or utcnow()
        return MatchScore(
            id=match_id(buyer.user_id, candidate),
            buyer_id=buyer.user_id,
            seller_id=None if candidate.is_off_platform else candidate.candidate_id,
            off_platform_seller_id=candidate.candidate_id if candidate.is_off_platform else None,
            overall_score=b.overall,
            financial_score=b.financial,
            urgency_score=b.urgency,
            motivation_score=b.motivation,
            closing_probability_score=b.closing_probability,
            location_score=b.location,
            key_alignment_factors=b.factors,
            created_at=ts,
            updated_at=ts,
        )

    def breakdown(self, buyer: BuyerProfile, candidate: Candidate) -> ScoreBreakdown | None:
        """Compute every sub-score; None when locations don't overlap."""
        location = self.location_score(buyer, candidate)
        if location is None:
            return None
        financial = self.financial_score(buyer, candidate)
        urgency = self.urgency_score(buyer, candidate)
        motivation = self.motivation_score(candidate)
        penalty = renovation_penalty(buyer.renovation_tolerance, candidate.property_condition)
        closing = _clamp(
            _round_half_up(0.4 * financial + 0.3 * urgency + 0.3 * motivation) - penalty
        )
        w = self.weights
        overall = _clamp(
            _round_half_up(
                w.financial * financial
                + w.urgency * urgency
                + w.location * location
                + w.motivation * motivation
                + w.closing * closing
            )
        )
        factors = key_alignment_factors(
            FactorContext(
                buyer=buyer,
                candidate=candidate,
                location_score=location,
                financial_score=financial,
                urgency_score=urgency,
                motivation_score=motivation,
                closing_probability_score=closing,
                renovation_penalty=penalty,
            )
        )
        return ScoreBreakdown(
            location=location,
            financial=financial,
            urgency=urgency,
            motivation=motivation,
            closing_probability=closing,
            overall=overall,
            factors=factors,
        )

    def location_score(self, buyer: BuyerProfile, candidate: Candidate) -> int | None:
        """Full credit on a city+state hit, partial on state only, else excluded."""
        loc = candidate.location
        if loc is None:
            return None
        prefs = buyer.location_preferences
        if any(loc.same_city(p) for p in prefs):
            return self.thresholds.same_city_location
        if any(loc.same_state(p) for p in prefs):
            return self.thresholds.same_state_location
        return None

    def financial_score(self, buyer: BuyerProfile, candidate: Candidate) -> int:
        """Budget fit, penalized proportionally above budget_max, then financing fit."""
        price = candidate.asking_price or 0
        budget_max = buyer.budget_max or 0
        base = 100.0
        if budget_max > 0 and price > budget_max:
            base -= min(100.0, (price - budget_max) / budget_max * OVER_BUDGET_SLOPE)
        adj = financing_adjustment(
            buyer.financing_method,
            candidate.price_flexibility,
            candidate.property_condition,
        )
        return _clamp(_round_half_up(base + adj))

    def urgency_score(self, buyer: BuyerProfile, candidate: Candidate) -> int:
        gap = abs(buyer.purchase_urgency - candidate.urgency_level)
        score = 100 - gap * URGENCY_GAP_PENALTY
        if buyer.purchase_urgency >= BOTH_URGENT_LEVEL and candidate.urgency_level >= BOTH_URGENT_LEVEL:
            score += BOTH_URGENT_BONUS
        return _clamp(score)

    def motivation_score(self, candidate: Candidate) -> int:
        score = (
            MOTIVATION_BASE[candidate.selling_motivation]
            + candidate.urgency_level * MOTIVATION_URGENCY_MULTIPLIER
            + FLEXIBILITY_BONUS[candidate.price_flexibility]
        )
        return _clamp(score)
