"""Key alignment factors: short, human-readable reasons a pair matched."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..models import (
    BuyerProfile,
    Candidate,
    FinancingMethod,
    InvestmentStrategy,
    PriceFlexibility,
    PropertyType,
)
from .tables import REHAB_CONDITIONS

MAX_FACTORS = 5


@dataclass(frozen=True)
class FactorContext:
    """Everything a factor rule may look at."""

    buyer: BuyerProfile
    candidate: Candidate
    location_score: int
    financial_score: int
    urgency_score: int
    motivation_score: int
    closing_probability_score: int
    renovation_penalty: int

    @property
    def within_budget(self) -> bool:
        price = self.candidate.asking_price or 0
        return (self.buyer.budget_min or 0) <= price <= (self.buyer.budget_max or 0)

    @property
    def below_budget(self) -> bool:
        return (self.candidate.asking_price or 0) < (self.buyer.budget_min or 0)

    @property
    def strategy(self) -> InvestmentStrategy | None:
        if not self.buyer.is_investor or self.buyer.investment_criteria is None:
            return None
        return self.buyer.investment_criteria.strategy


def _label(value: str) -> str:
    return value.replace("_", " ")


def _preferred_location(ctx: FactorContext) -> str:
    loc = ctx.candidate.location
    return f"Preferred location ({loc.city}, {loc.state})" if loc else "Preferred location"


AlignmentRule = tuple[Callable[[FactorContext], bool], Callable[[FactorContext], str]]

# Priority order matters: only the first MAX_FACTORS hits are kept.
ALIGNMENT_RULES: list[AlignmentRule] = [
    (
        lambda c: c.buyer.financing_method is FinancingMethod.CASH and c.financial_score >= 90,
        lambda c: "Cash buyer: fast close",
    ),
    (
        lambda c: c.motivation_score >= 80,
        lambda c: f"Seller highly motivated ({_label(c.candidate.selling_motivation.value)})",
    ),
    (
        lambda c: c.buyer.purchase_urgency >= 7 and c.candidate.urgency_level >= 7,
        lambda c: "Both ready to transact now",
    ),
    (lambda c: c.within_budget, lambda c: "Within budget range"),
    (lambda c: c.below_budget, lambda c: "Priced below budget"),
    (lambda c: c.location_score >= 100, _preferred_location),
    (
        lambda c: c.candidate.price_flexibility
        in (PriceFlexibility.MODERATE, PriceFlexibility.VERY_FLEXIBLE),
        lambda c: "Seller open to negotiation",
    ),
    (
        lambda c: c.buyer.financing_method is FinancingMethod.HARD_MONEY
        and c.candidate.property_condition in REHAB_CONDITIONS,
        lambda c: "Rehab financing fit",
    ),
    (
        lambda c: c.strategy is InvestmentStrategy.FLIP
        and c.candidate.property_condition in REHAB_CONDITIONS,
        lambda c: "Flip opportunity",
    ),
    (
        lambda c: c.strategy is InvestmentStrategy.RENTAL
        and c.candidate.property_type is PropertyType.MULTI_FAMILY,
        lambda c: "Rental income potential",
    ),
    (
        lambda c: c.renovation_penalty == 0 and c.candidate.property_condition in REHAB_CONDITIONS,
        lambda c: "Renovation tolerance fits condition",
    ),
    (
        lambda c: bool(c.buyer.property_types) and c.candidate.property_type in c.buyer.property_types,
        lambda c: f"Preferred property type ({_label(c.candidate.property_type.value)})",
    ),
    (lambda c: c.closing_probability_score >= 80, lambda c: "High closing probability"),
]


def key_alignment_factors(ctx: FactorContext, limit: int = MAX_FACTORS) -> tuple[str, ...]:
    """Evaluate ALIGNMENT_RULES in order and keep the first ``limit`` hits."""
    factors: list[str] = []
    for applies, describe in ALIGNMENT_RULES:
        if applies(ctx):
            factors.append(describe(ctx))
            if len(factors) >= limit:
                break
    return tuple(factors)
