"""Compatibility scoring between buyers and seller-like candidates."""

from .engine import ScoreBreakdown, ScoringEngine, match_id
from .factors import ALIGNMENT_RULES, FactorContext, key_alignment_factors
from .tables import financing_adjustment, renovation_penalty

__all__ = [
    "ScoringEngine",
    "ScoreBreakdown",
    "match_id",
    "ALIGNMENT_RULES",
    "FactorContext",
    "key_alignment_factors",
    "financing_adjustment",
    "renovation_penalty",
]
