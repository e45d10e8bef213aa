"""Compatibility tables used by the scoring engine.

Every table is keyed on the full enum domain so a new enum member fails
the completeness tests instead of silently scoring as zero.
"""

from __future__ import annotations

from ..models import (
    FinancingMethod,
    PriceFlexibility,
    PropertyCondition,
    RenovationTolerance,
    SellingMotivation,
)

MOTIVATION_BASE: dict[SellingMotivation, int] = {
    SellingMotivation.FORECLOSURE: 90,
    SellingMotivation.DIVORCE: 85,
    SellingMotivation.JOB_RELOCATION: 80,
    SellingMotivation.INHERITED: 75,
    SellingMotivation.DOWNSIZING: 70,
    SellingMotivation.UPGRADE: 65,
    SellingMotivation.INVESTMENT: 60,
    SellingMotivation.OTHER: 50,
}

FLEXIBILITY_BONUS: dict[PriceFlexibility, int] = {
    PriceFlexibility.FIRM: 0,
    PriceFlexibility.SLIGHT: 5,
    PriceFlexibility.MODERATE: 10,
    PriceFlexibility.VERY_FLEXIBLE: 20,
}

_F = FinancingMethod
_P = PriceFlexibility

# Financing method x seller price flexibility -> financial score adjustment.
# Lender-backed and seller-financed buyers lose points against firm sellers.
FINANCING_FLEXIBILITY_ADJUSTMENT: dict[tuple[FinancingMethod, PriceFlexibility], int] = {
    (_F.CASH, _P.FIRM): 0,
    (_F.CASH, _P.SLIGHT): 0,
    (_F.CASH, _P.MODERATE): 0,
    (_F.CASH, _P.VERY_FLEXIBLE): 0,
    (_F.CONVENTIONAL, _P.FIRM): -10,
    (_F.CONVENTIONAL, _P.SLIGHT): -5,
    (_F.CONVENTIONAL, _P.MODERATE): 0,
    (_F.CONVENTIONAL, _P.VERY_FLEXIBLE): 0,
    (_F.FHA, _P.FIRM): -10,
    (_F.FHA, _P.SLIGHT): -5,
    (_F.FHA, _P.MODERATE): 0,
    (_F.FHA, _P.VERY_FLEXIBLE): 0,
    (_F.VA, _P.FIRM): -10,
    (_F.VA, _P.SLIGHT): -5,
    (_F.VA, _P.MODERATE): 0,
    (_F.VA, _P.VERY_FLEXIBLE): 0,
    (_F.HARD_MONEY, _P.FIRM): 0,
    (_F.HARD_MONEY, _P.SLIGHT): 0,
    (_F.HARD_MONEY, _P.MODERATE): 0,
    (_F.HARD_MONEY, _P.VERY_FLEXIBLE): 0,
    (_F.SELLER_FINANCING, _P.FIRM): -10,
    (_F.SELLER_FINANCING, _P.SLIGHT): -5,
    (_F.SELLER_FINANCING, _P.MODERATE): 0,
    (_F.SELLER_FINANCING, _P.VERY_FLEXIBLE): 5,
}

# Hard money buyers gain points on needs_work/distressed properties.
REHAB_FINANCING_BONUS: dict[FinancingMethod, int] = {
    _F.CASH: 0,
    _F.CONVENTIONAL: 0,
    _F.FHA: 0,
    _F.VA: 0,
    _F.HARD_MONEY: 10,
    _F.SELLER_FINANCING: 0,
}

REHAB_CONDITIONS: frozenset[PropertyCondition] = frozenset(
    {PropertyCondition.NEEDS_WORK, PropertyCondition.DISTRESSED}
)

# Ordinal scale shared by renovation tolerance and the work a condition implies.
TOLERANCE_LEVEL: dict[RenovationTolerance, int | None] = {
    RenovationTolerance.NONE: 0,
    RenovationTolerance.MINOR: 1,
    RenovationTolerance.MODERATE: 2,
    RenovationTolerance.MAJOR: 3,
    RenovationTolerance.ANY: None,
}

CONDITION_REQUIRED_LEVEL: dict[PropertyCondition, int] = {
    PropertyCondition.EXCELLENT: 0,
    PropertyCondition.GOOD: 0,
    PropertyCondition.FAIR: 1,
    PropertyCondition.NEEDS_WORK: 2,
    PropertyCondition.DISTRESSED: 3,
}

RENOVATION_ONE_STEP_PENALTY = 5
RENOVATION_MULTI_STEP_PENALTY = 15


def financing_adjustment(
    method: FinancingMethod,
    flexibility: PriceFlexibility,
    condition: PropertyCondition,
) -> int:
    """Total financial-score adjustment for a financing/seller combination."""
    adj = FINANCING_FLEXIBILITY_ADJUSTMENT[(method, flexibility)]
    if condition in REHAB_CONDITIONS:
        adj += REHAB_FINANCING_BONUS[method]
    return adj


def renovation_penalty(tolerance: RenovationTolerance, condition: PropertyCondition) -> int:
    """Closing-probability penalty when the buyer won't take on the needed work."""
    level = TOLERANCE_LEVEL[tolerance]
    if level is None:
        return 0
    gap = CONDITION_REQUIRED_LEVEL[condition] - level
    if gap >= 2:
        return RENOVATION_MULTI_STEP_PENALTY
    if gap == 1:
        return RENOVATION_ONE_STEP_PENALTY
    return 0
