"""Pytest fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from real_match.config import load_config
from real_match.models import (
    BuyerProfile,
    FinancingMethod,
    Location,
    MatchScore,
    OffPlatformSeller,
    PriceFlexibility,
    PropertyCondition,
    PropertyType,
    RenovationTolerance,
    Role,
    SellerProfile,
    SellingMotivation,
    SubscriptionStatus,
    User,
)
from real_match.repositories import InMemoryStore
from real_match.scoring import ScoringEngine

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

PHOENIX = Location(city="Phoenix", state="AZ", zip_code="85004")
TUCSON = Location(city="Tucson", state="AZ", zip_code="85701")
MIAMI = Location(city="Miami", state="FL", zip_code="33101")


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> dict:
    """Repository config.yaml."""
    return load_config()


@pytest.fixture
def engine(config: dict) -> ScoringEngine:
    return ScoringEngine(config=config)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def make_buyer():
    """Cash Phoenix buyer, 300k-500k, ready to move; override any field."""

    def _make(user_id: str = "buyer-1", **overrides) -> BuyerProfile:
        fields = dict(
            user_id=user_id,
            budget_min=300_000,
            budget_max=500_000,
            location_preferences=(PHOENIX,),
            purchase_urgency=8,
            financing_method=FinancingMethod.CASH,
            renovation_tolerance=RenovationTolerance.ANY,
            updated_at=NOW,
        )
        fields.update(overrides)
        return BuyerProfile(**fields)

    return _make


@pytest.fixture
def make_seller():
    """Motivated Phoenix foreclosure listing at 420k; override any field."""

    def _make(user_id: str = "seller-1", **overrides) -> SellerProfile:
        fields = dict(
            user_id=user_id,
            property_type=PropertyType.SINGLE_FAMILY,
            asking_price=420_000,
            location=PHOENIX,
            selling_motivation=SellingMotivation.FORECLOSURE,
            urgency_level=9,
            price_flexibility=PriceFlexibility.VERY_FLEXIBLE,
            property_condition=PropertyCondition.DISTRESSED,
            address="12 W Van Buren St",
            bedrooms=3,
            updated_at=NOW,
        )
        fields.update(overrides)
        return SellerProfile(**fields)

    return _make


@pytest.fixture
def make_off_platform():
    def _make(seller_id: str = "op-1", **overrides) -> OffPlatformSeller:
        fields = dict(
            id=seller_id,
            name="Pat Owner",
            email="pat@example.com",
            property_type=PropertyType.SINGLE_FAMILY,
            asking_price=380_000,
            location=PHOENIX,
            selling_motivation=SellingMotivation.INHERITED,
            urgency_level=7,
            price_flexibility=PriceFlexibility.MODERATE,
            property_condition=PropertyCondition.FAIR,
            address="400 E Roosevelt St",
            bedrooms=4,
        )
        fields.update(overrides)
        return OffPlatformSeller(**fields)

    return _make


@pytest.fixture
def make_user():
    def _make(user_id: str, role: Role = Role.BUYER, **overrides) -> User:
        fields = dict(
            user_id=user_id,
            name=f"User {user_id}",
            email=f"{user_id}@example.com",
            role=role,
            subscription_status=SubscriptionStatus.TRIAL,
            trial_end_date=NOW + timedelta(days=7),
            created_at=NOW - timedelta(days=1),
            last_active_at=NOW,
        )
        fields.update(overrides)
        return User(**fields)

    return _make


@pytest.fixture
def make_match():
    """Hand-built MatchScore for ranking, alert and access tests."""

    def _make(
        overall: int,
        seller_id: str | None = "seller-1",
        buyer_id: str = "buyer-1",
        off_platform_seller_id: str | None = None,
        closing: int = 70,
        urgency: int = 70,
        **overrides,
    ) -> MatchScore:
        counterparty = seller_id or off_platform_seller_id
        kind = "seller" if seller_id else "op"
        fields = dict(
            id=f"{buyer_id}:{kind}:{counterparty}",
            buyer_id=buyer_id,
            seller_id=seller_id,
            off_platform_seller_id=off_platform_seller_id,
            overall_score=overall,
            financial_score=80,
            urgency_score=urgency,
            motivation_score=80,
            closing_probability_score=closing,
            key_alignment_factors=("Within budget range",),
            created_at=NOW,
            updated_at=NOW,
        )
        fields.update(overrides)
        return MatchScore(**fields)

    return _make
