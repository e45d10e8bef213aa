"""Tests for records, parsing and invariants."""

from datetime import datetime

import pytest

from conftest import NOW
from real_match.config import get_scoring_weights, load_config
from real_match.errors import ConfigError, InvariantViolation, ValidationError
from real_match.models import (
    BuyerProfile,
    FinancingMethod,
    InvestmentStrategy,
    Location,
    MatchScore,
    OffPlatformSeller,
    OwnerDashboardMetrics,
    PropertyType,
    Role,
    SellerProfile,
    User,
    parse_datetime,
)


class TestLocation:
    def test_case_insensitive_city_state(self) -> None:
        assert Location("Phoenix", "AZ").same_city(Location(" phoenix", "az "))
        assert not Location("Phoenix", "AZ").same_city(Location("Tucson", "AZ"))
        assert Location("Phoenix", "AZ").same_state(Location("Tucson", "az"))

    def test_zip_code_alias(self) -> None:
        loc = Location.from_dict({"city": "Phoenix", "state": "AZ", "zipCode": "85004"})
        assert loc.zip_code == "85004"
        assert loc.country == "US"

    def test_missing_city(self) -> None:
        with pytest.raises(ValidationError):
            Location.from_dict({"state": "AZ"})


class TestBuyerProfile:
    def test_from_dict(self) -> None:
        buyer = BuyerProfile.from_dict(
            {
                "user_id": "b1",
                "budget_min": "250000",
                "budget_max": 400000,
                "location_preferences": [{"city": "Phoenix", "state": "AZ"}],
                "property_types": ["condo", "single_family"],
                "purchase_urgency": 9,
                "financing_method": "HARD_MONEY",
                "is_investor": True,
                "investment_criteria": {"min_roi": 12, "strategy": "flip"},
            }
        )
        assert buyer.budget_min == 250_000
        assert buyer.property_types == frozenset({PropertyType.CONDO, PropertyType.SINGLE_FAMILY})
        assert buyer.financing_method is FinancingMethod.HARD_MONEY
        assert buyer.investment_criteria.strategy is InvestmentStrategy.FLIP
        assert buyer.primary_location.city == "Phoenix"
        buyer.validate()

    def test_unknown_enum(self) -> None:
        with pytest.raises(ValidationError) as exc:
            BuyerProfile.from_dict({"user_id": "b1", "financing_method": "bitcoin"})
        assert exc.value.field == "financing_method"

    @pytest.mark.parametrize(
        "overrides,field",
        [
            (dict(budget_min=None), "budget"),
            (dict(budget_min=-5), "budget"),
            (dict(budget_min=600_000), "budget"),
            (dict(location_preferences=()), "location_preferences"),
            (dict(purchase_urgency=11), "purchase_urgency"),
        ],
    )
    def test_validate(self, make_buyer, overrides, field) -> None:
        with pytest.raises(ValidationError) as exc:
            make_buyer(**overrides).validate()
        assert exc.value.field == field

    def test_round_trip(self, make_buyer) -> None:
        buyer = make_buyer(property_types=frozenset({PropertyType.LAND}))
        assert BuyerProfile.from_dict(buyer.to_dict()) == buyer

    def test_zero_urgency_is_rejected_not_defaulted(self, make_buyer) -> None:
        data = make_buyer().to_dict()
        data["purchase_urgency"] = 0
        buyer = BuyerProfile.from_dict(data)
        assert buyer.purchase_urgency == 0
        with pytest.raises(ValidationError) as exc:
            buyer.validate()
        assert exc.value.field == "purchase_urgency"
        del data["purchase_urgency"]
        assert BuyerProfile.from_dict(data).purchase_urgency == 5


class TestSellers:
    def test_seller_defaults(self) -> None:
        seller = SellerProfile.from_dict(
            {
                "user_id": "s1",
                "property_type": "condo",
                "asking_price": 300000,
                "location": {"city": "Mesa", "state": "AZ"},
            }
        )
        assert seller.urgency_level == 5
        assert seller.listing_status.value == "available"
        assert not seller.is_off_platform
        seller.validate()

    @pytest.mark.parametrize("cls,id_key", [(SellerProfile, "user_id"), (OffPlatformSeller, "id")])
    def test_zero_urgency_is_rejected_not_defaulted(self, cls, id_key) -> None:
        seller = cls.from_dict(
            {
                id_key: "s1",
                "property_type": "condo",
                "asking_price": 300000,
                "location": {"city": "Mesa", "state": "AZ"},
                "urgency_level": 0,
            }
        )
        assert seller.urgency_level == 0
        with pytest.raises(ValidationError) as exc:
            seller.validate()
        assert exc.value.field == "urgency_level"

    def test_seller_missing_price(self, make_seller) -> None:
        with pytest.raises(ValidationError) as exc:
            make_seller(asking_price=None).validate()
        assert exc.value.field == "asking_price"

    def test_off_platform_round_trip(self, make_off_platform) -> None:
        op = make_off_platform(year_built=1978, has_pool=True, last_sold_price=210_000)
        again = OffPlatformSeller.from_dict(op.to_dict())
        assert again == op
        assert again.is_off_platform
        assert again.candidate_id == "op-1"

    def test_off_platform_social_links_alias(self) -> None:
        op = OffPlatformSeller.from_dict(
            {
                "id": "x",
                "property_type": "land",
                "socialLinks": [{"platform": "x", "username": "u", "url": "https://x.com/u"}],
            }
        )
        assert op.social_links[0].url == "https://x.com/u"


class TestUser:
    def test_round_trip(self, make_user) -> None:
        user = make_user("u1", Role.INVESTOR)
        assert User.from_dict(user.to_dict()) == user
        assert user.is_buyer_side

    def test_role_required(self) -> None:
        with pytest.raises(ValidationError):
            User.from_dict({"user_id": "u1"})


class TestMatchScore:
    def _fields(self, **overrides) -> dict:
        fields = dict(
            id="m",
            buyer_id="b",
            seller_id="s",
            off_platform_seller_id=None,
            overall_score=80,
            financial_score=80,
            urgency_score=80,
            motivation_score=80,
            closing_probability_score=80,
        )
        fields.update(overrides)
        return fields

    def test_both_counterparties(self) -> None:
        with pytest.raises(InvariantViolation):
            MatchScore(**self._fields(off_platform_seller_id="op"))

    def test_no_counterparty(self) -> None:
        with pytest.raises(InvariantViolation):
            MatchScore(**self._fields(seller_id=None))

    @pytest.mark.parametrize("name", ["overall_score", "financial_score", "closing_probability_score"])
    @pytest.mark.parametrize("value", [-1, 101])
    def test_out_of_range(self, name, value) -> None:
        with pytest.raises(InvariantViolation):
            MatchScore(**self._fields(**{name: value}))

    def test_too_many_factors(self) -> None:
        with pytest.raises(InvariantViolation):
            MatchScore(**self._fields(key_alignment_factors=tuple("abcdef")))

    def test_round_trip(self, make_match) -> None:
        m = make_match(77)
        assert MatchScore.from_dict(m.to_dict()) == m
        assert m.pair_key == ("buyer-1", "seller-1", None)


class TestMisc:
    def test_parse_datetime(self) -> None:
        assert parse_datetime("2026-03-01T12:00:00Z") == NOW
        assert parse_datetime("2026-03-01T12:00:00") == NOW
        assert parse_datetime(datetime(2026, 3, 1, 12)) == NOW
        assert parse_datetime(None) is None
        with pytest.raises(ValidationError):
            parse_datetime("yesterday")

    def test_ratio_display(self) -> None:
        m = OwnerDashboardMetrics(
            active_sellers=5,
            active_professional_buyers=3,
            seller_buyer_ratio=5 / 3,
            total_sellers=5,
            total_buyers=3,
            total_matches=0,
            inquiry_rate=0,
            offer_rate=0,
            close_rate=0,
            avg_offers_per_pro=0.0,
            liquidity_score=0.0,
            liquidity_threshold=2.0,
            liquidity_recommendation="pause seller marketing",
            profile_completion_rate=100,
            drop_off_rate=0,
        )
        assert m.seller_buyer_ratio_display == "1.7"


class TestConfig:
    def test_repo_config(self) -> None:
        weights = get_scoring_weights(load_config())
        assert weights.financial == 0.30
        assert weights.total() == pytest.approx(1.0)

    def test_defaults_from_empty(self) -> None:
        assert get_scoring_weights({}).location == 0.20

    def test_weights_must_sum_to_one(self) -> None:
        with pytest.raises(ConfigError):
            get_scoring_weights({"weights": {"financial": 0.5}})

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")
