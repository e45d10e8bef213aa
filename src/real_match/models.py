"""Data models for profiles, users, match scores and alerts."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import InvariantViolation, ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    SELLER = "seller"
    BUYER = "buyer"
    INVESTOR = "investor"
    OWNER = "owner"


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Plan(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"


class PropertyType(str, Enum):
    SINGLE_FAMILY = "single_family"
    MULTI_FAMILY = "multi_family"
    CONDO = "condo"
    LAND = "land"
    COMMERCIAL = "commercial"


class FinancingMethod(str, Enum):
    CASH = "cash"
    CONVENTIONAL = "conventional"
    FHA = "fha"
    VA = "va"
    HARD_MONEY = "hard_money"
    SELLER_FINANCING = "seller_financing"


class RenovationTolerance(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    ANY = "any"


class InvestmentStrategy(str, Enum):
    FLIP = "flip"
    RENTAL = "rental"
    WHOLESALE = "wholesale"
    PRIMARY_RESIDENCE = "primary_residence"


class SellingMotivation(str, Enum):
    JOB_RELOCATION = "job_relocation"
    DIVORCE = "divorce"
    FORECLOSURE = "foreclosure"
    UPGRADE = "upgrade"
    DOWNSIZING = "downsizing"
    INVESTMENT = "investment"
    INHERITED = "inherited"
    OTHER = "other"


class PriceFlexibility(str, Enum):
    FIRM = "firm"
    SLIGHT = "slight"
    MODERATE = "moderate"
    VERY_FLEXIBLE = "very_flexible"


class PropertyCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_WORK = "needs_work"
    DISTRESSED = "distressed"


class ListingStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    OFF_MARKET = "off_market"


class AlertSeverity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


# --- parsing helpers -------------------------------------------------------


def _require(data: dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise ValidationError(f"missing required field '{key}'", field=key)
    return value


def _enum(cls: type[Enum], value: Any, key: str) -> Any:
    if isinstance(value, cls):
        return value
    try:
        return cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"invalid {key}: {value!r}", field=key) from None


def _opt_enum(cls: type[Enum], value: Any, key: str) -> Any:
    if value is None or value == "":
        return None
    return _enum(cls, value, key)


def _number(value: Any, key: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid {key}: {value!r}", field=key) from None


def _int(value: Any, key: str) -> int | None:
    num = _number(value, key)
    return None if num is None else int(num)


def _int_or(data: dict, key: str, default: int) -> int:
    """Missing or blank falls back to default; zero is kept."""
    num = _int(data.get(key), key)
    return default if num is None else num


def parse_datetime(value: Any) -> datetime | None:
    """Parse ISO strings or datetimes; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"invalid datetime: {value!r}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


# --- records ---------------------------------------------------------------


@dataclass(frozen=True)
class Location:
    """City/state location; equality for matching is case-insensitive city+state."""

    city: str
    state: str
    zip_code: str = ""
    country: str = "US"

    @property
    def state_key(self) -> str:
        return (self.state or "").strip().lower()

    @property
    def city_key(self) -> tuple[str, str]:
        return ((self.city or "").strip().lower(), self.state_key)

    def same_city(self, other: Location) -> bool:
        return self.city_key == other.city_key

    def same_state(self, other: Location) -> bool:
        return bool(self.state_key) and self.state_key == other.state_key

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Location:
        return cls(
            city=str(_require(data, "city")).strip(),
            state=str(_require(data, "state")).strip(),
            zip_code=str(data.get("zip_code") or data.get("zipCode") or ""),
            country=str(data.get("country") or "US"),
        )


@dataclass(frozen=True)
class User:
    """Platform account as supplied by the persistence layer."""

    user_id: str
    name: str
    email: str
    role: Role
    subscription_status: SubscriptionStatus = SubscriptionStatus.TRIAL
    plan: Plan | None = None
    trial_end_date: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    last_active_at: datetime | None = None

    @property
    def is_buyer_side(self) -> bool:
        return self.role in (Role.BUYER, Role.INVESTOR)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "subscription_status": self.subscription_status.value,
            "plan": self.plan.value if self.plan else None,
            "trial_end_date": _iso(self.trial_end_date),
            "created_at": _iso(self.created_at),
            "last_active_at": _iso(self.last_active_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            user_id=str(_require(data, "user_id")),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            role=_enum(Role, _require(data, "role"), "role"),
            subscription_status=_enum(
                SubscriptionStatus, data.get("subscription_status") or "trial", "subscription_status"
            ),
            plan=_opt_enum(Plan, data.get("plan"), "plan"),
            trial_end_date=parse_datetime(data.get("trial_end_date")),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            last_active_at=parse_datetime(data.get("last_active_at")),
        )


@dataclass(frozen=True)
class InvestmentCriteria:
    min_roi: float = 0.0
    strategy: InvestmentStrategy = InvestmentStrategy.PRIMARY_RESIDENCE


@dataclass(frozen=True)
class BuyerProfile:
    """Buyer/investor preferences. Replaced wholesale on every save."""

    user_id: str
    budget_min: float | None
    budget_max: float | None
    location_preferences: tuple[Location, ...]
    property_types: frozenset[PropertyType] = frozenset()
    purchase_urgency: int = 5
    financing_method: FinancingMethod = FinancingMethod.CONVENTIONAL
    renovation_tolerance: RenovationTolerance = RenovationTolerance.MINOR
    is_investor: bool = False
    investment_criteria: InvestmentCriteria | None = None
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def primary_location(self) -> Location | None:
        return self.location_preferences[0] if self.location_preferences else None

    def validate(self) -> None:
        """Raise ValidationError when budget or location data is unusable."""
        if not self.budget_min or not self.budget_max:
            raise ValidationError(f"buyer {self.user_id}: budget missing", field="budget")
        if self.budget_min <= 0 or self.budget_max <= 0:
            raise ValidationError(f"buyer {self.user_id}: budget must be positive", field="budget")
        if self.budget_min > self.budget_max:
            raise ValidationError(f"buyer {self.user_id}: budget_min > budget_max", field="budget")
        if not self.location_preferences:
            raise ValidationError(
                f"buyer {self.user_id}: no location preferences", field="location_preferences"
            )
        if not 1 <= self.purchase_urgency <= 10:
            raise ValidationError(
                f"buyer {self.user_id}: urgency out of range", field="purchase_urgency"
            )

    def to_dict(self) -> dict[str, Any]:
        criteria = None
        if self.investment_criteria:
            criteria = {
                "min_roi": self.investment_criteria.min_roi,
                "strategy": self.investment_criteria.strategy.value,
            }
        return {
            "user_id": self.user_id,
            "budget_min": self.budget_min,
            "budget_max": self.budget_max,
            "location_preferences": [loc.to_dict() for loc in self.location_preferences],
            "property_types": sorted(pt.value for pt in self.property_types),
            "purchase_urgency": self.purchase_urgency,
            "financing_method": self.financing_method.value,
            "renovation_tolerance": self.renovation_tolerance.value,
            "is_investor": self.is_investor,
            "investment_criteria": criteria,
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuyerProfile:
        criteria = None
        raw_criteria = data.get("investment_criteria")
        if isinstance(raw_criteria, dict):
            criteria = InvestmentCriteria(
                min_roi=_number(raw_criteria.get("min_roi"), "min_roi") or 0.0,
                strategy=_enum(
                    InvestmentStrategy,
                    raw_criteria.get("strategy") or "primary_residence",
                    "strategy",
                ),
            )
        return cls(
            user_id=str(_require(data, "user_id")),
            budget_min=_number(data.get("budget_min"), "budget_min"),
            budget_max=_number(data.get("budget_max"), "budget_max"),
            location_preferences=tuple(
                Location.from_dict(loc) for loc in data.get("location_preferences") or []
            ),
            property_types=frozenset(
                _enum(PropertyType, pt, "property_types") for pt in data.get("property_types") or []
            ),
            purchase_urgency=_int_or(data, "purchase_urgency", 5),
            financing_method=_enum(
                FinancingMethod, data.get("financing_method") or "conventional", "financing_method"
            ),
            renovation_tolerance=_enum(
                RenovationTolerance, data.get("renovation_tolerance") or "minor", "renovation_tolerance"
            ),
            is_investor=bool(data.get("is_investor", False)),
            investment_criteria=criteria,
            updated_at=parse_datetime(data.get("updated_at")) or utcnow(),
        )


@dataclass(frozen=True)
class SellerProfile:
    """A registered seller's listing. Replaced wholesale on every save."""

    user_id: str
    property_type: PropertyType
    asking_price: float | None
    location: Location | None
    selling_motivation: SellingMotivation = SellingMotivation.OTHER
    urgency_level: int = 5
    price_flexibility: PriceFlexibility = PriceFlexibility.SLIGHT
    property_condition: PropertyCondition = PropertyCondition.GOOD
    listing_status: ListingStatus = ListingStatus.AVAILABLE
    address: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    description: str = ""
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def candidate_id(self) -> str:
        return self.user_id

    @property
    def is_off_platform(self) -> bool:
        return False

    def validate(self) -> None:
        if not self.asking_price or self.asking_price <= 0:
            raise ValidationError(f"seller {self.user_id}: asking price missing", field="asking_price")
        if self.location is None or not self.location.state_key:
            raise ValidationError(f"seller {self.user_id}: location missing", field="location")
        if not 1 <= self.urgency_level <= 10:
            raise ValidationError(f"seller {self.user_id}: urgency out of range", field="urgency_level")

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "property_type": self.property_type.value,
            "asking_price": self.asking_price,
            "location": self.location.to_dict() if self.location else None,
            "selling_motivation": self.selling_motivation.value,
            "urgency_level": self.urgency_level,
            "price_flexibility": self.price_flexibility.value,
            "property_condition": self.property_condition.value,
            "listing_status": self.listing_status.value,
            "address": self.address,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_feet": self.square_feet,
            "description": self.description,
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SellerProfile:
        return cls(user_id=str(_require(data, "user_id")), **_listing_fields(data))


def _listing_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Fields shared by registered and off-platform sellers."""
    loc = data.get("location")
    return {
        "property_type": _enum(PropertyType, _require(data, "property_type"), "property_type"),
        "asking_price": _number(data.get("asking_price"), "asking_price"),
        "location": Location.from_dict(loc) if isinstance(loc, dict) else None,
        "selling_motivation": _enum(
            SellingMotivation, data.get("selling_motivation") or "other", "selling_motivation"
        ),
        "urgency_level": _int_or(data, "urgency_level", 5),
        "price_flexibility": _enum(
            PriceFlexibility, data.get("price_flexibility") or "slight", "price_flexibility"
        ),
        "property_condition": _enum(
            PropertyCondition, data.get("property_condition") or "good", "property_condition"
        ),
        "listing_status": _enum(
            ListingStatus, data.get("listing_status") or "available", "listing_status"
        ),
        "address": data.get("address") or data.get("property_address"),
        "bedrooms": _int(data.get("bedrooms"), "bedrooms"),
        "bathrooms": _number(data.get("bathrooms"), "bathrooms"),
        "square_feet": _int(data.get("square_feet"), "square_feet"),
        "description": str(data.get("description") or ""),
    }


@dataclass(frozen=True)
class SocialLink:
    platform: str
    username: str
    url: str


@dataclass(frozen=True)
class OffPlatformSeller:
    """Externally sourced listing. Read-only; never mutated by the engine."""

    id: str
    name: str
    property_type: PropertyType
    asking_price: float | None
    location: Location | None
    selling_motivation: SellingMotivation = SellingMotivation.OTHER
    urgency_level: int = 5
    price_flexibility: PriceFlexibility = PriceFlexibility.SLIGHT
    property_condition: PropertyCondition = PropertyCondition.GOOD
    listing_status: ListingStatus = ListingStatus.AVAILABLE
    address: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    description: str = ""
    email: str | None = None
    social_links: tuple[SocialLink, ...] = ()
    lot_size_sqft: int | None = None
    tax_assessment: float | None = None
    hoa_monthly: float | None = None
    year_built: int | None = None
    has_pool: bool | None = None
    has_garage: bool | None = None
    last_sold_price: float | None = None
    last_sold_date: str | None = None

    @property
    def candidate_id(self) -> str:
        return self.id

    @property
    def is_off_platform(self) -> bool:
        return True

    def validate(self) -> None:
        if not self.asking_price or self.asking_price <= 0:
            raise ValidationError(f"listing {self.id}: asking price missing", field="asking_price")
        if self.location is None or not self.location.state_key:
            raise ValidationError(f"listing {self.id}: location missing", field="location")
        if not 1 <= self.urgency_level <= 10:
            raise ValidationError(f"listing {self.id}: urgency out of range", field="urgency_level")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "social_links": [
                {"platform": s.platform, "username": s.username, "url": s.url}
                for s in self.social_links
            ],
            "property_type": self.property_type.value,
            "asking_price": self.asking_price,
            "location": self.location.to_dict() if self.location else None,
            "selling_motivation": self.selling_motivation.value,
            "urgency_level": self.urgency_level,
            "price_flexibility": self.price_flexibility.value,
            "property_condition": self.property_condition.value,
            "listing_status": self.listing_status.value,
            "address": self.address,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_feet": self.square_feet,
            "description": self.description,
            "lot_size_sqft": self.lot_size_sqft,
            "tax_assessment": self.tax_assessment,
            "hoa_monthly": self.hoa_monthly,
            "year_built": self.year_built,
            "has_pool": self.has_pool,
            "has_garage": self.has_garage,
            "last_sold_price": self.last_sold_price,
            "last_sold_date": self.last_sold_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OffPlatformSeller:
        links = tuple(
            SocialLink(
                platform=str(s.get("platform", "")),
                username=str(s.get("username", "")),
                url=str(s.get("url", "")),
            )
            for s in data.get("social_links") or data.get("socialLinks") or []
            if isinstance(s, dict)
        )
        return cls(
            id=str(_require(data, "id")),
            name=str(data.get("name") or ""),
            email=data.get("email") or None,
            social_links=links,
            lot_size_sqft=_int(data.get("lot_size_sqft"), "lot_size_sqft"),
            tax_assessment=_number(data.get("tax_assessment"), "tax_assessment"),
            hoa_monthly=_number(data.get("hoa_monthly"), "hoa_monthly"),
            year_built=_int(data.get("year_built"), "year_built"),
            has_pool=data.get("has_pool"),
            has_garage=data.get("has_garage"),
            last_sold_price=_number(data.get("last_sold_price"), "last_sold_price"),
            last_sold_date=data.get("last_sold_date"),
            **_listing_fields(data),
        )


Candidate = SellerProfile | OffPlatformSeller


_SCORE_FIELDS = (
    "overall_score",
    "financial_score",
    "urgency_score",
    "motivation_score",
    "closing_probability_score",
    "location_score",
)


@dataclass(frozen=True)
class MatchScore:
    """Scored buyer/candidate pair.

    Exactly one of ``seller_id`` / ``off_platform_seller_id`` is set and every
    score lies in [0, 100]; construction raises InvariantViolation otherwise.
    """

    id: str
    buyer_id: str
    seller_id: str | None
    off_platform_seller_id: str | None
    overall_score: int
    financial_score: int
    urgency_score: int
    motivation_score: int
    closing_probability_score: int
    location_score: int = 100
    key_alignment_factors: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if (self.seller_id is None) == (self.off_platform_seller_id is None):
            raise InvariantViolation(
                f"match {self.id}: exactly one of seller_id/off_platform_seller_id must be set"
            )
        for name in _SCORE_FIELDS:
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise InvariantViolation(f"match {self.id}: {name}={value} outside [0, 100]")
        if len(self.key_alignment_factors) > 5:
            raise InvariantViolation(f"match {self.id}: more than 5 alignment factors")

    @property
    def counterparty_id(self) -> str:
        return self.seller_id if self.seller_id is not None else self.off_platform_seller_id  # type: ignore[return-value]

    @property
    def pair_key(self) -> tuple[str, str | None, str | None]:
        """Upsert key: (buyer_id, seller_id, off_platform_seller_id)."""
        return (self.buyer_id, self.seller_id, self.off_platform_seller_id)

    def same_scores(self, other: MatchScore) -> bool:
        return all(getattr(self, n) == getattr(other, n) for n in _SCORE_FIELDS) and (
            self.key_alignment_factors == other.key_alignment_factors
        )

    def with_timestamps(self, created_at: datetime, updated_at: datetime) -> MatchScore:
        return replace(self, created_at=created_at, updated_at=updated_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "buyer_id": self.buyer_id,
            "seller_id": self.seller_id,
            "off_platform_seller_id": self.off_platform_seller_id,
            "overall_score": self.overall_score,
            "financial_score": self.financial_score,
            "urgency_score": self.urgency_score,
            "motivation_score": self.motivation_score,
            "closing_probability_score": self.closing_probability_score,
            "location_score": self.location_score,
            "key_alignment_factors": list(self.key_alignment_factors),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchScore:
        return cls(
            id=str(data["id"]),
            buyer_id=str(data["buyer_id"]),
            seller_id=data.get("seller_id"),
            off_platform_seller_id=data.get("off_platform_seller_id"),
            overall_score=int(data["overall_score"]),
            financial_score=int(data["financial_score"]),
            urgency_score=int(data["urgency_score"]),
            motivation_score=int(data["motivation_score"]),
            closing_probability_score=int(data["closing_probability_score"]),
            location_score=int(data.get("location_score", 100)),
            key_alignment_factors=tuple(data.get("key_alignment_factors") or ()),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            updated_at=parse_datetime(data.get("updated_at")) or utcnow(),
        )


@dataclass(frozen=True)
class MatchSnapshot:
    """One owner's stored ranked set and when it was computed."""

    owner_id: str
    computed_at: datetime
    matches: tuple[MatchScore, ...] = ()


@dataclass(frozen=True)
class MatchAlert:
    """High-probability match notification for one user."""

    id: str
    user_id: str
    buyer_id: str
    counterparty_id: str
    match_id: str
    overall_score: int
    message: str
    created_at: datetime = field(default_factory=utcnow)
    read: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "buyer_id": self.buyer_id,
            "counterparty_id": self.counterparty_id,
            "match_id": self.match_id,
            "overall_score": self.overall_score,
            "message": self.message,
            "created_at": _iso(self.created_at),
            "read": self.read,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchAlert:
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            buyer_id=str(data["buyer_id"]),
            counterparty_id=str(data["counterparty_id"]),
            match_id=str(data["match_id"]),
            overall_score=int(data["overall_score"]),
            message=str(data.get("message") or ""),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
            read=bool(data.get("read", False)),
        )


@dataclass(frozen=True)
class OwnerAlert:
    """Marketplace imbalance alert, derived from metrics."""

    id: str
    severity: AlertSeverity
    message: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "message": self.message,
            "created_at": _iso(self.created_at),
        }


@dataclass
class OwnerDashboardMetrics:
    """Operator-facing marketplace KPIs."""

    active_sellers: int
    active_professional_buyers: int
    seller_buyer_ratio: float | str
    total_sellers: int
    total_buyers: int
    total_matches: int
    inquiry_rate: int
    offer_rate: int
    close_rate: int
    avg_offers_per_pro: float
    liquidity_score: float
    liquidity_threshold: float
    liquidity_recommendation: str
    profile_completion_rate: int
    drop_off_rate: int
    alerts: list[OwnerAlert] = field(default_factory=list)

    @property
    def seller_buyer_ratio_display(self) -> str:
        if isinstance(self.seller_buyer_ratio, str):
            return self.seller_buyer_ratio
        return f"{self.seller_buyer_ratio:.1f}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_sellers": self.active_sellers,
            "active_professional_buyers": self.active_professional_buyers,
            "seller_buyer_ratio": self.seller_buyer_ratio,
            "total_sellers": self.total_sellers,
            "total_buyers": self.total_buyers,
            "total_matches": self.total_matches,
            "inquiry_rate": self.inquiry_rate,
            "offer_rate": self.offer_rate,
            "close_rate": self.close_rate,
            "avg_offers_per_pro": self.avg_offers_per_pro,
            "liquidity_score": self.liquidity_score,
            "liquidity_threshold": self.liquidity_threshold,
            "liquidity_recommendation": self.liquidity_recommendation,
            "profile_completion_rate": self.profile_completion_rate,
            "drop_off_rate": self.drop_off_rate,
            "alerts": [a.to_dict() for a in self.alerts],
        }


# --- parameter dataclasses (populated from config) --------------------------


@dataclass
class ScoringWeights:
    """Weights of the overall score; they sum to 1.0."""

    financial: float
    urgency: float
    location: float
    motivation: float
    closing: float

    def total(self) -> float:
        return self.financial + self.urgency + self.location + self.motivation + self.closing


@dataclass
class MatchThresholds:
    min_overall: int
    high_probability: int
    offer: int
    same_city_location: int
    same_state_location: int


@dataclass
class AccessParams:
    """Unlocked-match counts per tier. ``None`` means unlimited."""

    trial_unlocked: int
    expired_unlocked: int
    basic_unlocked: int
    premium_unlocked: int | None


@dataclass
class AnalyticsParams:
    activity_window_days: int
    liquidity_threshold: float
    max_seller_buyer_ratio: float
    healthy_inquiry_rate: int
    healthy_offer_rate: int
    healthy_close_rate: int
    min_profile_completion: int
