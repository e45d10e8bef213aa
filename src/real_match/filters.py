"""Match list filters and sort options for the buyer dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .access import MatchView
from .models import BuyerProfile, ListingStatus, PropertyType


class SortBy(str, Enum):
    SCORE = "score"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    BEDS_DESC = "beds_desc"


@dataclass
class MatchFilters:
    min_price: float | None = None
    max_price: float | None = None
    min_beds: int | None = None
    property_type: PropertyType | None = None
    listing_status: ListingStatus | None = None
    sort_by: SortBy = SortBy.SCORE

    @property
    def active_count(self) -> int:
        count = sum(
            v is not None
            for v in (
                self.min_price,
                self.max_price,
                self.min_beds,
                self.property_type,
                self.listing_status,
            )
        )
        return count + (self.sort_by is not SortBy.SCORE)


def filter_matches(views: list[MatchView], filters: MatchFilters) -> list[MatchView]:
    """
    Filter and sort match views.
    - Unknown price/beds/type/status never excludes a match
    - SCORE keeps the ranked order
    """
    result = []
    for v in views:
        price = v.asking_price
        if filters.min_price is not None and price is not None and price < filters.min_price:
            continue
        if filters.max_price is not None and price is not None and price > filters.max_price:
            continue
        if filters.min_beds is not None and v.bedrooms is not None and v.bedrooms < filters.min_beds:
            continue
        if (
            filters.property_type is not None
            and v.property_type
            and v.property_type != filters.property_type.value
        ):
            continue
        if (
            filters.listing_status is not None
            and v.listing_status
            and v.listing_status != filters.listing_status.value
        ):
            continue
        result.append(v)

    if filters.sort_by is SortBy.PRICE_ASC:
        result.sort(key=lambda v: v.asking_price or 0)
    elif filters.sort_by is SortBy.PRICE_DESC:
        result.sort(key=lambda v: -(v.asking_price or 0))
    elif filters.sort_by is SortBy.BEDS_DESC:
        result.sort(key=lambda v: -(v.bedrooms or 0))
    return result


def area_counts(buyer: BuyerProfile, views: list[MatchView]) -> list[tuple[str, int]]:
    """Match count per preferred city+state, in preference order."""
    counts: list[tuple[str, int]] = []
    seen: set[str] = set()
    for pref in buyer.location_preferences:
        label = f"{pref.city}, {pref.state}"
        if label in seen:
            continue
        seen.add(label)
        key = pref.city_key
        n = sum(
            1
            for v in views
            if v.city is not None
            and v.state is not None
            and (v.city.strip().lower(), v.state.strip().lower()) == key
        )
        counts.append((label, n))
    return counts


def unique_zip_count(views: list[MatchView]) -> int:
    return len({v.zip_code for v in views if v.zip_code})
