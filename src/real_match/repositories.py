"""Repository interfaces and an in-memory implementation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from .models import (
    BuyerProfile,
    MatchAlert,
    MatchScore,
    MatchSnapshot,
    OffPlatformSeller,
    SellerProfile,
    User,
    utcnow,
)


class ProfileRepository(ABC):
    """
    Read access to users and profiles, owned by the persistence layer.
    Implementations: InMemoryStore, storage.Storage (DuckDB).
    """

    @abstractmethod
    def get_user(self, user_id: str) -> User | None: ...

    @abstractmethod
    def list_users(self) -> list[User]: ...

    @abstractmethod
    def get_buyer_profile(self, user_id: str) -> BuyerProfile | None: ...

    @abstractmethod
    def get_seller_profile(self, user_id: str) -> SellerProfile | None: ...

    @abstractmethod
    def list_buyer_profiles(self) -> list[BuyerProfile]: ...

    @abstractmethod
    def list_seller_profiles(self) -> list[SellerProfile]: ...

    @abstractmethod
    def list_off_platform_sellers(self) -> list[OffPlatformSeller]: ...

    @abstractmethod
    def get_off_platform_seller(self, seller_id: str) -> OffPlatformSeller | None: ...

    @abstractmethod
    def catalog_version(self) -> int:
        """Changes whenever the off-platform catalog is replaced."""
        ...

    @abstractmethod
    def save_user(self, user: User) -> None: ...

    @abstractmethod
    def save_buyer_profile(self, profile: BuyerProfile) -> None:
        """Replace the user's whole buyer profile."""
        ...

    @abstractmethod
    def save_seller_profile(self, profile: SellerProfile) -> None:
        """Replace the user's whole seller profile."""
        ...

    @abstractmethod
    def save_off_platform_sellers(self, sellers: Iterable[OffPlatformSeller]) -> None:
        """Replace the off-platform catalog."""
        ...


class MatchRepository(ABC):
    """Ranked match snapshots, one per owning user."""

    @abstractmethod
    def get_matches(self, owner_id: str) -> list[MatchScore]:
        """Return the owner's committed snapshot (empty when unknown)."""
        ...

    @abstractmethod
    def replace_matches(
        self, owner_id: str, matches: list[MatchScore], computed_at: datetime | None = None
    ) -> None:
        """Atomically swap the owner's snapshot; readers see old or new, never a mix.

        ``computed_at`` defaults to the store's current time.
        """
        ...

    @abstractmethod
    def all_matches(self) -> list[MatchScore]:
        """Every stored match across owners (pairs may repeat across owners)."""
        ...

    @abstractmethod
    def snapshots(self) -> list[MatchSnapshot]:
        """Every owner's snapshot, oldest computation first."""
        ...


class AlertRepository(ABC):
    """Per-user match alerts with monotonic read state."""

    @abstractmethod
    def add_alerts(self, alerts: list[MatchAlert]) -> None: ...

    @abstractmethod
    def list_alerts(self, user_id: str) -> list[MatchAlert]: ...

    @abstractmethod
    def get_alert(self, alert_id: str) -> MatchAlert | None: ...

    @abstractmethod
    def mark_read(self, alert_id: str) -> MatchAlert | None:
        """Mark read; already-read alerts stay read. None when unknown."""
        ...


class InMemoryStore(ProfileRepository, MatchRepository, AlertRepository):
    """Thread-safe in-process store backed by immutable snapshots."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[str, User] = {}
        self._buyers: dict[str, BuyerProfile] = {}
        self._sellers: dict[str, SellerProfile] = {}
        self._off_platform: tuple[OffPlatformSeller, ...] = ()
        self._off_platform_by_id: dict[str, OffPlatformSeller] = {}
        self._catalog_version = 0
        self._matches: dict[str, MatchSnapshot] = {}
        self._alerts: dict[str, MatchAlert] = {}

    # profiles

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    def get_buyer_profile(self, user_id: str) -> BuyerProfile | None:
        return self._buyers.get(user_id)

    def get_seller_profile(self, user_id: str) -> SellerProfile | None:
        return self._sellers.get(user_id)

    def list_buyer_profiles(self) -> list[BuyerProfile]:
        with self._lock:
            return list(self._buyers.values())

    def list_seller_profiles(self) -> list[SellerProfile]:
        with self._lock:
            return list(self._sellers.values())

    def list_off_platform_sellers(self) -> list[OffPlatformSeller]:
        return list(self._off_platform)

    def get_off_platform_seller(self, seller_id: str) -> OffPlatformSeller | None:
        return self._off_platform_by_id.get(seller_id)

    def catalog_version(self) -> int:
        return self._catalog_version

    def save_user(self, user: User) -> None:
        with self._lock:
            self._users[user.user_id] = user

    def save_buyer_profile(self, profile: BuyerProfile) -> None:
        with self._lock:
            self._buyers[profile.user_id] = profile

    def save_seller_profile(self, profile: SellerProfile) -> None:
        with self._lock:
            self._sellers[profile.user_id] = profile

    def save_off_platform_sellers(self, sellers: Iterable[OffPlatformSeller]) -> None:
        catalog = tuple(sellers)
        with self._lock:
            self._off_platform = catalog
            self._off_platform_by_id = {s.id: s for s in catalog}
            self._catalog_version += 1

    # matches

    def get_matches(self, owner_id: str) -> list[MatchScore]:
        snap = self._matches.get(owner_id)
        return list(snap.matches) if snap else []

    def replace_matches(
        self, owner_id: str, matches: list[MatchScore], computed_at: datetime | None = None
    ) -> None:
        snapshot = MatchSnapshot(owner_id, computed_at or utcnow(), tuple(matches))
        with self._lock:
            self._matches[owner_id] = snapshot

    def all_matches(self) -> list[MatchScore]:
        return [m for snap in self.snapshots() for m in snap.matches]

    def snapshots(self) -> list[MatchSnapshot]:
        with self._lock:
            snaps = list(self._matches.values())
        return sorted(snaps, key=lambda s: s.computed_at)

    # alerts

    def add_alerts(self, alerts: list[MatchAlert]) -> None:
        with self._lock:
            for a in alerts:
                self._alerts.setdefault(a.id, a)

    def list_alerts(self, user_id: str) -> list[MatchAlert]:
        with self._lock:
            alerts = [a for a in self._alerts.values() if a.user_id == user_id]
        return sorted(alerts, key=lambda a: (a.created_at, a.id))

    def get_alert(self, alert_id: str) -> MatchAlert | None:
        return self._alerts.get(alert_id)

    def mark_read(self, alert_id: str) -> MatchAlert | None:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None:
                return None
            if not alert.read:
                alert = replace(alert, read=True)
                self._alerts[alert_id] = alert
            return alert
