"""DuckDB storage for profiles, match snapshots and alerts."""

from __future__ import annotations

import json
import threading
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import duckdb

from ..models import (
    BuyerProfile,
    MatchAlert,
    MatchScore,
    MatchSnapshot,
    OffPlatformSeller,
    SellerProfile,
    User,
    utcnow,
)
from ..repositories import AlertRepository, MatchRepository, ProfileRepository


def _serialize_datetime(obj: Any) -> Any:
    """JSON serializer for datetime objects."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _dumps(data: dict[str, Any]) -> str:
    return json.dumps(data, default=_serialize_datetime)


def _naive_utc(dt: datetime | None) -> datetime | None:
    """TIMESTAMP columns hold naive UTC; the JSON payload keeps the offset."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _loads(raw: Any) -> dict[str, Any]:
    if isinstance(raw, str):
        return json.loads(raw)
    return raw or {}


class Storage(ProfileRepository, MatchRepository, AlertRepository):
    """
    DuckDB storage backing every repository interface.
    One connection, serialized by a lock; match snapshots are swapped in a
    single transaction so readers never see a partial set.
    """

    def __init__(self, db_path: Path | str = "real_match.duckdb") -> None:
        self.db_path = Path(db_path) if str(db_path) != ":memory:" else None
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.RLock()

    def _connect(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            if self.db_path is None:
                self._conn = duckdb.connect(":memory:")
            else:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = duckdb.connect(str(self.db_path))
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        conn = self._conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS users (
                user_id TEXT PRIMARY KEY,
                role TEXT,
                payload JSON
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS buyer_profiles (
                user_id TEXT PRIMARY KEY,
                payload JSON,
                updated_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS seller_profiles (
                user_id TEXT PRIMARY KEY,
                listing_status TEXT,
                payload JSON,
                updated_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS off_platform_sellers (
                id TEXT,
                position INTEGER,
                state TEXT,
                payload JSON
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS catalog_meta (
                key TEXT PRIMARY KEY,
                value INTEGER
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS match_scores (
                owner_id TEXT,
                match_id TEXT,
                position INTEGER,
                buyer_id TEXT,
                seller_id TEXT,
                off_platform_seller_id TEXT,
                overall_score INTEGER,
                full_result JSON,
                updated_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS match_snapshots (
                owner_id TEXT,
                computed_at TIMESTAMP
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS match_alerts (
                id TEXT PRIMARY KEY,
                user_id TEXT,
                is_read BOOLEAN,
                payload JSON,
                created_at TIMESTAMP
            )
        """)

    def _fetch_payloads(self, sql: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        with self._lock:
            rows = self._connect().execute(sql, params or []).fetchall()
        return [_loads(r[0]) for r in rows]

    # profiles

    def get_user(self, user_id: str) -> User | None:
        rows = self._fetch_payloads("SELECT payload FROM users WHERE user_id = ?", [user_id])
        return User.from_dict(rows[0]) if rows else None

    def list_users(self) -> list[User]:
        return [User.from_dict(d) for d in self._fetch_payloads("SELECT payload FROM users ORDER BY user_id")]

    def get_buyer_profile(self, user_id: str) -> BuyerProfile | None:
        rows = self._fetch_payloads("SELECT payload FROM buyer_profiles WHERE user_id = ?", [user_id])
        return BuyerProfile.from_dict(rows[0]) if rows else None

    def get_seller_profile(self, user_id: str) -> SellerProfile | None:
        rows = self._fetch_payloads("SELECT payload FROM seller_profiles WHERE user_id = ?", [user_id])
        return SellerProfile.from_dict(rows[0]) if rows else None

    def list_buyer_profiles(self) -> list[BuyerProfile]:
        rows = self._fetch_payloads("SELECT payload FROM buyer_profiles ORDER BY user_id")
        return [BuyerProfile.from_dict(d) for d in rows]

    def list_seller_profiles(self) -> list[SellerProfile]:
        rows = self._fetch_payloads("SELECT payload FROM seller_profiles ORDER BY user_id")
        return [SellerProfile.from_dict(d) for d in rows]

    def list_off_platform_sellers(self) -> list[OffPlatformSeller]:
        rows = self._fetch_payloads("SELECT payload FROM off_platform_sellers ORDER BY position")
        return [OffPlatformSeller.from_dict(d) for d in rows]

    def get_off_platform_seller(self, seller_id: str) -> OffPlatformSeller | None:
        rows = self._fetch_payloads("SELECT payload FROM off_platform_sellers WHERE id = ?", [seller_id])
        return OffPlatformSeller.from_dict(rows[0]) if rows else None

    def catalog_version(self) -> int:
        with self._lock:
            row = self._connect().execute(
                "SELECT value FROM catalog_meta WHERE key = 'off_platform'"
            ).fetchone()
        return int(row[0]) if row else 0

    def save_user(self, user: User) -> None:
        with self._lock:
            self._connect().execute(
                "INSERT OR REPLACE INTO users (user_id, role, payload) VALUES (?, ?, ?)",
                [user.user_id, user.role.value, _dumps(user.to_dict())],
            )

    def save_buyer_profile(self, profile: BuyerProfile) -> None:
        with self._lock:
            self._connect().execute(
                "INSERT OR REPLACE INTO buyer_profiles (user_id, payload, updated_at) VALUES (?, ?, ?)",
                [profile.user_id, _dumps(profile.to_dict()), _naive_utc(profile.updated_at)],
            )

    def save_seller_profile(self, profile: SellerProfile) -> None:
        with self._lock:
            self._connect().execute(
                """
                INSERT OR REPLACE INTO seller_profiles (user_id, listing_status, payload, updated_at)
                VALUES (?, ?, ?, ?)
                """,
                [
                    profile.user_id,
                    profile.listing_status.value,
                    _dumps(profile.to_dict()),
                    _naive_utc(profile.updated_at),
                ],
            )

    def save_off_platform_sellers(self, sellers: Iterable[OffPlatformSeller]) -> None:
        rows = [
            [s.id, pos, s.location.state if s.location else None, _dumps(s.to_dict())]
            for pos, s in enumerate(sellers)
        ]
        with self._lock:
            conn = self._connect()
            conn.begin()
            try:
                conn.execute("DELETE FROM off_platform_sellers")
                if rows:
                    conn.executemany(
                        "INSERT INTO off_platform_sellers (id, position, state, payload) VALUES (?, ?, ?, ?)",
                        rows,
                    )
                conn.execute(
                    """
                    INSERT OR REPLACE INTO catalog_meta (key, value)
                    VALUES ('off_platform', COALESCE((SELECT value FROM catalog_meta WHERE key = 'off_platform'), 0) + 1)
                    """
                )
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    # matches

    def get_matches(self, owner_id: str) -> list[MatchScore]:
        rows = self._fetch_payloads(
            "SELECT full_result FROM match_scores WHERE owner_id = ? ORDER BY position",
            [owner_id],
        )
        return [MatchScore.from_dict(d) for d in rows]

    def replace_matches(
        self, owner_id: str, matches: list[MatchScore], computed_at: datetime | None = None
    ) -> None:
        stamp = _naive_utc(computed_at or utcnow())
        rows = [
            [
                owner_id,
                m.id,
                pos,
                m.buyer_id,
                m.seller_id,
                m.off_platform_seller_id,
                m.overall_score,
                _dumps(m.to_dict()),
                _naive_utc(m.updated_at),
            ]
            for pos, m in enumerate(matches)
        ]
        with self._lock:
            conn = self._connect()
            conn.begin()
            try:
                conn.execute("DELETE FROM match_scores WHERE owner_id = ?", [owner_id])
                conn.execute("DELETE FROM match_snapshots WHERE owner_id = ?", [owner_id])
                conn.execute("INSERT INTO match_snapshots VALUES (?, ?)", [owner_id, stamp])
                if rows:
                    conn.executemany(
                        """
                        INSERT INTO match_scores
                        (owner_id, match_id, position, buyer_id, seller_id, off_platform_seller_id,
                         overall_score, full_result, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        rows,
                    )
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def all_matches(self) -> list[MatchScore]:
        rows = self._fetch_payloads("SELECT full_result FROM match_scores ORDER BY owner_id, position")
        return [MatchScore.from_dict(d) for d in rows]

    def snapshots(self) -> list[MatchSnapshot]:
        with self._lock:
            conn = self._connect()
            owners = conn.execute(
                "SELECT owner_id, computed_at FROM match_snapshots ORDER BY computed_at, owner_id"
            ).fetchall()
            rows = conn.execute(
                "SELECT owner_id, full_result FROM match_scores ORDER BY owner_id, position"
            ).fetchall()
        by_owner: dict[str, list[MatchScore]] = {}
        for owner_id, raw in rows:
            by_owner.setdefault(owner_id, []).append(MatchScore.from_dict(_loads(raw)))
        return [
            MatchSnapshot(
                owner_id=owner_id,
                computed_at=computed_at.replace(tzinfo=timezone.utc),
                matches=tuple(by_owner.get(owner_id, ())),
            )
            for owner_id, computed_at in owners
        ]

    # alerts

    def add_alerts(self, alerts: list[MatchAlert]) -> None:
        with self._lock:
            conn = self._connect()
            for a in alerts:
                conn.execute(
                    """
                    INSERT OR IGNORE INTO match_alerts (id, user_id, is_read, payload, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [a.id, a.user_id, a.read, _dumps(a.to_dict()), _naive_utc(a.created_at)],
                )

    def _alerts_where(self, clause: str, params: list[Any]) -> list[MatchAlert]:
        with self._lock:
            rows = self._connect().execute(
                f"SELECT payload, is_read FROM match_alerts WHERE {clause} ORDER BY created_at, id",
                params,
            ).fetchall()
        return [replace(MatchAlert.from_dict(_loads(payload)), read=bool(is_read)) for payload, is_read in rows]

    def list_alerts(self, user_id: str) -> list[MatchAlert]:
        return self._alerts_where("user_id = ?", [user_id])

    def get_alert(self, alert_id: str) -> MatchAlert | None:
        found = self._alerts_where("id = ?", [alert_id])
        return found[0] if found else None

    def mark_read(self, alert_id: str) -> MatchAlert | None:
        with self._lock:
            self._connect().execute("UPDATE match_alerts SET is_read = TRUE WHERE id = ?", [alert_id])
            return self.get_alert(alert_id)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
