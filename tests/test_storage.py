"""Tests for DuckDB storage and match export."""

import csv
import json
from datetime import timedelta

import pytest

from conftest import NOW, TUCSON
from real_match.access import MatchView
from real_match.indexer import MatchIndexer
from real_match.models import MatchAlert, Role
from real_match.repositories import InMemoryStore
from real_match.storage import Storage, export_csv, export_json


@pytest.fixture
def db(tmp_path):
    storage = Storage(tmp_path / "test.duckdb")
    yield storage
    storage.close()


def _alert(alert_id: str, created_at=NOW, user_id: str = "buyer-1") -> MatchAlert:
    return MatchAlert(
        id=alert_id,
        user_id=user_id,
        buyer_id="buyer-1",
        counterparty_id="seller-1",
        match_id="buyer-1:seller:seller-1",
        overall_score=90,
        message="High-probability match (90%)",
        created_at=created_at,
    )


class TestProfiles:
    def test_round_trip(self, db, make_user, make_buyer, make_seller, make_off_platform) -> None:
        user = make_user("buyer-1")
        buyer = make_buyer()
        seller = make_seller()
        op = make_off_platform()
        db.save_user(user)
        db.save_buyer_profile(buyer)
        db.save_seller_profile(seller)
        db.save_off_platform_sellers([op])

        assert db.get_user("buyer-1") == user
        assert db.get_buyer_profile("buyer-1") == buyer
        assert db.get_seller_profile("seller-1") == seller
        assert db.get_off_platform_seller("op-1") == op
        assert db.get_user("missing") is None

    def test_save_replaces(self, db, make_seller) -> None:
        db.save_seller_profile(make_seller(asking_price=400_000))
        db.save_seller_profile(make_seller(asking_price=450_000))
        assert [s.asking_price for s in db.list_seller_profiles()] == [450_000]

    def test_catalog_version(self, db, make_off_platform) -> None:
        assert db.catalog_version() == 0
        db.save_off_platform_sellers([make_off_platform("op-1"), make_off_platform("op-2")])
        db.save_off_platform_sellers([make_off_platform("op-2"), make_off_platform("op-3", location=TUCSON)])
        assert db.catalog_version() == 2
        assert [s.id for s in db.list_off_platform_sellers()] == ["op-2", "op-3"]

    def test_persists_across_reopen(self, tmp_path, make_user) -> None:
        path = tmp_path / "persist.duckdb"
        first = Storage(path)
        first.save_user(make_user("seller-1", Role.SELLER))
        first.close()
        second = Storage(path)
        assert second.get_user("seller-1").role is Role.SELLER
        second.close()


class TestMatches:
    def test_replace_keeps_order(self, db, make_match) -> None:
        ranked = [make_match(92, seller_id="b"), make_match(88, seller_id="a")]
        db.replace_matches("buyer-1", ranked)
        assert db.get_matches("buyer-1") == ranked

    def test_replace_swaps_whole_set(self, db, make_match) -> None:
        db.replace_matches("buyer-1", [make_match(92, seller_id="a"), make_match(80, seller_id="b")])
        db.replace_matches("buyer-1", [make_match(70, seller_id="c")])
        assert [m.seller_id for m in db.get_matches("buyer-1")] == ["c"]
        db.replace_matches("buyer-1", [])
        assert db.get_matches("buyer-1") == []

    def test_snapshots_per_owner(self, db, make_match) -> None:
        db.replace_matches("buyer-1", [make_match(90)])
        db.replace_matches("seller-1", [make_match(90)])
        db.replace_matches("buyer-1", [])
        assert len(db.get_matches("seller-1")) == 1
        assert len(db.all_matches()) == 1

    def test_snapshots_carry_computed_at(self, db, make_match) -> None:
        db.replace_matches("seller-1", [make_match(90)], computed_at=NOW + timedelta(hours=1))
        db.replace_matches("buyer-1", [], computed_at=NOW)
        snaps = db.snapshots()
        assert [(s.owner_id, s.computed_at) for s in snaps] == [
            ("buyer-1", NOW),
            ("seller-1", NOW + timedelta(hours=1)),
        ]
        assert snaps[0].matches == ()
        assert [m.overall_score for m in snaps[1].matches] == [90]

    def test_in_memory_database(self, make_match) -> None:
        storage = Storage(":memory:")
        storage.replace_matches("buyer-1", [make_match(75)])
        assert storage.get_matches("buyer-1")[0].overall_score == 75
        storage.close()


class TestAlerts:
    def test_add_and_list(self, db) -> None:
        db.add_alerts([_alert("a2", NOW + timedelta(minutes=1)), _alert("a1")])
        db.add_alerts([_alert("other", user_id="buyer-2")])
        assert [a.id for a in db.list_alerts("buyer-1")] == ["a1", "a2"]

    def test_mark_read_is_monotonic(self, db) -> None:
        db.add_alerts([_alert("a1")])
        assert db.mark_read("a1").read
        db.add_alerts([_alert("a1")])
        assert db.get_alert("a1").read
        assert db.mark_read("missing") is None


class TestIndexerOnStorage:
    def test_matches_in_memory_result(self, db, clock, engine, make_user, make_buyer, make_seller, make_off_platform) -> None:
        memory = InMemoryStore()
        for repo in (db, memory):
            repo.save_user(make_user("buyer-1"))
            repo.save_buyer_profile(make_buyer())
            repo.save_seller_profile(make_seller())
            repo.save_seller_profile(make_seller("seller-3", location=TUCSON))
            repo.save_off_platform_sellers([make_off_platform()])
        expected = MatchIndexer(memory, memory, engine=engine, clock=clock).recompute("buyer-1")
        actual = MatchIndexer(db, db, engine=engine, clock=clock).recompute("buyer-1")
        assert actual == expected
        assert db.get_matches("buyer-1") == expected


class TestExport:
    @pytest.fixture
    def views(self, make_match) -> list[MatchView]:
        return [
            MatchView(rank=1, match=make_match(95), counterparty_name="Sam Seller", city="Phoenix", state="AZ"),
            MatchView(rank=2, match=make_match(88, seller_id="seller-2"), locked=True),
        ]

    def test_csv(self, tmp_path, views) -> None:
        path = tmp_path / "out" / "matches.csv"
        export_csv(views, path)
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["rank"] for r in rows] == ["1", "2"]
        assert rows[0]["counterparty_id"] == "seller-1"
        assert rows[0]["key_alignment_factors"] == "Within budget range"
        assert rows[1]["counterparty_id"] == ""
        assert rows[1]["match_id"] == ""
        assert rows[1]["overall_score"] == "88"

    def test_json(self, tmp_path, views) -> None:
        path = tmp_path / "matches.json"
        export_json(views, path, user_id="buyer-1")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["user_id"] == "buyer-1"
        assert data["count"] == 2
        assert data["locked_count"] == 1
        assert data["matches"][0]["counterparty_name"] == "Sam Seller"
        locked = data["matches"][1]["match"]
        assert locked["overall_score"] == 88
        assert not {"id", "buyer_id", "seller_id", "off_platform_seller_id"} & locked.keys()
        assert "seller-2" not in json.dumps(data["matches"][1])
