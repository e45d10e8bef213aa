"""Tests for the matchmaking service facade."""

import gc
import threading

import pytest

from real_match.models import ListingStatus, PriceFlexibility, Role, SubscriptionStatus
from real_match.service import MatchmakingService


@pytest.fixture
def service(store, config, clock) -> MatchmakingService:
    return MatchmakingService(store, store, store, config=config, clock=clock)


@pytest.fixture
def populated(store, make_user, make_buyer, make_seller):
    store.save_user(make_user("buyer-1"))
    store.save_buyer_profile(make_buyer())
    for uid, kwargs in {
        "seller-1": {},
        "seller-2": dict(asking_price=480_000, price_flexibility=PriceFlexibility.FIRM, urgency_level=5),
    }.items():
        store.save_user(make_user(uid, Role.SELLER))
        store.save_seller_profile(make_seller(uid, **kwargs))
    return store


class TestRecompute:
    def test_matches_and_alerts(self, service, populated) -> None:
        matches = service.compute_matches("buyer-1")
        assert [m.seller_id for m in matches] == ["seller-1", "seller-2"]
        assert [m.overall_score for m in matches] == [100, 94]
        assert service.get_matches_for_user("buyer-1") == matches
        alerts = service.get_unread_alerts("buyer-1")
        assert len(alerts) == 2
        assert alerts[0].message.startswith("High-probability match (100%)")

    def test_repeat_recompute_is_quiet(self, service, populated, clock) -> None:
        service.compute_matches("buyer-1")
        clock.advance(minutes=10)
        service.compute_matches("buyer-1")
        assert len(service.get_unread_alerts("buyer-1")) == 2

    def test_user_locks_released_after_use(self, service, populated) -> None:
        held = service._user_lock("buyer-1")
        assert service._user_lock("buyer-1") is held
        service.compute_all()
        del held
        gc.collect()
        assert len(service._locks) == 0

    def test_mark_read(self, service, populated) -> None:
        service.compute_matches("buyer-1")
        first = service.get_unread_alerts("buyer-1")[0]
        assert service.mark_alert_read(first.id).read
        assert len(service.get_unread_alerts("buyer-1")) == 1

    def test_sold_listing_clears_matches(self, service, populated, make_seller) -> None:
        assert len(service.compute_matches("seller-1")) == 1
        matches = service.save_seller_profile(make_seller(listing_status=ListingStatus.SOLD))
        assert matches == []
        assert service.get_matches_for_user("seller-1") == []

    def test_save_buyer_profile(self, store, service, make_buyer, make_seller) -> None:
        store.save_seller_profile(make_seller())
        matches = service.save_buyer_profile(make_buyer())
        assert [m.seller_id for m in matches] == ["seller-1"]

    def test_compute_all(self, service, populated) -> None:
        counts = service.compute_all()
        assert counts == {"buyer-1": 2, "seller-1": 1, "seller-2": 1}
        assert len(service.get_unread_alerts("seller-1")) == 1

    def test_concurrent_recompute_alerts_once(self, service, populated) -> None:
        barrier = threading.Barrier(4)

        def run() -> None:
            barrier.wait()
            service.compute_matches("buyer-1")

        threads = [threading.Thread(target=run) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(service.get_unread_alerts("buyer-1")) == 2


class TestQueries:
    def test_visible_matches_for_trial(self, service, populated) -> None:
        service.compute_matches("buyer-1")
        result = service.get_visible_matches("buyer-1")
        assert len(result.unlocked) == 1
        assert result.locked_count == 1
        assert result.locked[0].counterparty_name is None

    def test_access_checks(self, service, populated, clock) -> None:
        assert service.can_access_matches("buyer-1")
        assert not service.is_trial_expired("buyer-1")
        clock.advance(days=8)
        assert not service.can_access_matches("buyer-1")
        assert service.is_trial_expired("buyer-1")

    def test_trial_days_left(self, store, service, populated, clock, make_user) -> None:
        assert service.trial_days_left("buyer-1") == 7
        clock.advance(hours=36)
        assert service.trial_days_left("buyer-1") == 6
        store.save_user(make_user("buyer-1", subscription_status=SubscriptionStatus.ACTIVE))
        assert service.trial_days_left("buyer-1") == 0
        assert service.trial_days_left("ghost") == 0

    def test_unknown_user(self, service) -> None:
        assert service.compute_matches("ghost") == []
        assert not service.can_access_matches("ghost")
        assert not service.is_trial_expired("ghost")
        assert service.get_visible_matches("ghost").views == []

    def test_owner_metrics(self, service, populated) -> None:
        service.compute_all()
        m = service.get_owner_dashboard_metrics()
        assert m.active_sellers == 2
        assert m.active_professional_buyers == 1
        assert m.total_matches == 2
        assert m.close_rate == 100
        assert m.profile_completion_rate == 100

    def test_buyer_recompute_retires_stale_seller_copy(self, store, service, populated, clock, make_seller) -> None:
        service.compute_all()
        store.save_seller_profile(make_seller("seller-2", listing_status=ListingStatus.SOLD))
        clock.advance(minutes=5)
        assert [m.seller_id for m in service.compute_matches("buyer-1")] == ["seller-1"]
        assert len(store.get_matches("seller-2")) == 1
        assert service.get_owner_dashboard_metrics().total_matches == 1

    def test_clock_drives_activity(self, service, populated, clock) -> None:
        clock.advance(days=31)
        assert service.get_owner_dashboard_metrics().active_sellers == 0
