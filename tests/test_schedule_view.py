"""Tests for provider schedule summaries."""

from datetime import date, time

from booking_engine.scheduling import schedule_view
from tests.conftest import NEXT_MONDAY

SUNDAY = date(2026, 10, 25)


class TestBuild:
    def test_empty_week(self, provider):
        summary = schedule_view.build(provider, [], NEXT_MONDAY, SUNDAY)
        assert len(summary.days) == 7
        assert summary.open_minutes == 5 * 540
        assert summary.booked_minutes == 0
        assert summary.utilisation == 0.0

    def test_weekend_not_working(self, provider):
        summary = schedule_view.build(provider, [], NEXT_MONDAY, SUNDAY)
        assert [d.working for d in summary.days] == [True] * 5 + [False] * 2

    def test_counts_and_minutes(self, service, machine, ledger, provider):
        first = service.claim_slot(provider.id, NEXT_MONDAY, time(9, 0))
        service.claim_slot(provider.id, NEXT_MONDAY, time(10, 0))
        cancelled = service.claim_slot(provider.id, NEXT_MONDAY, time(11, 0))
        machine.start(first.id)
        machine.cancel(cancelled.id)

        bookings = ledger.for_provider_range(provider.id, NEXT_MONDAY, SUNDAY)
        summary = schedule_view.build(provider, bookings, NEXT_MONDAY, SUNDAY)

        assert summary.status_counts == {
            "scheduled": 1, "in_progress": 1, "completed": 0, "cancelled": 1,
        }
        monday = summary.days[0]
        assert len(monday.bookings) == 3
        assert monday.booked_minutes == 120
        assert round(monday.utilisation, 3) == round(120 / 540, 3)

    def test_bookings_outside_range_ignored(self, service, ledger, provider):
        service.claim_slot(provider.id, date(2026, 10, 26), time(9, 0))
        bookings = ledger.for_provider_range(provider.id, NEXT_MONDAY, date(2026, 10, 30))
        summary = schedule_view.build(provider, bookings, NEXT_MONDAY, SUNDAY)
        assert summary.booked_minutes == 0

    def test_to_dict(self, service, ledger, provider):
        service.claim_slot(provider.id, NEXT_MONDAY, time(9, 0), order_ref="ORD-5")
        bookings = ledger.for_provider_range(provider.id, NEXT_MONDAY, NEXT_MONDAY)
        payload = schedule_view.build(provider, bookings, NEXT_MONDAY, NEXT_MONDAY).to_dict()
        assert payload["start_date"] == "2026-10-19"
        assert payload["days"][0]["bookings"][0]["time_slot"] == "09:00-10:00"
        assert payload["days"][0]["bookings"][0]["order_ref"] == "ORD-5"
        assert payload["booked_minutes"] == 60
