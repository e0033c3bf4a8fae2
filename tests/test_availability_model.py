"""Tests for weekly availability parsing and validation."""

from datetime import time

import pytest

from booking_engine.scheduling.availability_model import AvailabilityModel
from booking_engine.scheduling.errors import InvalidScheduleError
from booking_engine.schemas.provider_schema import DaySchedule
from tests.conftest import NEXT_MONDAY, NEXT_SATURDAY, WEEKDAY_HOURS, make_provider


class TestFromPayload:
    def test_weekday_schedule(self):
        model = AvailabilityModel.from_payload(WEEKDAY_HOURS, 60, 24)
        assert model.working_days == ["monday", "tuesday", "wednesday", "thursday", "friday"]
        assert model.working_hours["monday"].start == time(9, 0)
        assert model.working_hours["monday"].end == time(18, 0)

    def test_missing_days_are_closed(self):
        model = AvailabilityModel.from_payload(
            [{"day": "tuesday", "available": True, "start": "10:00", "end": "14:00"}], 60, 24
        )
        assert model.working_days == ["tuesday"]
        assert not model.working_hours["sunday"].available

    def test_working_days_follow_calendar_order(self):
        entries = [
            {"day": "friday", "available": True, "start": "09:00", "end": "12:00"},
            {"day": "monday", "available": True, "start": "09:00", "end": "12:00"},
        ]
        model = AvailabilityModel.from_payload(entries, 60, 24)
        assert model.working_days == ["monday", "friday"]

    def test_day_names_are_case_insensitive(self):
        model = AvailabilityModel.from_payload(
            [{"day": "Monday", "available": True, "start": "09:00", "end": "12:00"}], 60, 24
        )
        assert model.working_days == ["monday"]

    def test_duplicate_day_rejected(self):
        entries = WEEKDAY_HOURS + [{"day": "monday", "available": False}]
        with pytest.raises(InvalidScheduleError, match="Duplicate"):
            AvailabilityModel.from_payload(entries, 60, 24)

    def test_start_after_end_rejected(self):
        entries = [{"day": "monday", "available": True, "start": "18:00", "end": "09:00"}]
        with pytest.raises(InvalidScheduleError, match="Monday"):
            AvailabilityModel.from_payload(entries, 60, 24)

    def test_equal_start_and_end_rejected(self):
        entries = [{"day": "monday", "available": True, "start": "09:00", "end": "09:00"}]
        with pytest.raises(InvalidScheduleError):
            AvailabilityModel.from_payload(entries, 60, 24)

    def test_disabled_day_window_not_checked(self):
        entries = [{"day": "monday", "available": False, "start": "18:00", "end": "09:00"}]
        model = AvailabilityModel.from_payload(entries, 60, 24)
        assert model.working_days == []

    def test_unparsable_time_rejected(self):
        entries = [{"day": "monday", "available": True, "start": "25:00", "end": "26:00"}]
        with pytest.raises(InvalidScheduleError, match="monday"):
            AvailabilityModel.from_payload(entries, 60, 24)

    def test_unknown_weekday_rejected(self):
        entries = [{"day": "funday", "available": True, "start": "09:00", "end": "17:00"}]
        with pytest.raises(InvalidScheduleError, match="funday"):
            AvailabilityModel.from_payload(entries, 60, 24)


class TestBounds:
    @pytest.mark.parametrize("duration", [15, 60, 480])
    def test_duration_within_bounds(self, duration):
        AvailabilityModel.from_payload(WEEKDAY_HOURS, duration, 24)

    @pytest.mark.parametrize("duration", [0, 14, 481])
    def test_duration_out_of_bounds(self, duration):
        with pytest.raises(InvalidScheduleError, match="Service duration"):
            AvailabilityModel.from_payload(WEEKDAY_HOURS, duration, 24)

    @pytest.mark.parametrize("lead", [1, 168])
    def test_lead_within_bounds(self, lead):
        AvailabilityModel.from_payload(WEEKDAY_HOURS, 60, lead)

    @pytest.mark.parametrize("lead", [0, 169])
    def test_lead_out_of_bounds(self, lead):
        with pytest.raises(InvalidScheduleError, match="advance booking"):
            AvailabilityModel.from_payload(WEEKDAY_HOURS, 60, lead)


class TestIsOpen:
    def test_open_weekday(self):
        model = AvailabilityModel.from_payload(WEEKDAY_HOURS, 60, 24)
        day = model.is_open(NEXT_MONDAY)
        assert day is not None
        assert day.start == time(9, 0)

    def test_closed_weekend(self):
        model = AvailabilityModel.from_payload(WEEKDAY_HOURS, 60, 24)
        assert model.is_open(NEXT_SATURDAY) is None

    def test_validate_direct_construction(self):
        model = AvailabilityModel(
            working_hours={"monday": DaySchedule(available=True, start=time(12), end=time(11))}
        )
        with pytest.raises(InvalidScheduleError):
            model.validate()


class TestFromProvider:
    def test_unconfigured_provider_gets_default_week(self, providers):
        provider = make_provider(providers)
        model = AvailabilityModel.from_provider(provider)
        assert len(model.working_days) == 7
        assert model.is_open(NEXT_SATURDAY).end == time(18, 0)

    def test_configured_provider(self, provider):
        model = AvailabilityModel.from_provider(provider)
        assert model.working_days == provider.working_days
        assert model.avg_service_duration == 60
        assert model.min_advance_booking_hours == 24
