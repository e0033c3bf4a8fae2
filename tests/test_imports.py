"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors.
"""


class TestSchemaImports:
    def test_import_provider_schema(self):
        from booking_engine.schemas.provider_schema import (
            AvailabilityStatus, ServiceProvider, WorkingHoursUpdate,
        )
        assert AvailabilityStatus.BUSY == "busy"
        assert "working_days" in ServiceProvider.model_computed_fields
        assert WorkingHoursUpdate is not None

    def test_import_booking_schema(self):
        from booking_engine.schemas.booking_schema import ACTIVE_STATUSES, BookingStatus
        assert BookingStatus.COMPLETED not in ACTIVE_STATUSES


class TestSchedulingImports:
    def test_import_errors(self):
        from booking_engine.scheduling.errors import (
            CapacityExceededError, LeadTimeViolationError, SchedulingError, SlotUnavailableError,
        )
        assert issubclass(SlotUnavailableError, SchedulingError)
        assert issubclass(CapacityExceededError, SchedulingError)
        assert LeadTimeViolationError("x", 24).reason == "lead_time_violation"

    def test_import_engine(self):
        from booking_engine.scheduling.availability_service import AvailabilityService
        from booking_engine.scheduling.ledger import BookingLedger
        from booking_engine.scheduling.state_machine import BookingStateMachine
        from booking_engine.stores.provider_store import ProviderStore
        providers, ledger = ProviderStore(), BookingLedger()
        assert AvailabilityService(providers, ledger) is not None
        assert BookingStateMachine(ledger, providers) is not None

    def test_import_schedule_view(self):
        from booking_engine.scheduling.schedule_view import ScheduleSummary, build
        assert callable(build)
        assert ScheduleSummary is not None


class TestApiImports:
    def test_create_app(self):
        from booking_engine.api.app import create_app
        app = create_app()
        paths = set(app.openapi()["paths"])
        assert "/api/services/book" in paths
        assert "/admin/service-management/{provider_id}/working-hours" in paths


class TestConfigImport:
    def test_import_config(self):
        from booking_engine.config import settings
        assert settings.scheduling.default_service_duration >= 15
        assert settings.scheduling.timezone


class TestConsoleDemo:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert session.provider.working_days == [
            "monday", "tuesday", "wednesday", "thursday", "friday",
        ]

    def test_booking_scenario_runs(self, capsys):
        from console_demo import ConsoleSession
        ConsoleSession().run_scenario("booking")
        assert "complete" in capsys.readouterr().out
