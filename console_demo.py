"""
Offline console demo: drives the real booking engine without the HTTP server.

Registers a provider, lists free slots, claims them and walks bookings
through their lifecycle, printing every step. No network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario race
    python console_demo.py --scenario capacity
"""

import argparse
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

from booking_engine.config import settings
from booking_engine.scheduling.availability_service import AvailabilityService
from booking_engine.scheduling.errors import SchedulingError
from booking_engine.scheduling.ledger import BookingLedger
from booking_engine.scheduling.state_machine import BookingStateMachine
from booking_engine.schemas.provider_schema import ProviderCreate
from booking_engine.stores.provider_store import ProviderStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """Runs scripted scheduling scenarios against an in-memory engine."""

    SCENARIOS = ("booking", "race", "capacity")

    def __init__(self) -> None:
        self.providers = ProviderStore()
        self.ledger = BookingLedger()
        self.service = AvailabilityService(self.providers, self.ledger)
        self.machine = BookingStateMachine(self.ledger, self.providers)
        self.provider = self.providers.create(
            ProviderCreate(business_name="Northside Heating", city_id=1, area_id=10, is_verified=True)
        )
        self.service.configure_working_hours(
            self.provider.id,
            [{"day": d, "available": True, "start": "09:00", "end": "18:00"}
             for d in ("monday", "tuesday", "wednesday", "thursday", "friday")],
            avg_service_duration=60,
            min_advance_booking_hours=24,
        )

    def say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[engine]{RESET} {GREEN}{text}{RESET}")

    def fail(self, text: str) -> None:
        print(f"{RED}{BOLD}[engine]{RESET} {RED}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _target_monday(self) -> date:
        today = self.service.today()
        return today + timedelta(days=(7 - today.weekday()) % 7 + 7)

    def run_scenario(self, scenario: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  BOOKING ENGINE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Provider: {self.provider.display_name} "
              f"(timezone {settings.scheduling.timezone}){RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        getattr(self, f"_scenario_{scenario}")()

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    def _scenario_booking(self) -> None:
        monday = self._target_monday()
        slots = self.service.get_free_slots(self.provider.id, monday)
        self.say(f"{len(slots)} free slots on {monday.isoformat()}:")
        self.system_log(", ".join(s.label for s in slots))

        booking = self.service.claim_slot(
            self.provider.id, monday, slots[0].start, order_ref="ORD-1001"
        )
        self.say(f"Claimed {booking.time_slot} as {booking.reference}")

        print(f"\n{BLUE}[admin]{RESET} claim the same slot again")
        try:
            self.service.claim_slot(self.provider.id, monday, slots[0].start)
        except SchedulingError as exc:
            self.fail(f"{exc.reason}: {exc.message}")

        self.machine.start(booking.id)
        self.machine.complete(booking.id, rating=5)
        provider = self.providers.get(self.provider.id)
        self.say(f"Booking {booking.reference} is {booking.status.value}")
        self.system_log(
            f"History: {' -> '.join(e.status.value for e in booking.history)}; "
            f"rating {provider.rating} from {provider.total_reviews} review(s)"
        )

    def _scenario_race(self) -> None:
        monday = self._target_monday()
        start = self.service.get_free_slots(self.provider.id, monday)[2].start
        callers = 8
        self.say(f"{callers} clients racing for {monday.isoformat()} {start.strftime('%H:%M')}")

        def attempt(n: int) -> str:
            try:
                b = self.service.claim_slot(self.provider.id, monday, start, order_ref=f"RACE-{n}")
                return f"RACE-{n}: won ({b.reference})"
            except SchedulingError as exc:
                return f"RACE-{n}: {exc.reason}"

        with ThreadPoolExecutor(max_workers=callers) as pool:
            for line in pool.map(attempt, range(callers)):
                self.system_log(line)

    def _scenario_capacity(self) -> None:
        monday = self._target_monday()
        cap = self.providers.get(self.provider.id).max_daily_orders
        self.say(f"Daily cap is {cap}; claiming {cap + 1} slots on {monday.isoformat()}")
        for slot in self.service.get_free_slots(self.provider.id, monday)[: cap + 1]:
            try:
                booking = self.service.claim_slot(self.provider.id, monday, slot.start)
                self.system_log(f"{slot.label}: {booking.reference}")
            except SchedulingError as exc:
                self.fail(f"{slot.label}: {exc.reason}: {exc.message}")
        remaining = self.service.get_free_slots(self.provider.id, monday)
        self.say(f"Free slots left on {monday.isoformat()}: {len(remaining)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline booking engine demo")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleSession.SCENARIOS),
        default="booking",
        help="Scripted scenario to play",
    )
    args = parser.parse_args()
    ConsoleSession().run_scenario(args.scenario)


if __name__ == "__main__":
    main()
