"""Daily counter reset running alongside the HTTP server."""

import asyncio
import logging
from datetime import datetime, timedelta

from booking_engine.stores.provider_store import ProviderStore
from booking_engine.utils import local_now

logger = logging.getLogger(__name__)


def seconds_until_midnight(now: datetime) -> float:
    """Seconds from ``now`` until the next local midnight."""
    tomorrow = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return max((tomorrow - now).total_seconds(), 0.0)


async def daily_reset_loop(providers: ProviderStore, tz_name: str) -> None:
    """Zero every provider's daily order counter at each local midnight."""
    while True:
        try:
            await asyncio.sleep(seconds_until_midnight(local_now(tz_name)))
            count = providers.reset_all_daily_orders()
            logger.info("Nightly reset done for %d providers", count)
        except asyncio.CancelledError:
            logger.info("Daily reset loop stopped")
            raise
        except Exception:
            logger.exception("Daily reset failed; retrying in 60s")
            await asyncio.sleep(60)
