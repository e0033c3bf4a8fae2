"""
Booking engine entry point.

Serves the HTTP API with uvicorn, or runs the offline console demo.

Usage:
    HTTP server:  python main.py
    Console mode: python main.py console
"""

import logging
import sys

from booking_engine.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the FastAPI app on the configured host and port."""
    import uvicorn

    from booking_engine.api.app import create_app

    logger.info("Serving on %s:%s", settings.server.host, settings.server.port)
    uvicorn.run(create_app(), host=settings.server.host, port=settings.server.port)


def _run_console_mode() -> None:
    """Run the scripted console demo (no server)."""
    from console_demo import main as console_main

    sys.argv = [sys.argv[0]] + sys.argv[2:]
    console_main()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server()
