"""
Phone booking line entry point.

Serves the Twilio voice webhooks and the email confirmation pages, or runs
the offline console demo for development.

Usage:
    Web server:   python main.py serve
    Console mode: python main.py console [--scenario booking]
"""

import logging
import sys

from phone_booking.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the FastAPI app under uvicorn (Twilio webhooks point here)."""
    import uvicorn

    from phone_booking.web.app import create_app

    logger.info("Starting booking line on port %d", settings.port)
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


def _run_console_mode(argv: list[str]) -> None:
    """Start the offline console demo (no API keys required)."""
    from console_demo import main as console_main

    console_main(argv)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode(sys.argv[2:])
    else:
        _run_server()
