# app/core/logging.py
import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # APScheduler is chatty at INFO on every job run
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
