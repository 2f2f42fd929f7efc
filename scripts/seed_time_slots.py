"""Create the fixed daily time slots if they are missing.

Run:
  PYTHONPATH=backend python scripts/seed_time_slots.py
"""

from __future__ import annotations

import logging

import academic_scheduler.models  # noqa: F401
from academic_scheduler.core.config import get_settings
from academic_scheduler.db.base import Base
from academic_scheduler.db.session import SessionLocal, engine
from academic_scheduler.main import configure_logging
from academic_scheduler.services.availability import SESSION_TO_TIME_SLOT
from academic_scheduler.services.time_slots import time_slot_catalog

logger = logging.getLogger("seed_time_slots")


def main() -> None:
    configure_logging(get_settings().log_level)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        summary = time_slot_catalog.ensure_seeded(db)
        for slot in time_slot_catalog.all(db):
            logger.info("%2d  %s", slot.order_index, slot.label)
    finally:
        db.close()

    logger.info("Created %d, existing %d, total %d", summary.created, summary.existing, summary.total)
    logger.info("Session mapping:")
    for session, label in SESSION_TO_TIME_SLOT.items():
        logger.info("  %s -> %s", session, label)


if __name__ == "__main__":
    main()
