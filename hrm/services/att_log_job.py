"""
Scheduled att_log sync
======================
Dijalankan oleh APScheduler jam 01:00, 10:00 dan 18:00 WIB.

Pulls the fingerprint taps of the last ATT_LOG_SYNC_DAYS days from the legacy
MySQL database into att_log.
"""
import logging
from datetime import datetime, timedelta

import pytz

from hrm.core.config import settings
from hrm.database import SessionLocal
from hrm.legacy.client import LegacyConfigError, open_source
from hrm.legacy.importers import sync_att_logs

logger = logging.getLogger("att_log_job")


def att_log_since():
    tz = pytz.timezone(settings.TIMEZONE)
    return (datetime.now(tz) - timedelta(days=settings.ATT_LOG_SYNC_DAYS)).date()


def run_att_log_sync():
    since = att_log_since()

    db = SessionLocal()
    try:
        logger.info(f"[AttLogSync] Tick, syncing taps since {since}")
        with open_source(db) as source:
            stats = sync_att_logs(db, source, since)
        logger.info(f"[AttLogSync] Done: {stats['imported']} new, {stats['updated']} updated, {stats['errors']} errors")
        return stats
    except LegacyConfigError as e:
        logger.warning(f"[AttLogSync] Skipped: {e}")
        return None
    except Exception as e:
        db.rollback()
        logger.error(f"[AttLogSync] Error: {e}")
        raise
    finally:
        db.close()
