"""
Indonesian public holiday sync.

Sources, in order:
- dayoffapi.vercel.app (includes cuti bersama)
- date.nager.at (public holidays only)
2026 uses the official SKB list below instead of the APIs.
"""
import datetime
import logging
from typing import List, Tuple

import requests
from sqlalchemy.orm import Session

from hrm.core.config import settings
from hrm.models.models import Holiday

logger = logging.getLogger("holiday_sync")

MAX_KETERANGAN = 40
TYPE_NATIONAL = 'LIBUR_NASIONAL'
TYPE_CUTI_BERSAMA = 'CUTI_BERSAMA'

HOLIDAYS_2026 = [
    ('2026-01-01', 'Tahun Baru Masehi'),
    ('2026-01-16', 'Isra Mi\'raj Nabi Muhammad SAW'),
    ('2026-02-17', 'Tahun Baru Imlek 2577 Kongzili'),
    ('2026-03-19', 'Hari Suci Nyepi (Tahun Baru Saka 1948)'),
    ('2026-03-21', 'Idul Fitri 1447 H'),
    ('2026-03-22', 'Idul Fitri 1447 H'),
    ('2026-04-03', 'Wafat Isa Almasih'),
    ('2026-04-05', 'Paskah'),
    ('2026-05-01', 'Hari Buruh Internasional'),
    ('2026-05-14', 'Kenaikan Isa Almasih'),
    ('2026-05-27', 'Idul Adha 1447 H'),
    ('2026-05-31', 'Hari Raya Waisak 2570 BE'),
    ('2026-06-01', 'Hari Lahir Pancasila'),
    ('2026-06-16', 'Tahun Baru Islam 1448 H'),
    ('2026-08-17', 'Hari Kemerdekaan RI'),
    ('2026-08-25', 'Maulid Nabi Muhammad SAW'),
    ('2026-12-25', 'Hari Raya Natal'),
]


class HolidaySourceError(Exception):
    pass


def _holiday_items(response) -> List[dict]:
    """Decoded feed, which must be a JSON list of objects."""
    payload = response.json()
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise ValueError(f"Unexpected holiday payload: {str(payload)[:100]}")
    return payload


def fetch_primary(year: int) -> List[dict]:
    response = requests.get(
        settings.HOLIDAY_API_PRIMARY,
        params={"year": year},
        timeout=settings.HOLIDAY_API_TIMEOUT
    )
    response.raise_for_status()
    return [
        {
            "date": item.get("tanggal"),
            "name": item.get("keterangan"),
            "cuti_bersama": bool(item.get("is_cuti")),
        }
        for item in _holiday_items(response)
    ]


def fetch_backup(year: int) -> List[dict]:
    response = requests.get(
        f"{settings.HOLIDAY_API_BACKUP}/{year}/ID",
        timeout=settings.HOLIDAY_API_TIMEOUT
    )
    response.raise_for_status()
    return [
        {"date": item.get("date"), "name": item.get("localName"), "cuti_bersama": False}
        for item in _holiday_items(response)
    ]


def fetch_holidays(year: int) -> Tuple[List[dict], str]:
    if year == 2026:
        return [{"date": d, "name": n, "cuti_bersama": False} for d, n in HOLIDAYS_2026], 'manual-override-2026'
    try:
        return fetch_primary(year), 'primary'
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"[HolidaySync] Primary API failed, trying backup: {e}")
    try:
        return fetch_backup(year), 'backup'
    except (requests.RequestException, ValueError) as e:
        logger.error(f"[HolidaySync] Backup API failed: {e}")
        raise HolidaySourceError("Both APIs failed. Please try again later or input manually.")


def _parse_date(value) -> datetime.date:
    return datetime.date.fromisoformat(str(value)[:10])


def sync_holidays(db: Session, year: int) -> dict:
    items, source = fetch_holidays(year)

    if source == 'manual-override-2026':
        db.query(Holiday).filter(
            Holiday.tgl_libur >= datetime.date(year, 1, 1),
            Holiday.tgl_libur <= datetime.date(year, 12, 31)
        ).delete(synchronize_session=False)

    synced = 0
    for item in items:
        try:
            tgl_libur = _parse_date(item["date"])
        except (TypeError, ValueError):
            logger.warning(f"[HolidaySync] Skipping invalid date {item.get('date')!r}")
            continue
        keterangan = (item.get("name") or '')[:MAX_KETERANGAN]
        type_day = TYPE_CUTI_BERSAMA if item.get("cuti_bersama") else TYPE_NATIONAL

        holiday = db.query(Holiday).filter(Holiday.tgl_libur == tgl_libur).first()
        if holiday is None:
            holiday = Holiday(tgl_libur=tgl_libur)
            db.add(holiday)
        holiday.keterangan = keterangan
        holiday.type_day = type_day
        holiday.is_repeat = False
        # a date repeated in the feed updates the pending row
        db.flush()
        synced += 1

    db.commit()
    logger.info(f"[HolidaySync] {synced} holidays for {year} (source: {source})")
    return {"count": synced, "source": source, "year": year}
