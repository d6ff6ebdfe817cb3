"""
Attendance arithmetic shared by the attendance endpoints and the legacy importer.
Times are "HH:mm" strings as stored on absent.std_* / absent.real_*.
"""
from typing import Iterable, List, Optional

EMPTY_CLOCK = '--:--'


def time_to_minutes(value: Optional[str]) -> Optional[int]:
    if not value or not isinstance(value, str):
        return None
    parts = value.strip().replace('.', ':').split(':')
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]) * 60 + int(parts[1])
    except ValueError:
        return None


def calculate_late(std_in: Optional[str], real_in: Optional[str]) -> int:
    """Minutes checked in after the scheduled start, 0 when on time or unknown."""
    std_min = time_to_minutes(std_in)
    real_min = time_to_minutes(real_in)
    if std_min is None or real_min is None:
        return 0
    return max(0, real_min - std_min)


def calculate_early(std_out: Optional[str], real_out: Optional[str]) -> int:
    """Minutes checked out before the scheduled end, 0 when on time or unknown."""
    std_min = time_to_minutes(std_out)
    real_min = time_to_minutes(real_out)
    if std_min is None or real_min is None:
        return 0
    return max(0, std_min - real_min)


def has_clock(value: Optional[str]) -> bool:
    return bool(value) and value != EMPTY_CLOCK and value.strip() != ''


def sanitize_status(kd_absen: Optional[str], real_in: Optional[str], real_out: Optional[str]) -> Optional[str]:
    # 'H' (hadir) without any tap becomes 'A' (alpha)
    if kd_absen == 'H' and not has_clock(real_in) and not has_clock(real_out):
        return 'A'
    return kd_absen


def dedupe_taps(logs: Iterable) -> List:
    """Drop consecutive taps that repeat the previous jam and cflag."""
    result = []
    previous = None
    for log in logs:
        key = (log.jam, log.cflag)
        if key == previous:
            continue
        result.append(log)
        previous = key
    return result
