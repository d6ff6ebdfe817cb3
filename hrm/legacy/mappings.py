"""
Value conversion for rows read from the legacy MySQL HRIS.

The legacy schema stores enums as small integers, booleans as 0/1 (sometimes
BIT columns), and "empty" dates as MySQL zero dates. Everything the importers
write goes through these helpers.
"""
import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

SEX_MAP = {1: 'LAKILAKI', 2: 'PEREMPUAN'}
EMPLOYMENT_TYPE_MAP = {1: 'KONTRAK', 2: 'TETAP', 3: 'HARIAN'}
STATUS_MAP = {1: 'TIDAK_AKTIF', 2: 'AKTIF'}

ZERO_DATES = ('0000-00-00', '0000-00-00 00:00:00')


def map_enum(mapping: dict, value: Any, default: str) -> str:
    try:
        return mapping.get(int(value), default)
    except (TypeError, ValueError):
        return default


def to_datetime(value: Any) -> Optional[datetime.datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, bytes):
        value = value.decode('utf-8', 'ignore')
    text = str(value).strip()
    if not text or text in ZERO_DATES or text.startswith('0000-00-00'):
        return None
    for fmt in ('%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d'):
        try:
            return datetime.datetime.strptime(text[:19], fmt)
        except ValueError:
            continue
    return None


def to_date(value: Any) -> Optional[datetime.date]:
    if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
        return value
    parsed = to_datetime(value)
    return parsed.date() if parsed else None


def is_flag_set(value: Any) -> bool:
    """Legacy 0/1 flag. Only an explicit 1 counts as set."""
    if isinstance(value, bytes):
        return int.from_bytes(value, 'big') == 1
    if isinstance(value, bool):
        return value
    try:
        return int(value) == 1
    except (TypeError, ValueError):
        return False


def flag_or_default(row: dict, column: str, default: bool = True) -> bool:
    if column not in row or row[column] is None:
        return default
    return is_flag_set(row[column])


def or_none(value: Any) -> Any:
    return value if value else None


def clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode('utf-8', 'ignore')
    text = str(value).strip()
    return text or None


def to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def to_decimal(value: Any, default: Decimal = Decimal('0')) -> Decimal:
    if value is None or value == '':
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def normalize_clock(value: Any) -> Optional[str]:
    """'07.45' / '07:45:12' -> '07:45'."""
    text = clean_str(value)
    if not text:
        return None
    text = text.replace('.', ':')
    parts = text.split(':')
    if len(parts) < 2:
        return None
    return f"{parts[0].zfill(2)}:{parts[1][:2].zfill(2)}"
