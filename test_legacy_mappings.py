import datetime
from decimal import Decimal

from hrm.legacy.mappings import (
    EMPLOYMENT_TYPE_MAP, SEX_MAP, STATUS_MAP, clean_str, flag_or_default, is_flag_set, map_enum,
    normalize_clock, to_date, to_datetime, to_decimal, to_int,
)


def test_enum_codes_map_to_names():
    assert map_enum(SEX_MAP, 2, 'LAKILAKI') == 'PEREMPUAN'
    assert map_enum(SEX_MAP, '1', 'PEREMPUAN') == 'LAKILAKI'
    assert map_enum(EMPLOYMENT_TYPE_MAP, 3, 'TETAP') == 'HARIAN'
    assert map_enum(STATUS_MAP, 1, 'AKTIF') == 'TIDAK_AKTIF'


def test_unknown_enum_codes_use_default():
    assert map_enum(SEX_MAP, 9, 'LAKILAKI') == 'LAKILAKI'
    assert map_enum(STATUS_MAP, None, 'AKTIF') == 'AKTIF'
    assert map_enum(EMPLOYMENT_TYPE_MAP, 'x', 'TETAP') == 'TETAP'


def test_zero_dates_become_none():
    assert to_date('0000-00-00') is None
    assert to_datetime('0000-00-00 00:00:00') is None
    assert to_date('') is None
    assert to_date(None) is None


def test_dates_are_parsed():
    assert to_date('1990-05-17') == datetime.date(1990, 5, 17)
    assert to_date(datetime.datetime(2026, 1, 2, 8, 30)) == datetime.date(2026, 1, 2)
    assert to_datetime(datetime.date(2026, 1, 2)) == datetime.datetime(2026, 1, 2)
    assert to_datetime(b'2026-03-04 07:15:00') == datetime.datetime(2026, 3, 4, 7, 15)


def test_flags_only_accept_explicit_one():
    assert is_flag_set(1) is True
    assert is_flag_set('1') is True
    assert is_flag_set(b'\x01') is True
    assert is_flag_set(b'\x00') is False
    assert is_flag_set(2) is False
    assert is_flag_set(None) is False
    assert is_flag_set('Y') is False


def test_flag_or_default():
    assert flag_or_default({}, 'IS_ACTIVE') is True
    assert flag_or_default({'IS_ACTIVE': None}, 'IS_ACTIVE', False) is False
    assert flag_or_default({'IS_ACTIVE': 0}, 'IS_ACTIVE') is False


def test_scalar_conversions():
    assert clean_str('  abc ') == 'abc'
    assert clean_str('   ') is None
    assert to_int('12') == 12
    assert to_int('12.7') == 12
    assert to_int(None) == 0
    assert to_decimal('1500000.50') == Decimal('1500000.50')
    assert to_decimal(None) == Decimal('0')
    assert to_decimal('abc') == Decimal('0')


def test_normalize_clock():
    assert normalize_clock('07.45') == '07:45'
    assert normalize_clock('7:05:12') == '07:05'
    assert normalize_clock('') is None
    assert normalize_clock('0745') is None
