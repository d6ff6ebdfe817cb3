from types import SimpleNamespace

from hrm.services.attendance_rules import (
    calculate_early, calculate_late, dedupe_taps, sanitize_status, time_to_minutes,
)


def tap(jam, cflag='I'):
    return SimpleNamespace(jam=jam, cflag=cflag)


def test_time_to_minutes_accepts_dot_and_colon():
    assert time_to_minutes("07:30") == 450
    assert time_to_minutes("07.30") == 450
    assert time_to_minutes("17:05:59") == 1025
    assert time_to_minutes("--:--") is None
    assert time_to_minutes(None) is None
    assert time_to_minutes("") is None


def test_calculate_late():
    assert calculate_late("07:00", "07:12") == 12
    assert calculate_late("07:00", "06:50") == 0
    assert calculate_late("07:00", None) == 0
    assert calculate_late(None, "08:00") == 0


def test_calculate_early():
    assert calculate_early("16:00", "15:30") == 30
    assert calculate_early("16:00", "16:10") == 0
    assert calculate_early("16:00", "--:--") == 0


def test_sanitize_status_turns_present_without_taps_into_alpha():
    assert sanitize_status('H', None, None) == 'A'
    assert sanitize_status('H', '--:--', '') == 'A'
    assert sanitize_status('H', '07:00', None) == 'H'
    assert sanitize_status('S', None, None) == 'S'


def test_dedupe_taps_drops_consecutive_repeats_only():
    logs = [tap("07:01"), tap("07:01"), tap("12:00", 'O'), tap("07:01"), tap("16:00", 'O'), tap("16:00", 'O')]
    result = dedupe_taps(logs)
    assert [(t.jam, t.cflag) for t in result] == [
        ("07:01", 'I'), ("12:00", 'O'), ("07:01", 'I'), ("16:00", 'O'),
    ]
