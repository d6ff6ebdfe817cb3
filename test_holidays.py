import datetime

import pytest
import requests

from hrm.models.models import Holiday
from hrm.services import holiday_sync
from hrm.services.holiday_sync import HOLIDAYS_2026, HolidaySourceError, fetch_holidays, sync_holidays


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


def fake_get(primary=None, backup=None):
    calls = []

    def get(url, params=None, timeout=None):
        calls.append(url)
        source = primary if url == holiday_sync.settings.HOLIDAY_API_PRIMARY else backup
        if isinstance(source, Exception):
            raise source
        return source
    get.calls = calls
    return get


def test_primary_feed_is_stored_with_truncated_names(db, monkeypatch):
    monkeypatch.setattr(holiday_sync.requests, "get", fake_get(primary=FakeResponse([
        {"tanggal": "2027-01-01", "keterangan": "Tahun Baru Masehi", "is_cuti": False},
        {"tanggal": "2027-02-08", "keterangan": "Cuti Bersama Tahun Baru Imlek yang sangat panjang sekali", "is_cuti": True},
        {"tanggal": "2027-02-08", "keterangan": "Cuti Bersama Imlek", "is_cuti": True},
        {"tanggal": "bukan-tanggal", "keterangan": "Rusak"},
    ])))

    result = sync_holidays(db, 2027)
    assert result == {"count": 3, "source": "primary", "year": 2027}

    rows = db.query(Holiday).order_by(Holiday.tgl_libur).all()
    assert [r.tgl_libur for r in rows] == [datetime.date(2027, 1, 1), datetime.date(2027, 2, 8)]
    assert rows[1].keterangan == "Cuti Bersama Imlek"
    assert rows[1].type_day == "CUTI_BERSAMA"
    assert rows[0].type_day == "LIBUR_NASIONAL"


def test_backup_is_used_when_primary_fails(db, monkeypatch):
    get = fake_get(
        primary=requests.ConnectionError("down"),
        backup=FakeResponse([{"date": "2027-08-17", "localName": "Hari Ulang Tahun Kemerdekaan Republik Indonesia"}]),
    )
    monkeypatch.setattr(holiday_sync.requests, "get", get)

    items, source = fetch_holidays(2027)
    assert source == "backup"
    assert len(get.calls) == 2
    assert get.calls[1].endswith("/2027/ID")

    sync_holidays(db, 2027)
    holiday = db.query(Holiday).one()
    assert len(holiday.keterangan) == 40


def test_backup_is_used_when_primary_answers_an_error_object(db, monkeypatch):
    get = fake_get(
        primary=FakeResponse({"error": "rate limited"}),
        backup=FakeResponse([{"date": "2025-08-17", "localName": "Hari Kemerdekaan"}]),
    )
    monkeypatch.setattr(holiday_sync.requests, "get", get)

    items, source = fetch_holidays(2025)
    assert source == "backup"
    assert items == [{"date": "2025-08-17", "name": "Hari Kemerdekaan", "cuti_bersama": False}]


def test_backup_with_malformed_items_raises(monkeypatch):
    monkeypatch.setattr(holiday_sync.requests, "get", fake_get(
        primary=FakeResponse(["2025-01-01"]),
        backup=FakeResponse("not a list"),
    ))
    with pytest.raises(HolidaySourceError):
        fetch_holidays(2025)


def test_both_sources_failing_raises(monkeypatch):
    monkeypatch.setattr(holiday_sync.requests, "get", fake_get(
        primary=FakeResponse([], status_code=500),
        backup=requests.Timeout("slow"),
    ))
    with pytest.raises(HolidaySourceError):
        fetch_holidays(2027)


def test_2026_uses_official_list_and_replaces_the_year(db, monkeypatch):
    monkeypatch.setattr(holiday_sync.requests, "get", fake_get(primary=AssertionError("no network for 2026")))
    db.add(Holiday(tgl_libur=datetime.date(2026, 7, 7), keterangan="Libur perusahaan"))
    db.add(Holiday(tgl_libur=datetime.date(2025, 12, 25), keterangan="Natal"))
    db.commit()

    result = sync_holidays(db, 2026)
    assert result["source"] == "manual-override-2026"
    assert result["count"] == len(HOLIDAYS_2026)

    db.expire_all()
    assert db.query(Holiday).filter(Holiday.tgl_libur == datetime.date(2026, 7, 7)).first() is None
    assert db.query(Holiday).filter(Holiday.tgl_libur == datetime.date(2025, 12, 25)).first() is not None


def test_sync_endpoint_reports_failure(client, hr_headers, monkeypatch):
    monkeypatch.setattr(holiday_sync.requests, "get", fake_get(
        primary=requests.ConnectionError("down"), backup=requests.ConnectionError("down"),
    ))
    response = client.post("/api/holidays/sync", json={"year": 2030}, headers=hr_headers)
    assert response.status_code == 500
    assert "Both APIs failed" in response.json()["detail"]


def test_holiday_crud(client, hr_headers):
    created = client.post("/api/holidays", json={"tgl_libur": "2027-05-01", "keterangan": "Hari Buruh"}, headers=hr_headers)
    assert created.status_code == 201
    holiday = created.json()["data"]
    assert holiday["type_day"] == "LIBUR_NASIONAL"
    assert holiday["is_repeat"] is False

    duplicate = client.post("/api/holidays", json={"tgl_libur": "2027-05-01", "keterangan": "Lagi"}, headers=hr_headers)
    assert duplicate.status_code == 400

    updated = client.put(f"/api/holidays/{holiday['id']}", json={"is_repeat": True}, headers=hr_headers).json()["data"]
    assert updated["is_repeat"] is True
    assert updated["keterangan"] == "Hari Buruh"

    assert len(client.get("/api/holidays", params={"year": 2027}, headers=hr_headers).json()["data"]) == 1
    assert client.get("/api/holidays", params={"year": 2028}, headers=hr_headers).json()["data"] == []

    assert client.delete(f"/api/holidays/{holiday['id']}", headers=hr_headers).status_code == 200
    assert client.delete(f"/api/holidays/{holiday['id']}", headers=hr_headers).status_code == 404
