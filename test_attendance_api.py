from datetime import date

import pytest

from hrm.models.models import Absent, AttLog, Karyawan


@pytest.fixture
def attendance(db, make_user):
    _, employee_headers = make_user("EMPLOYEE", email="e001@example.com", empl_id="E001", nik="3201", kd_dept="D01")
    db.add(Karyawan(empl_id="E002", nama="Siti", kd_dept="D02"))
    db.commit()
    db.add_all([
        Absent(empl_id="E001", tgl_absen=date(2026, 1, 5), kd_absen="H", std_masuk="07:00", real_masuk="07:10",
               lambat=10, kd_dept="D01"),
        Absent(empl_id="E001", tgl_absen=date(2026, 1, 6), kd_absen="H", lambat=0, kd_dept="D01"),
        Absent(empl_id="E001", tgl_absen=date(2026, 1, 7), kd_absen="S", kd_dept="D01"),
        Absent(empl_id="E002", tgl_absen=date(2026, 1, 5), kd_absen="A", kd_dept="D02"),
    ])
    db.commit()
    return employee_headers


def test_attendance_requires_login(client):
    assert client.get("/api/attendance").status_code == 401


def test_employee_sees_only_own_attendance(client, attendance):
    response = client.get("/api/attendance", headers=attendance)
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 3
    assert {row["empl_id"] for row in body["data"]} == {"E001"}
    # newest first
    assert body["data"][0]["tgl_absen"] == "2026-01-07"
    assert body["data"][0]["nama"] == "Karyawan E001"


def test_management_filters_attendance(client, attendance, hr_headers):
    body = client.get("/api/attendance", headers=hr_headers).json()
    assert body["pagination"]["total"] == 4

    body = client.get("/api/attendance", params={"kd_dept": "D02"}, headers=hr_headers).json()
    assert [row["empl_id"] for row in body["data"]] == ["E002"]

    body = client.get("/api/attendance", params={"search": "siti"}, headers=hr_headers).json()
    assert body["pagination"]["total"] == 1

    body = client.get(
        "/api/attendance",
        params={"start_date": "2026-01-06", "end_date": "2026-01-07", "limit": 1},
        headers=hr_headers
    ).json()
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "totalPages": 2}


def test_attendance_stats(client, attendance, hr_headers):
    params = {"start_date": "2026-01-01", "end_date": "2026-01-31"}
    stats = client.get("/api/attendance/stats", params=params, headers=hr_headers).json()["stats"]
    assert stats["total"] == 4
    assert stats["presentCount"] == 2
    assert stats["lateCount"] == 1
    assert stats["absentCount"] == 2
    assert stats["presentPercentage"] == 50

    own = client.get("/api/attendance/stats", params=params, headers=attendance).json()["stats"]
    assert own["total"] == 3
    assert own["absentCount"] == 1


def test_stats_without_rows_are_zero(client, hr_headers):
    stats = client.get("/api/attendance/stats", headers=hr_headers).json()["stats"]
    assert stats["total"] == 0
    assert stats["presentPercentage"] == 0


def test_update_attendance_recalculates_minutes(client, db, attendance, hr_headers):
    record = db.query(Absent).filter(Absent.empl_id == "E001", Absent.tgl_absen == date(2026, 1, 6)).first()
    payload = {
        "std_masuk": "07:00",
        "std_keluar": "15:00",
        "real_masuk": "07:25",
        "real_keluar": "14:40",
        "kd_absen": "H",
        "kode_desc": "",
    }
    response = client.put(f"/api/attendance/{record.id}", json=payload, headers=hr_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Data absensi berhasil diperbarui"
    assert body["data"]["lambat"] == 25
    assert body["data"]["cepat"] == 20
    assert body["data"]["kode_desc"] is None


def test_update_attendance_rules(client, db, attendance, hr_headers):
    record = db.query(Absent).first()
    assert client.put(f"/api/attendance/{record.id}", json={}, headers=attendance).status_code == 403
    assert client.put("/api/attendance/missing", json={}, headers=hr_headers).status_code == 404


def test_att_logs_for_a_day(client, db, attendance, hr_headers):
    db.add_all([
        AttLog(nik="E001", tanggal=date(2026, 1, 5), jam="15:30", cflag="O"),
        AttLog(nik="E001", tanggal=date(2026, 1, 5), jam="07:10", cflag="I"),
        AttLog(nik="E001", tanggal=date(2026, 1, 6), jam="07:00", cflag="I"),
        AttLog(nik="E002", tanggal=date(2026, 1, 5), jam="07:05", cflag="I"),
    ])
    db.commit()

    body = client.get("/api/attendance/logs", params={"nik": "E001", "date": "2026-01-05"}, headers=hr_headers).json()
    assert body["count"] == 2
    assert [log["jam"] for log in body["data"]] == ["07:10", "15:30"]

    # employees always get their own taps
    body = client.get("/api/attendance/logs", params={"nik": "E002", "date": "2026-01-05"}, headers=attendance).json()
    assert {log["nik"] for log in body["data"]} == {"E001"}


def test_att_logs_require_nik_and_date(client, hr_headers):
    response = client.get("/api/attendance/logs", params={"nik": "E001"}, headers=hr_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "NIK and Date are required"
