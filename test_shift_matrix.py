import datetime

import pytest

from hrm.models.models import Absent, Company, Dshift, JnsJam, Karyawan
from hrm.services.shift_matrix import MatrixError, generate_matrix, parse_periode, split_pattern


def test_split_pattern_ignores_blanks():
    assert split_pattern(" P, ,S ,M") == ["P", "S", "M"]
    assert split_pattern(None) == []


def test_parse_periode():
    assert parse_periode("202602") == (2026, 2, 28)
    assert parse_periode("202402") == (2024, 2, 29)
    with pytest.raises(MatrixError) as exc:
        parse_periode("202613")
    assert exc.value.status_code == 400
    with pytest.raises(MatrixError):
        parse_periode("2026-1")


def test_generate_matrix_rotates_from_reference_date():
    matrix = generate_matrix("P,P,S,S,M,M,L,L", datetime.date(2026, 1, 1), datetime.date(2026, 2, 1), 28)
    # 2026-02-01 is 31 days after the reference date
    assert matrix["shift01"] == "L"
    assert matrix["shift02"] == "P"
    assert matrix["shift04"] == "S"
    assert len(matrix) == 28


def test_generate_matrix_with_reference_after_period_start():
    matrix = generate_matrix("A,B,C", datetime.date(2026, 2, 3), datetime.date(2026, 2, 1), 3)
    assert [matrix["shift01"], matrix["shift02"], matrix["shift03"]] == ["B", "C", "A"]


def test_generate_matrix_rejects_empty_pattern():
    with pytest.raises(MatrixError):
        generate_matrix(" , ", datetime.date(2026, 1, 1), datetime.date(2026, 2, 1), 28)


@pytest.fixture
def group(client, db, hr_headers):
    db.add(Company(kd_cmpy="C01", company="PT Satu"))
    db.add(JnsJam(kd_jam="P", nm_jam="Pagi", jam_msk="07:00", jam_klr="15:00"))
    db.commit()
    pattern = client.post("/api/shifts/patterns", json={"name": "Pagi selang", "pattern": "P,0"}, headers=hr_headers)
    assert pattern.status_code == 201
    response = client.post("/api/shifts/groups", json={
        "group_shift": "G1",
        "group_name": "Grup 1",
        "pattern_id": pattern.json()["data"]["id"],
        "ref_date": "2026-02-01",
    }, headers=hr_headers)
    assert response.status_code == 201
    return response.json()["data"]


def test_generate_then_sync_to_attendance(client, db, hr_headers, group):
    db.add(Karyawan(empl_id="E001", nama="Siti", group_shift="G1", group_shift_id=group["id"]))
    db.add(Karyawan(empl_id="E002", nama="Keluar", group_shift="G1", group_shift_id=group["id"], kd_sts="TIDAK_AKTIF"))
    db.commit()

    generated = client.post("/api/shifts/generate", json={"periode": "202602", "group_shift_id": group["id"]},
                            headers=hr_headers)
    assert generated.status_code == 200
    data = generated.json()["data"]
    assert (data["shift01"], data["shift02"], data["shift28"]) == ("P", "0", "0")
    assert data["kd_cmpy"] == "C01"
    assert data["shift29"] is None

    fetched = client.get("/api/shifts/matrix", params={"periode": "202602", "group_shift_id": group["id"]},
                         headers=hr_headers).json()["data"]
    assert fetched["id"] == data["id"]

    synced = client.post("/api/shifts/sync", json={"periode": "202602", "group_shift_id": group["id"]},
                         headers=hr_headers)
    assert synced.status_code == 200
    assert synced.json()["synced"] == 14
    assert synced.json()["employees"] == 1

    first_day = db.query(Absent).filter(Absent.tgl_absen == datetime.date(2026, 2, 1)).one()
    assert first_day.empl_id == "E001"
    assert (first_day.kd_jam, first_day.std_masuk, first_day.std_keluar) == ("P", "07:00", "15:00")
    assert first_day.periode == "202602"
    assert db.query(Absent).filter(Absent.tgl_absen == datetime.date(2026, 2, 2)).count() == 0


def test_manual_matrix_save_updates_existing_row(client, db, hr_headers, group):
    body = {"periode": "202602", "group_shift_id": group["id"], "shifts": {"shift01": "P", "shift02": "L"}}
    assert client.post("/api/shifts/matrix", json=body, headers=hr_headers).status_code == 200
    body["shifts"] = {"shift02": "P"}
    saved = client.post("/api/shifts/matrix", json=body, headers=hr_headers).json()["data"]
    assert (saved["shift01"], saved["shift02"]) == ("P", "P")
    assert db.query(Dshift).count() == 1

    bad = {"periode": "202602", "group_shift_id": group["id"], "shifts": {"shift32": "P"}}
    assert client.post("/api/shifts/matrix", json=bad, headers=hr_headers).status_code == 400


def test_matrix_errors(client, hr_headers, make_user):
    assert client.get("/api/shifts/matrix", headers=hr_headers).status_code == 400
    missing = client.post("/api/shifts/generate", json={"periode": "202602", "group_shift_id": "nope"},
                          headers=hr_headers)
    assert missing.status_code == 404

    _, employee = make_user("EMPLOYEE", empl_id="E001")
    assert client.get("/api/shifts/types", headers=employee).status_code == 403


def test_group_without_pattern_cannot_generate(client, db, hr_headers):
    db.add(Company(kd_cmpy="C01"))
    db.commit()
    group = client.post("/api/shifts/groups", json={"group_shift": "G9"}, headers=hr_headers).json()["data"]
    response = client.post("/api/shifts/generate", json={"periode": "202602", "group_shift_id": group["id"]},
                           headers=hr_headers)
    assert response.status_code == 400


def test_pattern_delete_is_soft(client, hr_headers):
    created = client.post("/api/shifts/patterns", json={"name": "X", "pattern": "P,S"}, headers=hr_headers).json()
    assert client.post("/api/shifts/patterns", json={"name": "Y", "pattern": " , "}, headers=hr_headers).status_code == 400

    response = client.delete(f"/api/shifts/patterns/{created['data']['id']}", headers=hr_headers)
    assert response.json()["message"] == "Pola shift berhasil dinonaktifkan"
    assert client.get("/api/shifts/patterns", headers=hr_headers).json()["data"] == []
