import datetime

import pytest

from hrm.models.models import Absent, ApprovalLog


@pytest.fixture
def people(make_user):
    _, staff = make_user("EMPLOYEE", email="staff@example.com", empl_id="E001",
                         superior_id="S001", superior2_id="S002")
    _, boss = make_user("EMPLOYEE", email="boss@example.com", empl_id="S001")
    _, boss2 = make_user("EMPLOYEE", email="boss2@example.com", empl_id="S002")
    _, hr = make_user("HR_MANAGER", email="hr@example.com")
    return {"staff": staff, "boss": boss, "boss2": boss2, "hr": hr}


def submit(client, headers, **overrides):
    payload = {"type": "CUTI", "start_date": "2026-03-02", "end_date": "2026-03-03", "reason": "Keluarga"}
    payload.update(overrides)
    response = client.post("/api/requests", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_full_chain_writes_attendance(client, db, people):
    request = submit(client, people["staff"])
    assert request["status"] == "PENDING"
    assert request["karyawan"]["superior"]["empl_id"] == "S001"

    out_of_turn = client.post(f"/api/requests/{request['id']}/approve", json={}, headers=people["boss2"])
    assert out_of_turn.status_code == 403

    pending = client.get("/api/requests/pending", headers=people["boss"]).json()["data"]
    assert [r["id"] for r in pending] == [request["id"]]

    step1 = client.post(f"/api/requests/{request['id']}/approve", json={"notes": "ok"}, headers=people["boss"])
    assert step1.json()["data"]["status"] == "IN_PROGRESS"
    assert step1.json()["data"]["current_step"] == 2

    step2 = client.post(f"/api/requests/{request['id']}/approve", json={}, headers=people["boss2"])
    assert step2.json()["data"]["current_step"] == 3

    hr_pending = client.get("/api/requests/pending", headers=people["hr"]).json()["data"]
    assert [r["id"] for r in hr_pending] == [request["id"]]

    final = client.post(f"/api/requests/{request['id']}/approve", json={}, headers=people["hr"])
    assert final.status_code == 200
    assert final.json()["data"]["status"] == "APPROVED"
    assert len(final.json()["data"]["approvals"]) == 3

    rows = db.query(Absent).filter(Absent.empl_id == "E001").order_by(Absent.tgl_absen).all()
    assert [r.tgl_absen for r in rows] == [datetime.date(2026, 3, 2), datetime.date(2026, 3, 3)]
    assert {r.kd_absen for r in rows} == {'C'}
    assert rows[0].keterangan == "CUTI: Keluarga"

    history = client.get("/api/requests/history", headers=people["boss"]).json()["data"]
    assert [r["id"] for r in history] == [request["id"]]

    cancel = client.post(f"/api/requests/{request['id']}/cancel", headers=people["staff"])
    assert cancel.status_code == 400


def test_rejection_is_final(client, db, people):
    request = submit(client, people["staff"])
    rejected = client.post(f"/api/requests/{request['id']}/reject", json={"notes": "sibuk"}, headers=people["boss"])
    assert rejected.json()["data"]["status"] == "REJECTED"

    again = client.post(f"/api/requests/{request['id']}/approve", json={}, headers=people["boss"])
    assert again.status_code == 403
    assert db.query(Absent).count() == 0


def test_missing_second_superior_goes_straight_to_hr(client, db, make_user):
    _, staff = make_user("EMPLOYEE", email="staff@example.com", empl_id="E001", superior_id="S001")
    _, boss = make_user("EMPLOYEE", email="boss@example.com", empl_id="S001")
    _, hr = make_user("HR_MANAGER", email="hr@example.com")
    db.add(Absent(empl_id="E001", tgl_absen=datetime.date(2026, 3, 2), kd_absen='H', real_masuk="07:00"))
    db.commit()

    request = submit(client, staff, type="PULANG_CEPAT", start_date="2026-03-02", end_date=None, reason=None)
    step1 = client.post(f"/api/requests/{request['id']}/approve", json={}, headers=boss).json()["data"]
    assert step1["current_step"] == 3

    client.post(f"/api/requests/{request['id']}/approve", json={}, headers=hr)
    db.expire_all()
    absent = db.query(Absent).one()
    assert absent.kd_absen == 'H'
    assert absent.keterangan == "PULANG_CEPAT"

    hr_log = db.query(ApprovalLog).filter(ApprovalLog.step == 3).one()
    assert hr_log.action == "APPROVE"


def test_create_validation(client, make_user, people):
    _, unlinked = make_user("EMPLOYEE", email="nolink@example.com")
    response = client.post("/api/requests", json={"type": "CUTI", "start_date": "2026-03-02"}, headers=unlinked)
    assert response.status_code == 400
    assert "nolink@example.com" in response.json()["detail"]

    bad_type = client.post("/api/requests", json={"type": "LIBURAN", "start_date": "2026-03-02"}, headers=people["staff"])
    assert bad_type.status_code == 400

    backwards = client.post(
        "/api/requests", json={"type": "IJIN", "start_date": "2026-03-05", "end_date": "2026-03-01"},
        headers=people["staff"]
    )
    assert backwards.status_code == 400


def test_detail_visibility_and_cancel(client, make_user, people):
    _, stranger = make_user("EMPLOYEE", email="stranger@example.com", empl_id="X001")
    request = submit(client, people["staff"])

    assert client.get(f"/api/requests/{request['id']}", headers=stranger).status_code == 403
    assert client.get(f"/api/requests/{request['id']}", headers=people["boss"]).status_code == 200
    assert client.get("/api/requests/unknown-id", headers=people["staff"]).status_code == 404

    assert client.post(f"/api/requests/{request['id']}/cancel", headers=people["boss"]).status_code == 403
    cancelled = client.post(f"/api/requests/{request['id']}/cancel", headers=people["staff"])
    assert cancelled.json()["data"]["status"] == "CANCELLED"
    assert client.get("/api/requests/mine", headers=people["staff"]).json()["data"][0]["status"] == "CANCELLED"
