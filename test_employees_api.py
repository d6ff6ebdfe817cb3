import datetime

from hrm.models.models import Karyawan, MstDept


def employee_payload(**overrides):
    payload = {
        "empl_id": "E100",
        "nama": "Andi Wijaya",
        "nik": "3201000100",
        "kd_dept": "D01",
        "kd_jns": "KONTRAK",
        "pokok_bln": "4500000",
        "t_transport": "300000",
        "kd_transp": False,
        "t_makan": "200000",
        "kd_makan": True,
    }
    payload.update(overrides)
    return payload


def test_requires_authentication(client):
    assert client.get("/api/employees").status_code == 401
    response = client.get("/api/employees", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


def test_create_resolves_relations_and_links_user(client, db, hr_headers, make_user):
    db.add(MstDept(kd_dept="D01", nm_dept="Produksi"))
    db.commit()
    user, _ = make_user("EMPLOYEE", email="andi@example.com")

    response = client.post("/api/employees", json=employee_payload(email="Andi@Example.com"), headers=hr_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["nm_dept"] == "Produksi"
    assert data["user_id"] == user.id
    assert data["kd_jns"] == "KONTRAK"

    emp = db.query(Karyawan).filter(Karyawan.empl_id == "E100").one()
    assert emp.dept_id == db.query(MstDept).one().id
    assert emp.created_by == "hr@example.com"


def test_duplicate_employee_id_is_rejected(client, hr_headers):
    assert client.post("/api/employees", json=employee_payload(), headers=hr_headers).status_code == 201
    response = client.post("/api/employees", json=employee_payload(nik="other"), headers=hr_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Employee ID already exists"


def test_employee_role_cannot_create(client, make_user):
    _, headers = make_user("EMPLOYEE", empl_id="E001")
    assert client.post("/api/employees", json=employee_payload(), headers=headers).status_code == 403


def test_list_search_and_soft_delete(client, hr_headers):
    first = client.post("/api/employees", json=employee_payload(), headers=hr_headers).json()["data"]
    client.post("/api/employees", json=employee_payload(empl_id="E200", nama="Budi", nik="3201000200"), headers=hr_headers)

    listing = client.get("/api/employees", params={"search": "andi"}, headers=hr_headers).json()
    assert [e["empl_id"] for e in listing["data"]] == ["E100"]
    assert listing["pagination"]["total"] == 1

    response = client.delete(f"/api/employees/{first['id']}", headers=hr_headers)
    assert response.json()["message"] == "Data berhasil dihapus"

    listing = client.get("/api/employees", headers=hr_headers).json()
    assert [e["empl_id"] for e in listing["data"]] == ["E200"]
    assert client.get(f"/api/employees/{first['id']}", headers=hr_headers).status_code == 404


def test_payroll_counts_allowances_only_when_flagged(client, hr_headers):
    emp = client.post("/api/employees", json=employee_payload(), headers=hr_headers).json()["data"]
    payroll = client.get(f"/api/employees/{emp['id']}/payroll", headers=hr_headers).json()["data"]["payroll"]
    assert payroll["allowances"]["transport"] == 0
    assert payroll["allowances"]["meal"] == 200000
    assert payroll["total_salary"] == 4700000
    assert payroll["warnings"] == []


def test_verify_dob(client, make_user):
    _, headers = make_user("EMPLOYEE", empl_id="E001", tgl_lhr=datetime.date(1990, 5, 17))
    ok = client.post("/api/employees/verify-dob", json={"dob": "17051990"}, headers=headers)
    assert ok.status_code == 200
    wrong = client.post("/api/employees/verify-dob", json={"dob": "01011990"}, headers=headers)
    assert wrong.status_code == 401


def test_employee_cannot_read_someone_elses_payroll_history(client, db, make_user):
    make_user("EMPLOYEE", email="other@example.com", empl_id="E002")
    _, headers = make_user("EMPLOYEE", empl_id="E001")
    other = db.query(Karyawan).filter(Karyawan.empl_id == "E002").one()
    mine = db.query(Karyawan).filter(Karyawan.empl_id == "E001").one()

    assert client.get(f"/api/employees/{other.id}/history", headers=headers).status_code == 403
    response = client.get(f"/api/employees/{mine.id}/history", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"] == []
