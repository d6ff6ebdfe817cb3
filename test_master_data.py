def test_code_master_crud(client, hr_headers):
    response = client.post("/api/master/banks", json={"bank_code": "BCA", "bank_nama": "Bank Central Asia"}, headers=hr_headers)
    assert response.status_code == 201
    assert response.json()["message"] == "Data berhasil disimpan"

    response = client.post("/api/master/banks", json={"bank_code": "BCA"}, headers=hr_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Kode Bank sudah ada"

    response = client.put("/api/master/banks/BCA", json={"bank_code": "IGNORED", "bank_nama": "BCA"}, headers=hr_headers)
    assert response.json()["data"]["bank_code"] == "BCA"
    assert response.json()["data"]["bank_nama"] == "BCA"

    assert client.get("/api/master/banks/BCA", headers=hr_headers).json()["data"]["bank_nama"] == "BCA"
    assert client.delete("/api/master/banks/BCA", headers=hr_headers).json()["message"] == "Bank berhasil dihapus"
    response = client.get("/api/master/banks/BCA", headers=hr_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Bank tidak ditemukan"


def test_position_amounts_are_numbers(client, hr_headers):
    client.post("/api/master/positions", json={"kd_jab": "J01", "nm_jab": "Operator", "n_tjabatan": 250000}, headers=hr_headers)
    data = client.get("/api/master/positions", headers=hr_headers).json()["data"]
    assert data[0]["kd_jab"] == "J01"
    assert data[0]["n_tjabatan"] == 250000.0


def test_master_writes_need_management(client, make_user, hr_headers):
    _, employee_headers = make_user("EMPLOYEE", empl_id="E001")
    assert client.get("/api/master/religions", headers=employee_headers).status_code == 200
    assert client.post("/api/master/religions", json={"kd_agm": "1"}, headers=employee_headers).status_code == 403


def test_company_crud(client, hr_headers):
    payload = {"kd_cmpy": "C01", "company": "PT Satu"}
    created = client.post("/api/master/companies", json=payload, headers=hr_headers)
    assert created.status_code == 201
    company_id = created.json()["data"]["id"]

    duplicate = client.post("/api/master/companies", json=payload, headers=hr_headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Kode Company sudah terdaftar"

    other = client.post("/api/master/companies", json={"kd_cmpy": "C02"}, headers=hr_headers).json()["data"]
    response = client.put(f"/api/master/companies/{other['id']}", json={"kd_cmpy": "C01"}, headers=hr_headers)
    assert response.status_code == 400

    response = client.put(f"/api/master/companies/{company_id}", json={"kd_cmpy": "C01", "company": "PT Satu Baru"}, headers=hr_headers)
    assert response.json()["data"]["company"] == "PT Satu Baru"

    assert client.delete(f"/api/master/companies/{company_id}", headers=hr_headers).status_code == 200
    assert client.get(f"/api/master/companies/{company_id}", headers=hr_headers).status_code == 404


def test_master_options(client, hr_headers):
    client.post("/api/master/companies", json={"kd_cmpy": "C01", "company": "PT Satu"}, headers=hr_headers)
    client.post("/api/master/education", json={"kd_skl": "S1", "nm_skl": "Sarjana"}, headers=hr_headers)

    data = client.get("/api/master/options", headers=hr_headers).json()["data"]
    assert data["companies"] == [{"code": "C01", "name": "PT Satu"}]
    assert data["education"] == [{"code": "S1", "name": "Sarjana"}]
    assert data["banks"] == []


def test_org_structure_hierarchy(client, hr_headers):
    assert client.post("/api/org-structure/divisions", json={"kd_bag": "B1", "nm_bag": "Produksi"}, headers=hr_headers).status_code == 201
    client.post("/api/org-structure/departments", json={"kd_dept": "D1", "kd_bag": "B1"}, headers=hr_headers)
    client.post("/api/org-structure/departments", json={"kd_dept": "D2", "kd_bag": "B2"}, headers=hr_headers)
    client.post("/api/org-structure/sections", json={"kd_seksie": "S1", "kd_dept": "D1", "kd_bag": "B1"}, headers=hr_headers)

    departments = client.get("/api/org-structure/departments", params={"kd_bag": "B1"}, headers=hr_headers).json()
    assert [d["kd_dept"] for d in departments] == ["D1"]
    sections = client.get("/api/org-structure/sections", params={"kd_dept": "D1"}, headers=hr_headers).json()
    assert [s["kd_seksie"] for s in sections] == ["S1"]

    response = client.post("/api/org-structure/divisions", json={"kd_bag": "B1"}, headers=hr_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Kode Bagian B1 sudah ada"

    updated = client.put("/api/org-structure/divisions/B1", json={"nm_bag": "Produksi 1"}, headers=hr_headers).json()
    assert updated["nm_bag"] == "Produksi 1"
    assert client.put("/api/org-structure/divisions/B9", json={}, headers=hr_headers).status_code == 404
