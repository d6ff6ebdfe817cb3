from datetime import timedelta

from hrm.core.security import create_access_token, get_password_hash, verify_password
from hrm.models.models import Karyawan, Users


def login(client, email, password="secret123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_password_hashes_accept_laravel_prefix():
    hashed = get_password_hash("rahasia")
    assert verify_password("rahasia", hashed)
    assert verify_password("rahasia", "$2y$" + hashed[4:])
    assert not verify_password("salah", hashed)
    assert not verify_password("rahasia", None)
    assert not verify_password("rahasia", "not-a-hash")


def test_login_and_me(client, make_user):
    make_user("HR_MANAGER", email="hr@example.com")
    response = login(client, "  HR@example.com ")
    assert response.status_code == 200
    body = response.json()
    assert body["data"]["role"] == "HR_MANAGER"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "hr@example.com"
    assert me.json()["employee"] is None


def test_login_failures(client, db, make_user):
    user, _ = make_user("EMPLOYEE", email="staff@example.com")
    assert login(client, "staff@example.com", "wrong").status_code == 401
    assert login(client, "ghost@example.com").status_code == 401

    user.is_active = False
    db.commit()
    assert login(client, "staff@example.com").status_code == 403


def test_login_links_employee_by_email(client, db, make_user):
    db.add(Karyawan(empl_id="E001", nama="Siti", email="Siti@Example.com"))
    db.commit()
    make_user("EMPLOYEE", email="siti@example.com")

    body = login(client, "siti@example.com").json()
    assert body["data"]["empl_id"] == "E001"
    db.expire_all()
    assert db.query(Karyawan).one().user_id == db.query(Users).one().id


def test_refresh_token(client, make_user):
    make_user("EMPLOYEE", email="staff@example.com")
    body = login(client, "staff@example.com").json()

    refreshed = client.post("/api/auth/refresh", json={"refresh_token": body["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["token"]

    wrong_kind = client.post("/api/auth/refresh", json={"refresh_token": body["token"]})
    assert wrong_kind.status_code == 401


def test_expired_or_deactivated_tokens_are_rejected(client, db, make_user):
    user, headers = make_user("EMPLOYEE", email="staff@example.com")
    expired = create_access_token({"sub": user.id}, expires_delta=timedelta(seconds=-5))
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401

    assert client.get("/api/auth/me", headers=headers).status_code == 200
    user.is_active = False
    db.commit()
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_user_administration(client, db, make_user, admin_headers, hr_headers):
    assert client.get("/api/users", headers=hr_headers).status_code == 403

    db.add(Karyawan(empl_id="E001", nama="Siti", email="siti@example.com"))
    db.commit()
    created = client.post("/api/users", json={"email": "Siti@Example.com", "password": "pw123456"}, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["data"]["empl_id"] == "E001"
    assert created.json()["data"]["email"] == "siti@example.com"

    duplicate = client.post("/api/users", json={"email": "siti@example.com", "password": "x"}, headers=admin_headers)
    assert duplicate.status_code == 400
    bad_role = client.post("/api/users", json={"email": "x@example.com", "password": "x", "role": "ROOT"},
                           headers=admin_headers)
    assert bad_role.status_code == 400

    user_id = created.json()["data"]["id"]
    promoted = client.put(f"/api/users/{user_id}", json={"role": "HR_MANAGER"}, headers=admin_headers)
    assert promoted.json()["data"]["role"] == "HR_MANAGER"

    admin = db.query(Users).filter(Users.email == "admin@example.com").one()
    own = client.put(f"/api/users/{admin.id}", json={"role": "EMPLOYEE"}, headers=admin_headers)
    assert own.status_code == 400

    listing = client.get("/api/users", params={"role": "HR_MANAGER"}, headers=admin_headers).json()
    assert sorted(u["email"] for u in listing["data"]) == ["hr@example.com", "siti@example.com"]


def test_health_and_db_check(client, admin_headers):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/api/check-db").json() == {"status": "connected", "user_count": 1}
