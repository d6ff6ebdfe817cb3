from hrm.models.models import Menu, Notification, RoleMenu
from hrm.services.notifications import create_notification


def add_menu(db, label, href, order, group="HR Management", is_active=True):
    menu = Menu(label=label, href=href, order=order, group_label=group, is_active=is_active)
    db.add(menu)
    db.commit()
    return menu


def test_rbac_is_super_admin_only(client, admin_headers):
    assert client.get("/api/rbac/roles").status_code == 401
    assert client.get("/api/rbac/roles", headers=admin_headers).status_code == 403


def test_role_permissions_are_replaced(client, db, make_user):
    _, root = make_user("SUPER_ADMIN", email="root@example.com")
    dashboard = add_menu(db, "Dashboard", "/dashboard", 1, group="Menu Utama")
    employees = add_menu(db, "Data Karyawan", "/dashboard/employees", 2)
    db.add(RoleMenu(role="HR_MANAGER", menu_id=dashboard.id))
    db.commit()

    assert "HR_MANAGER" in client.get("/api/rbac/roles", headers=root).json()["roles"]
    assert [m["label"] for m in client.get("/api/rbac/menus", headers=root).json()] == ["Dashboard", "Data Karyawan"]

    response = client.put(
        "/api/rbac/permissions/HR_MANAGER",
        json={"menu_ids": [employees.id, employees.id]},
        headers=root
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Permissions updated successfully"

    permissions = client.get("/api/rbac/permissions/HR_MANAGER", headers=root).json()
    assert [p["menu"]["href"] for p in permissions] == ["/dashboard/employees"]


def test_role_permission_validation(client, make_user):
    _, root = make_user("SUPER_ADMIN", email="root@example.com")
    assert client.get("/api/rbac/permissions/GUEST", headers=root).status_code == 400
    response = client.put("/api/rbac/permissions/ADMIN", json={"menu_ids": ["missing"]}, headers=root)
    assert response.status_code == 400
    assert response.json()["detail"] == "Menu tidak ditemukan: missing"


def test_my_menus_follow_the_token_role(client, db, hr_headers):
    dashboard = add_menu(db, "Dashboard", "/dashboard", 1, group="Menu Utama")
    payroll = add_menu(db, "Payroll Processing", "/dashboard/payroll", 4, group="Finance")
    employees = add_menu(db, "Data Karyawan", "/dashboard/employees", 2)
    hidden = add_menu(db, "Laporan", "/dashboard/reports", 5, is_active=False)
    settings = add_menu(db, "Pengaturan Sistem", "/dashboard/settings", 99, group="System")
    for menu in (dashboard, payroll, employees, hidden):
        db.add(RoleMenu(role="HR_MANAGER", menu_id=menu.id))
    db.add(RoleMenu(role="ADMIN", menu_id=settings.id))
    db.commit()

    groups = client.get("/api/menus/my-menus", headers=hr_headers).json()
    assert [g["group_label"] for g in groups] == ["Menu Utama", "HR Management", "Finance"]
    assert groups[1]["menus"] == [{"href": "/dashboard/employees", "label": "Data Karyawan", "icon": None}]


def test_notifications_list_and_read(client, db, make_user):
    user, headers = make_user("EMPLOYEE", empl_id="E001")
    other, other_headers = make_user("EMPLOYEE", empl_id="E002")
    first = create_notification(db, subject="Slip gaji", note="Slip Januari tersedia", user_id=user.id)
    create_notification(db, subject="Cuti", note="Disetujui", empl_id="E001")
    db.commit()

    body = client.get("/api/notifications", params={"limit": 1}, headers=headers).json()
    assert body["pagination"] == {"total": 2, "page": 1, "limit": 1, "totalPages": 2}
    assert body["unread"] == 2

    # someone else's notification is not found
    assert client.put(f"/api/notifications/{first.id}/read", headers=other_headers).status_code == 404
    assert client.put(f"/api/notifications/{first.id}/read", headers=headers).status_code == 200
    assert client.get("/api/notifications", headers=headers).json()["unread"] == 1

    read_all = client.put("/api/notifications/read-all", headers=headers).json()
    assert read_all["updated"] == 1
    assert client.get("/api/notifications", headers=headers).json()["unread"] == 0
    assert client.get("/api/notifications", headers=other_headers).json()["data"] == []


def test_notification_without_user_account_is_skipped(db):
    assert create_notification(db, subject="x", note="y", empl_id="NOPE") is None
    assert db.query(Notification).count() == 0


def test_final_decision_notifies_the_requester(client, db, make_user):
    staff_user, staff = make_user("EMPLOYEE", email="staff@example.com", empl_id="E001", superior_id="S001")
    _, boss = make_user("EMPLOYEE", email="boss@example.com", empl_id="S001")
    created = client.post(
        "/api/requests",
        json={"type": "CUTI", "start_date": "2026-03-02", "end_date": "2026-03-02", "reason": "Keluarga"},
        headers=staff
    ).json()["data"]

    client.post(f"/api/requests/{created['id']}/reject", json={"notes": "sibuk"}, headers=boss)

    notification = db.query(Notification).one()
    assert notification.recipient_user_id == staff_user.id
    assert notification.subject == "Pengajuan CUTI ditolak"
    assert client.get("/api/notifications", headers=staff).json()["data"][0]["url"].endswith(created["id"])


def test_logout(client):
    response = client.post("/api/auth/logout")
    assert response.json() == {"success": True, "message": "Logged out successfully"}
