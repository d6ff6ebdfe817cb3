import os
import re

# Must be set before hrm is imported: settings and the engine are built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "0"
os.environ["AUDIT_ENABLED"] = "0"
for name in ("MYSQL_HOST", "MYSQL_USER", "MYSQL_PASSWORD", "MYSQL_DATABASE", "MYSQL_URL"):
    os.environ.pop(name, None)

import pytest
from fastapi.testclient import TestClient

from hrm.core.security import create_access_token, get_password_hash
from hrm.database import SessionLocal, engine
from hrm.main import app_fastapi
from hrm.models.models import Base, Karyawan, Users

TABLE_RE = re.compile(r"FROM\s+`?(\w+)`?", re.IGNORECASE)


class FakeSource:
    """In-memory stand-in for the legacy MySQL connection: table name -> list of dict rows."""

    def __init__(self, tables=None):
        self.tables = tables or {}
        self.queries = []
        self.closed = False

    def query(self, sql, params=None):
        self.queries.append((sql, params))
        normalized = " ".join(sql.split())
        if normalized == "SHOW TABLES":
            return [{"Tables_in_legacy": name} for name in self.tables]
        if normalized.startswith("SELECT 1") or "VERSION()" in normalized:
            return [{"version": "5.7.0-fake"}]

        if "INFORMATION_SCHEMA.COLUMNS" in normalized:
            return [{"COLUMN_NAME": column} for column in self._columns(params[0])]

        table = TABLE_RE.search(normalized).group(1)
        rows = list(self.tables.get(table, []))

        if normalized.startswith("SHOW INDEX"):
            return []
        if "COUNT(*)" in normalized:
            return [{"total": len(rows)}]
        if table == "att_log" and "WHERE nik" in normalized:
            nik, day = params
            taps = [r for r in rows if str(r["nik"]) == nik and str(r["tanggal"])[:10] == day]
            return [{"jam": r["jam"]} for r in sorted(taps, key=lambda r: r["jam"])]
        if table == "att_log" and "tanggal >=" in normalized:
            return [r for r in rows if str(r["tanggal"])[:10] >= params[0]]
        if table == "absent" and "TGL_ABSEN >=" in normalized:
            return [r for r in rows if str(r["TGL_ABSEN"])[:10] >= params[0]]
        if "LIMIT %s OFFSET %s" in normalized:
            limit, offset = params
            return rows[offset:offset + limit]
        if "LIMIT 2" in normalized:
            return rows[:2]
        return rows

    def _columns(self, table):
        rows = self.tables.get(table) or [{}]
        return list(rows[0].keys())

    def ping(self):
        pass

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app_fastapi.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app_fastapi)


@pytest.fixture
def make_user(db):
    """Creates a user (optionally linked to a new employee) and returns (user, auth headers)."""
    def _make(role="EMPLOYEE", email=None, empl_id=None, password="secret123", **employee_fields):
        email = email or f"{role.lower()}-{empl_id or 'x'}@example.com"
        user = Users(email=email, name=email.split("@")[0], password=get_password_hash(password), role=role)
        db.add(user)
        db.commit()
        if empl_id:
            employee_fields.setdefault("nama", f"Karyawan {empl_id}")
            db.add(Karyawan(empl_id=empl_id, user_id=user.id, email=email, **employee_fields))
            db.commit()
        token = create_access_token({"sub": user.id, "email": user.email, "role": user.role})
        return user, {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def admin_headers(make_user):
    return make_user("ADMIN", email="admin@example.com")[1]


@pytest.fixture
def hr_headers(make_user):
    return make_user("HR_MANAGER", email="hr@example.com")[1]
