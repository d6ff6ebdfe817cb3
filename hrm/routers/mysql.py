from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
from datetime import date
import logging

import pymysql

from hrm.database import get_db
from hrm.models.models import MysqlConfig
from hrm.core.config import settings
from hrm.core.permissions import CurrentUser, require_admin
from hrm.services.att_log_job import att_log_since
from hrm.legacy.backfill import backfill_relations
from hrm.legacy.client import (
    LegacyConfigError, get_active_config, inspect_table, list_tables, machine_status, open_source,
    preview_table, test_connection,
)
from hrm.legacy.importers import (
    ORG_STRUCTURE_TABLES, import_attendance, import_employees, import_master_data, import_payroll,
    import_tables, sync_att_logs,
)

logger = logging.getLogger("mysql")

router = APIRouter(
    prefix="/api/mysql",
    tags=["MySQL Migration"],
    dependencies=[Depends(require_admin)]
)

# endpoint name -> master mapping name
SINGLE_TABLE_IMPORTS = {
    "companies": "companies",
    "banks": "banks",
    "positions": "positions",
    "levels": "levels",
    "religions": "religions",
    "education": "education",
    "shift-groups": "shift_groups",
    "shift-types": "shift_types",
    "factories": "factories",
}


class MysqlConfigDTO(BaseModel):
    host: str
    port: int = 3306
    user: str
    password: Optional[str] = None
    database: str


def config_to_dict(config: Optional[MysqlConfig]) -> Optional[dict]:
    if config is None:
        return None
    return {
        "id": config.id,
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": "****" if config.password else None,
        "database": config.database,
        "is_active": config.is_active,
        "updated_at": config.updated_at.isoformat() if config.updated_at else None,
    }


def get_legacy_source(db: Session = Depends(get_db)):
    """One legacy connection per request, closed afterwards."""
    try:
        source = open_source(db)
    except LegacyConfigError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except pymysql.err.Error as e:
        logger.error(f"[MySQL] Connection failed: {e}")
        raise HTTPException(status_code=500, detail=f"MySQL connection failed: {e}")
    try:
        yield source
    finally:
        source.close()


def _import_since() -> date:
    return date.fromisoformat(settings.ATTENDANCE_IMPORT_SINCE)


def _run_import(label: str, job):
    try:
        stats = job()
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"[MySQL] Import {label} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"[MySQL] Import {label} done")
    return {"success": True, "stats": stats, "message": f"Import {label} selesai"}


# ─── Connection config ────────────────────────────────────────────────────

@router.get("/config")
def get_config(db: Session = Depends(get_db)):
    return {"success": True, "config": config_to_dict(get_active_config(db))}


@router.post("/config")
def save_config(
    payload: MysqlConfigDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    try:
        db.query(MysqlConfig).filter(MysqlConfig.is_active == True).update(
            {MysqlConfig.is_active: False}, synchronize_session=False
        )
        config = MysqlConfig(**payload.model_dump(), is_active=True)
        db.add(config)
        db.commit()
        db.refresh(config)
        logger.info(f"[MySQL] New config {config.host}:{config.port}/{config.database} by {current_user.email}")
        return {"success": True, "config": config_to_dict(config)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/test")
def test_mysql(db: Session = Depends(get_db)):
    result = test_connection(db)
    return JSONResponse(status_code=200 if result["success"] else 500, content=result)


@router.get("/status/machine")
def get_machine_status(db: Session = Depends(get_db)):
    return machine_status(db)


# ─── Inspection ───────────────────────────────────────────────────────────

@router.get("/tables")
def get_tables(source=Depends(get_legacy_source)):
    tables = list_tables(source)
    return {"success": True, "tables": tables, "count": len(tables)}


@router.get("/inspect/{table_name}")
def get_table_structure(table_name: str, source=Depends(get_legacy_source)):
    try:
        return {"success": True, "data": inspect_table(source, table_name)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/tables/{name}")
def get_table_data(
    name: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=1000),
    source=Depends(get_legacy_source)
):
    try:
        return {"success": True, **preview_table(source, name, page, limit)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ─── Imports ──────────────────────────────────────────────────────────────

@router.post("/import/master-data")
def import_all_master_data(db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    return _run_import("master data", lambda: import_master_data(db, source))


@router.post("/import/org-structure")
def import_org_structure(db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    return _run_import("org structure", lambda: import_tables(db, source, ORG_STRUCTURE_TABLES))


@router.post("/import/employees")
def import_employee_data(db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    return _run_import("karyawan", lambda: import_employees(db, source))


@router.post("/import/payroll")
def import_payroll_data(db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    return _run_import("payroll", lambda: import_payroll(db, source))


@router.post("/import/attendance")
def import_attendance_data(db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    return _run_import("absensi", lambda: import_attendance(db, source, _import_since()))


@router.post("/import/att-log")
def import_att_log(db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    return _run_import("att_log", lambda: sync_att_logs(db, source, att_log_since()))


@router.post("/import/{name}")
def import_single_table(name: str, db: Session = Depends(get_db), source=Depends(get_legacy_source)):
    if name not in SINGLE_TABLE_IMPORTS:
        raise HTTPException(status_code=404, detail=f"Import {name} tidak tersedia")
    mapping_name = SINGLE_TABLE_IMPORTS[name]
    return _run_import(name, lambda: import_tables(db, source, [mapping_name])[mapping_name])


@router.post("/backfill")
def backfill_foreign_keys(db: Session = Depends(get_db)):
    try:
        counts = backfill_relations(db)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "updated": counts, "message": "Backfill relasi selesai"}
