from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from pydantic import BaseModel
from typing import Optional
from datetime import date, timedelta
from decimal import Decimal

from hrm.database import get_db
from hrm.models.models import Absent, AttLog, Karyawan
from hrm.core.permissions import CurrentUser, get_current_user, require_management
from hrm.services.attendance_rules import calculate_early, calculate_late, dedupe_taps

router = APIRouter(
    prefix="/api",
    tags=["Attendance"],
    responses={404: {"description": "Not found"}},
)

STATS_DEFAULT_DAYS = 90


class UpdateAttendanceDTO(BaseModel):
    std_masuk: Optional[str] = None
    std_keluar: Optional[str] = None
    real_masuk: Optional[str] = None
    real_keluar: Optional[str] = None
    kd_absen: Optional[str] = None
    kode_desc: Optional[str] = None
    tot_lmb: Optional[Decimal] = None
    ket_lmb: Optional[str] = None


def absent_to_dict(a: Absent, emp: Optional[Karyawan] = None) -> dict:
    return {
        "id": a.id,
        "empl_id": a.empl_id,
        "nik": a.nik,
        "nama": (emp.nama if emp else None) or a.nama,
        "tgl_absen": a.tgl_absen.isoformat(),
        "periode": a.periode,
        "kd_dept": a.kd_dept,
        "kd_seksie": a.kd_seksie,
        "kd_jam": a.kd_jam,
        "group_shift": a.group_shift,
        "std_masuk": a.std_masuk,
        "std_keluar": a.std_keluar,
        "real_masuk": a.real_masuk,
        "real_keluar": a.real_keluar,
        "lambat": a.lambat,
        "cepat": a.cepat,
        "kd_absen": a.kd_absen,
        "kode_desc": a.kode_desc,
        "keterangan": a.keterangan,
        "tot_lmb": float(a.tot_lmb or 0),
        "ket_lmb": a.ket_lmb,
    }


def _scoped_query(db: Session, current_user: CurrentUser):
    query = db.query(Absent, Karyawan).outerjoin(Karyawan, Absent.empl_id == Karyawan.empl_id)
    # Employees only see their own attendance
    if current_user.is_employee:
        query = query.filter(Absent.empl_id == (current_user.empl_id or ''))
    return query


@router.get("/attendance")
async def get_attendance(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    search: Optional[str] = None,
    kd_dept: Optional[str] = None,
    kd_seksie: Optional[str] = None,
    kd_jab: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    query = _scoped_query(db, current_user)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Absent.empl_id.ilike(pattern),
            Absent.nik.ilike(pattern),
            Absent.nama.ilike(pattern),
            Karyawan.nama.ilike(pattern)
        ))
    if kd_dept and kd_dept != 'all':
        query = query.filter(Absent.kd_dept == kd_dept)
    if kd_seksie and kd_seksie != 'all':
        query = query.filter(Absent.kd_seksie == kd_seksie)
    if kd_jab and kd_jab != 'all':
        query = query.filter(Karyawan.kd_jab == kd_jab)
    if start_date and end_date:
        query = query.filter(Absent.tgl_absen.between(start_date, end_date))

    total = query.count()
    rows = query.order_by(Absent.tgl_absen.desc()).offset((page - 1) * limit).limit(limit).all()

    return {
        "success": True,
        "data": [absent_to_dict(a, emp) for a, emp in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": (total + limit - 1) // limit
        }
    }


@router.get("/attendance/stats")
async def get_attendance_stats(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    kd_dept: Optional[str] = None,
    kd_seksie: Optional[str] = None,
    kd_jab: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    if not (start_date and end_date):
        end_date = date.today()
        start_date = end_date - timedelta(days=STATS_DEFAULT_DAYS)

    query = _scoped_query(db, current_user).filter(Absent.tgl_absen.between(start_date, end_date))
    if kd_dept and kd_dept != 'all':
        query = query.filter(Karyawan.kd_dept == kd_dept)
    if kd_seksie and kd_seksie != 'all':
        query = query.filter(Karyawan.kd_seksie == kd_seksie)
    if kd_jab and kd_jab != 'all':
        query = query.filter(Karyawan.kd_jab == kd_jab)

    total = query.count()
    present = query.filter(Absent.kd_absen == 'H').count()
    late = query.filter(Absent.lambat > 0).count()
    absent = query.filter(or_(Absent.kd_absen != 'H', Absent.kd_absen.is_(None))).count()

    def pct(count):
        return (count / total) * 100 if total > 0 else 0

    return {
        "success": True,
        "stats": {
            "total": total,
            "presentCount": present,
            "lateCount": late,
            "absentCount": absent,
            "presentPercentage": pct(present),
            "latePercentage": pct(late),
            "absentPercentage": pct(absent),
        }
    }


@router.put("/attendance/{id}")
async def update_attendance(
    id: str,
    payload: UpdateAttendanceDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    record = db.query(Absent).filter(Absent.id == id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Data not found")

    try:
        record.std_masuk = payload.std_masuk
        record.std_keluar = payload.std_keluar
        record.real_masuk = payload.real_masuk
        record.real_keluar = payload.real_keluar
        record.lambat = calculate_late(payload.std_masuk, payload.real_masuk)
        record.cepat = calculate_early(payload.std_keluar, payload.real_keluar)
        record.kd_absen = payload.kd_absen
        record.kode_desc = payload.kode_desc or None
        if payload.tot_lmb is not None:
            record.tot_lmb = payload.tot_lmb
        record.ket_lmb = payload.ket_lmb
        db.commit()
        db.refresh(record)
        return {"success": True, "message": "Data absensi berhasil diperbarui", "data": absent_to_dict(record)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/attendance/logs")
async def get_att_logs(
    nik: Optional[str] = None,
    date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Raw fingerprint taps of one employee on one day, consecutive double taps removed"""
    if current_user.is_employee:
        nik = current_user.empl_id
    if not nik or not date:
        raise HTTPException(status_code=400, detail="NIK and Date are required")

    logs = db.query(AttLog).filter(
        AttLog.nik == nik.strip(),
        AttLog.tanggal == date
    ).order_by(AttLog.jam.asc()).all()

    filtered = dedupe_taps(logs)
    return {
        "success": True,
        "count": len(filtered),
        "data": [{
            "id": log.id,
            "nik": log.nik,
            "tanggal": log.tanggal.isoformat(),
            "jam": log.jam,
            "cflag": log.cflag,
            "mesin": log.mesin,
        } for log in filtered]
    }
