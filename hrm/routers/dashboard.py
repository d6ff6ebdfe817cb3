from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from datetime import date, timedelta
import logging

from hrm.database import get_db
from hrm.models.models import Absent, AttLog, Dshift, Hcuti, JnsJam, Karyawan, Periode
from hrm.core.permissions import CurrentUser, get_current_user
from hrm.services.attendance_rules import dedupe_taps
from hrm.services.shift_matrix import shift_column

logger = logging.getLogger("dashboard")

router = APIRouter(
    prefix="/api/dashboard",
    tags=["Dashboard"]
)

RECENT_TAP_DAYS = 3
RECENT_TAP_LIMIT = 10
LEAVE_CODES = ['I', 'S', 'P']


def _today_shift(db: Session, emp: Karyawan, periode: str, today: date):
    if not emp.group_shift or not emp.kd_cmpy:
        return None
    dshift = db.query(Dshift).filter(
        Dshift.periode == periode,
        Dshift.kd_cmpy == emp.kd_cmpy,
        Dshift.group_shift == emp.group_shift
    ).first()
    kd_jam = getattr(dshift, shift_column(today.day)) if dshift else None
    if not kd_jam:
        return None
    jam = db.query(JnsJam).filter(JnsJam.kd_jam == kd_jam).first()
    return {
        "shift_code": kd_jam,
        "in": jam.jam_msk if jam else None,
        "out": jam.jam_klr if jam else None,
        "name": jam.nm_jam if jam else None,
    }


@router.get("/employee-stats")
async def get_employee_stats(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    if not current_user.empl_id:
        raise HTTPException(
            status_code=400,
            detail="Akun anda belum terhubung dengan data karyawan. Silakan hubungi HR."
        )
    empl_id = current_user.empl_id
    today = date.today()

    current_period = db.query(Periode).filter(Periode.data_defa == True).first()
    target_period = current_period.periode_id if current_period else today.strftime('%Y%m')

    hcuti = db.query(Hcuti).filter(Hcuti.empl_id == empl_id, Hcuti.tahun == today.year).first()
    hadir = db.query(Absent).filter(
        Absent.empl_id == empl_id,
        Absent.periode == target_period,
        Absent.kd_absen == 'H'
    ).count()
    ijin_sakit = db.query(Absent).filter(
        Absent.empl_id == empl_id,
        Absent.periode == target_period,
        Absent.kd_absen.in_(LEAVE_CODES)
    ).count()

    emp = db.query(Karyawan).filter(Karyawan.empl_id == empl_id).first()
    if not emp:
        raise HTTPException(status_code=404, detail="Data not found")

    taps = db.query(AttLog).filter(
        AttLog.empl_id == empl_id,
        AttLog.tanggal >= today - timedelta(days=RECENT_TAP_DAYS)
    ).order_by(AttLog.tanggal.desc(), AttLog.jam.desc()).limit(RECENT_TAP_LIMIT).all()

    return {
        "success": True,
        "data": {
            "sisa_cuti": hcuti.sisa if hcuti else 0,
            "hadir": hadir,
            "ijin_sakit": ijin_sakit,
            "employee": {
                "nama": emp.nama,
                "position": emp.jabatan.nm_jab if emp.jabatan else 'Karyawan',
                "department": emp.departemen.nm_dept if emp.departemen else 'General',
            },
            "today_shift": _today_shift(db, emp, target_period, today),
            "recent_activities": [{
                "id": log.id,
                "type": 'Clock In' if log.cflag in ('0', 'I') else 'Clock Out',
                "date": log.tanggal.isoformat(),
                "time": log.jam,
                "mesin": log.mesin,
            } for log in dedupe_taps(taps)],
            "period_info": current_period.nama if current_period and current_period.nama else f"Bulan {today.month}",
        }
    }
