from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import func
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
import logging

from hrm.database import get_db
from hrm.models.models import Gaji, Karyawan, Periode, Ptkp
from hrm.core.permissions import CurrentUser, get_current_user, require_management

logger = logging.getLogger("payroll")

router = APIRouter(
    prefix="/api/payroll",
    tags=["Payroll"]
)


class CreatePeriodDTO(BaseModel):
    name: str
    start_date: date
    end_date: date
    notes: Optional[str] = None


def _num(value) -> float:
    return float(value or 0)


def _require_linked(current_user: CurrentUser):
    if current_user.is_employee and not current_user.empl_id:
        raise HTTPException(status_code=400, detail="Your account is not linked to an employee record")


def slip_breakdown(g: Gaji) -> dict:
    pokok_trm = _num(g.pokok_trm)
    allowances = {
        "t_jabatan": _num(g.t_jabatan),
        "t_transport": _num(g.t_transport),
        "t_makan": _num(g.t_makan),
        "t_khusus": _num(g.t_khusus),
        "rapel": _num(g.rapel) + _num(g.tunj_rapel),
        "lembur": _num(g.tot_u_lembur),
        "t_lain": _num(g.tunj_lain) + _num(g.t_lain),
        "adm_bank": _num(g.adm_bank),
    }
    deductions = {
        "jht": _num(g.jht_empl),
        "jpn": _num(g.jpn_empl),
        "bpjs": _num(g.jkn_empl),
        "pph21": _num(g.t_pph21),
        "pinjaman": _num(g.pinjam),
        "koperasi": _num(g.koperasi),
        "lain": _num(g.pt_lain),
    }
    # Transport and meal are paid outside the slip total
    total_allowances = pokok_trm + sum(
        v for k, v in allowances.items() if k not in ("t_transport", "t_makan")
    )
    return {
        "pokok_trm": pokok_trm,
        "allowances": allowances,
        "deductions": deductions,
        "total_allowances": total_allowances,
        "total_deductions": sum(deductions.values()),
    }


def period_summaries(db: Session, empl_id: Optional[str] = None) -> list:
    """One row per payroll period with head count and net total, newest first"""
    query = db.query(
        Gaji.period,
        func.count(Gaji.id),
        func.sum(Gaji.g_bersih)
    )
    if empl_id:
        query = query.filter(Gaji.empl_id == empl_id)
    grouped = query.group_by(Gaji.period).order_by(Gaji.period.desc()).all()

    details = {
        p.periode_id: p
        for p in db.query(Periode).filter(Periode.periode_id.in_([row[0] for row in grouped])).all()
    }

    data = []
    for period, count, total in grouped:
        detail = details.get(period)
        data.append({
            "id": period,
            "name": detail.nama if detail and detail.nama else period,
            "year": detail.tahun if detail else None,
            "month": detail.bulan if detail else None,
            "start_date": detail.awal.isoformat() if detail else None,
            "end_date": detail.akhir.isoformat() if detail else None,
            "total_employees": count,
            "total_amount": _num(total),
            "status": 'Closed' if detail and detail.tutup else 'Open',
        })
    return data


@router.get("/periods")
async def get_payroll_periods(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    _require_linked(current_user)
    empl_id = current_user.empl_id if current_user.is_employee else None
    return {"success": True, "data": period_summaries(db, empl_id)}


@router.get("/my")
async def get_my_payroll_periods(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """The caller's own slips, whatever the role"""
    if not current_user.empl_id:
        raise HTTPException(status_code=400, detail="Your account is not linked to an employee record")
    return {"success": True, "data": period_summaries(db, current_user.empl_id)}


@router.post("/periods", status_code=201)
async def create_payroll_period(
    payload: CreatePeriodDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    try:
        periode_id = payload.start_date.strftime('%Y%m')
        if db.query(Periode).filter(Periode.periode_id == periode_id).first():
            raise HTTPException(status_code=400, detail=f"Period {periode_id} already exists")

        periode = Periode(
            periode_id=periode_id,
            nama=payload.name,
            tahun=payload.start_date.year,
            bulan=payload.start_date.month,
            awal=payload.start_date,
            akhir=payload.end_date,
            tutup=False,
            keterangan=payload.notes,
        )
        db.add(periode)

        employees = db.query(Karyawan).filter(
            Karyawan.kd_sts == 'AKTIF',
            Karyawan.deleted_at.is_(None)
        ).all()
        for emp in employees:
            db.add(Gaji(
                period=periode_id,
                empl_id=emp.empl_id,
                nik=emp.nik,
                nama=emp.nama,
                kd_cmpy=emp.kd_cmpy,
                kd_dept=emp.kd_dept,
                kd_jab=emp.kd_jab,
                tgl_proses=datetime.now().date(),
                tgl_msk=emp.tgl_msk,
                pokok_bln=emp.pokok_bln or 0,
                g_kotor=emp.pokok_bln or 0,
                g_bersih=emp.pokok_bln or 0,
            ))

        db.commit()
        logger.info(f"[Payroll] Period {periode_id} created with {len(employees)} salary rows by {current_user.email}")
        return {
            "success": True,
            "message": f"Generated payroll for {len(employees)} employees",
            "data": {"periode_id": periode_id, "nama": periode.nama}
        }
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/periods/{periode_id}/details")
async def get_payroll_detail(
    periode_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    periode = db.query(Periode).filter(Periode.periode_id == periode_id).first()
    if not periode:
        raise HTTPException(status_code=404, detail="Data not found")
    _require_linked(current_user)

    query = db.query(Gaji, Karyawan)\
        .outerjoin(Karyawan, Gaji.empl_id == Karyawan.empl_id)\
        .filter(Gaji.period == periode_id)
    if current_user.is_employee:
        query = query.filter(Gaji.empl_id == current_user.empl_id)
    rows = query.order_by(Gaji.empl_id).all()

    ptkp_map = {p.kode: p.status for p in db.query(Ptkp).all()}

    employees = []
    for g, emp in rows:
        slip = slip_breakdown(g)
        employees.append({
            "id": g.id,
            "empl_id": g.empl_id,
            "nama": emp.nama if emp else (g.nama or 'Unknown'),
            "nik": emp.nik if emp else (g.nik or '-'),
            "position": emp.jabatan.nm_jab if emp and emp.jabatan else '-',
            "department": emp.departemen.nm_dept if emp and emp.departemen else '-',
            "section": emp.seksie.nm_seksie if emp and emp.seksie else '-',
            "join_date": emp.tgl_msk.isoformat() if emp and emp.tgl_msk else None,
            "tax_status": ptkp_map.get(emp.kd_ptkp, str(emp.kd_ptkp)) if emp else '-',
            "base_salary": _num(g.pokok_bln),
            "net_salary": _num(g.g_bersih),
            "gross_salary": _num(g.g_kotor),
            "lembur_hours": _num(g.tot_j_lembur),
            **slip,
        })

    return {
        "success": True,
        "data": {
            "summary": {
                "period": {
                    "id": periode.periode_id,
                    "name": periode.nama or f"Periode {periode.periode_id}",
                    "start_date": periode.awal.isoformat(),
                    "end_date": periode.akhir.isoformat(),
                    "status": 'Closed' if periode.tutup else 'Open',
                },
                "employee_count": len(employees),
                "total_net_salary": sum(e["net_salary"] for e in employees),
                "total_allowances": sum(e["total_allowances"] for e in employees),
                "total_deductions": sum(e["total_deductions"] for e in employees),
            },
            "employees": employees
        }
    }
