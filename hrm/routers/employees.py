from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
import logging

from hrm.database import get_db
from hrm.models.models import Karyawan, Gaji, Periode, Users
from hrm.core.permissions import CurrentUser, get_current_user, require_management
from hrm.services.master_lookup import EMPLOYEE_RELATIONS, build_lookup_maps, resolve_relation_ids

logger = logging.getLogger("employees")

router = APIRouter(
    prefix="/api/employees",
    tags=["Employees"],
    responses={404: {"description": "Not found"}},
)


# DTOs
class EmployeeDTO(BaseModel):
    empl_id: str
    nama: str
    nik: Optional[str] = None
    id_absen: Optional[str] = None
    email: Optional[str] = None
    kd_sex: str = 'LAKILAKI'
    tmp_lhr: Optional[str] = None
    tgl_lhr: Optional[date] = None
    alamat1: Optional[str] = None
    kota: Optional[str] = None
    handphone: Optional[str] = None
    kd_cmpy: Optional[str] = None
    kd_fact: Optional[str] = None
    kd_bag: Optional[str] = None
    kd_dept: Optional[str] = None
    kd_seksie: Optional[str] = None
    kd_jab: Optional[str] = None
    kd_pkt: Optional[str] = None
    kd_agm: Optional[str] = None
    kd_skl: Optional[str] = None
    kd_jam: Optional[str] = None
    group_shift: Optional[str] = None
    kd_jns: str = 'TETAP'
    kd_sts: str = 'AKTIF'
    tgl_msk: Optional[date] = None
    tgl_out: Optional[date] = None
    kd_out: bool = False
    bank_code: Optional[str] = None
    bank_unit: Optional[str] = None
    bank_rek_no: Optional[str] = None
    bank_rek_name: Optional[str] = None
    pokok_bln: Decimal = Decimal('0')
    t_transport: Decimal = Decimal('0')
    kd_transp: bool = False
    t_makan: Decimal = Decimal('0')
    kd_makan: bool = False
    t_jabatan: Decimal = Decimal('0')
    t_keluarga: Decimal = Decimal('0')
    t_komunikasi: Decimal = Decimal('0')
    t_khusus: Decimal = Decimal('0')
    t_lmbtetap: Decimal = Decimal('0')
    fix_other: Decimal = Decimal('0')
    superior_id: Optional[str] = None
    superior2_id: Optional[str] = None


class VerifyDobDTO(BaseModel):
    dob: str


def _blank_to_none(value):
    if value in ('', 'none'):
        return None
    return value


def employee_to_dict(emp: Karyawan) -> dict:
    return {
        "id": emp.id,
        "empl_id": emp.empl_id,
        "nik": emp.nik,
        "id_absen": emp.id_absen,
        "nama": emp.nama,
        "email": emp.email,
        "kd_sex": emp.kd_sex,
        "tgl_lhr": emp.tgl_lhr.isoformat() if emp.tgl_lhr else None,
        "kd_cmpy": emp.kd_cmpy,
        "company": emp.company_rel.company if emp.company_rel else None,
        "kd_bag": emp.kd_bag,
        "nm_bag": emp.bagian.nm_bag if emp.bagian else None,
        "kd_dept": emp.kd_dept,
        "nm_dept": emp.departemen.nm_dept if emp.departemen else None,
        "kd_seksie": emp.kd_seksie,
        "nm_seksie": emp.seksie.nm_seksie if emp.seksie else None,
        "kd_jab": emp.kd_jab,
        "nm_jab": emp.jabatan.nm_jab if emp.jabatan else None,
        "kd_jns": emp.kd_jns,
        "kd_sts": emp.kd_sts,
        "kd_out": emp.kd_out,
        "kd_jam": emp.kd_jam,
        "group_shift": emp.group_shift,
        "tgl_msk": emp.tgl_msk.isoformat() if emp.tgl_msk else None,
        "bank_code": emp.bank_code,
        "superior_id": emp.superior_id,
        "superior2_id": emp.superior2_id,
        "user_id": emp.user_id,
        "created_at": emp.created_at.isoformat() if emp.created_at else None,
        "updated_at": emp.updated_at.isoformat() if emp.updated_at else None,
    }


def _get_active_employee(db: Session, id: str) -> Karyawan:
    emp = db.query(Karyawan).filter(Karyawan.id == id, Karyawan.deleted_at.is_(None)).first()
    if not emp:
        raise HTTPException(status_code=404, detail="Data not found")
    return emp


def _apply_payload(db: Session, emp: Karyawan, payload: EmployeeDTO):
    values = payload.model_dump()
    for key in ('nik', 'id_absen', 'email', 'kd_cmpy', 'kd_fact', 'kd_bag', 'kd_dept', 'kd_seksie', 'kd_jab',
                'kd_pkt', 'kd_agm', 'kd_skl', 'kd_jam', 'group_shift', 'bank_code', 'bank_unit', 'bank_rek_no',
                'bank_rek_name', 'superior_id', 'superior2_id'):
        values[key] = _blank_to_none(values[key])
    for key, value in values.items():
        setattr(emp, key, value)

    maps = build_lookup_maps(db, EMPLOYEE_RELATIONS)
    for key, value in resolve_relation_ids(values, maps, EMPLOYEE_RELATIONS).items():
        setattr(emp, key, value)

    # Link to the login account with the same email
    emp.user_id = None
    if emp.email:
        user = db.query(Users).filter(func.lower(Users.email) == emp.email.strip().lower()).first()
        if user:
            emp.user_id = user.id


@router.get("")
async def get_employees(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    search: Optional[str] = None,
    kd_cmpy: Optional[str] = None,
    kd_fact: Optional[str] = None,
    kd_bag: Optional[str] = None,
    kd_dept: Optional[str] = None,
    kd_seksie: Optional[str] = None,
    kd_jab: Optional[str] = None,
    kd_sts: Optional[str] = None,
    kd_out: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    query = db.query(Karyawan).filter(Karyawan.deleted_at.is_(None))

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Karyawan.empl_id.ilike(pattern),
            Karyawan.nik.ilike(pattern),
            Karyawan.nama.ilike(pattern)
        ))
    if kd_cmpy:
        query = query.filter(Karyawan.kd_cmpy == kd_cmpy)
    if kd_fact:
        query = query.filter(Karyawan.kd_fact == kd_fact)
    if kd_bag:
        query = query.filter(Karyawan.kd_bag == kd_bag)
    if kd_dept:
        query = query.filter(Karyawan.kd_dept == kd_dept)
    if kd_seksie:
        query = query.filter(Karyawan.kd_seksie == kd_seksie)
    if kd_jab:
        query = query.filter(Karyawan.kd_jab == kd_jab)
    if kd_sts:
        query = query.filter(Karyawan.kd_sts == kd_sts)
    if kd_out is not None:
        query = query.filter(Karyawan.kd_out == kd_out)

    total = query.count()
    employees = query.order_by(Karyawan.empl_id).offset((page - 1) * limit).limit(limit).all()

    return {
        "success": True,
        "data": [employee_to_dict(e) for e in employees],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": (total + limit - 1) // limit
        }
    }


@router.post("/verify-dob")
async def verify_dob(
    payload: VerifyDobDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Password gate for salary slips: date of birth as DDMMYYYY"""
    if not current_user.empl_id:
        raise HTTPException(status_code=400, detail="Account not linked to an employee")

    emp = db.query(Karyawan).filter(Karyawan.empl_id == current_user.empl_id).first()
    if not emp or not emp.tgl_lhr:
        raise HTTPException(status_code=404, detail="Birth date not found in records")

    if payload.dob.strip() != emp.tgl_lhr.strftime('%d%m%Y'):
        raise HTTPException(status_code=401, detail="Password salah")
    return {"success": True, "message": "Verification successful"}


@router.get("/{id}")
async def get_employee_detail(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    emp = _get_active_employee(db, id)
    data = employee_to_dict(emp)
    data.update({
        "alamat1": emp.alamat1,
        "kota": emp.kota,
        "handphone": emp.handphone,
        "tmp_lhr": emp.tmp_lhr,
        "ktp_no": emp.ktp_no,
        "npwp": emp.npwp,
        "no_bpjs_tk": emp.no_bpjs_tk,
        "no_bpjs_kes": emp.no_bpjs_kes,
        "bank_unit": emp.bank_unit,
        "bank_rek_no": emp.bank_rek_no,
        "bank_rek_name": emp.bank_rek_name,
        "tgl_out": emp.tgl_out.isoformat() if emp.tgl_out else None,
        "alasan_out": emp.alasan_out,
    })
    return {"success": True, "data": data}


@router.get("/{id}/payroll")
async def get_employee_payroll(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    emp = _get_active_employee(db, id)

    allowances = {
        "transport": float(emp.t_transport or 0) if emp.kd_transp else 0,
        "meal": float(emp.t_makan or 0) if emp.kd_makan else 0,
        "position": float(emp.t_jabatan or 0),
        "family": float(emp.t_keluarga or 0),
        "communication": float(emp.t_komunikasi or 0),
        "special": float(emp.t_khusus or 0),
        "overtime": float(emp.t_lmbtetap or 0),
        "other": float(emp.fix_other or 0),
    }
    base_salary = float(emp.pokok_bln or 0)
    total_salary = base_salary + sum(allowances.values())

    warnings = []
    if total_salary == 0:
        warnings.append('Total salary is 0 - check employee status')
    if base_salary == 0:
        warnings.append('Base salary is 0 - verify data mapping')

    return {
        "success": True,
        "data": {
            "employee": {"id": emp.id, "empl_id": emp.empl_id, "nama": emp.nama},
            "payroll": {
                "base_salary": base_salary,
                "allowances": allowances,
                "total_salary": total_salary,
                "warnings": warnings,
            }
        }
    }


@router.get("/{id}/history")
async def get_payroll_history(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    emp = _get_active_employee(db, id)
    if current_user.is_employee and emp.empl_id != current_user.empl_id:
        raise HTTPException(status_code=403, detail="Akses ditolak")

    rows = db.query(Gaji, Periode.nama)\
        .outerjoin(Periode, Gaji.period == Periode.periode_id)\
        .filter(Gaji.empl_id == emp.empl_id)\
        .order_by(Gaji.tgl_proses.desc())\
        .all()

    return {
        "success": True,
        "data": [{
            "id": g.id,
            "period": g.period,
            "period_name": nama or g.period,
            "process_date": g.tgl_proses.isoformat() if g.tgl_proses else None,
            "basic_salary": float(g.pokok_bln or 0),
            "gross_salary": float(g.g_kotor or 0),
            "net_salary": float(g.g_bersih or 0),
        } for g, nama in rows]
    }


@router.post("", status_code=201)
async def create_employee(
    payload: EmployeeDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    try:
        existing = db.query(Karyawan).filter(Karyawan.empl_id == payload.empl_id).first()
        if existing:
            raise HTTPException(status_code=400, detail="Employee ID already exists")

        emp = Karyawan(created_by=current_user.email, updated_by=current_user.email)
        _apply_payload(db, emp, payload)
        db.add(emp)
        db.commit()
        db.refresh(emp)
        logger.info(f"[Employees] Created {emp.empl_id} by {current_user.email}")
        return {"success": True, "message": "Data berhasil disimpan", "data": employee_to_dict(emp)}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{id}")
async def update_employee(
    id: str,
    payload: EmployeeDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    emp = _get_active_employee(db, id)
    try:
        if payload.empl_id != emp.empl_id:
            taken = db.query(Karyawan.id).filter(Karyawan.empl_id == payload.empl_id).first()
            if taken:
                raise HTTPException(status_code=400, detail="Employee ID already exists")

        _apply_payload(db, emp, payload)
        emp.updated_by = current_user.email
        db.commit()
        db.refresh(emp)
        return {"success": True, "message": "Data berhasil diupdate", "data": employee_to_dict(emp)}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{id}")
async def delete_employee(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    emp = _get_active_employee(db, id)
    try:
        emp.deleted_at = datetime.now()
        emp.updated_by = current_user.email
        db.commit()
        return {"success": True, "message": "Data berhasil dihapus"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
