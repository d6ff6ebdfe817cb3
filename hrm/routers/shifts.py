from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Dict, Optional
from datetime import date
import logging

from hrm.database import get_db
from hrm.models.models import GroupShift, JnsJam, ShiftPattern
from hrm.core.permissions import CurrentUser, require_management
from hrm.services.shift_matrix import (
    MatrixError, SHIFT_COLUMNS, find_matrix, generate_for_group, get_group, matrix_to_dict,
    split_pattern, sync_matrix_to_attendance, upsert_matrix,
)

logger = logging.getLogger("shifts")

router = APIRouter(
    prefix="/api/shifts",
    tags=["Shifts"],
    responses={404: {"description": "Not found"}},
)


# ─── DTOs ─────────────────────────────────────────────────────────────────

class ShiftTypeDTO(BaseModel):
    kd_jam: str
    nm_jam: Optional[str] = None
    jns_jam: Optional[str] = None
    jam_msk: Optional[str] = None
    jam_klr: Optional[str] = None
    keterangan: Optional[str] = None


class GroupShiftDTO(BaseModel):
    group_shift: str
    group_name: Optional[str] = None
    is_active: bool = True
    pattern_id: Optional[str] = None
    ref_date: Optional[date] = None


class MatrixDTO(BaseModel):
    periode: str
    group_shift_id: str
    shifts: Dict[str, Optional[str]] = {}


class MatrixRequestDTO(BaseModel):
    periode: str
    group_shift_id: str


class PatternDTO(BaseModel):
    name: str
    pattern: str
    description: Optional[str] = None
    is_active: bool = True


def shift_type_to_dict(j: JnsJam) -> dict:
    return {
        "id": j.id,
        "kd_jam": j.kd_jam,
        "nm_jam": j.nm_jam,
        "jns_jam": j.jns_jam,
        "jam_msk": j.jam_msk,
        "jam_klr": j.jam_klr,
        "keterangan": j.keterangan,
    }


def group_to_dict(g: GroupShift) -> dict:
    return {
        "id": g.id,
        "group_shift": g.group_shift,
        "group_name": g.group_name,
        "is_active": g.is_active,
        "pattern_id": g.pattern_id,
        "ref_date": g.ref_date.isoformat() if g.ref_date else None,
        "pattern": pattern_to_dict(g.pattern) if g.pattern else None,
    }


def pattern_to_dict(p: ShiftPattern) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "pattern": p.pattern,
        "description": p.description,
        "is_active": p.is_active,
    }


def _matrix_error(e: MatrixError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


# ─── Shift types (jnsjam) ─────────────────────────────────────────────────

@router.get("/types")
async def get_shift_types(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    types = db.query(JnsJam).order_by(JnsJam.kd_jam.asc()).all()
    return {"success": True, "data": [shift_type_to_dict(j) for j in types]}


@router.post("/types", status_code=201)
async def create_shift_type(
    payload: ShiftTypeDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    if db.query(JnsJam).filter(JnsJam.kd_jam == payload.kd_jam).first():
        raise HTTPException(status_code=400, detail=f"Kode jam {payload.kd_jam} sudah ada")
    try:
        shift_type = JnsJam(**payload.model_dump())
        db.add(shift_type)
        db.commit()
        db.refresh(shift_type)
        return {"success": True, "message": "Data berhasil disimpan", "data": shift_type_to_dict(shift_type)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/types/{id}")
async def update_shift_type(
    id: str,
    payload: ShiftTypeDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    shift_type = db.query(JnsJam).filter(JnsJam.id == id).first()
    if not shift_type:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        for key, value in payload.model_dump().items():
            setattr(shift_type, key, value)
        db.commit()
        db.refresh(shift_type)
        return {"success": True, "message": "Data berhasil diupdate", "data": shift_type_to_dict(shift_type)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/types/{id}")
async def delete_shift_type(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    shift_type = db.query(JnsJam).filter(JnsJam.id == id).first()
    if not shift_type:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        db.delete(shift_type)
        db.commit()
        return {"success": True, "message": "Data berhasil dihapus"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# ─── Shift groups ─────────────────────────────────────────────────────────

@router.get("/groups")
async def get_group_shifts(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    groups = db.query(GroupShift).filter(GroupShift.is_active == True).order_by(GroupShift.group_shift.asc()).all()
    return {"success": True, "data": [group_to_dict(g) for g in groups]}


@router.post("/groups", status_code=201)
async def create_group_shift(
    payload: GroupShiftDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    if db.query(GroupShift).filter(GroupShift.group_shift == payload.group_shift).first():
        raise HTTPException(status_code=400, detail=f"Grup {payload.group_shift} sudah ada")
    try:
        group = GroupShift(**payload.model_dump())
        db.add(group)
        db.commit()
        db.refresh(group)
        return {"success": True, "message": "Data berhasil disimpan", "data": group_to_dict(group)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/groups/{id}")
async def update_group_shift(
    id: str,
    payload: GroupShiftDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    group = db.query(GroupShift).filter(GroupShift.id == id).first()
    if not group:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        for key, value in payload.model_dump().items():
            setattr(group, key, value)
        db.commit()
        db.refresh(group)
        return {"success": True, "message": "Data berhasil diupdate", "data": group_to_dict(group)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/groups/{id}")
async def delete_group_shift(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    group = db.query(GroupShift).filter(GroupShift.id == id).first()
    if not group:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        db.delete(group)
        db.commit()
        return {"success": True, "message": "Data berhasil dihapus"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# ─── Monthly matrix (dshift) ──────────────────────────────────────────────

@router.get("/matrix")
async def get_matrix(
    periode: Optional[str] = None,
    group_shift_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    if not periode or not group_shift_id:
        raise HTTPException(status_code=400, detail="Periode and GroupShiftId are required")
    try:
        group = get_group(db, group_shift_id)
        row = find_matrix(db, periode, group)
    except MatrixError as e:
        raise _matrix_error(e)
    return {"success": True, "data": matrix_to_dict(row)}


@router.post("/matrix")
async def save_matrix(
    payload: MatrixDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    unknown = [column for column in payload.shifts if column not in SHIFT_COLUMNS]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Kolom tidak dikenal: {', '.join(unknown)}")
    try:
        group = get_group(db, payload.group_shift_id)
        row = upsert_matrix(db, payload.periode, group, payload.shifts)
        db.commit()
        db.refresh(row)
        return {"success": True, "message": "Data berhasil disimpan", "data": matrix_to_dict(row)}
    except MatrixError as e:
        db.rollback()
        raise _matrix_error(e)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/generate")
async def generate_matrix_from_pattern(
    payload: MatrixRequestDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    try:
        row = generate_for_group(db, payload.periode, payload.group_shift_id)
        return {
            "success": True,
            "message": "Jadwal otomatis berhasil dibuat berdasarkan pola.",
            "data": matrix_to_dict(row)
        }
    except MatrixError as e:
        db.rollback()
        raise _matrix_error(e)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sync")
async def sync_shift_to_attendance(
    payload: MatrixRequestDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    try:
        result = sync_matrix_to_attendance(db, payload.periode, payload.group_shift_id)
        return {
            "success": True,
            "message": f"Successfully synced {result['synced']} schedules for {result['employees']} employees.",
            **result
        }
    except MatrixError as e:
        db.rollback()
        raise _matrix_error(e)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# ─── Rotation patterns ────────────────────────────────────────────────────

@router.get("/patterns")
async def get_patterns(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    patterns = db.query(ShiftPattern).filter(ShiftPattern.is_active == True).order_by(ShiftPattern.name.asc()).all()
    return {"success": True, "data": [pattern_to_dict(p) for p in patterns]}


@router.post("/patterns", status_code=201)
async def create_pattern(
    payload: PatternDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    if not split_pattern(payload.pattern):
        raise HTTPException(status_code=400, detail="Pola shift kosong")
    try:
        pattern = ShiftPattern(**payload.model_dump())
        db.add(pattern)
        db.commit()
        db.refresh(pattern)
        return {"success": True, "message": "Data berhasil disimpan", "data": pattern_to_dict(pattern)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/patterns/{id}")
async def update_pattern(
    id: str,
    payload: PatternDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    pattern = db.query(ShiftPattern).filter(ShiftPattern.id == id).first()
    if not pattern:
        raise HTTPException(status_code=404, detail="Data not found")
    if not split_pattern(payload.pattern):
        raise HTTPException(status_code=400, detail="Pola shift kosong")
    try:
        for key, value in payload.model_dump().items():
            setattr(pattern, key, value)
        db.commit()
        db.refresh(pattern)
        return {"success": True, "message": "Data berhasil diupdate", "data": pattern_to_dict(pattern)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/patterns/{id}")
async def delete_pattern(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    pattern = db.query(ShiftPattern).filter(ShiftPattern.id == id).first()
    if not pattern:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        pattern.is_active = False
        db.commit()
        return {"success": True, "message": "Pola shift berhasil dinonaktifkan"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
