from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from pydantic import BaseModel
from typing import List, Optional
import logging

from hrm.database import get_db
from hrm.models.models import MstBag, MstDept, MstSie
from hrm.core.permissions import CurrentUser, get_current_user, require_management

logger = logging.getLogger("org_structure")

router = APIRouter(
    prefix="/api/org-structure",
    tags=["Org Structure"]
)


# ==========================================
# DTOs
# ==========================================

class DivisionDTO(BaseModel):
    id: str
    kd_bag: str
    nm_bag: Optional[str] = None
    keterangan: Optional[str] = None

    class Config:
        from_attributes = True


class DivisionCreateRequest(BaseModel):
    kd_bag: str
    nm_bag: Optional[str] = None
    keterangan: Optional[str] = None


class DivisionUpdateRequest(BaseModel):
    nm_bag: Optional[str] = None
    keterangan: Optional[str] = None


class DepartmentDTO(BaseModel):
    id: str
    kd_dept: str
    nm_dept: Optional[str] = None
    kd_bag: Optional[str] = None
    keterangan: Optional[str] = None

    class Config:
        from_attributes = True


class DepartmentCreateRequest(BaseModel):
    kd_dept: str
    nm_dept: Optional[str] = None
    kd_bag: Optional[str] = None
    keterangan: Optional[str] = None


class DepartmentUpdateRequest(BaseModel):
    nm_dept: Optional[str] = None
    kd_bag: Optional[str] = None
    keterangan: Optional[str] = None


class SectionDTO(BaseModel):
    id: str
    kd_seksie: str
    nm_seksie: Optional[str] = None
    kd_bag: Optional[str] = None
    kd_dept: Optional[str] = None
    keterangan: Optional[str] = None

    class Config:
        from_attributes = True


class SectionCreateRequest(BaseModel):
    kd_seksie: str
    nm_seksie: Optional[str] = None
    kd_bag: Optional[str] = None
    kd_dept: Optional[str] = None
    keterangan: Optional[str] = None


class SectionUpdateRequest(BaseModel):
    nm_seksie: Optional[str] = None
    kd_bag: Optional[str] = None
    kd_dept: Optional[str] = None
    keterangan: Optional[str] = None


def _create(db: Session, model, code_attr: str, payload: BaseModel, label: str):
    code = getattr(payload, code_attr)
    if db.query(model).filter(getattr(model, code_attr) == code).first():
        raise HTTPException(status_code=400, detail=f"Kode {label} {code} sudah ada")
    try:
        record = model(**payload.model_dump())
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


def _update(db: Session, model, code_attr: str, code: str, payload: BaseModel):
    record = db.query(model).filter(getattr(model, code_attr) == code).first()
    if not record:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        for key, value in payload.model_dump().items():
            setattr(record, key, value)
        db.commit()
        db.refresh(record)
        return record
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


def _delete(db: Session, model, code_attr: str, code: str, label: str):
    record = db.query(model).filter(getattr(model, code_attr) == code).first()
    if not record:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        db.delete(record)
        db.commit()
        return {"success": True, "message": f"{label} berhasil dihapus"}
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Tidak dapat menghapus karena ada data terkait (Karyawan/Lainnya)")
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# ==========================================
# DIVISIONS (BAGIAN)
# ==========================================

@router.get("/divisions", response_model=List[DivisionDTO])
async def get_divisions(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return db.query(MstBag).order_by(MstBag.kd_bag).all()


@router.post("/divisions", response_model=DivisionDTO, status_code=201)
async def create_division(
    payload: DivisionCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    return _create(db, MstBag, "kd_bag", payload, "Bagian")


@router.put("/divisions/{code}", response_model=DivisionDTO)
async def update_division(
    code: str,
    payload: DivisionUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    return _update(db, MstBag, "kd_bag", code, payload)


@router.delete("/divisions/{code}")
async def delete_division(code: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_management)):
    return _delete(db, MstBag, "kd_bag", code, "Bagian")


# ==========================================
# DEPARTMENTS
# ==========================================

@router.get("/departments", response_model=List[DepartmentDTO])
async def get_departments(
    kd_bag: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    query = db.query(MstDept)
    if kd_bag:
        query = query.filter(MstDept.kd_bag == kd_bag)
    return query.order_by(MstDept.kd_dept).all()


@router.post("/departments", response_model=DepartmentDTO, status_code=201)
async def create_department(
    payload: DepartmentCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    return _create(db, MstDept, "kd_dept", payload, "Departemen")


@router.put("/departments/{code}", response_model=DepartmentDTO)
async def update_department(
    code: str,
    payload: DepartmentUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    return _update(db, MstDept, "kd_dept", code, payload)


@router.delete("/departments/{code}")
async def delete_department(code: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_management)):
    return _delete(db, MstDept, "kd_dept", code, "Departemen")


# ==========================================
# SECTIONS (SEKSIE)
# ==========================================

@router.get("/sections", response_model=List[SectionDTO])
async def get_sections(
    kd_dept: Optional[str] = None,
    kd_bag: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    query = db.query(MstSie)
    if kd_dept:
        query = query.filter(MstSie.kd_dept == kd_dept)
    if kd_bag:
        query = query.filter(MstSie.kd_bag == kd_bag)
    return query.order_by(MstSie.kd_seksie).all()


@router.post("/sections", response_model=SectionDTO, status_code=201)
async def create_section(
    payload: SectionCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    return _create(db, MstSie, "kd_seksie", payload, "Seksie")


@router.put("/sections/{code}", response_model=SectionDTO)
async def update_section(
    code: str,
    payload: SectionUpdateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    return _update(db, MstSie, "kd_seksie", code, payload)


@router.delete("/sections/{code}")
async def delete_section(code: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_management)):
    return _delete(db, MstSie, "kd_seksie", code, "Seksie")
