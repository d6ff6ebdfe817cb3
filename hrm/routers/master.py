from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from pydantic import BaseModel
from typing import List, Optional, Type
from decimal import Decimal
import logging

from hrm.database import get_db
from hrm.models.models import Bank, Company, MstAgm, MstFact, MstJab, MstPkt, MstSkl
from hrm.core.permissions import CurrentUser, get_current_user, require_management

logger = logging.getLogger("master")

router = APIRouter(
    prefix="/api/master",
    tags=["Master Data"]
)


# ==========================================
# DTOs
# ==========================================

class BankRequest(BaseModel):
    bank_code: str
    bank_nama: Optional[str] = None


class PositionRequest(BaseModel):
    kd_jab: str
    nm_jab: Optional[str] = None
    n_tjabatan: Optional[Decimal] = None
    n_transport: Optional[Decimal] = None
    n_shift_all: Optional[Decimal] = None
    n_premi_hdr: Optional[Decimal] = None
    persen_rmh: Optional[Decimal] = None
    persen_pph: Optional[Decimal] = None
    keterangan: Optional[str] = None


class LevelRequest(BaseModel):
    kd_pkt: str
    nm_pkt: Optional[str] = None
    keterangan: Optional[str] = None


class FactoryRequest(BaseModel):
    kd_fact: str
    nm_fact: Optional[str] = None
    keterangan: Optional[str] = None


class ReligionRequest(BaseModel):
    kd_agm: str
    nm_agm: Optional[str] = None
    keterangan: Optional[str] = None


class EducationRequest(BaseModel):
    kd_skl: str
    nm_skl: Optional[str] = None
    keterangan: Optional[str] = None


class CompanyRequest(BaseModel):
    kd_cmpy: str
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    address3: Optional[str] = None
    tlp: Optional[str] = None
    fax: Optional[str] = None
    npwp: Optional[str] = None
    director: Optional[str] = None
    npwp_dir: Optional[str] = None
    logo: Optional[str] = None
    npp: Optional[str] = None
    astek_bayar: Optional[str] = None
    email: Optional[str] = None
    homepage: Optional[str] = None
    hrd_mng: Optional[str] = None
    npwp_mng: Optional[str] = None


def row_to_dict(record) -> dict:
    data = {}
    for column in record.__table__.columns:
        value = getattr(record, column.key)
        if isinstance(value, Decimal):
            value = float(value)
        elif hasattr(value, "isoformat"):
            value = value.isoformat()
        data[column.key] = value
    return data


# ==========================================
# CODE KEYED MASTERS
# ==========================================

def register_code_master(path: str, model, code_attr: str, request_dto: Type[BaseModel], label: str):
    """List, detail, create, update and delete endpoints for a master table keyed by its legacy code."""
    code_column = getattr(model, code_attr)

    def get_or_404(db: Session, code: str):
        record = db.query(model).filter(code_column == code).first()
        if not record:
            raise HTTPException(status_code=404, detail=f"{label} tidak ditemukan")
        return record

    @router.get(f"/{path}", name=f"list_{path}")
    async def list_records(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
        return {"success": True, "data": [row_to_dict(r) for r in db.query(model).order_by(code_column).all()]}

    @router.get(f"/{path}/{{code}}", name=f"get_{path}")
    async def get_record(code: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
        return {"success": True, "data": row_to_dict(get_or_404(db, code))}

    @router.post(f"/{path}", name=f"create_{path}", status_code=201)
    async def create_record(
        payload: request_dto,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(require_management)
    ):
        code = getattr(payload, code_attr)
        if db.query(model).filter(code_column == code).first():
            raise HTTPException(status_code=400, detail=f"Kode {label} sudah ada")
        try:
            record = model(**payload.model_dump(exclude_none=True))
            db.add(record)
            db.commit()
            db.refresh(record)
            return {"success": True, "message": "Data berhasil disimpan", "data": row_to_dict(record)}
        except Exception as e:
            db.rollback()
            logger.error(f"[Master] Create {path} failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @router.put(f"/{path}/{{code}}", name=f"update_{path}")
    async def update_record(
        code: str,
        payload: request_dto,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(require_management)
    ):
        record = get_or_404(db, code)
        try:
            # the code itself is the natural key and never changes
            for key, value in payload.model_dump(exclude={code_attr}, exclude_none=True).items():
                setattr(record, key, value)
            db.commit()
            db.refresh(record)
            return {"success": True, "message": "Data berhasil diupdate", "data": row_to_dict(record)}
        except Exception as e:
            db.rollback()
            raise HTTPException(status_code=500, detail=str(e))

    @router.delete(f"/{path}/{{code}}", name=f"delete_{path}")
    async def delete_record(code: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_management)):
        record = get_or_404(db, code)
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


register_code_master("banks", Bank, "bank_code", BankRequest, "Bank")
register_code_master("positions", MstJab, "kd_jab", PositionRequest, "Jabatan")
register_code_master("levels", MstPkt, "kd_pkt", LevelRequest, "Pangkat")
register_code_master("factories", MstFact, "kd_fact", FactoryRequest, "Pabrik")
register_code_master("religions", MstAgm, "kd_agm", ReligionRequest, "Agama")
register_code_master("education", MstSkl, "kd_skl", EducationRequest, "Pendidikan")


# ==========================================
# COMPANIES
# ==========================================

@router.get("/companies")
async def get_companies(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    companies = db.query(Company).order_by(Company.created_at.desc()).all()
    return {"success": True, "data": [row_to_dict(c) for c in companies]}


@router.get("/companies/{id}")
async def get_company(id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    company = db.query(Company).filter(Company.id == id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Data not found")
    return {"success": True, "data": row_to_dict(company)}


@router.post("/companies", status_code=201)
async def create_company(
    payload: CompanyRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    try:
        if db.query(Company).filter(Company.kd_cmpy == payload.kd_cmpy).first():
            raise HTTPException(status_code=400, detail="Kode Company sudah terdaftar")
        company = Company(**payload.model_dump())
        db.add(company)
        db.commit()
        db.refresh(company)
        return {"success": True, "message": "Company berhasil dibuat", "data": row_to_dict(company)}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/companies/{id}")
async def update_company(
    id: str,
    payload: CompanyRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    company = db.query(Company).filter(Company.id == id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Data not found")
    duplicate = db.query(Company).filter(Company.kd_cmpy == payload.kd_cmpy, Company.id != id).first()
    if duplicate:
        raise HTTPException(status_code=400, detail="Kode Company sudah terdaftar")
    try:
        for key, value in payload.model_dump().items():
            setattr(company, key, value)
        db.commit()
        db.refresh(company)
        return {"success": True, "message": "Company berhasil diupdate", "data": row_to_dict(company)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/companies/{id}")
async def delete_company(id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_management)):
    company = db.query(Company).filter(Company.id == id).first()
    if not company:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        db.delete(company)
        db.commit()
        return {"success": True, "message": "Company berhasil dihapus"}
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Tidak dapat menghapus karena ada data terkait (Karyawan/Lainnya)")
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# ==========================================
# OPTIONS (dropdowns)
# ==========================================

@router.get("/options")
async def get_master_options(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    def options(model, code_attr, name_attr) -> List[dict]:
        return [
            {"code": getattr(r, code_attr), "name": getattr(r, name_attr)}
            for r in db.query(model).order_by(getattr(model, code_attr)).all()
        ]

    return {
        "success": True,
        "data": {
            "companies": options(Company, "kd_cmpy", "company"),
            "banks": options(Bank, "bank_code", "bank_nama"),
            "positions": options(MstJab, "kd_jab", "nm_jab"),
            "levels": options(MstPkt, "kd_pkt", "nm_pkt"),
            "factories": options(MstFact, "kd_fact", "nm_fact"),
            "religions": options(MstAgm, "kd_agm", "nm_agm"),
            "education": options(MstSkl, "kd_skl", "nm_skl"),
        }
    }
