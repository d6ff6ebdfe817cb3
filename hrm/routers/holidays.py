from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
from datetime import date
import logging

from hrm.database import get_db
from hrm.models.models import Holiday
from hrm.core.permissions import CurrentUser, get_current_user, require_management
from hrm.services.holiday_sync import HolidaySourceError, MAX_KETERANGAN, TYPE_NATIONAL, sync_holidays

logger = logging.getLogger("holidays")

router = APIRouter(
    prefix="/api/holidays",
    tags=["Holidays"],
    responses={404: {"description": "Not found"}},
)


class CreateHolidayDTO(BaseModel):
    tgl_libur: date
    keterangan: str
    type_day: Optional[str] = None
    is_repeat: Optional[bool] = None


class UpdateHolidayDTO(BaseModel):
    tgl_libur: Optional[date] = None
    keterangan: Optional[str] = None
    type_day: Optional[str] = None
    is_repeat: Optional[bool] = None


class SyncHolidayDTO(BaseModel):
    year: Optional[int] = None


def holiday_to_dict(h: Holiday) -> dict:
    return {
        "id": h.id,
        "tgl_libur": h.tgl_libur.isoformat(),
        "keterangan": h.keterangan,
        "type_day": h.type_day,
        "is_repeat": h.is_repeat,
    }


@router.get("")
async def get_holidays(
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    query = db.query(Holiday)
    if year:
        query = query.filter(Holiday.tgl_libur.between(date(year, 1, 1), date(year, 12, 31)))
    holidays = query.order_by(Holiday.tgl_libur.asc()).all()
    return {"success": True, "data": [holiday_to_dict(h) for h in holidays]}


@router.post("", status_code=201)
async def create_holiday(
    payload: CreateHolidayDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    if db.query(Holiday).filter(Holiday.tgl_libur == payload.tgl_libur).first():
        raise HTTPException(status_code=400, detail=f"Hari libur {payload.tgl_libur.isoformat()} sudah ada")
    try:
        holiday = Holiday(
            tgl_libur=payload.tgl_libur,
            keterangan=payload.keterangan[:MAX_KETERANGAN],
            type_day=payload.type_day or TYPE_NATIONAL,
            is_repeat=bool(payload.is_repeat),
        )
        db.add(holiday)
        db.commit()
        db.refresh(holiday)
        return {"success": True, "message": "Data berhasil disimpan", "data": holiday_to_dict(holiday)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{id}")
async def update_holiday(
    id: str,
    payload: UpdateHolidayDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    holiday = db.query(Holiday).filter(Holiday.id == id).first()
    if not holiday:
        raise HTTPException(status_code=404, detail="Data not found")

    try:
        if payload.tgl_libur is not None:
            holiday.tgl_libur = payload.tgl_libur
        if payload.keterangan is not None:
            holiday.keterangan = payload.keterangan[:MAX_KETERANGAN]
        if payload.type_day is not None:
            holiday.type_day = payload.type_day
        if payload.is_repeat is not None:
            holiday.is_repeat = payload.is_repeat
        db.commit()
        db.refresh(holiday)
        return {"success": True, "message": "Data berhasil diupdate", "data": holiday_to_dict(holiday)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{id}")
async def delete_holiday(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    holiday = db.query(Holiday).filter(Holiday.id == id).first()
    if not holiday:
        raise HTTPException(status_code=404, detail="Data not found")

    try:
        db.delete(holiday)
        db.commit()
        return {"success": True, "message": "Data berhasil dihapus"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sync")
async def sync_holiday_calendar(
    payload: SyncHolidayDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    year = payload.year or date.today().year
    try:
        result = sync_holidays(db, year)
        return {
            "success": True,
            "message": f"Berhasil sinkronisasi {result['count']} hari libur tahun {year}",
            "source": result["source"],
            "count": result["count"],
        }
    except HolidaySourceError as e:
        logger.error(f"[Holiday] Sync {year} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
