from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
from datetime import date
import logging

from hrm.database import get_db
from hrm.models.models import Karyawan, Pengajuan
from hrm.core.permissions import CurrentUser, get_current_user
from hrm.services.approval import (
    REQUEST_TYPES, ApprovalError, cancel_request, history_for, pending_for, process_approval,
)

logger = logging.getLogger("requests")

router = APIRouter(
    prefix="/api/requests",
    tags=["Requests"],
    responses={404: {"description": "Not found"}},
)


class CreateRequestDTO(BaseModel):
    type: str
    start_date: date
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None


class ApprovalDTO(BaseModel):
    notes: Optional[str] = None


def _person(db: Session, empl_id: Optional[str]) -> Optional[dict]:
    if not empl_id:
        return None
    emp = db.query(Karyawan).filter(Karyawan.empl_id == empl_id).first()
    return {"empl_id": empl_id, "nama": emp.nama if emp else None}


def request_to_dict(db: Session, r: Pengajuan) -> dict:
    karyawan = r.karyawan
    return {
        "id": r.id,
        "empl_id": r.empl_id,
        "type": r.type,
        "start_date": r.start_date.isoformat(),
        "end_date": r.end_date.isoformat() if r.end_date else None,
        "start_time": r.start_time,
        "end_time": r.end_time,
        "reason": r.reason,
        "status": r.status,
        "current_step": r.current_step,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "karyawan": {
            "empl_id": karyawan.empl_id,
            "nama": karyawan.nama,
            "kd_dept": karyawan.kd_dept,
            "superior": _person(db, karyawan.superior_id),
            "superior2": _person(db, karyawan.superior2_id),
        } if karyawan else None,
        "approvals": [{
            "step": log.step,
            "approver_id": log.approver_id,
            "action": log.action,
            "notes": log.notes,
            "created_at": log.created_at.isoformat() if log.created_at else None,
        } for log in r.approval_logs],
    }


def _get_request(db: Session, id: str) -> Pengajuan:
    request = db.query(Pengajuan).filter(Pengajuan.id == id).first()
    if not request:
        raise HTTPException(status_code=404, detail="Request not found")
    return request


@router.post("", status_code=201)
async def create_request(
    payload: CreateRequestDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    if not current_user.empl_id:
        logger.warning(f"[Request] {current_user.email} has no linked employee")
        raise HTTPException(
            status_code=400,
            detail=f"Akun anda ({current_user.email}) belum terhubung dengan data karyawan. Silakan hubungi HR."
        )
    if payload.type not in REQUEST_TYPES:
        raise HTTPException(status_code=400, detail=f"Jenis pengajuan tidak valid: {payload.type}")
    if payload.end_date and payload.end_date < payload.start_date:
        raise HTTPException(status_code=400, detail="Tanggal selesai tidak boleh sebelum tanggal mulai")

    try:
        request = Pengajuan(
            empl_id=current_user.empl_id,
            type=payload.type,
            start_date=payload.start_date,
            end_date=payload.end_date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            reason=payload.reason,
            status='PENDING',
            current_step=1,
        )
        db.add(request)
        db.commit()
        db.refresh(request)
        logger.info(f"[Request] {current_user.empl_id} submitted {request.type} {request.id}")
        return {"success": True, "data": request_to_dict(db, request)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/mine")
async def get_my_requests(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    requests = db.query(Pengajuan).filter(
        Pengajuan.empl_id == (current_user.empl_id or '')
    ).order_by(Pengajuan.created_at.desc()).all()
    return {"success": True, "data": [request_to_dict(db, r) for r in requests]}


@router.get("/pending")
async def get_pending_approvals(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return {"success": True, "data": [request_to_dict(db, r) for r in pending_for(db, current_user)]}


@router.get("/history")
async def get_approval_history(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    return {"success": True, "data": [request_to_dict(db, r) for r in history_for(db, current_user)]}


@router.get("/{id}")
async def get_request_detail(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    request = _get_request(db, id)
    if current_user.is_employee and request.empl_id != current_user.empl_id:
        karyawan = request.karyawan
        if current_user.empl_id not in (karyawan.superior_id, karyawan.superior2_id):
            raise HTTPException(status_code=403, detail="Unauthorized to view this request")
    return {"success": True, "data": request_to_dict(db, request)}


def _decide(db: Session, id: str, current_user: CurrentUser, approve: bool, notes: Optional[str]):
    request = _get_request(db, id)
    try:
        request = process_approval(db, request, current_user, approve, notes)
    except ApprovalError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        db.rollback()
        logger.error(f"[Request] Approval of {id} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"[Request] {id} -> {request.status} (step {request.current_step}) by {current_user.email}")
    return request


@router.post("/{id}/approve")
async def approve_request(
    id: str,
    payload: ApprovalDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    request = _decide(db, id, current_user, True, payload.notes)
    return {"success": True, "message": "Pengajuan disetujui", "data": request_to_dict(db, request)}


@router.post("/{id}/reject")
async def reject_request(
    id: str,
    payload: ApprovalDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    request = _decide(db, id, current_user, False, payload.notes)
    return {"success": True, "message": "Pengajuan ditolak", "data": request_to_dict(db, request)}


@router.post("/{id}/cancel")
async def cancel_my_request(
    id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    request = _get_request(db, id)
    try:
        request = cancel_request(db, request, current_user)
    except ApprovalError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "message": "Pengajuan berhasil dibatalkan", "data": request_to_dict(db, request)}
