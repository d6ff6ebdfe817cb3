"""
Three step approval chain for pengajuan (leave / permission requests).

step 1: employee's superior (karyawan.superior_id)
step 2: employee's second superior (karyawan.superior2_id), skipped when unset
step 3: HR manager

A rejection at any step is final. The final HR approval writes the matching
attendance code onto absent for every day of the request.
"""
import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from hrm.core.permissions import CurrentUser, ROLE_HR_MANAGER
from hrm.models.models import Absent, ApprovalLog, Karyawan, Pengajuan, Periode
from hrm.services.notifications import create_notification

logger = logging.getLogger("approval")

REQUEST_TYPES = ['CUTI', 'IJIN', 'PULANG_CEPAT', 'DINAS_LUAR', 'SAKIT']
FINAL_STATUSES = ['APPROVED', 'REJECTED', 'CANCELLED']

ACTION_APPROVE = 'APPROVE'
ACTION_REJECT = 'REJECT'
ACTION_CANCEL = 'CANCEL'

ABSENT_CODES = {
    'CUTI': 'C',
    'IJIN': 'I',
    'SAKIT': 'S',
    'DINAS_LUAR': 'D',
    'PULANG_CEPAT': 'P',
}

HR_STEP = 3


class ApprovalError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def can_approve(request: Pengajuan, user: CurrentUser) -> bool:
    karyawan = request.karyawan
    if request.status in FINAL_STATUSES:
        return False
    if request.current_step == 1:
        return bool(user.empl_id) and karyawan.superior_id == user.empl_id
    if request.current_step == 2:
        return bool(user.empl_id) and karyawan.superior2_id == user.empl_id
    if request.current_step == HR_STEP:
        return user.has_role(ROLE_HR_MANAGER)
    return False


def _log(db: Session, request: Pengajuan, approver_id: str, action: str, notes: Optional[str]):
    db.add(ApprovalLog(
        pengajuan_id=request.id,
        step=request.current_step,
        approver_id=approver_id,
        action=action,
        notes=notes,
    ))


def request_days(request: Pengajuan) -> List[datetime.date]:
    end = request.end_date or request.start_date
    if end < request.start_date:
        return [request.start_date]
    return [request.start_date + datetime.timedelta(days=i) for i in range((end - request.start_date).days + 1)]


def _periode_for(db: Session, day: datetime.date) -> Optional[str]:
    periode = db.query(Periode.periode_id).filter(
        Periode.awal <= day,
        Periode.akhir >= day
    ).first()
    return periode.periode_id if periode else None


def sync_to_absent(db: Session, request: Pengajuan) -> int:
    """Caller commits. Returns the number of attendance rows written."""
    code = ABSENT_CODES.get(request.type)
    if not code:
        return 0
    karyawan = request.karyawan
    written = 0
    for day in request_days(request):
        absent = db.query(Absent).filter(
            Absent.empl_id == request.empl_id,
            Absent.tgl_absen == day
        ).first()
        if absent is None:
            absent = Absent(
                empl_id=request.empl_id,
                tgl_absen=day,
                nik=karyawan.nik,
                nama=karyawan.nama,
                kd_cmpy=karyawan.kd_cmpy,
                kd_dept=karyawan.kd_dept,
                periode=_periode_for(db, day),
            )
            db.add(absent)
        # Early leave keeps the day as worked, only the description changes
        if request.type != 'PULANG_CEPAT' or not absent.real_masuk:
            absent.kd_absen = code
        absent.keterangan = f"{request.type}: {request.reason}" if request.reason else request.type
        written += 1
    logger.info(f"[Approval] Synced request {request.id} ({request.type}) to {written} attendance rows")
    return written


def _notify_requester(db: Session, request: Pengajuan, user: CurrentUser):
    verdict = "disetujui" if request.status == 'APPROVED' else "ditolak"
    create_notification(
        db,
        subject=f"Pengajuan {request.type} {verdict}",
        note=f"Pengajuan {request.type} tanggal {request.start_date.isoformat()} telah {verdict}.",
        empl_id=request.empl_id,
        url=f"/dashboard/requests/{request.id}",
        creator_user_id=user.id,
    )


def process_approval(db: Session, request: Pengajuan, user: CurrentUser, approve: bool,
                     notes: Optional[str] = None) -> Pengajuan:
    if not can_approve(request, user):
        raise ApprovalError(403, "Anda tidak memiliki wewenang untuk menyetujui tahap ini.")

    approver_id = user.empl_id or user.id
    _log(db, request, approver_id, ACTION_APPROVE if approve else ACTION_REJECT, notes)

    if not approve:
        request.status = 'REJECTED'
    elif request.current_step == 1:
        request.current_step = 2 if request.karyawan.superior2_id else HR_STEP
        request.status = 'IN_PROGRESS'
    elif request.current_step == 2:
        request.current_step = HR_STEP
        request.status = 'IN_PROGRESS'
    else:
        request.status = 'APPROVED'
        sync_to_absent(db, request)

    if request.status in FINAL_STATUSES:
        _notify_requester(db, request, user)

    db.commit()
    db.refresh(request)
    return request


def cancel_request(db: Session, request: Pengajuan, user: CurrentUser) -> Pengajuan:
    if request.empl_id != user.empl_id:
        raise ApprovalError(403, "Unauthorized to cancel this request")
    if request.status in FINAL_STATUSES:
        raise ApprovalError(400, f"Tidak dapat membatalkan pengajuan yang sudah {request.status.lower()}.")

    request.status = 'CANCELLED'
    _log(db, request, user.empl_id, ACTION_CANCEL, "Dibatalkan oleh pembuat pengajuan")
    db.commit()
    db.refresh(request)
    return request


def pending_for(db: Session, user: CurrentUser) -> List[Pengajuan]:
    results = []
    if user.empl_id:
        results += db.query(Pengajuan).join(Karyawan, Pengajuan.empl_id == Karyawan.empl_id).filter(
            Pengajuan.current_step == 1,
            Pengajuan.status == 'PENDING',
            Karyawan.superior_id == user.empl_id
        ).all()
        results += db.query(Pengajuan).join(Karyawan, Pengajuan.empl_id == Karyawan.empl_id).filter(
            Pengajuan.current_step == 2,
            Pengajuan.status == 'IN_PROGRESS',
            Karyawan.superior2_id == user.empl_id
        ).all()
    if user.has_role(ROLE_HR_MANAGER):
        results += db.query(Pengajuan).filter(
            Pengajuan.current_step == HR_STEP,
            Pengajuan.status == 'IN_PROGRESS'
        ).all()
    results.sort(key=lambda r: r.created_at or datetime.datetime.min, reverse=True)
    return results


def history_for(db: Session, user: CurrentUser) -> List[Pengajuan]:
    approver_ids = [i for i in (user.empl_id, user.id) if i]
    return db.query(Pengajuan).join(ApprovalLog, ApprovalLog.pengajuan_id == Pengajuan.id).filter(
        ApprovalLog.approver_id.in_(approver_ids),
        ApprovalLog.action.in_([ACTION_APPROVE, ACTION_REJECT])
    ).distinct().order_by(Pengajuan.updated_at.desc()).all()
