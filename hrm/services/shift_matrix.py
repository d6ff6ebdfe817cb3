"""
Monthly shift matrix (dshift) helpers.

A matrix row holds one shift code per day of the period (shift01..shift31) for
one shift group. Rows can be generated from a rotating ShiftPattern anchored on
the group's reference date and pushed onto the daily attendance table.
"""
import calendar
import datetime
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hrm.models.models import Absent, Company, Dshift, GroupShift, JnsJam, Karyawan

logger = logging.getLogger("shift_matrix")

MAX_DAYS = 31
SHIFT_COLUMNS = [f"shift{day:02d}" for day in range(1, MAX_DAYS + 1)]


class MatrixError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def shift_column(day: int) -> str:
    return f"shift{day:02d}"


def parse_periode(periode: str):
    """'202601' -> (2026, 1, days in month)."""
    if not periode or len(periode) != 6 or not periode.isdigit():
        raise MatrixError(400, f"Periode tidak valid: {periode}")
    year, month = int(periode[:4]), int(periode[4:])
    if not 1 <= month <= 12:
        raise MatrixError(400, f"Periode tidak valid: {periode}")
    return year, month, calendar.monthrange(year, month)[1]


def split_pattern(pattern: str) -> List[str]:
    return [code.strip() for code in (pattern or '').split(',') if code.strip()]


def generate_matrix(pattern: str, ref_date: datetime.date, period_start: datetime.date, days: int) -> Dict[str, str]:
    codes = split_pattern(pattern)
    if not codes:
        raise MatrixError(400, "Pola shift kosong")
    n = len(codes)
    matrix = {}
    for day in range(1, days + 1):
        current = period_start + datetime.timedelta(days=day - 1)
        offset = (current - ref_date).days
        matrix[shift_column(day)] = codes[((offset % n) + n) % n]
    return matrix


def matrix_to_dict(row: Optional[Dshift]) -> Optional[dict]:
    if row is None:
        return None
    data = {
        "id": row.id,
        "kd_cmpy": row.kd_cmpy,
        "periode": row.periode,
        "group_shift": row.group_shift,
        "group_shift_id": row.group_shift_id,
    }
    for column in SHIFT_COLUMNS:
        data[column] = getattr(row, column)
    return data


def default_company(db: Session) -> Company:
    company = db.query(Company).order_by(Company.kd_cmpy).first()
    if not company:
        raise MatrixError(404, "No company found in database")
    return company


def get_group(db: Session, group_shift_id: str) -> GroupShift:
    group = db.query(GroupShift).filter(GroupShift.id == group_shift_id).first()
    if not group:
        raise MatrixError(404, "Grup tidak ditemukan.")
    return group


def find_matrix(db: Session, periode: str, group: GroupShift) -> Optional[Dshift]:
    company = default_company(db)
    return db.query(Dshift).filter(
        Dshift.kd_cmpy == company.kd_cmpy,
        Dshift.periode == periode,
        Dshift.group_shift == group.group_shift
    ).first()


def upsert_matrix(db: Session, periode: str, group: GroupShift, shifts: Dict[str, Optional[str]]) -> Dshift:
    """Caller commits."""
    parse_periode(periode)
    company = default_company(db)
    row = find_matrix(db, periode, group)
    if row is None:
        row = Dshift(
            kd_cmpy=company.kd_cmpy,
            periode=periode,
            group_shift=group.group_shift,
            group_shift_id=group.id,
        )
        db.add(row)
    for column, code in shifts.items():
        if column in SHIFT_COLUMNS:
            setattr(row, column, code)
    row.group_shift_id = group.id
    return row


def generate_for_group(db: Session, periode: str, group_shift_id: str) -> Dshift:
    group = get_group(db, group_shift_id)
    if not group.pattern_id or not group.ref_date or group.pattern is None:
        raise MatrixError(400, "Grup ini belum memiliki Pola Shift atau Tanggal Referensi.")
    year, month, days = parse_periode(periode)
    shifts = generate_matrix(group.pattern.pattern, group.ref_date, datetime.date(year, month, 1), days)
    row = upsert_matrix(db, periode, group, shifts)
    db.commit()
    db.refresh(row)
    logger.info(f"[ShiftMatrix] Generated {periode} for group {group.group_shift}")
    return row


def sync_matrix_to_attendance(db: Session, periode: str, group_shift_id: str) -> dict:
    """Write each day's shift code onto absent for every active employee of the group."""
    group = get_group(db, group_shift_id)
    company = default_company(db)
    row = find_matrix(db, periode, group)
    if row is None:
        raise MatrixError(404, "Shift matrix not found for this group and period")

    employees = db.query(Karyawan).filter(
        Karyawan.group_shift_id == group.id,
        Karyawan.kd_sts == 'AKTIF',
        Karyawan.deleted_at.is_(None)
    ).all()
    if not employees:
        raise MatrixError(404, "No active employees found in this group")

    shift_types = {jam.kd_jam: jam for jam in db.query(JnsJam).all()}
    year, month, days = parse_periode(periode)

    synced = 0
    for day in range(1, days + 1):
        kd_jam = getattr(row, shift_column(day))
        if not kd_jam or kd_jam in ('0', 'null'):
            continue
        shift_type = shift_types.get(kd_jam)
        tgl_absen = datetime.date(year, month, day)
        for emp in employees:
            absent = db.query(Absent).filter(
                Absent.empl_id == emp.empl_id,
                Absent.tgl_absen == tgl_absen
            ).first()
            if absent is None:
                absent = Absent(
                    empl_id=emp.empl_id,
                    tgl_absen=tgl_absen,
                    nik=emp.nik,
                    nama=emp.nama,
                    kd_cmpy=company.kd_cmpy,
                )
                db.add(absent)
            absent.kd_jam = kd_jam
            absent.jns_jam_id = shift_type.id if shift_type else None
            absent.group_shift = group.group_shift
            absent.group_shift_id = group.id
            absent.periode = periode
            if shift_type:
                absent.std_masuk = shift_type.jam_msk
                absent.std_keluar = shift_type.jam_klr
            synced += 1
    db.commit()
    logger.info(f"[ShiftMatrix] Synced {synced} schedules for {len(employees)} employees ({periode}/{group.group_shift})")
    return {"synced": synced, "employees": len(employees)}
