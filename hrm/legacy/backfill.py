"""
Fill UUID relation columns that are still NULL from their legacy code column.
Rows imported before the master existed (or before the relation column was
added) only carry the code, e.g. absent.kd_jam without absent.jns_jam_id.
"""
import logging
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from hrm.models.models import Absent, Dshift, GroupShift, JnsJam, Karyawan
from hrm.services.master_lookup import code_map

logger = logging.getLogger("legacy_backfill")

# (target model, id attribute, code attribute, master model, master code attribute)
BACKFILL_TARGETS: List[Tuple[type, str, str, type, str]] = [
    (Absent, 'jns_jam_id', 'kd_jam', JnsJam, 'kd_jam'),
    (Absent, 'group_shift_id', 'group_shift', GroupShift, 'group_shift'),
    (Dshift, 'group_shift_id', 'group_shift', GroupShift, 'group_shift'),
    (Karyawan, 'jns_jam_id', 'kd_jam', JnsJam, 'kd_jam'),
    (Karyawan, 'group_shift_id', 'group_shift', GroupShift, 'group_shift'),
]


def backfill_fk(db: Session, model, id_attr: str, code_attr: str, ref_model, ref_code_attr: str) -> int:
    """Returns the number of rows updated. Codes without a master row stay NULL."""
    lookup = code_map(db, ref_model, ref_code_attr)
    id_column = getattr(model, id_attr)
    code_column = getattr(model, code_attr)

    updated = 0
    for code, ref_id in lookup.items():
        updated += db.query(model).filter(
            id_column.is_(None),
            code_column == code
        ).update({id_column: ref_id}, synchronize_session=False)
    db.commit()
    return updated


def backfill_relations(db: Session) -> Dict[str, int]:
    results = {}
    for model, id_attr, code_attr, ref_model, ref_code_attr in BACKFILL_TARGETS:
        key = f"{model.__tablename__}.{id_attr}"
        try:
            results[key] = backfill_fk(db, model, id_attr, code_attr, ref_model, ref_code_attr)
            logger.info(f"[Backfill] {key}: {results[key]} rows")
        except Exception as e:
            db.rollback()
            logger.error(f"[Backfill] {key} gagal: {e}")
            raise
    return results
