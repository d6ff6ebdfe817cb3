"""
Code -> UUID lookups for the organisation masters.

Legacy rows (and API payloads) carry codes such as kd_dept or bank_code; the
UUID relation columns (dept_id, bank_id, ...) are resolved from these maps.
"""
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from hrm.models.models import (
    Bank, Company, GroupShift, JnsJam, MstAgm, MstBag, MstDept, MstFact, MstJab, MstPkt, MstSie, MstSkl
)

# (code attribute, id attribute, master model, code attribute on master)
ORG_RELATIONS: List[Tuple[str, str, type, str]] = [
    ('kd_cmpy', 'company_id', Company, 'kd_cmpy'),
    ('kd_fact', 'fact_id', MstFact, 'kd_fact'),
    ('kd_bag', 'bag_id', MstBag, 'kd_bag'),
    ('kd_dept', 'dept_id', MstDept, 'kd_dept'),
    ('kd_seksie', 'sie_id', MstSie, 'kd_seksie'),
    ('kd_jab', 'jabatan_id', MstJab, 'kd_jab'),
]

EMPLOYEE_RELATIONS: List[Tuple[str, str, type, str]] = ORG_RELATIONS + [
    ('kd_pkt', 'pkt_id', MstPkt, 'kd_pkt'),
    ('kd_agm', 'agama_id', MstAgm, 'kd_agm'),
    ('kd_skl', 'sekolah_id', MstSkl, 'kd_skl'),
    ('bank_code', 'bank_id', Bank, 'bank_code'),
    ('kd_jam', 'jns_jam_id', JnsJam, 'kd_jam'),
    ('group_shift', 'group_shift_id', GroupShift, 'group_shift'),
]

# Codes that must exist in their master; unknown values are stored as NULL
VALIDATED_EMPLOYEE_CODES = ['kd_seksie', 'kd_agm', 'kd_pkt', 'kd_jab', 'kd_skl', 'bank_code']


def code_map(db: Session, model, code_attr: str) -> Dict:
    column = getattr(model, code_attr)
    return {code: id_ for code, id_ in db.query(column, model.id).all()}


def build_lookup_maps(db: Session, relations=EMPLOYEE_RELATIONS) -> Dict[str, Dict]:
    return {code_attr: code_map(db, model, master_code) for code_attr, _, model, master_code in relations}


def resolve_relation_ids(values: dict, maps: Dict[str, Dict], relations=EMPLOYEE_RELATIONS) -> dict:
    resolved = {}
    for code_attr, id_attr, _, _ in relations:
        code = values.get(code_attr)
        resolved[id_attr] = maps.get(code_attr, {}).get(code) if code else None
    return resolved
