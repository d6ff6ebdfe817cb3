"""
Legacy MySQL -> PostgreSQL import jobs
======================================
Every job reads whole tables from the legacy source and upserts row by row on
the natural key of the target table. One row = one transaction: a failing row
is rolled back, counted in the stats and the job moves on.

Order matters because of foreign keys:
- master data : company, bank, factory, division, department, section,
                position, level, religion, education, shift type, shift group
- employees   : master data -> karyawan
- payroll     : periode -> jnspotongan/jnstunjangan/jnsrapel -> pinjamhdr
                -> gaji -> potongan -> pinjamdet -> tunjangan -> rapel
- attendance  : periode, desc_absen, jnsjam -> absent -> att_log -> activation
"""
import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from hrm.legacy.mappings import (
    EMPLOYMENT_TYPE_MAP, SEX_MAP, STATUS_MAP,
    clean_str, flag_or_default, is_flag_set, map_enum, normalize_clock, or_none,
    to_date, to_decimal, to_int,
)
from hrm.models.models import (
    Absent, AttLog, Bank, Company, DescAbsen, Gaji, GroupShift, JnsJam, JnsKary, JnsPotongan, JnsRapel,
    JnsTunjangan, Karyawan, MstAgm, MstBag, MstDept, MstFact, MstJab, MstPkt, MstSie, MstSkl, Periode,
    PinjamDet, PinjamHdr, Potongan, Ptkp, Rapel, Tunjangan,
)
from hrm.services.attendance_rules import calculate_early, calculate_late, sanitize_status
from hrm.services.master_lookup import (
    EMPLOYEE_RELATIONS, ORG_RELATIONS, VALIDATED_EMPLOYEE_CODES, build_lookup_maps, code_map, resolve_relation_ids,
)

logger = logging.getLogger("legacy_import")

IMPORT_USER = 'mysql_import'
ERROR_SAMPLE_SIZE = 10
MAX_ERROR_DETAILS = 500


@dataclass
class ImportStats:
    total: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: List[dict] = field(default_factory=list)
    extra: Dict[str, int] = field(default_factory=dict)

    def record_error(self, detail: dict):
        self.errors += 1
        if len(self.error_details) < MAX_ERROR_DETAILS:
            self.error_details.append(detail)

    def bump(self, counter: str, amount: int = 1):
        self.extra[counter] = self.extra.get(counter, 0) + amount

    def as_dict(self) -> dict:
        result = {
            "total": self.total,
            "imported": self.imported,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": self.errors,
            "errorSample": self.error_details[:ERROR_SAMPLE_SIZE],
        }
        result.update(self.extra)
        return result


@dataclass
class TableMapping:
    """How one legacy table lands in one target model."""
    name: str
    source_table: str
    model: type
    key: Tuple[str, ...]
    build: Callable[[dict], Optional[dict]]
    describe: Callable[[dict], str] = lambda row: ''


def upsert(db: Session, model, key: Iterable[str], values: dict) -> bool:
    """Insert or update on the natural key. Returns True when a row was created."""
    filters = [getattr(model, attr) == values[attr] for attr in key]
    existing = db.query(model).filter(*filters).first()
    if existing is None:
        db.add(model(**values))
        return True
    for attr, value in values.items():
        setattr(existing, attr, value)
    return False


def run_rows(db: Session, rows: List[dict], model, key: Tuple[str, ...],
             build: Callable[[dict], Optional[dict]], describe: Callable[[dict], str],
             stats: Optional[ImportStats] = None, label: str = '') -> ImportStats:
    stats = stats or ImportStats()
    stats.total += len(rows)
    for row in rows:
        try:
            values = build(row)
            if values is None:
                stats.skipped += 1
                continue
            created = upsert(db, model, key, values)
            db.commit()
            if created:
                stats.imported += 1
            else:
                stats.updated += 1
        except Exception as e:
            db.rollback()
            stats.record_error({"key": describe(row), "error": str(e)})
            logger.warning(f"[Import] {label} {describe(row)} gagal: {e}")
    return stats


def run_mapping(db: Session, source, mapping: TableMapping) -> ImportStats:
    logger.info(f"[Import] {mapping.name}: reading `{mapping.source_table}`")
    rows = source.query(f"SELECT * FROM `{mapping.source_table}`")
    stats = run_rows(db, rows, mapping.model, mapping.key, mapping.build, mapping.describe, label=mapping.name)
    logger.info(
        f"[Import] {mapping.name}: total={stats.total} baru={stats.imported} "
        f"update={stats.updated} error={stats.errors}"
    )
    return stats


def _require(value, message: str):
    if value is None or value == '':
        raise ValueError(message)
    return value


# ─── Master data ──────────────────────────────────────────────────────────

def _company(row):
    return {
        "kd_cmpy": _require(clean_str(row.get('KODE_CMPY')), "KODE_CMPY kosong"),
        "company": or_none(row.get('COMPANY')),
        "address1": or_none(row.get('ADDRESS1')),
        "address2": or_none(row.get('ADDRESS2')),
        "address3": or_none(row.get('ADDRESS3')),
        "tlp": or_none(row.get('TLP')),
        "fax": or_none(row.get('FAX')),
        "npwp": or_none(row.get('NPWP')),
        "director": or_none(row.get('DIRECTOR')),
        "npwp_dir": or_none(row.get('NPWPDIR')),
        "logo": or_none(row.get('LOGO')),
        "npp": or_none(row.get('NPP')),
        "astek_bayar": or_none(clean_str(row.get('ASTEKBAYAR'))),
        "email": or_none(row.get('EMAIL')),
        "homepage": or_none(row.get('HOMEPAGE')),
        "hrd_mng": or_none(row.get('HRDMNG')),
        "npwp_mng": or_none(row.get('NPWPMNG')),
    }


def _bank(row):
    return {
        "bank_code": _require(clean_str(row.get('BANK_CODE')), "BANK_CODE kosong"),
        "bank_nama": row.get('BANK_NAMA'),
    }


def _simple_master(code_attr: str, name_attr: str, code_col: str, name_col: str):
    def build(row):
        return {
            code_attr: _require(clean_str(row.get(code_col)), f"{code_col} kosong"),
            name_attr: row.get(name_col),
            "keterangan": row.get('KETERANGAN'),
        }
    return build


def _department(row):
    values = _simple_master('kd_dept', 'nm_dept', 'CKD_DEPT', 'CNM_DEPT')(row)
    values["kd_bag"] = clean_str(row.get('CKD_BAG'))
    return values


def _section(row):
    values = _simple_master('kd_seksie', 'nm_seksie', 'CKD_SIE', 'CNM_SIE')(row)
    values["kd_bag"] = clean_str(row.get('CKD_BAG'))
    values["kd_dept"] = clean_str(row.get('CKD_DEPT'))
    return values


def _position(row):
    values = _simple_master('kd_jab', 'nm_jab', 'CKD_JAB', 'CNM_JAB')(row)
    values.update({
        "n_tjabatan": to_decimal(row.get('NTJABATAN')),
        "n_transport": to_decimal(row.get('NTRANSPORT')),
        "n_shift_all": to_decimal(row.get('NSHIFT_ALL')),
        "n_premi_hdr": to_decimal(row.get('NPREMI_HDR')),
        "persen_rmh": to_decimal(row.get('PERSEN_RMH')),
        "persen_pph": to_decimal(row.get('PERSEN_PPH')),
    })
    return values


def _shift_type(row):
    return {
        "kd_jam": _require(clean_str(row.get('KD_JAM')), "KD_JAM kosong"),
        "nm_jam": or_none(row.get('NM_JAM')),
        "jns_jam": or_none(row.get('JNS_JAM')),
        "jam_msk": normalize_clock(row.get('JAM_MSK')),
        "jam_klr": normalize_clock(row.get('JAM_KLR')),
    }


def _shift_group(row):
    return {
        "group_shift": _require(clean_str(row.get('GROUP_SHIFT')), "GROUP_SHIFT kosong"),
        "group_name": row.get('GROUP_NAME') or '',
        "is_active": flag_or_default(row, 'is_active', True),
    }


def _periode(row):
    today = datetime.date.today()
    return {
        "periode_id": _require(clean_str(row.get('PERIODE_ID')), "PERIODE_ID kosong"),
        "awal": to_date(row.get('AWAL')) or today,
        "akhir": to_date(row.get('AKHIR')) or today,
        "data_defa": is_flag_set(row.get('DATA_DEFA')),
        "tutup": is_flag_set(row.get('TUTUP')),
        "tahun": to_int(row.get('TAHUN')) or 2024,
        "bulan": to_int(row.get('BULAN')) or 1,
        "nama": row.get('NAMA'),
        "kd_cmpy": clean_str(row.get('KD_CMPY')),
    }


def _desc_absen(row):
    return {
        "kode_desc": _require(clean_str(row.get('KODE_DESC')), "KODE_DESC kosong"),
        "keterangan": row.get('KETERANGAN'),
    }


def _trans_type(row):
    return {
        "trans_code": to_int(row.get('TRANS_CODE')),
        "jenis": row.get('JENIS') or '',
        "is_active": flag_or_default(row, 'is_active', True),
    }


def _code_of(column: str):
    return lambda row: str(row.get(column))


MASTER_MAPPINGS: Dict[str, TableMapping] = {
    "companies": TableMapping("companies", "company", Company, ("kd_cmpy",), _company, _code_of('KODE_CMPY')),
    "banks": TableMapping("banks", "bank", Bank, ("bank_code",), _bank, _code_of('BANK_CODE')),
    "factories": TableMapping("factories", "mstfact", MstFact, ("kd_fact",),
                              _simple_master('kd_fact', 'nm_fact', 'CKD_FACT', 'CNM_FACT'), _code_of('CKD_FACT')),
    "divisions": TableMapping("divisions", "mstbag", MstBag, ("kd_bag",),
                              _simple_master('kd_bag', 'nm_bag', 'CKD_BAG', 'CNM_BAG'), _code_of('CKD_BAG')),
    "departments": TableMapping("departments", "mstdept", MstDept, ("kd_dept",), _department, _code_of('CKD_DEPT')),
    "sections": TableMapping("sections", "mstsie", MstSie, ("kd_seksie",), _section, _code_of('CKD_SIE')),
    "positions": TableMapping("positions", "mstjab", MstJab, ("kd_jab",), _position, _code_of('CKD_JAB')),
    "levels": TableMapping("levels", "mstpkt", MstPkt, ("kd_pkt",),
                           _simple_master('kd_pkt', 'nm_pkt', 'CKD_PKT', 'CNM_PKT'), _code_of('CKD_PKT')),
    "religions": TableMapping("religions", "mstagm", MstAgm, ("kd_agm",),
                              _simple_master('kd_agm', 'nm_agm', 'CKD_AGM', 'CNM_AGM'), _code_of('CKD_AGM')),
    "education": TableMapping("education", "mstskl", MstSkl, ("kd_skl",),
                              _simple_master('kd_skl', 'nm_skl', 'CKD_SKL', 'CNM_SKL'), _code_of('CKD_SKL')),
    "shift_types": TableMapping("shift_types", "jnsjam", JnsJam, ("kd_jam",), _shift_type, _code_of('KD_JAM')),
    "shift_groups": TableMapping("shift_groups", "groupshift", GroupShift, ("group_shift",),
                                 _shift_group, _code_of('GROUP_SHIFT')),
}

ORG_STRUCTURE_TABLES = ["divisions", "departments", "sections"]

PERIODE_MAPPING = TableMapping("periods", "periode", Periode, ("periode_id",), _periode, _code_of('PERIODE_ID'))
DESC_ABSEN_MAPPING = TableMapping("descriptions", "desc_absen", DescAbsen, ("kode_desc",),
                                  _desc_absen, _code_of('KODE_DESC'))
TRANS_TYPE_MAPPINGS = [
    TableMapping("jnsPotongan", "jnspotongan", JnsPotongan, ("trans_code",), _trans_type, _code_of('TRANS_CODE')),
    TableMapping("jnsTunjangan", "jnstunjangan", JnsTunjangan, ("trans_code",), _trans_type, _code_of('TRANS_CODE')),
    TableMapping("jnsRapel", "jnsrapel", JnsRapel, ("trans_code",), _trans_type, _code_of('TRANS_CODE')),
]


def import_tables(db: Session, source, names: List[str]) -> Dict[str, dict]:
    results = {}
    for name in names:
        if name not in MASTER_MAPPINGS:
            raise KeyError(f"Unknown master table: {name}")
        results[name] = run_mapping(db, source, MASTER_MAPPINGS[name]).as_dict()
    return results


def import_master_data(db: Session, source) -> Dict[str, dict]:
    return import_tables(db, source, list(MASTER_MAPPINGS.keys()))


# ─── Employees ────────────────────────────────────────────────────────────

def _employee_builder(db: Session, maps: Dict[str, Dict], stats: ImportStats):
    def build(row):
        empl_id = _require(clean_str(row.get('EMPL_ID')), "EMPL_ID kosong")

        codes = {
            "kd_cmpy": or_none(clean_str(row.get('KD_CMPY'))),
            "kd_fact": or_none(clean_str(row.get('KD_FACT'))),
            "kd_bag": or_none(clean_str(row.get('KD_BAG'))),
            "kd_dept": or_none(clean_str(row.get('KD_DEPT'))),
            "kd_seksie": or_none(clean_str(row.get('KD_SEKSIE'))),
            "kd_pkt": or_none(clean_str(row.get('KD_PKT'))),
            "kd_jab": or_none(clean_str(row.get('KD_JAB'))),
            "kd_agm": or_none(clean_str(row.get('KD_AGM'))),
            "kd_skl": or_none(clean_str(row.get('KD_SKL'))),
            "bank_code": or_none(clean_str(row.get('BANK_CODE'))),
            "kd_jam": clean_str(row.get('KD_JAM')) or 'A',
            "group_shift": clean_str(row.get('GROUP_SHIFT')) or '00',
        }
        for code_attr in VALIDATED_EMPLOYEE_CODES:
            code = codes[code_attr]
            if code and code not in maps[code_attr]:
                stats.bump(f"{code_attr}_missing")
                codes[code_attr] = None

        nik = or_none(clean_str(row.get('NIK')))
        if nik:
            conflict = db.query(Karyawan.id).filter(
                Karyawan.nik == nik,
                Karyawan.empl_id != empl_id
            ).first()
            if conflict:
                stats.bump("nik_conflicts")
                nik = None

        values = {
            "empl_id": empl_id,
            "nik": nik,
            "id_absen": or_none(clean_str(row.get('ID_ABSEN'))),
            "nama": _require(row.get('NAMA'), f"NAMA kosong untuk {empl_id}"),
            "kd_sex": map_enum(SEX_MAP, row.get('KD_SEX'), 'LAKILAKI'),
            "alamat1": or_none(row.get('ALAMAT1')),
            "alamat2": or_none(row.get('ALAMAT2')),
            "kota": or_none(row.get('KOTA')),
            "kd_pos": or_none(clean_str(row.get('KD_POS'))),
            "telpon": or_none(row.get('TELPON')),
            "handphone": or_none(row.get('HANDPHONE')),
            "email": or_none(row.get('EMAIL')),
            "tmp_lhr": or_none(row.get('TMP_LHR')),
            "tgl_lhr": to_date(row.get('TGL_LHR')),
            "tgl_angkat": to_date(row.get('TGL_ANGKAT')),
            "ktp_no": or_none(row.get('KTPNO')),
            "valid_ktp": to_date(row.get('VALID_KTP')),
            "npwp": or_none(row.get('NPWP')),
            "tgl_npwp": to_date(row.get('TGL_NPWP')),
            "type_sim": or_none(row.get('TYPE_SIM')),
            "no_sim": or_none(row.get('NO_SIM')),
            "valid_sim": to_date(row.get('VALID_SIM')),
            "pasport_no": or_none(row.get('PASPORTNO')),
            "kitas_no": or_none(row.get('KITASNO')),
            "valid_kitas": to_date(row.get('VALID_KITAS')),
            "no_bpjs_tk": or_none(row.get('NOBPJSTK')),
            "no_bpjs_kes": or_none(row.get('NOBPJSKES')),
            "kd_bpjs_tk": is_flag_set(row.get('KD_BPJSTK')),
            "kd_bpjs_kes": is_flag_set(row.get('KD_BPJSKES')),
            "tgl_astek": to_date(row.get('TGL_ASTEK')),
            "bank_unit": or_none(row.get('BANK_UNIT')),
            "bank_rek_no": or_none(row.get('BANK_REKNO')),
            "bank_rek_name": or_none(row.get('BANK_REKNAME')),
            "tgl_msk": to_date(row.get('TGL_MSK')),
            "tgl_out": to_date(row.get('TGL_OUT')),
            "alasan_out": str(row['ALASAN_OUT']) if row.get('ALASAN_OUT') else None,
            "kd_out": is_flag_set(row.get('KD_OUT')),
            "kd_jns": map_enum(EMPLOYMENT_TYPE_MAP, row.get('KD_JNS'), 'TETAP'),
            "hari_kerja": to_int(row.get('HARI_KERJA')) or 5,
            "kd_gaji": to_int(row.get('KD_GAJI')) or 1,
            "kd_wni": is_flag_set(row.get('KD_WNI')),
            "kd_sts": map_enum(STATUS_MAP, row.get('KD_STS'), 'AKTIF'),
            "tgl_nikah": to_date(row.get('TGL_NIKAH')),
            "kd_ptkp": to_int(row.get('KD_PTKP')) or 1,
            "jml_anak": to_int(row.get('JMLANAK')),
            "kd_lmb": is_flag_set(row.get('KD_LMB')),
            "kd_spl": is_flag_set(row.get('KD_SPL')),
            "kd_pjk": is_flag_set(row.get('KD_PJK')),
            "type_pjk": to_int(row.get('TYPE_PJK')) or 1,
            "kd_koperasi": is_flag_set(row.get('KD_KOPERASI')),
            "kdpt_rumah": is_flag_set(row.get('KDPT_RUMAH')),
            "pot_rumah": to_decimal(row.get('POT_RUMAH')),
            "tgl_koperasi": to_date(row.get('TGL_KOPERASI')),
            "no_anggota": or_none(row.get('No_ANGGOTA')),
            "kd_spsi": is_flag_set(row.get('KD_SPSI')),
            "gl_darah": or_none(row.get('GLDARAH')),
            "tinggi": to_int(row.get('TINGGI')),
            "berat": to_int(row.get('BERAT')),
            "pokok_bln": to_decimal(row.get('POKOK_BLN')),
            "t_transport": to_decimal(row.get('TTRANSPORT')),
            "kd_transp": is_flag_set(row.get('KD_TRANSP')),
            "t_makan": to_decimal(row.get('TMAKAN')),
            "kd_makan": is_flag_set(row.get('KD_MAKAN')),
            "t_jabatan": to_decimal(row.get('TJABATAN')),
            "t_keluarga": to_decimal(row.get('TKELUARGA')),
            "t_komunikasi": to_decimal(row.get('TKOMUNIKASI')),
            "t_khusus": to_decimal(row.get('TKHUSUS')),
            "t_lmbtetap": to_decimal(row.get('TLMBTETAP')),
            "fix_other": to_decimal(row.get('FIXOTHER')),
            "nm_teman": or_none(row.get('NM_TEMAN')),
            "alm_teman": or_none(row.get('ALM_TEMAN')),
            "tlp_teman": or_none(row.get('TLP_TEMAN')),
            "hub_teman": or_none(row.get('HUB_TEMAN')),
            "kk_no": or_none(row.get('KKNO')),
            "ibu_kandung": or_none(row.get('IBUKANDUNG')),
            "alamat_dom1": or_none(row.get('ALAMATDOM1')),
            "alamat_dom2": or_none(row.get('ALAMATDOM2')),
            "created_by": IMPORT_USER,
            "updated_by": row.get('Update_by') or IMPORT_USER,
        }
        values.update(codes)
        values.update(resolve_relation_ids(codes, maps, EMPLOYEE_RELATIONS))
        return values

    return build


def import_employees(db: Session, source, with_master: bool = True) -> dict:
    result = {}
    if with_master:
        logger.info("[Import] Employees: importing master data dependencies")
        result["masterData"] = import_master_data(db, source)

    maps = build_lookup_maps(db, EMPLOYEE_RELATIONS)
    rows = source.query("SELECT * FROM karyawan")
    stats = ImportStats()
    stats.extra["nik_conflicts"] = 0
    run_rows(db, rows, Karyawan, ("empl_id",), _employee_builder(db, maps, stats),
             _code_of('EMPL_ID'), stats=stats, label="karyawan")
    logger.info(
        f"[Import] Employees: total={stats.total} baru={stats.imported} update={stats.updated} "
        f"nik_conflicts={stats.extra.get('nik_conflicts', 0)} error={stats.errors}"
    )
    result["employees"] = stats.as_dict()
    return result


# ─── Payroll ──────────────────────────────────────────────────────────────

def _gaji_builder(maps: Dict[str, Dict], ptkp_map: Dict, jnskary_map: Dict):
    def build(row):
        today = datetime.date.today()
        codes = {
            "kd_cmpy": or_none(clean_str(row.get('KD_CMPY'))),
            "kd_fact": or_none(clean_str(row.get('KD_FACT'))),
            "kd_bag": or_none(clean_str(row.get('KD_BAG'))),
            "kd_dept": or_none(clean_str(row.get('KD_DEPT'))),
            "kd_seksie": or_none(clean_str(row.get('KD_SEKSIE'))),
            "kd_jab": or_none(clean_str(row.get('KD_JAB'))),
        }
        values = {
            "period": _require(clean_str(row.get('PERIOD')), "PERIOD kosong"),
            "empl_id": _require(clean_str(row.get('EMPL_ID')), "EMPL_ID kosong"),
            "nik": or_none(row.get('NIK')),
            "nama": or_none(row.get('NAMA')),
            "tgl_proses": to_date(row.get('TGL_PROSES')) or today,
            "tgl_msk": to_date(row.get('TGL_MSK')) or today,
            "type_empl": to_int(row.get('TYPE_EMPL')),
            "kd_pjk": to_int(row.get('KD_PJK')),
            "type_pjk": to_int(row.get('TYPE_PJK')),
            "kd_bpjs_tk": is_flag_set(row.get('KD_BPJSTK')),
            "kd_bpjs_kes": is_flag_set(row.get('KD_BPJSKES')),
            "kd_out": is_flag_set(row.get('KD_OUT')),
            "kd_jns": to_int(row.get('KD_JNS')),
            "thn_kerja": to_int(row.get('THN_KERJA')),
            "bln_kerja": to_int(row.get('BLN_KERJA')),
            "hr_kerja": to_int(row.get('HR_KERJA')),
            "pokok_bln": to_decimal(row.get('POKOK_BLN')),
            "pokok_trm": to_decimal(row.get('POKOK_TRM')),
            "t_jabatan": to_decimal(row.get('TJABATAN')),
            "t_transport": to_decimal(row.get('TTRANSPORT')),
            "t_makan": to_decimal(row.get('TMAKAN')),
            "t_khusus": to_decimal(row.get('TKHUSUS')),
            "t_lain": to_decimal(row.get('TLAIN')),
            "tunj_lain": to_decimal(row.get('TUNJLAIN')),
            "tunj_medik": to_decimal(row.get('TUNJMEDIK')),
            "rapel": to_decimal(row.get('RAPEL')),
            "tunj_rapel": to_decimal(row.get('TUNJRAPEL')),
            "tot_j_lembur": to_decimal(row.get('TOTJLEMBUR')),
            "tot_u_lembur": to_decimal(row.get('TOTULEMBUR')),
            "tot_u_shift": to_decimal(row.get('TOTUSHIFT')),
            "meal_ot": to_decimal(row.get('MEALOT')),
            "jht_empl": to_decimal(row.get('JHT_EMPL')),
            "jpn_empl": to_decimal(row.get('JPN_EMPL')),
            "jkn_empl": to_decimal(row.get('JKN_EMPL')),
            "jht_comp": to_decimal(row.get('JHT_COMP')),
            "jpn_comp": to_decimal(row.get('JPN_COMP')),
            "jkn_comp": to_decimal(row.get('JKN_COMP')),
            "jkk": to_decimal(row.get('JKK')),
            "jkm": to_decimal(row.get('JKM')),
            "t_pph21": to_decimal(row.get('TPPH21')),
            "pph_thr": to_decimal(row.get('PPH_THR')),
            "pph_empl": to_decimal(row.get('PPH_EMPL')),
            "ptkp_amount": to_decimal(row.get('PTKP')),
            "adm_bank": to_decimal(row.get('ADM_BANK')),
            "upah_tetap": to_decimal(row.get('UPAHTETAP')),
            "pt_absen": to_decimal(row.get('PT_ABSEN')),
            "hr_hadir": to_int(row.get('HR_HADIR')),
            "hr_mangkir": to_int(row.get('HR_MANGKIR')),
            "hr_sakit": to_int(row.get('HR_SAKIT')),
            "hr_izin": to_int(row.get('HR_IZIN')),
            "hr_cuti1": to_int(row.get('HR_CUTI1')),
            "hr_lambat": to_int(row.get('HR_LAMBAT')),
            "mn_lambat": to_int(row.get('MN_LAMBAT')),
            "thr": to_decimal(row.get('THR')),
            "g_kotor": to_decimal(row.get('GKOTOR')),
            "g_bersih": to_decimal(row.get('GBERSIH')),
            "pinjam": to_decimal(row.get('PINJAM')),
            "koperasi": to_decimal(row.get('KOPERASI')),
            "pt_lain": to_decimal(row.get('PT_LAIN')),
            "tot_potong": to_decimal(row.get('TOTPOTONG')),
            "ptkp_id": ptkp_map.get(to_int(row.get('KD_PTKP'))),
            "jnskary_id": jnskary_map.get(to_int(row.get('KD_JNS'))),
            "closing": is_flag_set(row.get('CLOSING')),
            "paid_date": to_date(row.get('PAID_DATE')),
            "paid_by": or_none(row.get('PAID_BY')),
        }
        values.update(codes)
        values.update(resolve_relation_ids(codes, maps, ORG_RELATIONS))
        return values

    return build


def _transaction_builder(type_map: Dict, type_attr: str):
    def build(row):
        trans_code = to_int(row.get('TRANS_CODE'))
        return {
            "period": _require(clean_str(row.get('PERIOD')), "PERIOD kosong"),
            "trans_id": _require(clean_str(row.get('TRANS_ID')), "TRANS_ID kosong"),
            "trans_date": to_date(row.get('TRANS_DATE')),
            "trans_code": trans_code,
            "empl_id": _require(clean_str(row.get('EMPL_ID')), "EMPL_ID kosong"),
            "nik": row.get('NIK'),
            "jumlah": to_decimal(row.get('JUMLAH')),
            "keterangan": row.get('KETERANGAN'),
            type_attr: type_map.get(trans_code),
        }
    return build


def _pinjam_hdr(row):
    return {
        "empl_id": _require(clean_str(row.get('EMPL_ID')), "EMPL_ID kosong"),
        "tgl_pinjam": _require(to_date(row.get('TGL_PINJAM')), "TGL_PINJAM tidak valid"),
        "tot_pinjam": to_decimal(row.get('TOT_PINJAM')),
        "jns_sumber": to_int(row.get('JNS_SUMBER')),
        "saldo_pinjam": to_decimal(row.get('SALDO_PINJAM')),
        "jml_cicil": to_int(row.get('JML_CICIL')),
        "keterangan": row.get('KETERANGAN') or '',
        "status": is_flag_set(row.get('STATUS')),
        "approved": is_flag_set(row.get('APPROVED')),
        "approved_by": row.get('APPROVED_BY'),
    }


def _pinjam_det(row):
    return {
        "trans_id": _require(clean_str(row.get('TRANS_ID')), "TRANS_ID kosong"),
        "periode": _require(clean_str(row.get('PERIODE')), "PERIODE kosong"),
        "jns_sumber": to_int(row.get('JNS_SUMBER')),
        "tgl_bayar": _require(to_date(row.get('TGL_BAYAR')), "TGL_BAYAR tidak valid"),
        "tgl_pinjam": to_date(row.get('TGL_PINJAM')),
        "empl_id": _require(clean_str(row.get('EMPL_ID')), "EMPL_ID kosong"),
        "jml_bayar": to_decimal(row.get('JML_BAYAR')),
        "saldo_pinjam": to_decimal(row.get('SALDO_PINJAM')),
        "keterangan": row.get('KETERANGAN') or '',
        "flag_lunas": is_flag_set(row.get('FLAG_LUNAS')),
    }


def _describe_trans(row):
    return f"{row.get('PERIOD')}/{row.get('TRANS_ID')} (code {row.get('TRANS_CODE')})"


def import_payroll(db: Session, source) -> Dict[str, dict]:
    stats: Dict[str, dict] = {}

    stats["periods"] = run_mapping(db, source, PERIODE_MAPPING).as_dict()
    for mapping in TRANS_TYPE_MAPPINGS:
        stats[mapping.name] = run_mapping(db, source, mapping).as_dict()

    rows = source.query("SELECT * FROM pinjamhdr")
    stats["pinjamHdr"] = run_rows(
        db, rows, PinjamHdr, ("empl_id", "tgl_pinjam", "tot_pinjam", "jns_sumber"), _pinjam_hdr,
        lambda row: f"{row.get('EMPL_ID')}/{row.get('TGL_PINJAM')}", label="pinjamhdr"
    ).as_dict()

    maps = build_lookup_maps(db, ORG_RELATIONS)
    ptkp_map = code_map(db, Ptkp, 'kode')
    jnskary_map = code_map(db, JnsKary, 'kd_jns')
    rows = source.query("SELECT * FROM gaji")
    stats["gaji"] = run_rows(
        db, rows, Gaji, ("period", "empl_id"), _gaji_builder(maps, ptkp_map, jnskary_map),
        lambda row: f"{row.get('PERIOD')}/{row.get('EMPL_ID')}", label="gaji"
    ).as_dict()

    jns_pot_map = code_map(db, JnsPotongan, 'trans_code')
    jns_tunj_map = code_map(db, JnsTunjangan, 'trans_code')
    jns_rapel_map = code_map(db, JnsRapel, 'trans_code')

    rows = source.query("SELECT * FROM potongan")
    stats["potongan"] = run_rows(
        db, rows, Potongan, ("period", "trans_id"), _transaction_builder(jns_pot_map, "jenis_pot_id"),
        _describe_trans, label="potongan"
    ).as_dict()

    rows = source.query("SELECT * FROM pinjamdet")
    stats["pinjamDet"] = run_rows(
        db, rows, PinjamDet, ("trans_id", "periode", "jns_sumber", "tgl_bayar"), _pinjam_det,
        lambda row: f"{row.get('TRANS_ID')}/{row.get('PERIODE')}", label="pinjamdet"
    ).as_dict()

    rows = source.query("SELECT * FROM tunjangan")
    stats["tunjangan"] = run_rows(
        db, rows, Tunjangan, ("period", "trans_id"), _transaction_builder(jns_tunj_map, "jenis_tunj_id"),
        _describe_trans, label="tunjangan"
    ).as_dict()

    rows = source.query("SELECT * FROM rapel")
    stats["rapel"] = run_rows(
        db, rows, Rapel, ("period", "trans_id"), _transaction_builder(jns_rapel_map, "jenis_rapel_id"),
        _describe_trans, label="rapel"
    ).as_dict()

    logger.info(f"[Import] Payroll selesai: gaji={stats['gaji']['imported'] + stats['gaji']['updated']}")
    return stats


# ─── Attendance ───────────────────────────────────────────────────────────

def find_real_in_out(source, nik: str, day: datetime.date) -> Tuple[Optional[str], Optional[str]]:
    """First tap is the check-in, last tap (only when there is more than one) the check-out."""
    try:
        logs = source.query(
            "SELECT jam FROM att_log WHERE nik = %s AND tanggal = %s ORDER BY jam ASC",
            (nik, day.isoformat())
        )
    except Exception as e:
        logger.warning(f"[Import] att_log lookup {nik} {day} gagal: {e}")
        return None, None
    if not logs:
        return None, None
    first_tap = normalize_clock(logs[0].get('jam'))
    last_tap = normalize_clock(logs[-1].get('jam')) if len(logs) > 1 else None
    return first_tap, last_tap


def _attendance_builder(db: Session, source, active_empl_ids: set):
    employees = {empl_id for (empl_id,) in db.query(Karyawan.empl_id).all()}
    periods = {periode_id for (periode_id,) in db.query(Periode.periode_id).all()}
    descs = {kode for (kode,) in db.query(DescAbsen.kode_desc).all()}
    jam_ids = code_map(db, JnsJam, 'kd_jam')
    group_ids = code_map(db, GroupShift, 'group_shift')

    def build(row):
        tgl_absen = to_date(row.get('TGL_ABSEN'))
        if tgl_absen is None:
            return None
        empl_id = clean_str(row.get('EMPL_ID'))
        if empl_id not in employees:
            raise ValueError(f"Employee {empl_id} not found in PostgreSQL. Run Employee Import first.")

        periode = clean_str(row.get('PERIODE'))
        if not periode:
            raise ValueError(f"Attendance record for {empl_id} missing Period ID.")
        if periode not in periods:
            raise ValueError(f"Period {periode} not found. Fix: Dependency import failed.")

        kode_desc = clean_str(row.get('KODE_DESC'))
        if kode_desc and kode_desc not in descs:
            kode_desc = None

        is_sunday = tgl_absen.weekday() == 6
        kd_jam = clean_str(row.get('KD_JAM'))
        if is_sunday and kd_jam == 'JK1':
            # Legacy data marks Sundays as a normal 'JK1' day
            kd_jam = None
        if kd_jam and kd_jam not in jam_ids:
            kd_jam = None

        tap_in, tap_out = find_real_in_out(source, empl_id, tgl_absen)
        real_masuk = tap_in or normalize_clock(row.get('REALMASUK'))
        real_keluar = tap_out or normalize_clock(row.get('REALKELUAR'))
        if is_sunday and not tap_in and not tap_out:
            real_masuk = None
            real_keluar = None

        std_masuk = normalize_clock(row.get('STDMASUK'))
        std_keluar = normalize_clock(row.get('STDKELUAR'))

        if real_masuk or real_keluar:
            active_empl_ids.add(empl_id)

        group_shift = clean_str(row.get('GROUP_SHIFT')) or ''
        return {
            "empl_id": empl_id,
            "tgl_absen": tgl_absen,
            "periode": periode,
            "nik": or_none(row.get('NIK')),
            "id_absen": or_none(clean_str(row.get('ID_ABSEN'))),
            "nama": or_none(row.get('NAMA')),
            "kd_cmpy": or_none(clean_str(row.get('KD_CMPY'))),
            "kd_fact": or_none(clean_str(row.get('KD_FACT'))),
            "kd_bag": or_none(clean_str(row.get('KD_BAG'))),
            "kd_dept": or_none(clean_str(row.get('KD_DEPT'))),
            "kd_seksie": or_none(clean_str(row.get('KD_SEKSIE'))),
            "kd_jam": kd_jam,
            "group_shift": group_shift,
            "std_masuk": std_masuk,
            "std_keluar": std_keluar,
            "real_masuk": real_masuk,
            "real_keluar": real_keluar,
            "j_masuk": normalize_clock(row.get('JMASUK')),
            "j_keluar": normalize_clock(row.get('JKELUAR')),
            "kd_lmb": is_flag_set(row.get('KD_LMB')),
            "kd_spl": is_flag_set(row.get('KD_SPL')),
            "lembur1": to_decimal(row.get('LEMBUR1')),
            "lembur2": to_decimal(row.get('LEMBUR2')),
            "lembur3": to_decimal(row.get('LEMBUR3')),
            "lembur4": to_decimal(row.get('LEMBUR4')),
            "tot_kerja": to_decimal(row.get('TOTKERJA')),
            "lambat": calculate_late(std_masuk, real_masuk),
            "cepat": calculate_early(std_keluar, real_keluar),
            "kd_hari": to_int(row.get('KD_HARI')) or 1,
            "kd_absen": sanitize_status(clean_str(row.get('KD_ABSEN')) or 'H', real_masuk, real_keluar),
            "kd_shif": to_int(row.get('KD_SHIF')) or 1,
            "msk_lmb": normalize_clock(row.get('MSK_LMB')),
            "klr_lmb": normalize_clock(row.get('KLR_LMB')),
            "tot_lmb": to_decimal(row.get('TOT_LMB')),
            "ket_lmb": or_none(row.get('KET_LMB')),
            "flag_shift": is_flag_set(row.get('FLAG_SHIFT')),
            "flag_meal": is_flag_set(row.get('FLAG_MEAL')),
            "flag_susu": is_flag_set(row.get('FLAG_SUSU')),
            "kode_desc": kode_desc,
            "jns_jam_id": jam_ids.get(kd_jam) if kd_jam else None,
            "group_shift_id": group_ids.get(group_shift),
        }

    return build


def sync_att_logs(db: Session, source, since: datetime.date, active_empl_ids: Optional[set] = None) -> dict:
    """Copy raw fingerprint taps for employees known by NIK."""
    rows = source.query("SELECT * FROM att_log WHERE tanggal >= %s", (since.isoformat(),))
    nik_map = {
        nik: empl_id
        for nik, empl_id in db.query(Karyawan.nik, Karyawan.empl_id).filter(Karyawan.nik.isnot(None)).all()
    }

    def build(row):
        nik = clean_str(row.get('nik'))
        if not nik or nik not in nik_map:
            return None
        if active_empl_ids is not None:
            active_empl_ids.add(nik_map[nik])
        id_absen = clean_str(row.get('id_absen')) or ''
        return {
            "nik": nik,
            "tanggal": _require(to_date(row.get('tanggal')), "tanggal tidak valid"),
            "jam": clean_str(row.get('jam')) or '',
            "cflag": clean_str(row.get('cflag')) or '',
            "id_absen": id_absen,
            # legacy id_absen doubles as the employee id on the tap log
            "empl_id": id_absen,
        }

    stats = run_rows(
        db, rows, AttLog, ("nik", "tanggal", "jam", "cflag"), build,
        lambda row: f"{row.get('nik')}/{row.get('tanggal')} {row.get('jam')}", label="att_log"
    )
    logger.info(f"[AttLogSync] since={since} total={stats.total} baru={stats.imported} "
                f"update={stats.updated} skip={stats.skipped} error={stats.errors}")
    return stats.as_dict()


def activate_employees(db: Session, empl_ids: Iterable[str]) -> int:
    empl_ids = list(empl_ids)
    if not empl_ids:
        return 0
    count = db.query(Karyawan).filter(
        Karyawan.empl_id.in_(empl_ids),
        or_(Karyawan.kd_sts != 'AKTIF', Karyawan.kd_sts.is_(None))
    ).update({Karyawan.kd_sts: 'AKTIF'}, synchronize_session=False)
    db.commit()
    return count


def import_attendance(db: Session, source, since: datetime.date) -> dict:
    dependencies = {
        "periods": run_mapping(db, source, PERIODE_MAPPING).as_dict(),
        "descriptions": run_mapping(db, source, DESC_ABSEN_MAPPING).as_dict(),
        "workHours": run_mapping(db, source, MASTER_MAPPINGS["shift_types"]).as_dict(),
    }

    logger.info(f"[Import] Attendance since {since}")
    rows = source.query("SELECT * FROM absent WHERE TGL_ABSEN >= %s", (since.isoformat(),))
    active_empl_ids: set = set()
    stats = ImportStats()

    build = _attendance_builder(db, source, active_empl_ids)
    run_rows(
        db, rows, Absent, ("empl_id", "tgl_absen"), build,
        lambda row: f"{row.get('EMPL_ID')}/{row.get('TGL_ABSEN')}", stats=stats, label="absent"
    )

    att_log_stats = sync_att_logs(db, source, since, active_empl_ids)
    auto_activated = activate_employees(db, active_empl_ids)
    logger.info(f"[Import] Attendance selesai: baru={stats.imported} update={stats.updated} "
                f"error={stats.errors} auto_activated={auto_activated}")

    result = stats.as_dict()
    result.update({
        "dependencies": dependencies,
        "attLog": att_log_stats,
        "autoActivated": auto_activated,
    })
    return result
