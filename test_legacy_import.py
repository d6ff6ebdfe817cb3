import datetime

from conftest import FakeSource
from hrm.legacy.backfill import backfill_relations
from hrm.legacy.importers import (
    import_attendance, import_employees, import_master_data, import_payroll, import_tables, sync_att_logs,
)
from hrm.models.models import (
    Absent, AttLog, Company, Gaji, JnsJam, JnsKary, Karyawan, MstJab, PinjamDet, PinjamHdr, Potongan, Ptkp, Rapel,
    Tunjangan,
)


def test_master_import_upserts_on_code(db):
    source = FakeSource({
        "company": [{"KODE_CMPY": "C01", "COMPANY": "PT Satu"}, {"KODE_CMPY": "", "COMPANY": "Tanpa kode"}],
        "mstjab": [{"CKD_JAB": "J1", "CNM_JAB": "Operator", "NTJABATAN": "250000"}],
        "jnsjam": [{"KD_JAM": "JK1", "NM_JAM": "Pagi", "JAM_MSK": "07.00", "JAM_KLR": "16.00"}],
    })

    first = import_master_data(db, source)
    assert first["companies"]["imported"] == 1
    assert first["companies"]["errors"] == 1
    assert first["positions"]["imported"] == 1
    assert first["banks"]["total"] == 0

    source.tables["company"][0]["COMPANY"] = "PT Satu Baru"
    second = import_tables(db, source, ["companies"])
    assert second["companies"]["imported"] == 0
    assert second["companies"]["updated"] == 1

    db.expire_all()
    assert db.query(Company).one().company == "PT Satu Baru"
    shift_type = db.query(JnsJam).filter(JnsJam.kd_jam == "JK1").one()
    assert (shift_type.jam_msk, shift_type.jam_klr) == ("07:00", "16:00")


def test_import_tables_rejects_unknown_name(db):
    try:
        import_tables(db, FakeSource(), ["nope"])
    except KeyError as e:
        assert "nope" in str(e)
    else:
        raise AssertionError("KeyError expected")


def test_employee_import_remaps_enums_and_cleans_references(db):
    db.add(MstJab(kd_jab="J1", nm_jab="Operator"))
    db.commit()
    source = FakeSource({"karyawan": [
        {
            "EMPL_ID": "E001", "NIK": "3201", "NAMA": "Siti", "KD_SEX": 2, "KD_STS": 1, "KD_JNS": 3,
            "TGL_LHR": "0000-00-00", "TGL_MSK": "2020-02-01", "KD_JAB": "J1", "KD_AGM": "ZZ", "KD_BPJSTK": b"\x01",
        },
        {"EMPL_ID": "E002", "NIK": "3201", "NAMA": "Budi", "KD_SEX": 1, "KD_STS": 2},
        {"EMPL_ID": "E003", "NAMA": ""},
    ]})

    result = import_employees(db, source, with_master=False)
    stats = result["employees"]
    assert "masterData" not in result
    assert stats["imported"] == 2
    assert stats["errors"] == 1
    assert stats["nik_conflicts"] == 1
    assert stats["kd_agm_missing"] == 1

    db.expire_all()
    siti = db.query(Karyawan).filter(Karyawan.empl_id == "E001").one()
    assert siti.kd_sex == "PEREMPUAN"
    assert siti.kd_sts == "TIDAK_AKTIF"
    assert siti.kd_jns == "HARIAN"
    assert siti.tgl_lhr is None
    assert siti.tgl_msk == datetime.date(2020, 2, 1)
    assert siti.kd_agm is None
    assert siti.kd_bpjs_tk is True
    assert siti.jabatan_id == db.query(MstJab).one().id

    budi = db.query(Karyawan).filter(Karyawan.empl_id == "E002").one()
    assert budi.nik is None
    assert budi.kd_sts == "AKTIF"


def test_payroll_import_resolves_lookups_and_is_idempotent(db):
    db.add_all([Ptkp(kode=1, status="K/0"), JnsKary(kd_jns=2, nm_jns="Kontrak")])
    db.commit()
    source = FakeSource({
        "periode": [{"PERIODE_ID": "202601", "AWAL": "2025-12-21", "AKHIR": "2026-01-20", "TAHUN": 2026, "BULAN": 1}],
        "jnspotongan": [{"TRANS_CODE": 10, "JENIS": "Koperasi"}],
        "jnstunjangan": [{"TRANS_CODE": 20, "JENIS": "Tunjangan Hadir"}],
        "jnsrapel": [{"TRANS_CODE": 30, "JENIS": "Rapel Gaji"}],
        "pinjamhdr": [
            {"EMPL_ID": "E001", "TGL_PINJAM": "2026-01-05", "TOT_PINJAM": "1000000", "JNS_SUMBER": 1},
            {"EMPL_ID": "E001", "TGL_PINJAM": "2026-01-05", "TOT_PINJAM": "1000000", "JNS_SUMBER": 2},
            {"EMPL_ID": "E002", "TGL_PINJAM": "0000-00-00", "TOT_PINJAM": "500000", "JNS_SUMBER": 1},
        ],
        "gaji": [{"PERIOD": "202601", "EMPL_ID": "E001", "NIK": "N1", "KD_PTKP": 1, "KD_JNS": 2, "GBERSIH": "4500000"}],
        "potongan": [{"PERIOD": "202601", "TRANS_ID": "P1", "TRANS_CODE": 10, "EMPL_ID": "E001", "JUMLAH": "50000"}],
        "pinjamdet": [{"TRANS_ID": "L1", "PERIODE": "202601", "JNS_SUMBER": 1, "TGL_BAYAR": "2026-01-25",
                       "EMPL_ID": "E001", "JML_BAYAR": "100000"}],
        "tunjangan": [{"PERIOD": "202601", "TRANS_ID": "T1", "TRANS_CODE": 20, "EMPL_ID": "E001", "JUMLAH": "75000"}],
        "rapel": [{"PERIOD": "202601", "TRANS_ID": "R1", "TRANS_CODE": 30, "EMPL_ID": "E001", "JUMLAH": "25000"}],
    })

    first = import_payroll(db, source)
    for name in ("periods", "jnsPotongan", "jnsTunjangan", "jnsRapel", "gaji", "potongan", "pinjamDet",
                 "tunjangan", "rapel"):
        assert first[name]["imported"] == 1, name
    # same employee and date, different source: two loans
    assert first["pinjamHdr"]["imported"] == 2
    assert first["pinjamHdr"]["errors"] == 1
    assert first["pinjamHdr"]["errorSample"][0]["key"] == "E002/0000-00-00"
    assert first["pinjamHdr"]["errorSample"][0]["error"] == "TGL_PINJAM tidak valid"

    gaji = db.query(Gaji).one()
    assert gaji.ptkp_id == db.query(Ptkp).one().id
    assert gaji.jnskary_id == db.query(JnsKary).one().id
    assert db.query(Potongan).one().jenis_pot_id is not None
    assert db.query(Tunjangan).one().jenis_tunj_id is not None
    assert db.query(Rapel).one().jenis_rapel_id is not None
    assert db.query(PinjamDet).one().tgl_bayar == datetime.date(2026, 1, 25)

    second = import_payroll(db, source)
    assert second["gaji"]["imported"] == 0
    assert second["gaji"]["updated"] == 1
    assert second["pinjamHdr"]["updated"] == 2
    assert db.query(PinjamHdr).count() == 2


def test_attendance_import_applies_sunday_rules_and_activates(db):
    db.add(Karyawan(empl_id="E001", nik="E001", nama="Siti", kd_sts="TIDAK_AKTIF"))
    db.commit()
    source = FakeSource({
        "periode": [{"PERIODE_ID": "202601", "AWAL": "2026-01-01", "AKHIR": "2026-01-31", "TAHUN": 2026, "BULAN": 1}],
        "desc_absen": [],
        "jnsjam": [{"KD_JAM": "JK1", "NM_JAM": "Pagi", "JAM_MSK": "07.00", "JAM_KLR": "16.00"}],
        "absent": [
            # 2026-01-04 is a Sunday
            {"EMPL_ID": "E001", "TGL_ABSEN": "2026-01-04", "PERIODE": "202601", "KD_JAM": "JK1",
             "KD_ABSEN": "H", "REALMASUK": "07:00", "STDMASUK": "07:00", "STDKELUAR": "16:00"},
            {"EMPL_ID": "E001", "TGL_ABSEN": "2026-01-05", "PERIODE": "202601", "KD_JAM": "JK1",
             "KD_ABSEN": "H", "STDMASUK": "07:00", "STDKELUAR": "16:00"},
            {"EMPL_ID": "X999", "TGL_ABSEN": "2026-01-05", "PERIODE": "202601"},
            {"EMPL_ID": "E001", "TGL_ABSEN": "2026-01-06", "PERIODE": "209912"},
        ],
        "att_log": [
            {"nik": "E001", "tanggal": "2026-01-05", "jam": "07:10:00", "cflag": "I", "id_absen": "E001"},
            {"nik": "E001", "tanggal": "2026-01-05", "jam": "12:00:00", "cflag": "O", "id_absen": "E001"},
            {"nik": "E001", "tanggal": "2026-01-05", "jam": "15:30:00", "cflag": "O", "id_absen": "E001"},
        ],
    })

    result = import_attendance(db, source, datetime.date(2026, 1, 1))
    assert result["imported"] == 2
    assert result["errors"] == 2
    assert result["dependencies"]["periods"]["imported"] == 1
    assert result["attLog"]["imported"] == 3
    assert result["autoActivated"] == 1

    db.expire_all()
    sunday = db.query(Absent).filter(Absent.tgl_absen == datetime.date(2026, 1, 4)).one()
    assert sunday.kd_jam is None
    assert sunday.real_masuk is None
    assert sunday.kd_absen == 'A'

    monday = db.query(Absent).filter(Absent.tgl_absen == datetime.date(2026, 1, 5)).one()
    assert (monday.real_masuk, monday.real_keluar) == ("07:10", "15:30")
    assert monday.lambat == 10
    assert monday.cepat == 30
    assert monday.kd_absen == 'H'
    assert monday.jns_jam_id == db.query(JnsJam).one().id

    assert db.query(Karyawan).one().kd_sts == "AKTIF"


def test_att_log_sync_only_keeps_known_niks_and_is_idempotent(db):
    db.add(Karyawan(empl_id="E001", nik="3201", nama="Siti"))
    db.commit()
    source = FakeSource({"att_log": [
        {"nik": "3201", "tanggal": "2026-02-02", "jam": "07:01:00", "cflag": "I", "id_absen": "E001"},
        {"nik": "9999", "tanggal": "2026-02-02", "jam": "07:02:00", "cflag": "I", "id_absen": "X"},
        {"nik": "3201", "tanggal": "2025-12-31", "jam": "07:00:00", "cflag": "I", "id_absen": "E001"},
    ]})

    first = sync_att_logs(db, source, datetime.date(2026, 2, 1))
    assert first["total"] == 2
    assert first["imported"] == 1
    assert first["skipped"] == 1

    second = sync_att_logs(db, source, datetime.date(2026, 2, 1))
    assert second["imported"] == 0
    assert second["updated"] == 1
    assert db.query(AttLog).count() == 1
    assert db.query(AttLog).one().empl_id == "E001"


def test_backfill_fills_missing_relation_ids(db):
    shift_type = JnsJam(kd_jam="JK1", nm_jam="Pagi")
    db.add(shift_type)
    db.add(Karyawan(empl_id="E001", nama="Siti", kd_jam="JK1", group_shift="00"))
    db.add(Absent(empl_id="E001", tgl_absen=datetime.date(2026, 1, 5), kd_jam="JK1"))
    db.add(Absent(empl_id="E001", tgl_absen=datetime.date(2026, 1, 6), kd_jam="ZZZ"))
    db.commit()

    counts = backfill_relations(db)
    assert counts["absent.jns_jam_id"] == 1
    assert counts["karyawan.jns_jam_id"] == 1
    assert counts["absent.group_shift_id"] == 0

    db.expire_all()
    filled = db.query(Absent).filter(Absent.kd_jam == "JK1").one()
    assert filled.jns_jam_id == shift_type.id
    assert db.query(Absent).filter(Absent.kd_jam == "ZZZ").one().jns_jam_id is None
