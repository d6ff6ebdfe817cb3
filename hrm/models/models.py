from typing import Optional
import datetime
import decimal
import uuid

from sqlalchemy import Boolean, DECIMAL, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def new_uuid() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, default=datetime.datetime.now)
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, default=datetime.datetime.now, onupdate=datetime.datetime.now)


# ─── Auth ─────────────────────────────────────────────────────────────────

class Users(TimestampMixin, Base):
    __tablename__ = 'users'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(191), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100))
    password: Mapped[Optional[str]] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20), nullable=False, default='EMPLOYEE')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime)

    karyawan: Mapped[Optional['Karyawan']] = relationship('Karyawan', back_populates='user', uselist=False)


# ─── Organisation masters ─────────────────────────────────────────────────

class Company(TimestampMixin, Base):
    __tablename__ = 'company'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_cmpy: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    company: Mapped[Optional[str]] = mapped_column(String(100))
    address1: Mapped[Optional[str]] = mapped_column(String(100))
    address2: Mapped[Optional[str]] = mapped_column(String(100))
    address3: Mapped[Optional[str]] = mapped_column(String(100))
    tlp: Mapped[Optional[str]] = mapped_column(String(50))
    fax: Mapped[Optional[str]] = mapped_column(String(50))
    npwp: Mapped[Optional[str]] = mapped_column(String(30))
    director: Mapped[Optional[str]] = mapped_column(String(100))
    npwp_dir: Mapped[Optional[str]] = mapped_column(String(30))
    logo: Mapped[Optional[str]] = mapped_column(String(255))
    npp: Mapped[Optional[str]] = mapped_column(String(30))
    astek_bayar: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    homepage: Mapped[Optional[str]] = mapped_column(String(100))
    hrd_mng: Mapped[Optional[str]] = mapped_column(String(100))
    npwp_mng: Mapped[Optional[str]] = mapped_column(String(30))


class Bank(TimestampMixin, Base):
    __tablename__ = 'bank'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    bank_code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    bank_nama: Mapped[Optional[str]] = mapped_column(String(100))


class MstFact(TimestampMixin, Base):
    __tablename__ = 'mstfact'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_fact: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_fact: Mapped[Optional[str]] = mapped_column(String(100))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstBag(TimestampMixin, Base):
    __tablename__ = 'mstbag'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_bag: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_bag: Mapped[Optional[str]] = mapped_column(String(100))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstDept(TimestampMixin, Base):
    __tablename__ = 'mstdept'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_dept: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_dept: Mapped[Optional[str]] = mapped_column(String(100))
    kd_bag: Mapped[Optional[str]] = mapped_column(String(10))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstSie(TimestampMixin, Base):
    __tablename__ = 'mstsie'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_seksie: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_seksie: Mapped[Optional[str]] = mapped_column(String(100))
    kd_bag: Mapped[Optional[str]] = mapped_column(String(10))
    kd_dept: Mapped[Optional[str]] = mapped_column(String(10))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstJab(TimestampMixin, Base):
    __tablename__ = 'mstjab'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_jab: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_jab: Mapped[Optional[str]] = mapped_column(String(100))
    n_tjabatan: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(15, 2), default=0)
    n_transport: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(15, 2), default=0)
    n_shift_all: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(15, 2), default=0)
    n_premi_hdr: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(15, 2), default=0)
    persen_rmh: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(7, 2), default=0)
    persen_pph: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(7, 2), default=0)
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstPkt(TimestampMixin, Base):
    __tablename__ = 'mstpkt'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_pkt: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_pkt: Mapped[Optional[str]] = mapped_column(String(100))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstAgm(TimestampMixin, Base):
    __tablename__ = 'mstagm'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_agm: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_agm: Mapped[Optional[str]] = mapped_column(String(50))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class MstSkl(TimestampMixin, Base):
    __tablename__ = 'mstskl'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_skl: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    nm_skl: Mapped[Optional[str]] = mapped_column(String(50))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class Ptkp(TimestampMixin, Base):
    __tablename__ = 'ptkp'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kode: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(10))
    nilai: Mapped[Optional[decimal.Decimal]] = mapped_column(DECIMAL(15, 2), default=0)


class JnsKary(TimestampMixin, Base):
    __tablename__ = 'jnskary'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_jns: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    nm_jns: Mapped[Optional[str]] = mapped_column(String(50))


# ─── Shifts ───────────────────────────────────────────────────────────────

class JnsJam(TimestampMixin, Base):
    __tablename__ = 'jnsjam'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_jam: Mapped[str] = mapped_column(String(5), unique=True, nullable=False)
    nm_jam: Mapped[Optional[str]] = mapped_column(String(50))
    jns_jam: Mapped[Optional[str]] = mapped_column(String(50))
    jam_msk: Mapped[Optional[str]] = mapped_column(String(5))
    jam_klr: Mapped[Optional[str]] = mapped_column(String(5))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class ShiftPattern(TimestampMixin, Base):
    __tablename__ = 'shift_pattern'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    pattern: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    groups: Mapped[list['GroupShift']] = relationship('GroupShift', back_populates='pattern')


class GroupShift(TimestampMixin, Base):
    __tablename__ = 'groupshift'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    group_shift: Mapped[str] = mapped_column(String(5), unique=True, nullable=False)
    group_name: Mapped[Optional[str]] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    pattern_id: Mapped[Optional[str]] = mapped_column(ForeignKey('shift_pattern.id'))
    ref_date: Mapped[Optional[datetime.date]] = mapped_column(Date)

    pattern: Mapped[Optional['ShiftPattern']] = relationship('ShiftPattern', back_populates='groups')


class Dshift(TimestampMixin, Base):
    __tablename__ = 'dshift'
    __table_args__ = (
        UniqueConstraint('kd_cmpy', 'periode', 'group_shift', name='dshift_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kd_cmpy: Mapped[str] = mapped_column(String(10), nullable=False)
    periode: Mapped[str] = mapped_column(String(6), nullable=False)
    group_shift: Mapped[str] = mapped_column(String(5), nullable=False)
    group_shift_id: Mapped[Optional[str]] = mapped_column(ForeignKey('groupshift.id'))
    shift01: Mapped[Optional[str]] = mapped_column(String(5))
    shift02: Mapped[Optional[str]] = mapped_column(String(5))
    shift03: Mapped[Optional[str]] = mapped_column(String(5))
    shift04: Mapped[Optional[str]] = mapped_column(String(5))
    shift05: Mapped[Optional[str]] = mapped_column(String(5))
    shift06: Mapped[Optional[str]] = mapped_column(String(5))
    shift07: Mapped[Optional[str]] = mapped_column(String(5))
    shift08: Mapped[Optional[str]] = mapped_column(String(5))
    shift09: Mapped[Optional[str]] = mapped_column(String(5))
    shift10: Mapped[Optional[str]] = mapped_column(String(5))
    shift11: Mapped[Optional[str]] = mapped_column(String(5))
    shift12: Mapped[Optional[str]] = mapped_column(String(5))
    shift13: Mapped[Optional[str]] = mapped_column(String(5))
    shift14: Mapped[Optional[str]] = mapped_column(String(5))
    shift15: Mapped[Optional[str]] = mapped_column(String(5))
    shift16: Mapped[Optional[str]] = mapped_column(String(5))
    shift17: Mapped[Optional[str]] = mapped_column(String(5))
    shift18: Mapped[Optional[str]] = mapped_column(String(5))
    shift19: Mapped[Optional[str]] = mapped_column(String(5))
    shift20: Mapped[Optional[str]] = mapped_column(String(5))
    shift21: Mapped[Optional[str]] = mapped_column(String(5))
    shift22: Mapped[Optional[str]] = mapped_column(String(5))
    shift23: Mapped[Optional[str]] = mapped_column(String(5))
    shift24: Mapped[Optional[str]] = mapped_column(String(5))
    shift25: Mapped[Optional[str]] = mapped_column(String(5))
    shift26: Mapped[Optional[str]] = mapped_column(String(5))
    shift27: Mapped[Optional[str]] = mapped_column(String(5))
    shift28: Mapped[Optional[str]] = mapped_column(String(5))
    shift29: Mapped[Optional[str]] = mapped_column(String(5))
    shift30: Mapped[Optional[str]] = mapped_column(String(5))
    shift31: Mapped[Optional[str]] = mapped_column(String(5))


# ─── Employees ────────────────────────────────────────────────────────────

class Karyawan(TimestampMixin, Base):
    __tablename__ = 'karyawan'
    __table_args__ = (
        Index('karyawan_kd_sts_idx', 'kd_sts'),
        Index('karyawan_group_shift_idx', 'group_shift'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    empl_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    nik: Mapped[Optional[str]] = mapped_column(String(30), unique=True)
    id_absen: Mapped[Optional[str]] = mapped_column(String(20))
    nama: Mapped[str] = mapped_column(String(100), nullable=False)

    kd_cmpy: Mapped[Optional[str]] = mapped_column(String(10))
    kd_fact: Mapped[Optional[str]] = mapped_column(String(10))
    kd_bag: Mapped[Optional[str]] = mapped_column(String(10))
    kd_dept: Mapped[Optional[str]] = mapped_column(String(10))
    kd_seksie: Mapped[Optional[str]] = mapped_column(String(10))
    kd_pkt: Mapped[Optional[str]] = mapped_column(String(10))
    kd_jab: Mapped[Optional[str]] = mapped_column(String(10))
    kd_agm: Mapped[Optional[str]] = mapped_column(String(10))
    kd_skl: Mapped[Optional[str]] = mapped_column(String(10))
    bank_code: Mapped[Optional[str]] = mapped_column(String(10))

    kd_sex: Mapped[str] = mapped_column(String(10), default='LAKILAKI')
    alamat1: Mapped[Optional[str]] = mapped_column(String(150))
    alamat2: Mapped[Optional[str]] = mapped_column(String(150))
    kota: Mapped[Optional[str]] = mapped_column(String(50))
    kd_pos: Mapped[Optional[str]] = mapped_column(String(10))
    telpon: Mapped[Optional[str]] = mapped_column(String(30))
    handphone: Mapped[Optional[str]] = mapped_column(String(30))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    tmp_lhr: Mapped[Optional[str]] = mapped_column(String(50))
    tgl_lhr: Mapped[Optional[datetime.date]] = mapped_column(Date)
    tgl_angkat: Mapped[Optional[datetime.date]] = mapped_column(Date)
    ktp_no: Mapped[Optional[str]] = mapped_column(String(30))
    valid_ktp: Mapped[Optional[datetime.date]] = mapped_column(Date)
    npwp: Mapped[Optional[str]] = mapped_column(String(30))
    tgl_npwp: Mapped[Optional[datetime.date]] = mapped_column(Date)
    type_sim: Mapped[Optional[str]] = mapped_column(String(10))
    no_sim: Mapped[Optional[str]] = mapped_column(String(30))
    valid_sim: Mapped[Optional[datetime.date]] = mapped_column(Date)
    pasport_no: Mapped[Optional[str]] = mapped_column(String(30))
    kitas_no: Mapped[Optional[str]] = mapped_column(String(30))
    valid_kitas: Mapped[Optional[datetime.date]] = mapped_column(Date)
    no_bpjs_tk: Mapped[Optional[str]] = mapped_column(String(30))
    no_bpjs_kes: Mapped[Optional[str]] = mapped_column(String(30))
    kd_bpjs_tk: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_bpjs_kes: Mapped[bool] = mapped_column(Boolean, default=False)
    tgl_astek: Mapped[Optional[datetime.date]] = mapped_column(Date)
    bank_unit: Mapped[Optional[str]] = mapped_column(String(50))
    bank_rek_no: Mapped[Optional[str]] = mapped_column(String(30))
    bank_rek_name: Mapped[Optional[str]] = mapped_column(String(100))
    tgl_msk: Mapped[Optional[datetime.date]] = mapped_column(Date)
    tgl_out: Mapped[Optional[datetime.date]] = mapped_column(Date)
    alasan_out: Mapped[Optional[str]] = mapped_column(String(255))
    kd_out: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_jns: Mapped[str] = mapped_column(String(10), default='TETAP')
    hari_kerja: Mapped[int] = mapped_column(Integer, default=5)
    group_shift: Mapped[Optional[str]] = mapped_column(String(5), default='00')
    kd_gaji: Mapped[int] = mapped_column(Integer, default=1)
    kd_wni: Mapped[bool] = mapped_column(Boolean, default=True)
    kd_sts: Mapped[str] = mapped_column(String(15), default='AKTIF')
    tgl_nikah: Mapped[Optional[datetime.date]] = mapped_column(Date)
    kd_ptkp: Mapped[int] = mapped_column(Integer, default=1)
    jml_anak: Mapped[int] = mapped_column(Integer, default=0)
    kd_lmb: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_spl: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_pjk: Mapped[bool] = mapped_column(Boolean, default=False)
    type_pjk: Mapped[int] = mapped_column(Integer, default=1)
    kd_jam: Mapped[Optional[str]] = mapped_column(String(5), default='A')
    kd_koperasi: Mapped[bool] = mapped_column(Boolean, default=False)
    kdpt_rumah: Mapped[bool] = mapped_column(Boolean, default=False)
    pot_rumah: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tgl_koperasi: Mapped[Optional[datetime.date]] = mapped_column(Date)
    no_anggota: Mapped[Optional[str]] = mapped_column(String(30))
    kd_spsi: Mapped[bool] = mapped_column(Boolean, default=False)
    gl_darah: Mapped[Optional[str]] = mapped_column(String(5))
    tinggi: Mapped[int] = mapped_column(Integer, default=0)
    berat: Mapped[int] = mapped_column(Integer, default=0)

    pokok_bln: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_transport: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    kd_transp: Mapped[bool] = mapped_column(Boolean, default=False)
    t_makan: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    kd_makan: Mapped[bool] = mapped_column(Boolean, default=False)
    t_jabatan: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_keluarga: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_komunikasi: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_khusus: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_lmbtetap: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    fix_other: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)

    nm_teman: Mapped[Optional[str]] = mapped_column(String(100))
    alm_teman: Mapped[Optional[str]] = mapped_column(String(150))
    tlp_teman: Mapped[Optional[str]] = mapped_column(String(30))
    hub_teman: Mapped[Optional[str]] = mapped_column(String(30))
    kk_no: Mapped[Optional[str]] = mapped_column(String(30))
    ibu_kandung: Mapped[Optional[str]] = mapped_column(String(100))
    alamat_dom1: Mapped[Optional[str]] = mapped_column(String(150))
    alamat_dom2: Mapped[Optional[str]] = mapped_column(String(150))

    # Approval chain (refers to karyawan.empl_id)
    superior_id: Mapped[Optional[str]] = mapped_column(String(20))
    superior2_id: Mapped[Optional[str]] = mapped_column(String(20))

    # UUID relations resolved from the legacy codes
    company_id: Mapped[Optional[str]] = mapped_column(ForeignKey('company.id'))
    fact_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstfact.id'))
    bag_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstbag.id'))
    dept_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstdept.id'))
    sie_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstsie.id'))
    jabatan_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstjab.id'))
    pkt_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstpkt.id'))
    agama_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstagm.id'))
    sekolah_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstskl.id'))
    bank_id: Mapped[Optional[str]] = mapped_column(ForeignKey('bank.id'))
    jns_jam_id: Mapped[Optional[str]] = mapped_column(ForeignKey('jnsjam.id'))
    group_shift_id: Mapped[Optional[str]] = mapped_column(ForeignKey('groupshift.id'))

    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey('users.id'))
    created_by: Mapped[Optional[str]] = mapped_column(String(50))
    updated_by: Mapped[Optional[str]] = mapped_column(String(50))
    deleted_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime)

    user: Mapped[Optional['Users']] = relationship('Users', back_populates='karyawan')
    company_rel: Mapped[Optional['Company']] = relationship('Company')
    bagian: Mapped[Optional['MstBag']] = relationship('MstBag')
    departemen: Mapped[Optional['MstDept']] = relationship('MstDept')
    seksie: Mapped[Optional['MstSie']] = relationship('MstSie')
    jabatan: Mapped[Optional['MstJab']] = relationship('MstJab')


class Hcuti(TimestampMixin, Base):
    __tablename__ = 'hcuti'
    __table_args__ = (
        UniqueConstraint('empl_id', 'tahun', name='hcuti_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    empl_id: Mapped[str] = mapped_column(ForeignKey('karyawan.empl_id'), nullable=False)
    tahun: Mapped[int] = mapped_column(Integer, nullable=False)
    hak_cuti: Mapped[int] = mapped_column(Integer, default=12)
    ambil: Mapped[int] = mapped_column(Integer, default=0)
    sisa: Mapped[int] = mapped_column(Integer, default=12)


# ─── Attendance ───────────────────────────────────────────────────────────

class Periode(TimestampMixin, Base):
    __tablename__ = 'periode'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    periode_id: Mapped[str] = mapped_column(String(6), unique=True, nullable=False)
    awal: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    akhir: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    data_defa: Mapped[bool] = mapped_column(Boolean, default=False)
    tutup: Mapped[bool] = mapped_column(Boolean, default=False)
    tahun: Mapped[int] = mapped_column(Integer, nullable=False)
    bulan: Mapped[int] = mapped_column(Integer, nullable=False)
    nama: Mapped[Optional[str]] = mapped_column(String(50))
    kd_cmpy: Mapped[Optional[str]] = mapped_column(String(10))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))


class DescAbsen(TimestampMixin, Base):
    __tablename__ = 'desc_absen'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    kode_desc: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    keterangan: Mapped[Optional[str]] = mapped_column(String(100))


class Absent(TimestampMixin, Base):
    __tablename__ = 'absent'
    __table_args__ = (
        UniqueConstraint('empl_id', 'tgl_absen', name='absent_unique'),
        Index('absent_tgl_absen_idx', 'tgl_absen'),
        Index('absent_periode_idx', 'periode'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    empl_id: Mapped[str] = mapped_column(ForeignKey('karyawan.empl_id'), nullable=False)
    tgl_absen: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    periode: Mapped[Optional[str]] = mapped_column(ForeignKey('periode.periode_id'))
    nik: Mapped[Optional[str]] = mapped_column(String(30))
    id_absen: Mapped[Optional[str]] = mapped_column(String(20))
    nama: Mapped[Optional[str]] = mapped_column(String(100))
    kd_cmpy: Mapped[Optional[str]] = mapped_column(String(10))
    kd_fact: Mapped[Optional[str]] = mapped_column(String(10))
    kd_bag: Mapped[Optional[str]] = mapped_column(String(10))
    kd_dept: Mapped[Optional[str]] = mapped_column(String(10))
    kd_seksie: Mapped[Optional[str]] = mapped_column(String(10))
    kd_jam: Mapped[Optional[str]] = mapped_column(String(5))
    group_shift: Mapped[Optional[str]] = mapped_column(String(5))
    std_masuk: Mapped[Optional[str]] = mapped_column(String(5))
    std_keluar: Mapped[Optional[str]] = mapped_column(String(5))
    real_masuk: Mapped[Optional[str]] = mapped_column(String(5))
    real_keluar: Mapped[Optional[str]] = mapped_column(String(5))
    j_masuk: Mapped[Optional[str]] = mapped_column(String(5))
    j_keluar: Mapped[Optional[str]] = mapped_column(String(5))
    kd_lmb: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_spl: Mapped[bool] = mapped_column(Boolean, default=False)
    lembur1: Mapped[decimal.Decimal] = mapped_column(DECIMAL(7, 2), default=0)
    lembur2: Mapped[decimal.Decimal] = mapped_column(DECIMAL(7, 2), default=0)
    lembur3: Mapped[decimal.Decimal] = mapped_column(DECIMAL(7, 2), default=0)
    lembur4: Mapped[decimal.Decimal] = mapped_column(DECIMAL(7, 2), default=0)
    tot_kerja: Mapped[decimal.Decimal] = mapped_column(DECIMAL(7, 2), default=0)
    lambat: Mapped[int] = mapped_column(Integer, default=0)
    cepat: Mapped[int] = mapped_column(Integer, default=0)
    kd_hari: Mapped[int] = mapped_column(Integer, default=1)
    kd_absen: Mapped[Optional[str]] = mapped_column(String(5), default='H')
    kd_shif: Mapped[int] = mapped_column(Integer, default=1)
    msk_lmb: Mapped[Optional[str]] = mapped_column(String(5))
    klr_lmb: Mapped[Optional[str]] = mapped_column(String(5))
    tot_lmb: Mapped[decimal.Decimal] = mapped_column(DECIMAL(7, 2), default=0)
    ket_lmb: Mapped[Optional[str]] = mapped_column(String(255))
    flag_shift: Mapped[bool] = mapped_column(Boolean, default=False)
    flag_meal: Mapped[bool] = mapped_column(Boolean, default=False)
    flag_susu: Mapped[bool] = mapped_column(Boolean, default=False)
    kode_desc: Mapped[Optional[str]] = mapped_column(ForeignKey('desc_absen.kode_desc'))
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))
    jns_jam_id: Mapped[Optional[str]] = mapped_column(ForeignKey('jnsjam.id'))
    group_shift_id: Mapped[Optional[str]] = mapped_column(ForeignKey('groupshift.id'))

    karyawan: Mapped['Karyawan'] = relationship('Karyawan')


class AttLog(TimestampMixin, Base):
    __tablename__ = 'att_log'
    __table_args__ = (
        UniqueConstraint('nik', 'tanggal', 'jam', 'cflag', name='att_log_unique'),
        Index('att_log_tanggal_idx', 'tanggal'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    nik: Mapped[str] = mapped_column(String(30), nullable=False)
    tanggal: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    jam: Mapped[str] = mapped_column(String(8), nullable=False, default='')
    cflag: Mapped[str] = mapped_column(String(5), nullable=False, default='')
    id_absen: Mapped[Optional[str]] = mapped_column(String(20))
    empl_id: Mapped[Optional[str]] = mapped_column(String(20))
    mesin: Mapped[Optional[str]] = mapped_column(String(50))


# ─── Payroll ──────────────────────────────────────────────────────────────

class Gaji(TimestampMixin, Base):
    __tablename__ = 'gaji'
    __table_args__ = (
        UniqueConstraint('period', 'empl_id', name='gaji_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    period: Mapped[str] = mapped_column(ForeignKey('periode.periode_id'), nullable=False)
    empl_id: Mapped[str] = mapped_column(String(20), nullable=False)
    nik: Mapped[Optional[str]] = mapped_column(String(30))
    nama: Mapped[Optional[str]] = mapped_column(String(100))
    kd_cmpy: Mapped[Optional[str]] = mapped_column(String(10))
    kd_fact: Mapped[Optional[str]] = mapped_column(String(10))
    kd_bag: Mapped[Optional[str]] = mapped_column(String(10))
    kd_dept: Mapped[Optional[str]] = mapped_column(String(10))
    kd_seksie: Mapped[Optional[str]] = mapped_column(String(10))
    kd_jab: Mapped[Optional[str]] = mapped_column(String(10))
    tgl_proses: Mapped[Optional[datetime.date]] = mapped_column(Date)
    tgl_msk: Mapped[Optional[datetime.date]] = mapped_column(Date)

    type_empl: Mapped[int] = mapped_column(Integer, default=0)
    kd_pjk: Mapped[int] = mapped_column(Integer, default=0)
    type_pjk: Mapped[int] = mapped_column(Integer, default=0)
    kd_bpjs_tk: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_bpjs_kes: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_out: Mapped[bool] = mapped_column(Boolean, default=False)
    kd_jns: Mapped[int] = mapped_column(Integer, default=0)
    thn_kerja: Mapped[int] = mapped_column(Integer, default=0)
    bln_kerja: Mapped[int] = mapped_column(Integer, default=0)
    hr_kerja: Mapped[int] = mapped_column(Integer, default=0)

    pokok_bln: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    pokok_trm: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_jabatan: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_transport: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_makan: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_khusus: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_lain: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tunj_lain: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tunj_medik: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    rapel: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tunj_rapel: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tot_j_lembur: Mapped[decimal.Decimal] = mapped_column(DECIMAL(10, 2), default=0)
    tot_u_lembur: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tot_u_shift: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    meal_ot: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)

    jht_empl: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jpn_empl: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jkn_empl: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jht_comp: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jpn_comp: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jkn_comp: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jkk: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jkm: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    t_pph21: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    pph_thr: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    pph_empl: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    ptkp_amount: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    adm_bank: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    upah_tetap: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    pt_absen: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)

    hr_hadir: Mapped[int] = mapped_column(Integer, default=0)
    hr_mangkir: Mapped[int] = mapped_column(Integer, default=0)
    hr_sakit: Mapped[int] = mapped_column(Integer, default=0)
    hr_izin: Mapped[int] = mapped_column(Integer, default=0)
    hr_cuti1: Mapped[int] = mapped_column(Integer, default=0)
    hr_lambat: Mapped[int] = mapped_column(Integer, default=0)
    mn_lambat: Mapped[int] = mapped_column(Integer, default=0)

    thr: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    g_kotor: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    g_bersih: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    pinjam: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    koperasi: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    pt_lain: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    tot_potong: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)

    company_id: Mapped[Optional[str]] = mapped_column(ForeignKey('company.id'))
    fact_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstfact.id'))
    bag_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstbag.id'))
    dept_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstdept.id'))
    sie_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstsie.id'))
    jabatan_id: Mapped[Optional[str]] = mapped_column(ForeignKey('mstjab.id'))
    ptkp_id: Mapped[Optional[str]] = mapped_column(ForeignKey('ptkp.id'))
    jnskary_id: Mapped[Optional[str]] = mapped_column(ForeignKey('jnskary.id'))

    closing: Mapped[bool] = mapped_column(Boolean, default=False)
    paid_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    paid_by: Mapped[Optional[str]] = mapped_column(String(50))


class JnsPotongan(TimestampMixin, Base):
    __tablename__ = 'jnspotongan'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    trans_code: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    jenis: Mapped[str] = mapped_column(String(100), default='')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class JnsTunjangan(TimestampMixin, Base):
    __tablename__ = 'jnstunjangan'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    trans_code: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    jenis: Mapped[str] = mapped_column(String(100), default='')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class JnsRapel(TimestampMixin, Base):
    __tablename__ = 'jnsrapel'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    trans_code: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    jenis: Mapped[str] = mapped_column(String(100), default='')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Potongan(TimestampMixin, Base):
    __tablename__ = 'potongan'
    __table_args__ = (
        UniqueConstraint('period', 'trans_id', name='potongan_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    period: Mapped[str] = mapped_column(String(6), nullable=False)
    trans_id: Mapped[str] = mapped_column(String(30), nullable=False)
    trans_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    trans_code: Mapped[int] = mapped_column(Integer, default=0)
    empl_id: Mapped[str] = mapped_column(String(20), nullable=False)
    nik: Mapped[Optional[str]] = mapped_column(String(30))
    jumlah: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))
    jenis_pot_id: Mapped[Optional[str]] = mapped_column(ForeignKey('jnspotongan.id'))


class Tunjangan(TimestampMixin, Base):
    __tablename__ = 'tunjangan'
    __table_args__ = (
        UniqueConstraint('period', 'trans_id', name='tunjangan_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    period: Mapped[str] = mapped_column(String(6), nullable=False)
    trans_id: Mapped[str] = mapped_column(String(30), nullable=False)
    trans_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    trans_code: Mapped[int] = mapped_column(Integer, default=0)
    empl_id: Mapped[str] = mapped_column(String(20), nullable=False)
    nik: Mapped[Optional[str]] = mapped_column(String(30))
    jumlah: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))
    jenis_tunj_id: Mapped[Optional[str]] = mapped_column(ForeignKey('jnstunjangan.id'))


class Rapel(TimestampMixin, Base):
    __tablename__ = 'rapel'
    __table_args__ = (
        UniqueConstraint('period', 'trans_id', name='rapel_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    period: Mapped[str] = mapped_column(String(6), nullable=False)
    trans_id: Mapped[str] = mapped_column(String(30), nullable=False)
    trans_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    trans_code: Mapped[int] = mapped_column(Integer, default=0)
    empl_id: Mapped[str] = mapped_column(String(20), nullable=False)
    nik: Mapped[Optional[str]] = mapped_column(String(30))
    jumlah: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))
    jenis_rapel_id: Mapped[Optional[str]] = mapped_column(ForeignKey('jnsrapel.id'))


class PinjamHdr(TimestampMixin, Base):
    __tablename__ = 'pinjamhdr'
    __table_args__ = (
        UniqueConstraint('empl_id', 'tgl_pinjam', 'tot_pinjam', 'jns_sumber', name='pinjam_hdr_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    empl_id: Mapped[str] = mapped_column(String(20), nullable=False)
    tgl_pinjam: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    tot_pinjam: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jns_sumber: Mapped[int] = mapped_column(Integer, default=0)
    saldo_pinjam: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    jml_cicil: Mapped[int] = mapped_column(Integer, default=0)
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[bool] = mapped_column(Boolean, default=False)
    approved: Mapped[bool] = mapped_column(Boolean, default=False)
    approved_by: Mapped[Optional[str]] = mapped_column(String(50))


class PinjamDet(TimestampMixin, Base):
    __tablename__ = 'pinjamdet'
    __table_args__ = (
        UniqueConstraint('trans_id', 'periode', 'jns_sumber', 'tgl_bayar', name='pinjam_det_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    trans_id: Mapped[str] = mapped_column(String(30), nullable=False)
    periode: Mapped[str] = mapped_column(String(6), nullable=False)
    jns_sumber: Mapped[int] = mapped_column(Integer, default=0)
    tgl_bayar: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    tgl_pinjam: Mapped[Optional[datetime.date]] = mapped_column(Date)
    empl_id: Mapped[str] = mapped_column(String(20), nullable=False)
    jml_bayar: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    saldo_pinjam: Mapped[decimal.Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    keterangan: Mapped[Optional[str]] = mapped_column(String(255))
    flag_lunas: Mapped[bool] = mapped_column(Boolean, default=False)


# ─── Holidays & requests ──────────────────────────────────────────────────

class Holiday(TimestampMixin, Base):
    __tablename__ = 'holiday'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    tgl_libur: Mapped[datetime.date] = mapped_column(Date, unique=True, nullable=False)
    keterangan: Mapped[str] = mapped_column(String(40), nullable=False)
    type_day: Mapped[str] = mapped_column(String(20), default='LIBUR_NASIONAL')
    is_repeat: Mapped[bool] = mapped_column(Boolean, default=False)


class Pengajuan(TimestampMixin, Base):
    __tablename__ = 'pengajuan'
    __table_args__ = (
        Index('pengajuan_empl_status_idx', 'empl_id', 'status'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    empl_id: Mapped[str] = mapped_column(ForeignKey('karyawan.empl_id'), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    start_time: Mapped[Optional[str]] = mapped_column(String(5))
    end_time: Mapped[Optional[str]] = mapped_column(String(5))
    reason: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default='PENDING')
    current_step: Mapped[int] = mapped_column(Integer, default=1)

    karyawan: Mapped['Karyawan'] = relationship('Karyawan')
    approval_logs: Mapped[list['ApprovalLog']] = relationship('ApprovalLog', back_populates='pengajuan', cascade='all, delete-orphan', order_by='ApprovalLog.created_at')


class ApprovalLog(Base):
    __tablename__ = 'approval_log'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    pengajuan_id: Mapped[str] = mapped_column(ForeignKey('pengajuan.id'), nullable=False)
    step: Mapped[int] = mapped_column(Integer, nullable=False)
    approver_id: Mapped[str] = mapped_column(String(36), nullable=False)
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, default=datetime.datetime.now)

    pengajuan: Mapped['Pengajuan'] = relationship('Pengajuan', back_populates='approval_logs')


# ─── System ───────────────────────────────────────────────────────────────

class MysqlConfig(TimestampMixin, Base):
    __tablename__ = 'mysql_config'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    host: Mapped[str] = mapped_column(String(100), nullable=False)
    port: Mapped[int] = mapped_column(Integer, default=3306)
    user: Mapped[str] = mapped_column(String(100), nullable=False)
    password: Mapped[Optional[str]] = mapped_column(String(255))
    database: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class SysEventHistory(Base):
    __tablename__ = 'sys_event_history'
    __table_args__ = (
        Index('sys_event_history_log_date_idx', 'log_date'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    log_user: Mapped[Optional[str]] = mapped_column(String(100))
    log_date: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now)
    modul: Mapped[Optional[str]] = mapped_column(String(50))
    action: Mapped[Optional[str]] = mapped_column(String(20))
    data: Mapped[Optional[str]] = mapped_column(Text)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45))
    user_agent: Mapped[Optional[str]] = mapped_column(String(255))


class Notification(TimestampMixin, Base):
    __tablename__ = 'sys_notification'
    __table_args__ = (
        Index('sys_notification_recipient_idx', 'recipient_user_id', 'is_read'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    recipient_user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    creator_user_id: Mapped[Optional[str]] = mapped_column(String(36))
    type: Mapped[int] = mapped_column(Integer, default=0)
    subject: Mapped[str] = mapped_column(String(150), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text)
    url: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[bool] = mapped_column(Boolean, default=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)


# ─── Menu access ──────────────────────────────────────────────────────────

class Menu(TimestampMixin, Base):
    __tablename__ = 'menu'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    href: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(50))
    order: Mapped[int] = mapped_column(Integer, default=0)
    group_label: Mapped[Optional[str]] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class RoleMenu(Base):
    __tablename__ = 'role_menu'
    __table_args__ = (
        UniqueConstraint('role', 'menu_id', name='role_menu_unique'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    menu_id: Mapped[str] = mapped_column(ForeignKey('menu.id', ondelete='CASCADE'), nullable=False)
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, default=datetime.datetime.now)

    menu: Mapped['Menu'] = relationship('Menu')
