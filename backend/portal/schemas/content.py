from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from portal.schemas.validators import sanitize_string


# ── Loker (job postings, sheet) ─────────────────────────────

LOKER_HEADERS = (
    "id",
    "posisi",
    "perusahaan",
    "deskripsi",
    "gambar_url",
    "requirements",
    "salary_range",
    "lokasi",
    "contact_method",
    "contact_person",
    "status_aktif",
    "admin_poster",
    "deadline",
    "created_at",
    "updated_at",
)


class LokerCreate(BaseModel):
    posisi: str
    perusahaan: str
    deskripsi: str = ""
    gambar_url: str = ""
    requirements: str = ""
    salary_range: str = ""
    lokasi: str = ""
    contact_method: str = ""
    contact_person: str = ""
    status_aktif: str = "Aktif"
    admin_poster: str = ""
    deadline: date | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("posisi", "perusahaan")
    @classmethod
    def _required_text(cls, v: str) -> str:
        v = sanitize_string(v, max_length=255)
        if not v:
            raise ValueError("Field wajib diisi")
        return v


class LokerUpdate(BaseModel):
    id: int
    posisi: str | None = None
    perusahaan: str | None = None
    deskripsi: str | None = None
    gambar_url: str | None = None
    requirements: str | None = None
    salary_range: str | None = None
    lokasi: str | None = None
    contact_method: str | None = None
    contact_person: str | None = None
    status_aktif: str | None = None
    admin_poster: str | None = None
    deadline: date | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class IdRequest(BaseModel):
    id: int


# ── BPH (RW board, sheet) ───────────────────────────────────

class BphCreate(BaseModel):
    nama: str
    jabatan: str
    periode_start: str = ""
    periode_end: str = ""
    foto_url: str = ""
    kontak: str = ""
    bio: str = ""
    status_aktif: str = "Aktif"

    model_config = ConfigDict(coerce_numbers_to_str=True)


# ── Berita (news, database) ─────────────────────────────────

class BeritaCreate(BaseModel):
    judul: str
    konten: str
    kategori: str | None = None
    foto_url: str | None = None
    lembaga_id: int | None = None

    @field_validator("judul")
    @classmethod
    def _judul(cls, v: str) -> str:
        v = sanitize_string(v, max_length=255)
        if not v:
            raise ValueError("Judul wajib diisi")
        return v


class BeritaOut(BaseModel):
    id: int
    judul: str
    konten: str
    kategori: str | None
    foto_url: str | None
    penulis: str | None
    status_publish: str
    views: int | None
    admin_approver: str | None
    lembaga_id: int | None
    published_at: datetime | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── UMKM (small businesses, database) ───────────────────────

class UmkmCreate(BaseModel):
    nama_usaha: str
    jenis_usaha: str | None = None
    alamat: str | None = None
    no_hp: str | None = None
    deskripsi: str | None = None
    foto_url: str | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("nama_usaha")
    @classmethod
    def _nama_usaha(cls, v: str) -> str:
        v = sanitize_string(v, max_length=255)
        if not v:
            raise ValueError("Nama usaha wajib diisi")
        return v


class UmkmOut(BaseModel):
    id: int
    nama_usaha: str
    jenis_usaha: str | None
    alamat: str | None
    no_hp: str | None
    deskripsi: str | None
    foto_url: str | None
    status_verifikasi: str
    admin_approver: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Lembaga desa (village institutions, database) ───────────

class LembagaCreate(BaseModel):
    nama_lembaga: str
    ketua: str | None = None
    sekretaris: str | None = None
    bendahara: str | None = None
    program_kerja: str | None = None
    kontak: str | None = None
    alamat_sekretariat: str | None = None
    logo_url: str | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("nama_lembaga")
    @classmethod
    def _nama_lembaga(cls, v: str) -> str:
        v = sanitize_string(v, max_length=255)
        if not v:
            raise ValueError("Nama lembaga wajib diisi")
        return v


class LembagaOut(BaseModel):
    id: int
    nama_lembaga: str
    ketua: str | None
    sekretaris: str | None
    bendahara: str | None
    program_kerja: str | None
    kontak: str | None
    alamat_sekretariat: str | None
    logo_url: str | None
    status_aktif: str
    created_at: datetime | None

    model_config = {"from_attributes": True}
