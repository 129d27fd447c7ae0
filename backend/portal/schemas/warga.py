from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from portal.schemas.validators import sanitize_string, validate_area_code, validate_identity_number


# ── Resident record ─────────────────────────────────────────

class WargaData(BaseModel):
    """One resident, as read from the sheet or the ``warga`` table.

    Sheet columns have carried several names for the identity numbers over
    time; all of them land in ``nik_encrypted`` / ``kk_encrypted``. Numeric
    cells (ids aside) are read back as text so area codes compare as strings.
    """

    id: int
    nik_encrypted: str = Field(
        "", validation_alias=AliasChoices("nik_encrypted", "nik", "NIK")
    )
    kk_encrypted: str = Field(
        "", validation_alias=AliasChoices("kk_encrypted", "kk", "KK", "no_kk")
    )
    nama: str = ""
    jenis_kelamin: str = ""
    tempat_lahir: str = ""
    tanggal_lahir: str = ""
    alamat: str = ""
    rt: str = ""
    rw: str = ""
    kelurahan: str = ""
    kecamatan: str = ""
    agama: str = ""
    status_perkawinan: str = ""
    pekerjaan: str = ""
    kewarganegaraan: str = ""
    no_hp: str = ""
    status_aktif: str = ""
    created_at: str = ""
    updated_at: str = ""

    model_config = ConfigDict(
        coerce_numbers_to_str=True,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_blank(cls, v):
        return "" if v is None else v

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp_as_text(cls, v):
        return v.isoformat() if hasattr(v, "isoformat") else v


# ── Writes ──────────────────────────────────────────────────

class WargaCreate(BaseModel):
    nik: str
    kk: str
    nama: str
    rt: str = ""
    rw: str = ""
    jenis_kelamin: str = ""
    tempat_lahir: str = ""
    tanggal_lahir: str = ""
    alamat: str = ""
    kelurahan: str = ""
    kecamatan: str = ""
    agama: str = ""
    status_perkawinan: str = ""
    pekerjaan: str = ""
    kewarganegaraan: str = "WNI"
    no_hp: str = ""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("nik", "kk")
    @classmethod
    def _identity(cls, v: str) -> str:
        return validate_identity_number(v)

    @field_validator("nama")
    @classmethod
    def _nama(cls, v: str) -> str:
        v = sanitize_string(v, max_length=255)
        if not v:
            raise ValueError("Nama wajib diisi")
        return v

    @field_validator("rt", "rw")
    @classmethod
    def _area(cls, v: str) -> str:
        return validate_area_code(v) if v else v


class WargaUpdate(BaseModel):
    nama: str | None = None
    jenis_kelamin: str | None = None
    tempat_lahir: str | None = None
    tanggal_lahir: str | None = None
    alamat: str | None = None
    rt: str | None = None
    rw: str | None = None
    kelurahan: str | None = None
    kecamatan: str | None = None
    agama: str | None = None
    status_perkawinan: str | None = None
    pekerjaan: str | None = None
    kewarganegaraan: str | None = None
    no_hp: str | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("rt", "rw")
    @classmethod
    def _area(cls, v: str | None) -> str | None:
        return validate_area_code(v) if v else v


class WargaDeleteRequest(BaseModel):
    ids: list[int] = Field(default_factory=list)


# ── Verification ────────────────────────────────────────────

class VerifyRequest(BaseModel):
    nik: str = ""
    kk: str = ""

    model_config = ConfigDict(coerce_numbers_to_str=True)
