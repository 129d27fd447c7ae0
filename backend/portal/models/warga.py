from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal.database import Base


class Warga(Base):
    """Resident registered under an RT/RW pair. Never hard-deleted."""

    __tablename__ = "warga"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Identity (never returned in list responses) ────────────
    nik: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    kk: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    # ── Profile ────────────────────────────────────────────────
    nama: Mapped[str] = mapped_column(String(255), nullable=False)
    jenis_kelamin: Mapped[str | None] = mapped_column(String(32))
    tempat_lahir: Mapped[str | None] = mapped_column(String(100))
    tanggal_lahir: Mapped[str | None] = mapped_column(String(32))
    alamat: Mapped[str | None] = mapped_column(Text)
    agama: Mapped[str | None] = mapped_column(String(32))
    status_perkawinan: Mapped[str | None] = mapped_column(String(32))
    pekerjaan: Mapped[str | None] = mapped_column(String(100))
    kewarganegaraan: Mapped[str | None] = mapped_column(String(32))
    no_hp: Mapped[str | None] = mapped_column(String(32))

    # ── Administrative area ────────────────────────────────────
    rt: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    rw: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    kelurahan: Mapped[str | None] = mapped_column(String(100))
    kecamatan: Mapped[str | None] = mapped_column(String(100))

    # "Aktif" | "Non-Aktif"
    status_aktif: Mapped[str] = mapped_column(String(16), default="Aktif", index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
