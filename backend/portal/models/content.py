"""Public-facing content tables: news, small businesses, village institutions."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal.database import Base


class Berita(Base):
    __tablename__ = "berita"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    judul: Mapped[str] = mapped_column(String(255), nullable=False)
    konten: Mapped[str] = mapped_column(Text, nullable=False)
    kategori: Mapped[str | None] = mapped_column(String(64))
    foto_url: Mapped[str | None] = mapped_column(String(500))
    penulis: Mapped[str | None] = mapped_column(String(255))
    # "Published" | "Pending"
    status_publish: Mapped[str] = mapped_column(String(16), default="Pending", index=True)
    views: Mapped[int] = mapped_column(Integer, default=0)
    admin_approver: Mapped[str | None] = mapped_column(String(255))
    lembaga_id: Mapped[int | None] = mapped_column(Integer)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Umkm(Base):
    __tablename__ = "umkm"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_usaha: Mapped[str] = mapped_column(String(255), nullable=False)
    jenis_usaha: Mapped[str | None] = mapped_column(String(100))
    alamat: Mapped[str | None] = mapped_column(Text)
    no_hp: Mapped[str | None] = mapped_column(String(32))
    deskripsi: Mapped[str | None] = mapped_column(Text)
    foto_url: Mapped[str | None] = mapped_column(String(500))
    # "Verified" | "pending"
    status_verifikasi: Mapped[str] = mapped_column(String(16), default="pending", index=True)
    admin_approver: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class LembagaDesa(Base):
    __tablename__ = "lembaga_desa"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nama_lembaga: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    ketua: Mapped[str | None] = mapped_column(String(255))
    sekretaris: Mapped[str | None] = mapped_column(String(255))
    bendahara: Mapped[str | None] = mapped_column(String(255))
    program_kerja: Mapped[str | None] = mapped_column(Text)
    kontak: Mapped[str | None] = mapped_column(String(100))
    alamat_sekretariat: Mapped[str | None] = mapped_column(Text)
    logo_url: Mapped[str | None] = mapped_column(String(500))
    status_aktif: Mapped[str] = mapped_column(String(16), default="Aktif")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
