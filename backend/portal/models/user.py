import enum
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from portal.database import Base


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    ADMIN_RW = "admin_rw"
    KETUA_RW = "ketua_rw"
    ADMIN_RT = "admin_rt"
    KETUA_RT = "ketua_rt"
    ADMIN_LEMBAGA = "admin_lembaga"
    WARGA = "warga"
    DEVELOPER = "developer"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Stored lower-cased; login matches case-insensitively
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    nama_lengkap: Mapped[str] = mapped_column(String(255), nullable=False)
    # Plain string so an unrecognised role survives a round-trip and is
    # denied by the permission layer instead of failing to load.
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=UserRole.WARGA.value)

    # Administrative scope: RT (sub-unit) and RW (super-unit) codes
    rt_akses: Mapped[str | None] = mapped_column(String(8))
    rw_akses: Mapped[str | None] = mapped_column(String(8))

    # "Aktif" | "Non-Aktif"
    status_aktif: Mapped[str] = mapped_column(String(16), default="Aktif")
    # "active" | "inactive" | "expired" | "suspended"
    subscription_status: Mapped[str] = mapped_column(String(16), default="inactive")
    subscription_end: Mapped[str | None] = mapped_column(String(32))

    last_login: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
