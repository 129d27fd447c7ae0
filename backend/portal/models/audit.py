"""Audit tables: the activity log and the verification blocklist."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portal.database import Base


class LogAktivitas(Base):
    """Append-only trail of who did what, from where."""

    __tablename__ = "log_aktivitas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Who ────────────────────────────────────────────────────
    user_email: Mapped[str | None] = mapped_column(String(255), index=True)
    user_role: Mapped[str | None] = mapped_column(String(32))
    ip_address: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(String(500))

    # ── What ───────────────────────────────────────────────────
    # LOGIN | VERIFY_ATTEMPT | CREATE | UPDATE | DEACTIVATE | ...
    action_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    table_affected: Mapped[str | None] = mapped_column(String(50))
    record_id: Mapped[str | None] = mapped_column(String(64))

    # JSON-encoded snapshots
    old_data: Mapped[str | None] = mapped_column(Text)
    new_data: Mapped[str | None] = mapped_column(Text)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )


class BlokirAttempt(Base):
    """Failed resident-verification attempts, one row per client IP."""

    __tablename__ = "blokir_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip_address: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    nik_attempted: Mapped[str | None] = mapped_column(String(32))
    kk_attempted: Mapped[str | None] = mapped_column(String(32))
    failed_count: Mapped[int] = mapped_column(Integer, default=0)
    total_blocks: Mapped[int] = mapped_column(Integer, default=0)
    # "monitoring" | "blocked"
    status: Mapped[str] = mapped_column(String(16), default="monitoring")
    blocked_until: Mapped[datetime | None] = mapped_column(DateTime)
    first_attempt: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    last_attempt: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )
