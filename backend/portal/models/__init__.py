"""Aggregate model imports for Alembic auto-detection."""

from portal.models.user import User, UserRole  # noqa: F401
from portal.models.warga import Warga  # noqa: F401
from portal.models.content import Berita, LembagaDesa, Umkm  # noqa: F401
from portal.models.audit import BlokirAttempt, LogAktivitas  # noqa: F401
