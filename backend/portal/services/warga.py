"""Resident visibility rules and two-factor resident verification.

Visibility is two stages, always in this order:

  1. Row selection by role and RT/RW scope.
  2. Field masking on every selected row: NIK and KK always, phone number
     unless the role may see phone numbers.

Verification matches a resident by NIK *and* KK. The caller gets back the
row without any identity-number column, plus short masked previews of the
numbers they typed.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from portal.auth.permissions import has_permission
from portal.middleware.exceptions import UpstreamUnavailableError
from portal.models.user import UserRole
from portal.schemas.auth import SessionUser
from portal.schemas.warga import WargaData
from portal.sheets.records import HIDDEN, KK_FIELDS, NIK_FIELDS

logger = logging.getLogger(__name__)

_SEES_ALL = {UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value}
_SEES_RW = {UserRole.ADMIN_RW.value, UserRole.KETUA_RW.value}
_SEES_RT = {UserRole.ADMIN_RT.value, UserRole.KETUA_RT.value}


# ── Visibility ──────────────────────────────────────────────

def _select_rows(user: SessionUser, records: list[WargaData]) -> list[WargaData]:
    if user.role in _SEES_ALL:
        return list(records)
    if user.role in _SEES_RW:
        return [w for w in records if str(w.rw) == str(user.rw_akses)]
    if user.role in _SEES_RT:
        return [
            w for w in records
            if str(w.rt) == str(user.rt_akses) and str(w.rw) == str(user.rw_akses)
        ]
    # admin_lembaga, warga, developer and unknown roles see no residents
    return []


def filter_warga_data(user: SessionUser | None, records: list[WargaData]) -> list[WargaData]:
    """Residents ``user`` may see, with identity numbers always hidden."""
    if user is None:
        return []

    show_phone = has_permission(user, "can_view_hp")
    masked = []
    for record in _select_rows(user, records):
        update = {"nik_encrypted": HIDDEN, "kk_encrypted": HIDDEN}
        if not show_phone:
            update["no_hp"] = HIDDEN
        masked.append(record.model_copy(update=update))
    return masked


# ── Verification ────────────────────────────────────────────

class VerificationOutcome(str, enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class WargaVerification:
    outcome: VerificationOutcome
    record: dict[str, Any] | None = None

    @property
    def found(self) -> bool:
        return self.outcome is VerificationOutcome.FOUND


def mask_identifier(value: str) -> str:
    """First 4 + ``****`` + last 4 characters, e.g. ``3277****0001``."""
    return f"{value[:4]}****{value[-4:]}"


def partial_identifier(value: str) -> str:
    """Prefix-only form used in audit logs, e.g. ``3277***``."""
    return f"{value[:4]}***"


def _first_filled(row: dict[str, Any], names: tuple[str, ...]) -> str:
    for name in names:
        value = row.get(name)
        if value not in (None, ""):
            return str(value)
    return ""


async def verify_warga_data(
    load_rows: Callable[[], Awaitable[list[dict[str, Any]]]],
    nik: str,
    kk: str,
) -> WargaVerification:
    """Find the first resident whose NIK and KK both equal the inputs.

    ``load_rows`` returns every resident row and raises
    ``UpstreamUnavailableError`` when the store cannot be read; that case is
    reported as UNAVAILABLE rather than NOT_FOUND.
    """
    try:
        rows = await load_rows()
    except UpstreamUnavailableError as exc:
        logger.error("Resident verification could not read residents: %s", exc)
        return WargaVerification(VerificationOutcome.UNAVAILABLE)

    nik, kk = str(nik), str(kk)
    match_order_nik = ("nik", "NIK", "nik_encrypted")
    match_order_kk = ("kk", "KK", "no_kk", "kk_encrypted")
    for row in rows:
        if _first_filled(row, match_order_nik) == nik and _first_filled(row, match_order_kk) == kk:
            record = {k: v for k, v in row.items() if k not in NIK_FIELDS + KK_FIELDS}
            record["nik_masked"] = mask_identifier(nik)
            record["kk_masked"] = mask_identifier(kk)
            return WargaVerification(VerificationOutcome.FOUND, record)

    return WargaVerification(VerificationOutcome.NOT_FOUND)
