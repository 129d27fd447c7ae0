"""Role-based capabilities for the RT/RW portal.

Design:
  - Each role maps to a fixed, immutable ``RolePermissions`` record.
  - The table is closed-world: a role that is not listed, an absent session,
    or an unknown capability name all answer False.
  - NIK/KK are never viewable through the API, whatever the role.

Capability names are the ``RolePermissions`` field names, e.g.
``has_permission(user, "can_view_hp")``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Literal, Mapping

from portal.models.user import UserRole
from portal.schemas.auth import SessionUser


@dataclass(frozen=True)
class RolePermissions:
    can_view_nik: bool
    can_view_kk: bool
    can_view_hp: bool
    can_manage_users: bool
    can_manage_subscriptions: bool
    can_access_all_rw: bool
    can_access_all_rt: bool
    can_manage_berita: bool
    can_manage_lembaga: bool
    description: str = ""


CAPABILITIES: frozenset[str] = frozenset(
    f.name for f in fields(RolePermissions) if f.name != "description"
)


# ── Role → capabilities ─────────────────────────────────────

ROLE_PERMISSIONS: Mapping[str, RolePermissions] = MappingProxyType({
    UserRole.ADMIN.value: RolePermissions(
        can_view_nik=False,
        can_view_kk=False,
        can_view_hp=True,
        can_manage_users=True,
        can_manage_subscriptions=True,
        can_access_all_rw=True,
        can_access_all_rt=True,
        can_manage_berita=True,
        can_manage_lembaga=True,
        description="Admin - full access except NIK/KK",
    ),
    UserRole.ADMIN_RW.value: RolePermissions(
        can_view_nik=False,
        can_view_kk=False,
        can_view_hp=True,
        can_manage_users=True,
        can_manage_subscriptions=False,
        can_access_all_rw=False,
        can_access_all_rt=True,
        can_manage_berita=True,
        can_manage_lembaga=False,
        description="Admin RW - manage RTs in RW",
    ),
    UserRole.KETUA_RW.value: RolePermissions(
        can_view_nik=False,
        can_view_kk=False,
        can_view_hp=True,
        can_manage_users=True,
        can_manage_subscriptions=False,
        can_access_all_rw=False,
        can_access_all_rt=True,
        can_manage_berita=True,
        can_manage_lembaga=False,
        description="Ketua RW - lead RW operations",
    ),
    UserRole.ADMIN_RT.value: RolePermissions(
        can_view_nik=False,
        can_view_kk=False,
        can_view_hp=True,
        can_manage_users=True,
        can_manage_subscriptions=False,
        can_access_all_rw=False,
        can_access_all_rt=False,
        can_manage_berita=True,
        can_manage_lembaga=False,
        description="Admin RT - manage RT only",
    ),
    UserRole.KETUA_RT.value: RolePermissions(
        can_view_nik=False,
        can_view_kk=False,
        can_view_hp=True,
        can_manage_users=False,
        can_manage_subscriptions=False,
        can_access_all_rw=False,
        can_access_all_rt=False,
        can_manage_berita=True,
        can_manage_lembaga=False,
        description="Ketua RT - lead RT operations",
    ),
    UserRole.ADMIN_LEMBAGA.value: RolePermissions(
        can_view_nik=False,
        can_view_kk=False,
        can_view_hp=False,
        can_manage_users=False,
        can_manage_subscriptions=False,
        can_access_all_rw=False,
        can_access_all_rt=False,
        can_manage_berita=True,
        can_manage_lembaga=True,
        description="Admin lembaga - manage organization content only",
    ),
})


# ── Landing pages ───────────────────────────────────────────

DASHBOARD_PATHS: Mapping[str, str] = MappingProxyType({
    UserRole.SUPER_ADMIN.value: "/dashboard/admin",
    UserRole.ADMIN.value: "/dashboard/admin",
    UserRole.DEVELOPER.value: "/dashboard/admin",
    UserRole.ADMIN_RW.value: "/dashboard/rw",
    UserRole.KETUA_RW.value: "/dashboard/rw",
    UserRole.ADMIN_RT.value: "/dashboard/rt",
    UserRole.KETUA_RT.value: "/dashboard/rt",
    UserRole.ADMIN_LEMBAGA.value: "/dashboard/lembaga",
    UserRole.WARGA.value: "/dashboard",
})


def dashboard_path_for(role: str) -> str:
    return DASHBOARD_PATHS.get(role, "/dashboard")


# ── Checks ──────────────────────────────────────────────────

def has_permission(user: SessionUser | None, capability: str) -> bool:
    """Closed-world lookup of one capability for the user's role."""
    if user is None or capability not in CAPABILITIES:
        return False
    role_permissions = ROLE_PERMISSIONS.get(user.role)
    if role_permissions is None:
        return False
    return getattr(role_permissions, capability) is True


def can_view_phone_numbers(user: SessionUser | None) -> bool:
    return has_permission(user, "can_view_hp")


def can_view_sensitive_data() -> bool:
    # NIK/KK never leave the service in plaintext.
    return False


def check_role(user: SessionUser | None, allowed_roles) -> bool:
    if user is None:
        return False
    return user.role in {str(getattr(r, "value", r)) for r in allowed_roles}


def can_create_warga(user: SessionUser | None) -> bool:
    return check_role(user, (UserRole.ADMIN_RT, UserRole.ADMIN))


def can_update_warga(
    user: SessionUser | None,
    update_type: Literal["basic", "rt_transfer"],
) -> bool:
    """Moving a resident to another RT is an RW-level decision."""
    if update_type == "rt_transfer":
        return check_role(user, (UserRole.ADMIN_RW, UserRole.KETUA_RW, UserRole.ADMIN))
    return check_role(
        user,
        (UserRole.ADMIN_RT, UserRole.ADMIN_RW, UserRole.KETUA_RW, UserRole.ADMIN),
    )


def can_manage_berita(user: SessionUser | None, berita_scope: str | None = None) -> bool:
    """Institution admins may only manage news published under their own name."""
    if user is None:
        return False
    if user.role == UserRole.ADMIN_LEMBAGA.value:
        return berita_scope is not None and berita_scope == user.nama_lengkap
    return has_permission(user, "can_manage_berita")


def check_rt_access(user: SessionUser | None, required_rt: str) -> bool:
    if user is None:
        return False
    if has_permission(user, "can_access_all_rt"):
        return True
    if check_role(user, (UserRole.ADMIN_RT, UserRole.KETUA_RT)):
        return user.rt_akses == str(required_rt)
    return False


def check_rw_access(user: SessionUser | None, required_rw: str) -> bool:
    if user is None:
        return False
    if has_permission(user, "can_access_all_rw"):
        return True
    if check_role(
        user,
        (UserRole.ADMIN_RW, UserRole.KETUA_RW, UserRole.ADMIN_RT, UserRole.KETUA_RT),
    ):
        return user.rw_akses == str(required_rw)
    return False


def check_subscription(user: SessionUser | None, now: datetime | None = None) -> bool:
    """Admins are exempt; everyone else needs an active, unexpired subscription."""
    if user is None:
        return False
    if user.role == UserRole.ADMIN.value:
        return True
    if user.subscription_status != "active":
        return False

    end = _parse_date(user.subscription_end)
    if end is None:
        return False
    now = now or datetime.now(timezone.utc)
    return end > now


def _parse_date(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
