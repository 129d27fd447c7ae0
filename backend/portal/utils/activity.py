"""Lightweight helper for recording activity log entries.

Usage:
    await log_activity(
        logs, request, user,
        action_type="CREATE", table_affected="warga",
        record_id=row["id"], new_data=row,
    )

The entry is handed to the repository; with the database store it is
committed with the enclosing request transaction.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from fastapi import Depends, Request

from portal.config import Settings, get_settings
from portal.models.audit import LogAktivitas
from portal.repositories.base import ActivityLogRepository
from portal.schemas.auth import SessionUser


def client_ip(request: Request, trusted_proxies: int = 0) -> str:
    """The caller's address.

    ``X-Forwarded-For`` is client-controlled at its left end, so it is only
    read when ``trusted_proxies`` reverse proxies sit in front of the app.
    The entry appended by the outermost trusted proxy is the client.
    """
    peer = request.client.host if request.client and request.client.host else "unknown"
    if trusted_proxies <= 0:
        return peer

    hops = [hop.strip() for hop in request.headers.get("x-forwarded-for", "").split(",") if hop.strip()]
    if len(hops) < trusted_proxies:
        return peer
    return hops[-trusted_proxies]


def resolve_client_ip(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """App-wide dependency: resolve the client address once per request."""
    ip = client_ip(request, settings.trusted_proxy_count)
    request.state.client_ip = ip
    return ip


def _dump(data: Any) -> str | None:
    if data is None:
        return None
    if isinstance(data, str):
        return data
    return json.dumps(data, default=str)


async def log_activity(
    logs: ActivityLogRepository,
    request: Request,
    user: SessionUser | None = None,
    *,
    action_type: str,
    table_affected: str | None = None,
    record_id: Any = None,
    old_data: Any = None,
    new_data: Any = None,
    user_email: str | None = None,
    user_role: str | None = None,
) -> LogAktivitas:
    """Append an activity log entry with the caller's IP and user agent."""
    entry = LogAktivitas(
        user_email=user.email if user else user_email,
        user_role=user.role if user else user_role,
        ip_address=getattr(request.state, "client_ip", None) or client_ip(request),
        user_agent=(request.headers.get("user-agent") or "unknown")[:500],
        action_type=action_type,
        table_affected=table_affected,
        record_id=None if record_id is None else str(record_id),
        old_data=_dump(old_data),
        new_data=_dump(new_data),
        timestamp=datetime.utcnow(),
    )
    await logs.add(entry)
    return entry
