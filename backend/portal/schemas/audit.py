from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class LogCreate(BaseModel):
    user_email: str | None = None
    user_role: str | None = None
    action_type: str
    table_affected: str | None = None
    record_id: str | None = None
    old_data: Any = None
    new_data: Any = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class LogOut(BaseModel):
    id: int
    user_email: str | None
    user_role: str | None
    ip_address: str | None
    user_agent: str | None
    action_type: str
    table_affected: str | None
    record_id: str | None
    old_data: str | None
    new_data: str | None
    timestamp: datetime

    model_config = {"from_attributes": True}


class BlokirReport(BaseModel):
    ip_address: str
    nik_attempted: str | None = None
    kk_attempted: str | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class BlokirOut(BaseModel):
    id: int | None
    ip_address: str
    nik_attempted: str | None
    kk_attempted: str | None
    failed_count: int
    total_blocks: int
    status: str
    blocked_until: datetime | None
    first_attempt: datetime | None
    last_attempt: datetime | None

    model_config = {"from_attributes": True}
