from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr


# ── Accounts ────────────────────────────────────────────────

class AccountCreate(BaseModel):
    """New login account.

    Fields are plain strings so that a missing or inconsistent field yields
    one readable 400 listing every problem (see ``routers.accounts``).
    """
    email: str = ""
    password: str = ""
    nama_lengkap: str = ""
    role: str = ""
    rt_akses: str = ""
    rw_akses: str = ""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class AccountUpdate(BaseModel):
    id: int
    password: str | None = None
    email: EmailStr | None = None
    nama_lengkap: str | None = None
    role: str | None = None
    rt_akses: str | None = None
    rw_akses: str | None = None
    status_aktif: str | None = None
    subscription_status: str | None = None
    subscription_end: str | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class AccountOut(BaseModel):
    id: int
    email: str
    nama_lengkap: str
    role: str
    rt_akses: str | None
    rw_akses: str | None
    status_aktif: str
    subscription_status: str | None

    model_config = {"from_attributes": True}


# ── RW subscriptions ────────────────────────────────────────

SubscriptionStatus = Literal["active", "expired", "suspended"]


class SubscriptionCreate(BaseModel):
    rw_code: str
    nama_rw: str = ""
    contact_person: str = ""
    email: EmailStr | None = None
    phone: str = ""
    start_date: str = ""
    end_date: str = ""
    status: SubscriptionStatus = "active"
    payment_proof: str = ""
    notes: str = ""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class SubscriptionUpdate(BaseModel):
    id: int
    rw_code: str | None = None
    nama_rw: str | None = None
    contact_person: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    status: SubscriptionStatus | None = None
    payment_proof: str | None = None
    notes: str | None = None

    model_config = ConfigDict(coerce_numbers_to_str=True)
