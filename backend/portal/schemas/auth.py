from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ── Session claims ───────────────────────────────────────────

class SessionUser(BaseModel):
    """The authenticated actor, as carried inside the session token.

    Field names match the JSON claims the frontend already reads, so the
    object is serialised ``by_alias`` when it leaves the service.
    """

    id: int
    email: str
    role: str
    rt_akses: str = ""
    rw_akses: str = ""
    nama_lengkap: str = ""
    subscription_status: str = "inactive"
    subscription_end: str = ""
    login_time: datetime = Field(alias="loginTime")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_claims(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    # Plain strings: a missing field is a 400 with a readable message,
    # not a schema error.
    email: str = ""
    password: str = ""


class UserOut(BaseModel):
    """Sanitised user returned after login (never carries the hash)."""
    id: int
    email: str
    role: str
    nama_lengkap: str
    rt_akses: str | None = None
    rw_akses: str | None = None
    subscription_status: str | None = None
    dashboard_path: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login berhasil"
    user: UserOut


class SessionResponse(BaseModel):
    success: bool
    user: dict | None = None
