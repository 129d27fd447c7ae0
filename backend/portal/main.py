import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.config import get_settings
from portal.database import engine
from portal.middleware.exceptions import register_exception_handlers
from portal.middleware.security import HTTPSRedirectMiddleware, SecurityHeadersMiddleware
from portal.routers import (
    accounts,
    auth,
    berita,
    blokir,
    bph,
    dashboard,
    health,
    lembaga,
    logs,
    loker,
    subscriptions,
    umkm,
    warga,
)
from portal.sheets.client import close_sheets_client
from portal.utils.activity import resolve_client_ip
from portal.utils.cache import close_redis

logger = logging.getLogger(__name__)

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting RT-RW Portal (%s, residents in %s)", settings.environment, settings.warga_store)
    yield
    await close_sheets_client()
    await close_redis()
    await engine.dispose()
    logger.info("RT-RW Portal stopped")


app = FastAPI(
    title="RT-RW Portal",
    description="Neighbourhood administration portal: residents, news, jobs, UMKM",
    version="0.1.0",
    lifespan=lifespan,
    dependencies=[Depends(resolve_client_ip)],
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)
app.add_middleware(HTTPSRedirectMiddleware, force_https=settings.is_production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(warga.router, prefix="/api/warga", tags=["warga"])
app.include_router(loker.router, prefix="/api/loker", tags=["loker"])
app.include_router(berita.router, prefix="/api/berita", tags=["berita"])
app.include_router(umkm.router, prefix="/api/umkm", tags=["umkm"])
app.include_router(lembaga.router, prefix="/api/lembaga-desa", tags=["lembaga"])
app.include_router(bph.router, prefix="/api/bph", tags=["bph"])
app.include_router(accounts.router, prefix="/api/account", tags=["account"])
app.include_router(subscriptions.router, prefix="/api/subscriptions", tags=["subscriptions"])
app.include_router(logs.router, prefix="/api/log", tags=["log"])
app.include_router(blokir.router, prefix="/api/blokir-attempts", tags=["security"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
