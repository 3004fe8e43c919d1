from __future__ import annotations

import logging
import os

from fastapi import FastAPI, HTTPException

from app.api.routers import (
    announcements,
    auth,
    dashboard,
    incidents,
    media,
    notifications,
    owners,
    pets,
    settings,
    setup,
    strays,
    users,
    vaccinations,
)
from app.infra.audit import AuditMiddleware
from app.infra.db import check_db_ready
from app.infra.redis_state import check_redis_ready

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="barangay-pet-registry",
    description="Multi-tenant pet registry for barangay animal control offices.",
    version="0.1.0",
)

app.add_middleware(AuditMiddleware)

app.include_router(setup.router, prefix="/api/setup", tags=["setup"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(pets.router, prefix="/api/pets", tags=["pets"])
app.include_router(owners.router, prefix="/api/owners", tags=["owners"])
app.include_router(vaccinations.router, prefix="/api/vaccinations", tags=["vaccinations"])
app.include_router(incidents.router, prefix="/api/incidents", tags=["incidents"])
app.include_router(strays.router, prefix="/api/strays", tags=["strays"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(settings.router, prefix="/api/settings", tags=["settings"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(announcements.router, prefix="/api/announcements", tags=["announcements"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(media.router, prefix="/media", tags=["media"])


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict[str, object]:
    db_ok = check_db_ready()
    redis_ok = check_redis_ready()
    checks = {
        "db": "ok" if db_ok else "fail",
        "redis": "ok" if redis_ok else "fail",
    }
    if not (db_ok and redis_ok):
        raise HTTPException(
            status_code=503,
            detail={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
