"""
DocTrack Backend — Service Status Routes
==========================================

What:  GET / (plain-text banner) and GET /health (status for probes).
Who:   Browsers checking the deployment; Docker and load balancer probes.

/health answers 200 in both states so that a restarting database does not
take the HTTP process out of rotation:
    - healthy:   database ping succeeds
    - degraded:  database unreachable (the connect loop is still retrying)
"""

import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app import __version__
from app.database import Database, get_database
from app.schemas.student import HealthResponse

router = APIRouter(tags=["Health"])

BANNER = "Hello! Your HTTPS setup is working 🚀"

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Service banner")
async def banner() -> str:
    return BANNER


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(database: Database = Depends(get_database)) -> HealthResponse:
    db_ok = await database.ping()
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        database="connected" if db_ok else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
