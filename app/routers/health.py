"""
Health check endpoint.

Reports whether the credential database is reachable; load balancers take
the instance out of rotation on 503.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response

from app import db
from app.models import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def get_health(response: Response) -> HealthResponse:
    database_ok = await db.ping()
    if not database_ok:
        response.status_code = 503
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        database="ok" if database_ok else "unavailable",
        version="0.1.0",
        timestamp=datetime.now(timezone.utc),
    )
