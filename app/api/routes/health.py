"""Health check at the root path with a database ping."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.guard import resolve_client_ip
from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.core.responses import ok
from app.schemas.health import HealthPayload

router = APIRouter()


@router.get("/")
def get_health(request: Request, db: Session = Depends(get_db)) -> JSONResponse:
    """
    Return service health and database connectivity.
    Answers 503 when the database does not respond, for load balancers and monitoring.
    """
    connected = check_db_connected(db)
    payload = HealthPayload(
        service=settings.SERVICE_NAME,
        status="ok" if connected else "degraded",
        time=datetime.now(UTC),
        client_ip=resolve_client_ip(request),
        db="connected" if connected else "disconnected",
    )
    code = status.HTTP_200_OK if connected else status.HTTP_503_SERVICE_UNAVAILABLE
    return ok(payload, "health", code)
