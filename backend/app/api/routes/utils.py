from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/liveness/", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness probe: is the process alive and responsive?

    Lightweight: no engine work.  If this fails the container should be
    restarted by the orchestrator.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Process unhealthy", "data": failures},
        )
    return True


@router.get("/health-check/", response_model=None)
def health_check() -> bool | JSONResponse:
    """
    Readiness probe: can the service handle traffic?

    Checks: the script engine can create and dispose a context, and the server
    config loads. Returns 200 with true if both are ok; 503 otherwise.
    """
    ok, failures = readiness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "message": "Service Unavailable",
                "data": failures,
            },
        )
    return True
