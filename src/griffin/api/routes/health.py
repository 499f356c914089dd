"""Health check endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from griffin.api.contracts import HealthResponse
from griffin.api.dependencies import Services, get_services

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)):
    """Aggregate dependency health: 200 if healthy, 503 otherwise."""
    report = await services.health.check()
    body = HealthResponse.from_report(report)
    return JSONResponse(
        status_code=200 if report.status == "healthy" else 503,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.get("/config")
async def health_config(services: Services = Depends(get_services)):
    """Configuration with secrets redacted."""
    return {
        "status": "healthy",
        "service": "griffin-orchestrator",
        "config": services.settings.get_safe_dict(),
    }
