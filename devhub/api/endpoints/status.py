import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from devhub.api.deps import get_deployment_service
from devhub.schemas.deployment import StatusResponse
from devhub.services.deployment_service import DeploymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=StatusResponse)
async def read_status(
    service: DeploymentService = Depends(get_deployment_service),
) -> Any:
    """
    Current deployment status with the five latest deployments and errors.
    """
    try:
        return await service.get_status()
    except Exception as e:
        logger.error(f"Status error: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch status"})
