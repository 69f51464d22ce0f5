from fastapi import APIRouter

from devhub.api.endpoints import auth, compounds, status, webhooks

api_router = APIRouter()

# Include authentication endpoints
api_router.include_router(
    auth.router, prefix="/auth", tags=["authentication"])

# Include compound endpoints
api_router.include_router(
    compounds.router, prefix="/compounds", tags=["compounds"])

# Include deployment status endpoints
api_router.include_router(
    status.router, prefix="/status", tags=["status"])

# Include deployment webhook receiver
api_router.include_router(
    webhooks.router, prefix="/webhooks", tags=["webhooks"])
