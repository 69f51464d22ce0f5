import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from devhub.core.config import settings
from devhub.core.limiter import limiter
from devhub.api.api import api_router
from devhub.middleware.error_middleware import ErrorHandlingMiddleware
from devhub.services.error_handler import DevHubError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Compound tracking and deployment status for the chemistry dev hub",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return Response(status_code=200)


@app.exception_handler(DevHubError)
async def devhub_exception_handler(request: Request, exc: DevHubError):
    """Render domain errors as `{error: message}` with their status code."""
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "devhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
