# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the AI App Builder API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Startup builds the provider clients once. A missing CEREBRAS_API_KEY or
# SAMBANOVA_API_KEY stops the app from starting.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ai.providers import ProviderRegistry
from ai.task_handlers import TaskHandler
from app.config import settings
from app.exceptions import (
    AppBuilderException,
    app_builder_exception_handler,
    application_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.routers import analytics, data_sources, deployed, deployments, health, inference, models, projects
from core.services.deployment_service import DeploymentEngine
from lib.utils import ApplicationError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: build the provider registry, TaskHandler and DeploymentEngine
    and keep them on app.state for the request dependencies.
    """
    logger.info(f"Starting AI App Builder API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    providers = ProviderRegistry.from_settings(settings)
    task_handler = TaskHandler(providers)

    app.state.providers = providers
    app.state.task_handler = task_handler
    app.state.deployment_engine = DeploymentEngine(task_handler, site_url=settings.site_url)

    logger.info(f"Providers ready: {[p.value for p in providers.providers]}")

    yield

    logger.info("Shutting down AI App Builder API")


# Create FastAPI application
app = FastAPI(
    title="AI App Builder API",
    description="""
## Build, deploy and call AI text applications

### How It Works

1. **Create a Project** - Pick a task kind (sentiment, classification, summarization, ...)
2. **Add Data** - Upload CSV / JSON / text or point at a JSON API, then process it
3. **Pick a Model** - Browse the catalog; each task kind has a recommended model
4. **Test** - Run inference against your project
5. **Deploy** - Get an endpoint URL and an API key
6. **Call** - `POST /api/deployed/{id}` with `Authorization: Bearer <key>`

### Quick Start

```bash
# Call a deployed sentiment app
curl -X POST http://localhost:8000/api/deployed/{deployment_id} \\
  -H "Authorization: Bearer aib_..." \\
  -H "Content-Type: application/json" \\
  -d '{"text": "The new dashboard is fantastic"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Projects", "description": "Create and manage AI projects"},
        {"name": "Data Sources", "description": "Attach, process and preview project data"},
        {"name": "AI", "description": "Model catalog and test inference"},
        {"name": "Deployments", "description": "Deploy, update and stop project endpoints"},
        {"name": "Analytics", "description": "Per-day usage of deployed endpoints"},
        {"name": "Deployed", "description": "Public, API-key authenticated endpoints"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(AppBuilderException)
async def handle_app_builder_exception(request: Request, exc: AppBuilderException):
    """Handle custom API exceptions."""
    return await app_builder_exception_handler(request, exc)


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    """Handle errors raised by the ai/, ingestion/ and lib/ packages."""
    return await application_error_handler(request, exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    """Render auth failures and other HTTPExceptions as {error}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle request body/query validation failures."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    return await unhandled_exception_handler(request, exc)


# =============================================================================
# Routers
# =============================================================================

app.include_router(health.router, prefix="/api/v1", tags=["Health"])

app.include_router(projects.router, prefix="/api/v1/projects", tags=["Projects"])

app.include_router(data_sources.router, prefix="/api/v1", tags=["Data Sources"])

app.include_router(models.router, prefix="/api/v1/ai", tags=["AI"])
app.include_router(inference.router, prefix="/api/v1/ai", tags=["AI"])

app.include_router(deployments.router, prefix="/api/v1/deployments", tags=["Deployments"])

app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["Analytics"])

# Public endpoints for deployed apps (API-key auth, not session auth)
app.include_router(deployed.router, prefix="/api/deployed", tags=["Deployed"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "AI App Builder API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
