import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gatepass import __version__
from gatepass.api.routers import auth, reference, removals, workflow
from gatepass.api.schemas.common import ErrorResponse
from gatepass.core.config import get_settings
from gatepass.core.errors import WorkflowError
from gatepass.core.logger import configure_logging

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

# HTTP status per WorkflowError code
ERROR_STATUS_CODES = {
    "unauthenticated": 401,
    "permission_denied": 403,
    "not_found": 404,
    "invalid_state": 409,
    "conflict": 409,
    "precondition_failed": 412,
    "validation_error": 422,
}

app = FastAPI(
    title=settings.app_name,
    description="Approval workflow for taking company assets off premises",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    status_code = ERROR_STATUS_CODES.get(exc.code, 400)
    body = ErrorResponse(
        error=exc.code,
        detail=exc.message,
        code=exc.code,
        retryable=exc.retryable,
        context={k: v for k, v in exc.context.items() if v is not None},
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(removals.router, prefix="/api")
app.include_router(workflow.router, prefix="/api")
app.include_router(reference.router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
