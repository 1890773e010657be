"""
Inpatient Bed Allocation API.
FastAPI with WebSocket notifications of allocation changes.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inpatient.config import settings
from inpatient.core.database import create_db_and_tables
from inpatient.core.exceptions import BaseAppException
from inpatient.api.router import api_router
from inpatient.utils.logger import configure_logging

logger = configure_logging()


# ============================================
# STARTUP
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info(f"{settings.APP_TITLE} {settings.APP_VERSION} started ({settings.APP_ENV})")
    yield
    logger.info("Application stopped")


# Create application
app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """Turns application exceptions into the JSON error body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests use the same 400 body as service validation errors."""
    fields = []
    for error in exc.errors():
        names = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = names[-1] if names else "body"
        if field not in fields:
            fields.append(field)

    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": "; ".join(
                f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()
            ),
            "details": {"fields": fields},
        },
    )


# ============================================
# ROUTES
# ============================================

app.include_router(api_router, prefix="/api")


@app.get("/")
def root():
    return {
        "name": settings.APP_TITLE,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
