"""
NEXUS Query — FastAPI ASGI Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nexus_query.api.v1.router import api_router
from nexus_query.config import get_settings
from nexus_query.core.errors import QueryError
from nexus_query.core.logging import configure_logging
from nexus_query.core.responses import query_error_response
from nexus_query.db.session import dispose_engine

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — logging on startup, engine disposal on shutdown."""
    configure_logging(settings.LOG_LEVEL)
    yield
    await dispose_engine()


app = FastAPI(
    title="NEXUS Query",
    description="Scoped, filtered, paginated reads",
    version="0.1.0",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    status_code, body = query_error_response(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=body)


@app.get("/health")
async def health():
    """Health check for load balancers and Docker."""
    return {"status": "ok", "service": "nexus-query"}
