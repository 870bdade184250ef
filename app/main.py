import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.errors import (
    StorageUnavailableError,
    http_exception_handler,
    request_validation_exception_handler,
    storage_unavailable_handler,
)
from app.core.questions import get_active_question_set
from app.db.session import dispose_engine, init_models

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    question_set = get_active_question_set()
    if settings.DB_CREATE_ALL:
        await init_models()
    logger.info(
        f"{settings.PROJECT_NAME} started in {settings.ENVIRONMENT} mode "
        f"(question set {question_set.version}, {settings.ONBOARDING_WRITE_POLICY} policy)"
    )
    yield
    await dispose_engine()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(StorageUnavailableError, storage_unavailable_handler)

from app.api.api import api_router
app.include_router(api_router, prefix=settings.API_PREFIX)

@app.get("/")
async def root():
    return {"message": "Onboarding API", "project": settings.PROJECT_NAME}

@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
        "environment": settings.ENVIRONMENT,
    }
