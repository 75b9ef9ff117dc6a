import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import config
from app.core.db.engine import check_database_connection, database_url, init_models
from app.core.error_handler import (
    app_error_handler,
    global_exception_handler,
    request_validation_handler,
    storage_error_handler,
)
from app.core.exceptions import AppError
from app.core.response_interceptor import (
    SuccessResponseInterceptor,
    CustomAPIRoute,
    skip_interceptor,
)
from app.modules.users.router import router as users_router
from app.modules.drafts.router import router as drafts_router
from app.modules.compliance.router import router as compliance_router
from app.modules.route_optimization.router import router as route_optimization_router
from app.modules.carbon_footprint.router import router as carbon_footprint_router
from app.modules.product_analysis.router import router as product_analysis_router
from app.modules.history.router import router as history_router

# Configure logging to output to console
logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database_url.startswith("sqlite"):
        await init_models()
        logger.info("SQLite schema ready")
    logger.info("Movex API started")
    yield
    logger.info("Movex API stopped")


app = FastAPI(
    title="Movex API",
    description="Shipment drafts, compliance checks, route planning and carbon analysis",
    version="1.0.0",
    lifespan=lifespan,
)

# Override the default route class to support skip_interceptor decorator
app.router.route_class = CustomAPIRoute

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(SQLAlchemyError, storage_error_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add Success Response Interceptor (must be added after CORS)
app.add_middleware(SuccessResponseInterceptor)

# Include routers with /api prefix
app.include_router(users_router, prefix="/api")
app.include_router(drafts_router, prefix="/api")
app.include_router(compliance_router, prefix="/api")
app.include_router(route_optimization_router, prefix="/api")
app.include_router(carbon_footprint_router, prefix="/api")
app.include_router(product_analysis_router, prefix="/api")
app.include_router(history_router, prefix="/api")


@app.get("/api/health")
@skip_interceptor
async def health() -> dict[str, str]:
    database = "ok" if await check_database_connection() else "unavailable"
    return {"status": "ok", "database": database}
