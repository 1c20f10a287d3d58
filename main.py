from contextlib import asynccontextmanager
from fastapi import FastAPI
from framework.config import settings
from framework.database.manager import DatabaseManager
from framework.middleware.logging_md import LoggingMiddleware
from framework.logging.logger import StructuredLogger
from framework.exceptions.handler import install_exception_handlers
from apps.catalog.api.categories import router as categories_router
from apps.catalog.api.products import router as products_router

# One logger for the whole process, shared by middleware, handlers and routes
app_logger = StructuredLogger.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info(f"{settings.APP_NAME} starting ({settings.APP_ENV})")
    await DatabaseManager.get_instance().sql.connect()
    yield
    await DatabaseManager.shutdown()
    app_logger.info(f"{settings.APP_NAME} stopped")
    app_logger.shutdown()


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)
app.state.logger = app_logger

# Register the last-resort exception handler
install_exception_handlers(app, app_logger)

app.add_middleware(LoggingMiddleware, logger=app_logger)

# Mount routers (prefix from config for easy override)
app.include_router(
    categories_router,
    prefix=settings.API_V1_CATEGORIES_PREFIX,
    tags=["Categories"]
)

app.include_router(
    products_router,
    prefix=settings.API_V1_PRODUCTS_PREFIX,
    tags=["Products"]
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
