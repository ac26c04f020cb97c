import logging
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import MarketplaceError
from app.core.logging_config import setup_logging
from app.database.connection import CatalogBase, IdentityBase, Store
from app.middleware.metrics import MetricsMiddleware, new_metrics
from app.routes import system
from app.routes.auth import router as auth_router
from app.routes.products import router as product_router
from app.routes.pricing.calculate_price import router as calculate_price_router
from app.routes.categories import router as categories_router
from app.routes.promotions import router as promotions_router
from app.routes.recommendations import router as recommendations_router

# register every model on its metadata before the stores create tables
from app.models import category, inventory_log, price_history, product, promotion, user  # noqa: F401

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="B2B Marketplace Catalog & Pricing")

app.add_middleware(MetricsMiddleware)


app.include_router(auth_router)
app.include_router(calculate_price_router)
app.include_router(product_router)
app.include_router(categories_router)
app.include_router(promotions_router)
app.include_router(recommendations_router)
app.include_router(system.router)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup_event():
    app.state.identity_store = Store("identity", settings.IDENTITY_DATABASE_URL, IdentityBase).open()
    app.state.catalog_store = Store("catalog", settings.CATALOG_DATABASE_URL, CatalogBase).open()
    app.state.start_time = datetime.utcnow()
    app.state.metrics = new_metrics()


@app.on_event("shutdown")
async def shutdown_event():
    app.state.catalog_store.close()
    app.state.identity_store.close()
