import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database.connection import get_catalog_db, get_identity_db
from app.dependencies.auth import require_auth
from app.models.product import Product
from app.models.promotion import Promotion
from app.schemas.system import HealthCheckResponse, SystemMetricsResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


def _uptime(request: Request, now: datetime) -> float:
    start_time = getattr(request.app.state, "start_time", now)
    return (now - start_time).total_seconds()


def _ping(store) -> tuple:
    try:
        return store.ping(), None
    except (SQLAlchemyError, RuntimeError) as e:
        logger.error("%s store health check failed: %s", store.name, e)
        return False, str(e)


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request):
    """
    Lightweight public health check.
    Returns ok + connectivity of both stores (SELECT 1).
    """
    now = datetime.utcnow()
    extra = {}

    identity_ok, identity_error = _ping(request.app.state.identity_store)
    catalog_ok, catalog_error = _ping(request.app.state.catalog_store)
    if identity_error:
        extra["identity_store_error"] = identity_error
    if catalog_error:
        extra["catalog_store_error"] = catalog_error

    return HealthCheckResponse(
        status="ok" if identity_ok and catalog_ok else "degraded",
        now=now,
        uptime_seconds=_uptime(request, now),
        identity_store_ok=identity_ok,
        catalog_store_ok=catalog_ok,
        extra=extra or None,
    )


@router.get("/metrics", response_model=SystemMetricsResponse, dependencies=[Depends(require_auth)])
def system_metrics(
    request: Request,
    catalog_db: Session = Depends(get_catalog_db),
    identity_db: Session = Depends(get_identity_db),
):
    """
    System metrics in JSON form.
    Uses in-process counters stored on app.state.metrics and store-derived counts.
    """
    now = datetime.utcnow()

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    def _count(db: Session, model, *criteria) -> int:
        return db.query(func.count()).select_from(model).filter(*criteria).scalar() or 0

    return SystemMetricsResponse(
        uptime_seconds=_uptime(request, now),
        now=now,
        requests_count=requests_count,
        avg_response_ms=avg_response_ms,
        pricing_calculations=int(metrics.get("pricing_calculations", 0)),
        active_products=_count(catalog_db, Product, Product.is_active.is_(True)),
        inactive_products=_count(catalog_db, Product, Product.is_active.is_(False)),
        low_stock_products=_count(
            catalog_db, Product,
            Product.is_active.is_(True),
            Product.available <= Product.reorder_level,
        ),
        running_promotions=_count(
            identity_db, Promotion,
            Promotion.is_active.is_(True),
            Promotion.start_date <= now,
            Promotion.end_date > now,
        ),
    )
