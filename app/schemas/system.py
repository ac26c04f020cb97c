from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime


class HealthCheckResponse(BaseModel):
    status: str
    now: datetime
    uptime_seconds: float
    identity_store_ok: bool
    catalog_store_ok: bool
    extra: Optional[Dict[str, Any]] = None


class SystemMetricsResponse(BaseModel):
    uptime_seconds: float
    now: datetime

    # middleware counters
    requests_count: int
    avg_response_ms: Optional[float] = None
    pricing_calculations: int = 0

    # store metrics
    active_products: int
    inactive_products: int
    low_stock_products: int
    running_promotions: int

    extra: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    kind: str
    message: str
