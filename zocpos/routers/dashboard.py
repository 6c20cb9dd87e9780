from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from zocpos.config import Settings
from zocpos.db import get_db
from zocpos.deps import get_settings
from zocpos.schemas.analytics import DashboardCharts, DashboardMetrics
from zocpos.services.analytics import dashboard_charts, dashboard_metrics

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    return dashboard_metrics(db, settings)


@router.get("/charts", response_model=DashboardCharts)
def get_charts(
    range_key: Optional[str] = Query(None, alias="range", pattern="^(1d|7d|30d|90d|1y)$"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return dashboard_charts(db, settings, range_key=range_key, date_from=date_from, date_to=date_to)
