from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from zocpos.config import Settings
from zocpos.db import get_db
from zocpos.deps import analytics_filter, get_settings
from zocpos.schemas.analytics import AnalyticsFilter, AnalyticsOut
from zocpos.services.analytics import build_report

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsOut)
def get_analytics(
    f: AnalyticsFilter = Depends(analytics_filter),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Sales analytics for a window (default: the trailing 30 days).

    Query params: dateFrom, dateTo, paymentMethod, orderStatus, category,
    minAmount, maxAmount. Cancelled orders are left out unless orderStatus
    asks for them explicitly.
    """
    return build_report(db, f, settings)
