from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..database import get_db
from ..models import User
from ..schemas.analytics import DashboardAnalytics, LinkAnalytics
from ..services.analytics import get_dashboard_analytics, get_link_analytics

router = APIRouter(prefix="/analytics")


@router.get("/dashboard", response_model=DashboardAnalytics)
def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Totals, time windows and top referrers across the caller's links."""
    return get_dashboard_analytics(db, current_user.id)


@router.get("/url/{link_id}", response_model=LinkAnalytics)
def link_analytics(
    link_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    30 day analytics for one of the caller's links.

    Links owned by someone else are reported as not found.
    """
    return get_link_analytics(db, link_id, current_user.id)
