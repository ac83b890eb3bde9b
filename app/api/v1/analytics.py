from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_analytics, require_capability
from ...core.permissions import READ_ANALYTICS
from ...core.security import Identity
from ...schemas.prescription import AnalyticsEvent
from ...services.analytics import Analytics

router = APIRouter(prefix="/analytics", tags=["Analytics"])

@router.get("/events", response_model=List[AnalyticsEvent])
async def list_events(
    analytics: Analytics = Depends(get_analytics),
    _: Identity = Depends(require_capability(READ_ANALYTICS))
):
    """Most recent workflow events, oldest first."""
    return analytics.get_events()
