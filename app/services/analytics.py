import logging
from collections import deque
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..schemas.prescription import AnalyticsEvent

logger = logging.getLogger(__name__)


class Analytics:
    """Keeps the most recent workflow events in memory and logs each one."""

    def __init__(self, max_events: int = 100, clock: Callable[[], datetime] = datetime.now):
        self._events = deque(maxlen=max_events)
        self.clock = clock

    def track(self, event: str, properties: Optional[Dict[str, Any]] = None, user_id: Optional[str] = None) -> AnalyticsEvent:
        entry = AnalyticsEvent(
            event=event,
            properties={k: v for k, v in (properties or {}).items() if v is not None},
            user_id=user_id,
            timestamp=self.clock(),
        )
        self._events.append(entry)
        logger.info(f"Analytics: {event} {entry.properties}")
        return entry

    # Pharmacy workflow events
    def fulfill_request(self, prescription_id: str, user_id: Optional[str] = None):
        return self.track("fulfill_request", {"prescription_id": prescription_id}, user_id)

    def fulfill_success(self, prescription_id: str, user_id: Optional[str] = None):
        return self.track("fulfill_success", {"prescription_id": prescription_id}, user_id)

    def fulfill_failure(self, prescription_id: str, error: str, user_id: Optional[str] = None):
        return self.track(
            "fulfill_failure",
            {"prescription_id": prescription_id, "error_message": error},
            user_id,
        )

    def dispense_upload_start(self, prescription_id: str, user_id: Optional[str] = None):
        return self.track("dispense_upload_start", {"prescription_id": prescription_id}, user_id)

    def dispense_upload_success(self, prescription_id: str, dispense_id: str, user_id: Optional[str] = None):
        return self.track(
            "dispense_upload_success",
            {"prescription_id": prescription_id, "dispense_id": dispense_id},
            user_id,
        )

    def dispense_upload_failure(self, prescription_id: str, error: str, user_id: Optional[str] = None):
        return self.track(
            "dispense_upload_failure",
            {"prescription_id": prescription_id, "error_message": error},
            user_id,
        )

    def get_events(self) -> List[AnalyticsEvent]:
        return list(self._events)
