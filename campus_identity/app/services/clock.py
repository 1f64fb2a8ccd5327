from datetime import datetime

from campus_identity.domain.base import utc_now


class Clock:
    """Source of the current time, injected so expiry logic is testable"""

    def now(self) -> datetime:
        return utc_now()
