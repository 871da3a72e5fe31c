"""
Exceptions raised by the feature layer.

Messages are user facing and safe to return to API clients.
"""

from typing import Optional

class CheckinError(Exception):
    """Base class for service errors"""

class NotFoundError(CheckinError):
    """Requested entity does not exist in the event"""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.entity_id = entity_id

class AlreadyCheckedInError(CheckinError):
    def __init__(self, assignment_id: str):
        super().__init__("Already checked in")
        self.assignment_id = assignment_id

class CheckInRejectedError(CheckinError):
    """Check-in request was refused for a reason other than distance"""

class TooFarAwayError(CheckInRejectedError):
    """GPS position is outside the allowed check-in radius"""

    def __init__(self, message: str, distance_m: float, allowed_radius_m: float):
        super().__init__(message)
        self.distance_m = distance_m
        self.allowed_radius_m = allowed_radius_m

class NotAuthorizedError(CheckinError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Not authorized to access this event")
