"""
Check-in service.

Loads the assignment and its checkpoint, evaluates the request and
persists the new state together with the checkpoint's checked-in count.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Tuple
from marshal_checkin.common.geo import validate_coordinates
from marshal_checkin.core.checkin import (
    apply_check_in, evaluate_check_in, toggle_admin_check_in, toggle_method_for,
)
from marshal_checkin.core.errors import (
    AlreadyCheckedInError, CheckInRejectedError, NotAuthorizedError, NotFoundError, TooFarAwayError,
)
from marshal_checkin.core.models import (
    CHECK_IN_ADMIN, CHECK_IN_GPS, CHECK_IN_MANUAL, Assignment, Location, UserClaims,
)
from marshal_checkin.ports.repository import EventStorePort
from marshal_checkin.settings import CheckInConfig
from marshal_checkin.observability import metrics
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.service")

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class CheckInService:
    """Marshal and admin check-in operations"""

    def __init__(self, store: EventStorePort, config: Optional[CheckInConfig] = None,
                 clock: Callable[[], datetime] = _utcnow):
        """
        Initialize the service.

        Args:
            store: event store
            config: check-in radius and manual check-in switch
            clock: source of the check-in time
        """
        self.store = store
        self.config = config or CheckInConfig()
        self.clock = clock

    async def _load(self, event_id: str, assignment_id: str) -> Tuple[Assignment, Location]:
        assignment = await self.store.get_assignment(event_id, assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment", assignment_id)

        location = await self.store.get_location(event_id, assignment.location_id)
        if location is None:
            raise NotFoundError("Location", assignment.location_id)

        return assignment, location

    async def check_in(
        self,
        event_id: str,
        assignment_id: str,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        manual: bool = False
    ) -> Assignment:
        """
        Check a marshal in at their checkpoint.

        Args:
            event_id: event id
            assignment_id: assignment being checked in
            latitude: reported GPS latitude
            longitude: reported GPS longitude
            manual: manual check-in without GPS

        Returns:
            The updated assignment

        Raises:
            NotFoundError: unknown assignment or location
            AlreadyCheckedInError: the assignment is already checked in
            TooFarAwayError: GPS position outside the configured radius
            CheckInRejectedError: no usable position and no manual check-in
        """
        assignment, location = await self._load(event_id, assignment_id)

        if assignment.is_checked_in:
            metrics.check_ins_rejected.labels(reason="already_checked_in").inc()
            raise AlreadyCheckedInError(assignment_id)

        if manual and not self.config.allow_manual:
            metrics.check_ins_rejected.labels(reason="manual_disabled").inc()
            raise CheckInRejectedError("Manual check-in is disabled for this event")

        if not manual and latitude is not None and longitude is not None \
                and not validate_coordinates(latitude, longitude):
            metrics.check_ins_rejected.labels(reason="invalid_position").inc()
            raise CheckInRejectedError("Invalid GPS coordinates")

        decision = evaluate_check_in(
            assignment, location,
            latitude=latitude, longitude=longitude,
            manual=manual, radius_m=self.config.radius_m,
        )
        if decision.distance_m is not None:
            metrics.check_in_distance_m.observe(decision.distance_m)

        if not decision.accepted:
            if decision.method == CHECK_IN_GPS and decision.distance_m is not None:
                metrics.check_ins_rejected.labels(reason="too_far").inc()
                raise TooFarAwayError(decision.reason, decision.distance_m, self.config.radius_m)
            metrics.check_ins_rejected.labels(reason="no_position").inc()
            raise CheckInRejectedError(decision.reason)

        if decision.method == CHECK_IN_MANUAL:
            latitude = longitude = None
        updated = apply_check_in(assignment, decision, self.clock(), latitude, longitude)
        await self.store.upsert_assignment(updated)
        await self.store.upsert_location(
            location.model_copy(update={"checked_in_count": location.checked_in_count + 1})
        )

        metrics.check_ins_total.labels(method=decision.method).inc()
        log.info(f"Check-in successful: {assignment_id} ({decision.method})")
        return updated

    async def admin_toggle(self, event_id: str, assignment_id: str) -> Assignment:
        """
        Check in or undo a check-in on behalf of an admin.

        Raises:
            NotFoundError: unknown assignment or location
        """
        assignment, location = await self._load(event_id, assignment_id)
        return await self._toggle(assignment, location, CHECK_IN_ADMIN)

    async def toggle_for(self, claims: Optional[UserClaims], event_id: str, assignment_id: str) -> Assignment:
        """
        Check in or undo a check-in for a marshal on the caller's authority.

        Admins are recorded as ``Admin`` and area leads covering the
        checkpoint as ``AreaLead``.

        Raises:
            NotFoundError: unknown assignment or location
            NotAuthorizedError: the caller neither administers the event nor
                leads the checkpoint's area
        """
        assignment, location = await self._load(event_id, assignment_id)

        method = toggle_method_for(claims, location)
        if method is None:
            log.warning(f"Check-in toggle denied event:{event_id} assignment:{assignment_id}")
            raise NotAuthorizedError("Not authorized to check in this marshal")

        return await self._toggle(assignment, location, method)

    async def _toggle(self, assignment: Assignment, location: Location, method: str) -> Assignment:
        updated = toggle_admin_check_in(assignment, self.clock(), method)
        delta = 1 if updated.is_checked_in else -1
        await self.store.upsert_assignment(updated)
        await self.store.upsert_location(
            location.model_copy(update={"checked_in_count": max(0, location.checked_in_count + delta)})
        )

        if updated.is_checked_in:
            metrics.check_ins_total.labels(method=updated.check_in_method).inc()
        log.info(f"{method} check-in toggle: {assignment.id} - now "
                 f"{'checked in' if updated.is_checked_in else 'checked out'}")
        return updated
