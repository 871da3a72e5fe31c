"""
Check-in evaluation for the marshal check-in service.

Pure functions deciding whether a marshal may check in at their
checkpoint and producing the updated assignment.
"""

from datetime import datetime
from typing import Optional
from marshal_checkin.core.models import (
    AREA_LEAD_ROLES, CHECK_IN_ADMIN, CHECK_IN_AREA_LEAD, CHECK_IN_GPS, CHECK_IN_MANUAL,
    Assignment, CheckInDecision, Location, UserClaims,
)
from marshal_checkin.common.geo import haversine_distance_m

def evaluate_check_in(
    assignment: Assignment,
    location: Location,
    *,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    manual: bool = False,
    radius_m: float = 100.0
) -> CheckInDecision:
    """
    Decide whether a check-in request is accepted.

    Args:
        assignment: the marshal's assignment
        location: checkpoint of the assignment
        latitude: reported GPS latitude
        longitude: reported GPS longitude
        manual: the marshal asked for a manual check-in
        radius_m: maximum accepted distance for GPS check-ins

    Returns:
        Decision with the method used and, for GPS, the measured distance
    """
    if assignment.is_checked_in:
        return CheckInDecision(accepted=False, reason="Already checked in")

    if manual:
        return CheckInDecision(accepted=True, method=CHECK_IN_MANUAL, reason="manual check-in")

    if latitude is None or longitude is None:
        return CheckInDecision(
            accepted=False,
            reason="Either provide GPS coordinates or request manual check-in"
        )

    distance = haversine_distance_m(location.latitude, location.longitude, latitude, longitude)
    if distance > radius_m:
        return CheckInDecision(
            accepted=False,
            method=CHECK_IN_GPS,
            distance_m=distance,
            reason=(f"You are {round(distance)}m away from the location. "
                    f"You must be within {radius_m:g}m to check in.")
        )

    return CheckInDecision(
        accepted=True,
        method=CHECK_IN_GPS,
        distance_m=distance,
        reason=f"distance({distance:.1f}m) <= radius({radius_m:g}m)"
    )

def apply_check_in(
    assignment: Assignment,
    decision: CheckInDecision,
    now: datetime,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None
) -> Assignment:
    """Return a checked-in copy of ``assignment`` for an accepted decision."""
    if not decision.accepted:
        raise ValueError(f"cannot apply rejected check-in: {decision.reason}")

    return assignment.model_copy(update={
        "is_checked_in": True,
        "check_in_time": now,
        "check_in_method": decision.method,
        "check_in_latitude": latitude,
        "check_in_longitude": longitude,
    })

def toggle_admin_check_in(assignment: Assignment, now: datetime,
                          method: str = CHECK_IN_ADMIN) -> Assignment:
    """
    Flip the check-in state on behalf of an admin or area lead.

    Undoing a check-in clears the time, method and captured position.
    """
    if assignment.is_checked_in:
        return assignment.model_copy(update={
            "is_checked_in": False,
            "check_in_time": None,
            "check_in_method": "",
            "check_in_latitude": None,
            "check_in_longitude": None,
        })

    return assignment.model_copy(update={
        "is_checked_in": True,
        "check_in_time": now,
        "check_in_method": method,
    })

def toggle_method_for(claims: Optional[UserClaims], location: Location) -> Optional[str]:
    """
    Decide who may toggle a check-in at a checkpoint on a marshal's behalf.

    Admins toggle as ``Admin``. Area leads toggle as ``AreaLead`` at
    checkpoints inside their areas; a lead role without areas covers the
    whole event.

    Returns:
        The check-in method to record, or None when the caller may not toggle
    """
    if claims is None:
        return None
    if claims.is_system_admin or claims.is_event_admin:
        return CHECK_IN_ADMIN

    for role in claims.event_roles:
        if role.role not in AREA_LEAD_ROLES:
            continue
        if not role.area_ids or set(role.area_ids) & set(location.area_ids):
            return CHECK_IN_AREA_LEAD
    return None
