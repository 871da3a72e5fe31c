"""
Core domain models and pure functions for the marshal check-in service.

The submodules hold the pure logic and are independent of storage and
HTTP concerns. Only the models are re-exported here.
"""

from .models import (
    Point, Area, Layer, Location, Assignment, Marshal, EventRole, EventRoleInfo,
    UserClaims, ContactPermissions, CheckInDecision,
)

__all__ = [
    "Point", "Area", "Layer", "Location", "Assignment", "Marshal", "EventRole",
    "EventRoleInfo", "UserClaims", "ContactPermissions", "CheckInDecision",
]
