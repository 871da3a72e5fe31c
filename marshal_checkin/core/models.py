"""
Core domain models for the marshal check-in service.

This module defines the domain models using Pydantic v2. List-valued
fields are typed lists here; their JSON text form exists only in the
storage adapter.
"""

from datetime import datetime
from typing import List, Literal, Optional, Set
from pydantic import BaseModel, Field

# event roles
ROLE_EVENT_ADMIN = "EventAdmin"
ROLE_EVENT_AREA_ADMIN = "EventAreaAdmin"
ROLE_EVENT_AREA_LEAD = "EventAreaLead"

AREA_LEAD_ROLES = (ROLE_EVENT_AREA_LEAD, ROLE_EVENT_AREA_ADMIN)

# check-in methods
CHECK_IN_GPS = "GPS"
CHECK_IN_MANUAL = "Manual"
CHECK_IN_ADMIN = "Admin"
CHECK_IN_AREA_LEAD = "AreaLead"

# layer assignment modes
LAYER_MODE_AUTO = "auto"
LAYER_MODE_MANUAL = "manual"

CheckInMethod = Literal["GPS", "Manual", "Admin", "AreaLead", ""]

class Point(BaseModel):
    """Geographic point in decimal degrees"""
    latitude: float
    longitude: float

class Area(BaseModel):
    """Geographic zone grouping checkpoints"""
    id: str
    event_id: str
    name: str = ""
    description: str = ""
    color: str = ""
    polygon: List[Point] = Field(default_factory=list)
    is_default: bool = False
    display_order: int = 0

class Layer(BaseModel):
    """Map layer, optionally carrying a GPX route"""
    id: str
    event_id: str
    name: str = ""
    display_order: int = 0
    route: List[Point] = Field(default_factory=list)
    route_color: str = ""

class Location(BaseModel):
    """Checkpoint along the event route"""
    id: str
    event_id: str
    name: str
    description: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    area_ids: List[str] = Field(default_factory=list)
    what3words: str = ""
    checked_in_count: int = 0
    layer_ids: List[str] = Field(default_factory=list)
    layer_assignment_mode: Literal["auto", "manual"] = "auto"

class Assignment(BaseModel):
    """Marshal assigned to a checkpoint, with check-in state"""
    id: str
    event_id: str
    marshal_id: str
    location_id: str
    is_checked_in: bool = False
    check_in_time: Optional[datetime] = None
    check_in_method: CheckInMethod = ""
    check_in_latitude: Optional[float] = None
    check_in_longitude: Optional[float] = None

class Marshal(BaseModel):
    """Volunteer registered for an event"""
    id: str
    event_id: str
    name: str
    person_id: Optional[str] = None
    email: str = ""
    phone_number: str = ""

class EventRole(BaseModel):
    """Role granted to a person within an event"""
    id: str
    person_id: str
    event_id: str
    role: str
    area_ids: List[str] = Field(default_factory=list)

class EventRoleInfo(BaseModel):
    """Role grant as carried by request claims"""
    role: str
    area_ids: List[str] = Field(default_factory=list)

class UserClaims(BaseModel):
    """Request-scoped authorization context"""
    person_id: str
    event_id: Optional[str] = None
    marshal_id: Optional[str] = None
    is_system_admin: bool = False
    event_roles: List[EventRoleInfo] = Field(default_factory=list)

    @property
    def is_event_admin(self) -> bool:
        return any(r.role == ROLE_EVENT_ADMIN for r in self.event_roles)

class ContactPermissions(BaseModel):
    """Who the viewer may see and modify"""
    can_view_all: bool = False
    viewable_marshal_ids: Set[str] = Field(default_factory=set)
    can_modify_all: bool = False
    modifiable_marshal_ids: Set[str] = Field(default_factory=set)

class CheckInDecision(BaseModel):
    """Check-in evaluation result"""
    accepted: bool
    method: CheckInMethod = ""
    distance_m: Optional[float] = None
    reason: str
