"""
Event store port interface.

This module defines the protocol the feature layer uses to read and
write event entities. Every ``*_by_event`` call returns the whole
collection for one event so callers can load a snapshot once per
request.
"""

from typing import List, Optional, Protocol
from marshal_checkin.core.models import Area, Assignment, EventRole, Layer, Location, Marshal

class EventStorePort(Protocol):
    """Event entity storage port"""

    async def get_areas_by_event(self, event_id: str) -> List[Area]:
        """
        Return every area of an event.

        Args:
            event_id: event id

        Returns:
            Areas ordered by display order
        """
        ...

    async def get_layers_by_event(self, event_id: str) -> List[Layer]:
        ...

    async def get_locations_by_event(self, event_id: str) -> List[Location]:
        ...

    async def get_assignments_by_event(self, event_id: str) -> List[Assignment]:
        ...

    async def get_marshals_by_event(self, event_id: str) -> List[Marshal]:
        ...

    async def get_event_roles_by_event(self, event_id: str) -> List[EventRole]:
        ...

    async def get_default_area(self, event_id: str) -> Optional[Area]:
        ...

    async def get_location(self, event_id: str, location_id: str) -> Optional[Location]:
        ...

    async def get_assignment(self, event_id: str, assignment_id: str) -> Optional[Assignment]:
        ...

    async def upsert_area(self, area: Area) -> None:
        ...

    async def upsert_layer(self, layer: Layer) -> None:
        ...

    async def upsert_location(self, location: Location) -> None:
        ...

    async def upsert_assignment(self, assignment: Assignment) -> None:
        ...

    async def upsert_marshal(self, marshal: Marshal) -> None:
        ...

    async def upsert_event_role(self, role: EventRole) -> None:
        ...

    async def delete_assignments_for_location(self, event_id: str, location_id: str) -> int:
        """
        Remove every assignment of a checkpoint.

        Returns:
            Number of assignments removed
        """
        ...

    async def delete_assignments_by_event(self, event_id: str) -> int:
        ...

    async def delete_locations_by_event(self, event_id: str) -> int:
        """
        Remove every checkpoint of an event.

        Assignments are not touched; callers clear them with
        ``delete_assignments_by_event``.

        Returns:
            Number of checkpoints removed
        """
        ...
