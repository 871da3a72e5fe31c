"""
Marshal contact directory.

Lists the marshals of an event as seen by a particular viewer: contact
details are only returned for marshals the viewer is allowed to see,
and each entry says whether the viewer may edit it.
"""

import time
from typing import List, Optional
from pydantic import BaseModel
from marshal_checkin.core.errors import NotAuthorizedError
from marshal_checkin.core.models import ContactPermissions, UserClaims
from marshal_checkin.core.permissions import (
    can_modify_marshal, can_view_contact_details, get_contact_permissions,
)
from marshal_checkin.ports.repository import EventStorePort
from marshal_checkin.observability import metrics
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.contacts")

class MarshalContact(BaseModel):
    """Marshal entry as returned to a viewer"""
    marshal_id: str
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    can_view_details: bool = False
    can_modify: bool = False

class ContactDirectory:
    """Permission-aware view over an event's marshals"""

    def __init__(self, store: EventStorePort):
        self.store = store

    async def permissions_for(self, claims: Optional[UserClaims], event_id: str) -> ContactPermissions:
        """
        Resolve the viewer's permissions from one snapshot of the event.

        Args:
            claims: viewer claims
            event_id: event id

        Returns:
            Resolved permissions
        """
        if claims is not None and (claims.is_event_admin or claims.is_system_admin):
            return get_contact_permissions(claims, event_id, [], [], [], [])

        locations = await self.store.get_locations_by_event(event_id)
        assignments = await self.store.get_assignments_by_event(event_id)
        marshals = await self.store.get_marshals_by_event(event_id)
        roles = await self.store.get_event_roles_by_event(event_id)

        with metrics.permission_resolve_seconds.time():
            return get_contact_permissions(claims, event_id, locations, assignments, marshals, roles)

    async def list_contacts(self, claims: Optional[UserClaims], event_id: str) -> List[MarshalContact]:
        """
        List the event's marshals with details redacted per viewer.

        Every collection is read once regardless of the number of
        marshals.
        """
        started = time.perf_counter()

        locations = await self.store.get_locations_by_event(event_id)
        assignments = await self.store.get_assignments_by_event(event_id)
        marshals = await self.store.get_marshals_by_event(event_id)
        roles = await self.store.get_event_roles_by_event(event_id)

        with metrics.permission_resolve_seconds.time():
            permissions = get_contact_permissions(
                claims, event_id, locations, assignments, marshals, roles
            )

        contacts: List[MarshalContact] = []
        for marshal in marshals:
            visible = can_view_contact_details(permissions, marshal.id)
            contacts.append(MarshalContact(
                marshal_id=marshal.id,
                name=marshal.name,
                email=marshal.email if visible else None,
                phone_number=marshal.phone_number if visible else None,
                can_view_details=visible,
                can_modify=can_modify_marshal(permissions, marshal.id),
            ))

        log.debug(f"Listed {len(contacts)} contacts for event {event_id} "
                  f"in {(time.perf_counter() - started) * 1000:.1f}ms")
        return contacts

    async def can_edit(self, claims: Optional[UserClaims], event_id: str, marshal_id: str) -> bool:
        permissions = await self.permissions_for(claims, event_id)
        return can_modify_marshal(permissions, marshal_id)

    async def require_modify(self, claims: Optional[UserClaims], event_id: str, marshal_id: str) -> None:
        """
        Raise unless the viewer may edit the marshal's record.

        Raises:
            NotAuthorizedError: the viewer may not modify this marshal
        """
        if not await self.can_edit(claims, event_id, marshal_id):
            log.warning(f"Modify denied event:{event_id} marshal:{marshal_id}")
            raise NotAuthorizedError("Not authorized to modify this marshal")
