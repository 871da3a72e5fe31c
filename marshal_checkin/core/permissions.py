"""
Contact permission resolution.

Works out whose contact details a viewer may see and whose marshal
record they may edit:

- Event admin: everyone, view and modify.
- Marshal: themselves (view and modify) plus the area leads of every
  area their checkpoints belong to (view only).
- Area lead: every marshal assigned to a checkpoint in their areas
  (view only). A lead role without areas covers the whole event.

The resolver is a pure function over collections the caller has loaded
once per request; it performs no I/O and keeps no state between calls.
"""

from typing import Dict, Iterable, List, Optional, Set
from marshal_checkin.core.models import (
    AREA_LEAD_ROLES, ROLE_EVENT_AREA_LEAD,
    Assignment, ContactPermissions, EventRole, Location, Marshal, UserClaims,
)

def _location_areas(locations: Iterable[Location]) -> Dict[str, List[str]]:
    return {location.id: location.area_ids for location in locations}

def _areas_of_marshal(marshal_id: str,
                      assignments: Iterable[Assignment],
                      location_areas: Dict[str, List[str]]) -> Set[str]:
    area_ids: Set[str] = set()
    for assignment in assignments:
        if assignment.marshal_id == marshal_id:
            area_ids.update(location_areas.get(assignment.location_id, []))
    return area_ids

def _area_lead_marshals(area_ids: Set[str],
                        event_id: str,
                        marshals: Iterable[Marshal],
                        event_roles: Iterable[EventRole]) -> Set[str]:
    """Marshal ids of the area leads of any of ``area_ids``."""
    lead_person_ids = {
        role.person_id
        for role in event_roles
        if role.role == ROLE_EVENT_AREA_LEAD
        and role.event_id == event_id
        and area_ids.intersection(role.area_ids)
    }
    if not lead_person_ids:
        return set()

    # roles without a marshal record in this event resolve to nothing
    return {
        marshal.id
        for marshal in marshals
        if marshal.person_id is not None and marshal.person_id in lead_person_ids
    }

def get_contact_permissions(
    claims: Optional[UserClaims],
    event_id: str,
    locations: Iterable[Location],
    assignments: Iterable[Assignment],
    marshals: Iterable[Marshal],
    event_roles: Iterable[EventRole]
) -> ContactPermissions:
    """
    Resolve the viewer's contact permissions for an event.

    Args:
        claims: the caller's claims, None when unauthenticated
        event_id: event being viewed
        locations: every location of the event
        assignments: every assignment of the event
        marshals: every marshal of the event
        event_roles: every role granted in the event

    Returns:
        The computed permissions; an empty result when nothing applies
    """
    if claims is None:
        return ContactPermissions()

    if claims.is_event_admin or claims.is_system_admin:
        return ContactPermissions(can_view_all=True, can_modify_all=True)

    assignments = list(assignments)
    location_areas = _location_areas(locations)

    viewable: Set[str] = set()
    modifiable: Set[str] = set()

    if claims.marshal_id is not None:
        viewable.add(claims.marshal_id)
        modifiable.add(claims.marshal_id)

        own_areas = _areas_of_marshal(claims.marshal_id, assignments, location_areas)
        if own_areas:
            viewable.update(_area_lead_marshals(own_areas, event_id, marshals, event_roles))

    lead_area_ids: Set[str] = set()
    for role in claims.event_roles:
        if role.role not in AREA_LEAD_ROLES:
            continue
        if not role.area_ids:
            # lead over the whole event
            return ContactPermissions(
                can_view_all=True,
                viewable_marshal_ids=viewable,
                can_modify_all=False,
                modifiable_marshal_ids=modifiable,
            )
        lead_area_ids.update(role.area_ids)

    if lead_area_ids:
        lead_locations = {
            location_id
            for location_id, area_ids in location_areas.items()
            if lead_area_ids.intersection(area_ids)
        }
        viewable.update(
            assignment.marshal_id
            for assignment in assignments
            if assignment.location_id in lead_locations
        )

    return ContactPermissions(
        can_view_all=False,
        viewable_marshal_ids=viewable,
        can_modify_all=False,
        modifiable_marshal_ids=modifiable,
    )

def can_view_contact_details(permissions: ContactPermissions, marshal_id: str) -> bool:
    return permissions.can_view_all or marshal_id in permissions.viewable_marshal_ids

def can_modify_marshal(permissions: ContactPermissions, marshal_id: str) -> bool:
    return permissions.can_modify_all or marshal_id in permissions.modifiable_marshal_ids
