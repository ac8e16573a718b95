"""
api/lookups.py -- Validate-then-load helpers shared by the tour, course and event routes.

Every child-record handler runs the same preamble before it touches anything:

  1. the tourId path parameter must be a well-formed object id (InvalidId)
  2. the tour it names must exist (NotFound)

Delete handlers then load the child and confirm it points back at that tour
(ReferentialMismatch). Keeping the checks here means each handler reads as
"check, then act" and no handler can mutate before validating.
"""

from typing import Optional

from core.errors import InvalidId, MissingFields, NotFound
from core.ids import is_valid_object_id
from tours.models import Tour
from tours.store import TourStore


def get_tour_or_404(store: TourStore, tour_id: str) -> Tour:
    """Load a tour by id. Malformed ids simply do not resolve."""
    tour = store.get_tour(tour_id) if is_valid_object_id(tour_id) else None
    if tour is None:
        raise NotFound("Tour not found")
    return tour


def require_parent_tour(store: TourStore, tour_id: str, *child_ids: str) -> Tour:
    """Validate the path ids and return the parent tour.

    Raises InvalidId if tour_id or any child id is malformed, NotFound if the
    tour does not exist.
    """
    if not is_valid_object_id(tour_id):
        raise InvalidId("Invalid tour ID format")
    if not all(is_valid_object_id(child_id) for child_id in child_ids):
        raise InvalidId("Invalid ID format")
    tour = store.get_tour(tour_id)
    if tour is None:
        raise NotFound("College/tour not found")
    return tour


def require_fields(message: str, **fields: Optional[object]) -> None:
    """Raise MissingFields if any of the named values is None or empty."""
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise MissingFields(message, detail=", ".join(missing))
