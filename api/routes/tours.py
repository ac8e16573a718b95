"""
api/routes/tours.py -- Tour CRUD routes.

Routes:
  GET    /tours        -- list all tours (public)
  POST   /tours        -- create a tour (requires auth)
  GET    /tours/{id}   -- tour detail (public)
  PUT    /tours/{id}   -- update a tour (requires auth + ownership)
  DELETE /tours/{id}   -- delete a tour (requires auth)

Ownership:
  A tour with a non-empty adminEmail belongs to that address. PUT must carry
  the same adminEmail in its body or it is refused with 403. Tours without an
  adminEmail are editable by any authenticated caller.

Updates are last-write-wins: the handler loads, checks, merges and writes the
whole document back in one statement, with no version check.
"""

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, Request

from api.lookups import get_tour_or_404
from api.models import MessageResponse, TourCreate, TourResponse, TourUpdate
from auth.dependencies import get_current_user
from auth.models import Identity
from core.errors import Forbidden, NotFound
from tours.models import DEFAULT_ESTABLISHED, DEFAULT_IMAGE, DEFAULT_STUDENTS, DEFAULT_TYPE, Tour
from tours.store import TourStore

logger = logging.getLogger("collegetours.tours")

# Auth policy:
# - GET    /tours, /tours/{id}: public
# - POST   /tours:              requires auth (get_current_user)
# - PUT    /tours/{id}:         requires auth + adminEmail ownership check
# - DELETE /tours/{id}:         requires auth
router = APIRouter()

_CLEARABLE_FIELDS = {"short_name", "tour_info", "admin_email"}


@router.get("/tours", response_model=list[TourResponse])
def list_tours(request: Request) -> list[TourResponse]:
    """Return every tour, oldest first."""
    store: TourStore = request.app.state.tour_store
    tours = store.list_tours()
    logger.debug("Found %d tours", len(tours))
    return [TourResponse.from_tour(t) for t in tours]


@router.post("/tours", response_model=TourResponse)
def create_tour(
    request: Request,
    body: TourCreate,
    identity: Identity = Depends(get_current_user),
) -> TourResponse:
    """Create a tour, filling in defaults for the optional fields left out."""
    store: TourStore = request.app.state.tour_store
    tour = Tour(
        name=body.name,
        description=body.description,
        short_name=body.short_name,
        tour_info=body.tour_info,
        location=body.location or [0.0, 0.0],
        address=body.address or "",
        established=body.established or DEFAULT_ESTABLISHED,
        type=body.type or DEFAULT_TYPE,
        students=body.students or DEFAULT_STUDENTS,
        image=body.image or DEFAULT_IMAGE,
        admin_email=body.admin_email,
    )
    tour_id = store.create_tour(tour)
    logger.info("Tour %s created by %s", tour_id, identity.id)
    return TourResponse.from_tour(get_tour_or_404(store, tour_id))


@router.get("/tours/{tour_id}", response_model=TourResponse)
def get_tour(request: Request, tour_id: str) -> TourResponse:
    store: TourStore = request.app.state.tour_store
    return TourResponse.from_tour(get_tour_or_404(store, tour_id))


@router.put("/tours/{tour_id}", response_model=TourResponse)
def update_tour(
    request: Request,
    tour_id: str,
    body: TourUpdate,
    identity: Identity = Depends(get_current_user),
) -> TourResponse:
    """Overwrite the fields present in the body and return the stored result.

    403 if the tour has an owner and the body's adminEmail is not that owner.
    """
    store: TourStore = request.app.state.tour_store
    existing = get_tour_or_404(store, tour_id)

    if existing.admin_email and existing.admin_email != body.admin_email:
        logger.info("Tour %s update refused for %s: adminEmail mismatch", tour_id, identity.id)
        raise Forbidden("Not authorized to edit this tour")

    # An explicit null clears an optional field; required fields keep their value.
    changes = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field in _CLEARABLE_FIELDS
    }
    updated = replace(existing, **changes)
    if not store.replace_tour(updated):
        # Deleted between the load and the write.
        raise NotFound("Tour not found")
    logger.info("Tour %s updated by %s (%s)", tour_id, identity.id, ", ".join(sorted(changes)) or "no fields")
    return TourResponse.from_tour(get_tour_or_404(store, tour_id))


@router.delete("/tours/{tour_id}", response_model=MessageResponse)
def delete_tour(
    request: Request,
    tour_id: str,
    identity: Identity = Depends(get_current_user),
) -> MessageResponse:
    store: TourStore = request.app.state.tour_store
    get_tour_or_404(store, tour_id)
    store.delete_tour(tour_id)
    logger.info("Tour %s deleted by %s", tour_id, identity.id)
    return MessageResponse(message="Tour deleted successfully")
