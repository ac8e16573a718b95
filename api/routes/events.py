"""
api/routes/events.py -- Events attached to a tour.

Routes:
  GET    /tours/{tour_id}/events              -- list (public)
  POST   /tours/{tour_id}/events              -- add (public), 201
  DELETE /tours/{tour_id}/events/{event_id}   -- remove (requires auth), 204

Same validate-then-act preamble as the course routes. Creating an event also
requires title, date and description, checked after the parent tour.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.lookups import require_fields, require_parent_tour
from api.models import EventCreate, EventResponse
from auth.dependencies import get_current_user
from auth.models import Identity
from core.errors import NotFound, ReferentialMismatch
from tours.models import Event
from tours.store import TourStore

logger = logging.getLogger("collegetours.tours")

router = APIRouter()


@router.get("/tours/{tour_id}/events", response_model=list[EventResponse])
def list_events(request: Request, tour_id: str) -> list[EventResponse]:
    store: TourStore = request.app.state.tour_store
    require_parent_tour(store, tour_id)
    return [EventResponse.from_event(e) for e in store.list_events(tour_id)]


@router.post("/tours/{tour_id}/events", response_model=EventResponse, status_code=201)
def create_event(request: Request, tour_id: str, body: EventCreate) -> EventResponse:
    store: TourStore = request.app.state.tour_store
    require_parent_tour(store, tour_id)
    require_fields(
        "Title, date, and description are required",
        title=body.title,
        date=body.date,
        description=body.description,
    )

    ev = Event(title=body.title, date=body.date.isoformat(), description=body.description, tour_id=tour_id)
    ev.id = store.create_event(ev)
    logger.info("Added event %s to tour %s", ev.id, tour_id)
    return EventResponse.from_event(ev)


@router.delete("/tours/{tour_id}/events/{event_id}", status_code=204)
def delete_event(
    request: Request,
    tour_id: str,
    event_id: str,
    identity: Identity = Depends(get_current_user),
) -> Response:
    store: TourStore = request.app.state.tour_store
    require_parent_tour(store, tour_id, event_id)

    ev = store.get_event(event_id)
    if ev is None:
        raise NotFound("Event not found")
    if ev.tour_id != tour_id:
        logger.info("Event %s does not belong to tour %s", event_id, tour_id)
        raise ReferentialMismatch("Event does not belong to this college")

    store.delete_event(event_id)
    logger.info("Deleted event %s from tour %s (by %s)", event_id, tour_id, identity.id)
    return Response(status_code=204)
