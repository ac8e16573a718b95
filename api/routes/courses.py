"""
api/routes/courses.py -- Courses attached to a tour.

Routes:
  GET    /tours/{tour_id}/courses               -- list (public)
  POST   /tours/{tour_id}/courses               -- add (public), 201
  DELETE /tours/{tour_id}/courses/{course_id}   -- remove (requires auth), 204

Every handler validates the path ids and the parent tour first (see
api/lookups.py). Delete also confirms the course belongs to the tour in the
path before removing it.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.lookups import require_fields, require_parent_tour
from api.models import CourseCreate, CourseResponse
from auth.dependencies import get_current_user
from auth.models import Identity
from core.errors import NotFound, ReferentialMismatch
from tours.models import Course
from tours.store import TourStore

logger = logging.getLogger("collegetours.tours")

router = APIRouter()


@router.get("/tours/{tour_id}/courses", response_model=list[CourseResponse])
def list_courses(request: Request, tour_id: str) -> list[CourseResponse]:
    store: TourStore = request.app.state.tour_store
    require_parent_tour(store, tour_id)
    return [CourseResponse.from_course(c) for c in store.list_courses(tour_id)]


@router.post("/tours/{tour_id}/courses", response_model=CourseResponse, status_code=201)
def create_course(request: Request, tour_id: str, body: CourseCreate) -> CourseResponse:
    """Attach a new course to an existing tour. name and description are required."""
    store: TourStore = request.app.state.tour_store
    require_parent_tour(store, tour_id)
    require_fields("Name and description are required", name=body.name, description=body.description)

    course = Course(name=body.name, description=body.description, tour_id=tour_id)
    course.id = store.create_course(course)
    logger.info("Added course %s to tour %s", course.id, tour_id)
    return CourseResponse.from_course(course)


@router.delete("/tours/{tour_id}/courses/{course_id}", status_code=204)
def delete_course(
    request: Request,
    tour_id: str,
    course_id: str,
    identity: Identity = Depends(get_current_user),
) -> Response:
    store: TourStore = request.app.state.tour_store
    require_parent_tour(store, tour_id, course_id)

    course = store.get_course(course_id)
    if course is None:
        raise NotFound("Course not found")
    if course.tour_id != tour_id:
        logger.info("Course %s does not belong to tour %s", course_id, tour_id)
        raise ReferentialMismatch("Course does not belong to this college")

    store.delete_course(course_id)
    logger.info("Deleted course %s from tour %s (by %s)", course_id, tour_id, identity.id)
    return Response(status_code=204)
