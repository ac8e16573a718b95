"""
tours/models.py -- Domain dataclasses for tours and their child records.

These are pure data containers with zero logic. Defaults for omitted tour
fields, ownership checks and referential checks live in the API layer;
persistence lives in tours/store.py.

A Tour is the single entity behind both the current /tours routes and the
legacy /colleges routes. Courses and Events point at their parent through
tour_id; the link is checked by the handlers, not by the database.
"""

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_ESTABLISHED = "Unknown"
DEFAULT_STUDENTS = "Unknown"
DEFAULT_TYPE = "College"
DEFAULT_IMAGE = "https://via.placeholder.com/300"


@dataclass
class Tour:
    """A college/institution profile.

    location is [longitude, latitude]. admin_email names the owner: when set,
    only a request presenting the same adminEmail may update the tour.

    id is None before the record is written to the database.
    """

    name: str
    description: str
    established: str = DEFAULT_ESTABLISHED
    students: str = DEFAULT_STUDENTS
    type: str = DEFAULT_TYPE
    image: str = DEFAULT_IMAGE
    location: list[float] = field(default_factory=lambda: [0.0, 0.0])
    address: str = ""
    short_name: Optional[str] = None
    tour_info: Optional[str] = None
    admin_email: Optional[str] = None
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Course:
    name: str
    description: str
    tour_id: str
    id: Optional[str] = None


@dataclass
class Event:
    """A dated happening on a tour. date is an ISO 8601 string."""

    title: str
    date: str
    description: str
    tour_id: str
    id: Optional[str] = None
