"""
tours/store.py -- SQLAlchemy-backed persistence layer for tours, courses and events.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in tours/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. TourStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers.

Documents, not relations:
  Every record is keyed by an application-generated object id (core/ids.py).
  courses.tour_id and events.tour_id are plain indexed columns, not foreign
  keys -- parent existence is checked by the handlers at create and delete
  time only. Each method is a single statement, so there is no multi-record
  transaction: a tour deleted while a course is being added can leave that
  course orphaned.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TourStore("sqlite:///:memory:")
    tour_id = store.create_tour(Tour(name="MIT", description="..."))
    store.create_course(Course(name="6.001", description="SICP", tour_id=tour_id))
    courses = store.list_courses(tour_id)
    store.close()
"""

import json
from typing import Optional

from sqlalchemy import Column, MetaData, String, Table, Text, text

from core.db import now_iso, open_engine
from core.ids import new_object_id
from tours.models import Course, Event, Tour

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_tours = Table(
    "tours",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("established", String(100), nullable=False),
    Column("students", String(100), nullable=False),
    Column("type", String(100), nullable=False),
    Column("short_name", String(100)),
    Column("tour_info", Text),
    Column("image", Text, nullable=False),
    Column("location", Text, nullable=False),  # JSON [longitude, latitude]
    Column("address", Text, nullable=False),
    Column("admin_email", String(255)),
    Column("created_at", String(32), nullable=False),
)

_courses = Table(
    "courses",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("tour_id", String(24), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
)

_events = Table(
    "events",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("date", String(32), nullable=False),
    Column("description", Text, nullable=False),
    Column("tour_id", String(24), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tour_values(tour: Tour) -> dict:
    return {
        "name": tour.name,
        "description": tour.description,
        "established": tour.established,
        "students": tour.students,
        "type": tour.type,
        "short_name": tour.short_name,
        "tour_info": tour.tour_info,
        "image": tour.image,
        "location": json.dumps(list(tour.location)),
        "address": tour.address,
        "admin_email": tour.admin_email,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TourStore:
    """Repository for Tour, Course and Event documents."""

    def __init__(self, db_url: Optional[str] = None) -> None:
        self.engine = open_engine(metadata, db_url)

    # ------------------------------------------------------------------
    # Tours
    # ------------------------------------------------------------------

    def create_tour(self, tour: Tour) -> str:
        """Insert a tour and return its new id. created_at is stamped here."""
        tour_id = new_object_id()
        with self.engine.connect() as conn:
            conn.execute(_tours.insert().values(id=tour_id, created_at=now_iso(), **_tour_values(tour)))
            conn.commit()
        return tour_id

    def get_tour(self, tour_id: str) -> Optional[Tour]:
        """Return the tour with this id, or None."""
        with self.engine.connect() as conn:
            row = conn.execute(_tours.select().where(_tours.c.id == tour_id)).fetchone()
        return _row_to_tour(row) if row is not None else None

    def list_tours(self) -> list[Tour]:
        """Return all tours, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_tours.select().order_by(_tours.c.created_at, _tours.c.id)).fetchall()
        return [_row_to_tour(r) for r in rows]

    def replace_tour(self, tour: Tour) -> bool:
        """Overwrite every mutable column of an existing tour in one statement.

        id and created_at are never changed. Returns False if the tour no
        longer exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_tours.update().where(_tours.c.id == tour.id).values(**_tour_values(tour)))
            conn.commit()
        return result.rowcount > 0

    def delete_tour(self, tour_id: str) -> bool:
        """Delete a tour. Its courses and events are left in place."""
        with self.engine.connect() as conn:
            result = conn.execute(_tours.delete().where(_tours.c.id == tour_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def create_course(self, course: Course) -> str:
        course_id = new_object_id()
        with self.engine.connect() as conn:
            conn.execute(
                _courses.insert().values(
                    id=course_id,
                    name=course.name,
                    description=course.description,
                    tour_id=course.tour_id,
                    created_at=now_iso(),
                )
            )
            conn.commit()
        return course_id

    def get_course(self, course_id: str) -> Optional[Course]:
        with self.engine.connect() as conn:
            row = conn.execute(_courses.select().where(_courses.c.id == course_id)).fetchone()
        return _row_to_course(row) if row is not None else None

    def list_courses(self, tour_id: str) -> list[Course]:
        """Return the courses attached to tour_id, oldest first."""
        with self.engine.connect() as conn:
            query = _courses.select().where(_courses.c.tour_id == tour_id).order_by(_courses.c.created_at, _courses.c.id)
            rows = conn.execute(query).fetchall()
        return [_row_to_course(r) for r in rows]

    def delete_course(self, course_id: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_courses.delete().where(_courses.c.id == course_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def create_event(self, ev: Event) -> str:
        event_id = new_object_id()
        with self.engine.connect() as conn:
            conn.execute(
                _events.insert().values(
                    id=event_id,
                    title=ev.title,
                    date=ev.date,
                    description=ev.description,
                    tour_id=ev.tour_id,
                    created_at=now_iso(),
                )
            )
            conn.commit()
        return event_id

    def get_event(self, event_id: str) -> Optional[Event]:
        with self.engine.connect() as conn:
            row = conn.execute(_events.select().where(_events.c.id == event_id)).fetchone()
        return _row_to_event(row) if row is not None else None

    def list_events(self, tour_id: str) -> list[Event]:
        """Return the events attached to tour_id, oldest first."""
        with self.engine.connect() as conn:
            query = _events.select().where(_events.c.tour_id == tour_id).order_by(_events.c.created_at, _events.c.id)
            rows = conn.execute(query).fetchall()
        return [_row_to_event(r) for r in rows]

    def delete_event(self, event_id: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_events.delete().where(_events.c.id == event_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_tour(row) -> Tour:
    return Tour(
        id=row.id,
        name=row.name,
        description=row.description,
        established=row.established,
        students=row.students,
        type=row.type,
        short_name=row.short_name,
        tour_info=row.tour_info,
        image=row.image,
        location=json.loads(row.location) if row.location else [0.0, 0.0],
        address=row.address,
        admin_email=row.admin_email,
        created_at=row.created_at,
    )


def _row_to_course(row) -> Course:
    return Course(id=row.id, name=row.name, description=row.description, tour_id=row.tour_id)


def _row_to_event(row) -> Event:
    return Event(id=row.id, title=row.title, date=row.date, description=row.description, tour_id=row.tour_id)
