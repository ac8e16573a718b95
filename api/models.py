"""
API request and response models for the College Tours REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
tours/models.py, which own the internal domain representation. Route handlers
map between the two.

Wire format: JSON keys are camelCase (shortName, adminEmail, tourId, ...).
Request models accept either camelCase or the snake_case field name.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import User
from auth.tokens import MAX_PASSWORD_BYTES
from tours.models import Course, Event, Tour

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _password_fits_bcrypt(value: str) -> str:
    """Reject passwords bcrypt cannot take whole. The limit is in UTF-8 bytes, not characters."""
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response.

    error carries internal detail for server errors in debug mode only.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    code: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255, pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _password_fits_bcrypt(value)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login. Either email or username identifies the account."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    password: str = Field(max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _password_fits_bcrypt(value)


class TokenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class PublicUser(BaseModel):
    """The user fields safe to return to clients. Never includes the hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(id=user.id, username=user.username, email=user.email)


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    user: PublicUser


class IdentityClaim(BaseModel):
    id: str


class CheckAuthResponse(BaseModel):
    """Response for GET /api/check-auth."""

    authenticated: bool
    user: IdentityClaim
    expires: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Tours
# ---------------------------------------------------------------------------


class TourCreate(BaseModel):
    """Request body for POST /api/tours.

    Optional fields left out (or sent empty) fall back to the defaults in
    tours/models.py when the handler builds the Tour.
    """

    model_config = _CAMEL

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    established: Optional[str] = None
    students: Optional[str] = None
    type: Optional[str] = None
    short_name: Optional[str] = Field(default=None, max_length=100)
    tour_info: Optional[str] = None
    image: Optional[str] = None
    location: Optional[list[float]] = Field(default=None, min_length=2, max_length=2)
    address: Optional[str] = None
    admin_email: Optional[str] = Field(default=None, max_length=255)


class TourUpdate(BaseModel):
    """Request body for PUT /api/tours/{id}.

    Every field is optional; the fields the client sends overwrite the stored
    ones. admin_email doubles as the ownership proof for owned tours.
    """

    model_config = _CAMEL

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    established: Optional[str] = None
    students: Optional[str] = None
    type: Optional[str] = None
    short_name: Optional[str] = Field(default=None, max_length=100)
    tour_info: Optional[str] = None
    image: Optional[str] = None
    location: Optional[list[float]] = Field(default=None, min_length=2, max_length=2)
    address: Optional[str] = None
    admin_email: Optional[str] = Field(default=None, max_length=255)


class TourResponse(BaseModel):
    model_config = _CAMEL

    id: str
    name: str
    description: str
    established: str
    students: str
    type: str
    short_name: Optional[str] = None
    tour_info: Optional[str] = None
    image: str
    location: list[float]
    address: str
    admin_email: Optional[str] = None
    created_at: str

    @classmethod
    def from_tour(cls, tour: Tour) -> "TourResponse":
        return cls(
            id=tour.id,
            name=tour.name,
            description=tour.description,
            established=tour.established,
            students=tour.students,
            type=tour.type,
            short_name=tour.short_name,
            tour_info=tour.tour_info,
            image=tour.image,
            location=tour.location,
            address=tour.address,
            admin_email=tour.admin_email,
            created_at=tour.created_at,
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Courses and events
#
# Body fields are optional at the schema level so the handler can check the
# parent tour first and then report absent fields as a 400 missing_fields
# error, in that order.
# ---------------------------------------------------------------------------


class CourseCreate(BaseModel):
    model_config = _CAMEL

    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None


class CourseResponse(BaseModel):
    model_config = _CAMEL

    id: str
    name: str
    description: str
    tour_id: str

    @classmethod
    def from_course(cls, course: Course) -> "CourseResponse":
        return cls(id=course.id, name=course.name, description=course.description, tour_id=course.tour_id)


class EventCreate(BaseModel):
    model_config = _CAMEL

    title: Optional[str] = Field(default=None, max_length=255)
    date: Optional[datetime] = None
    description: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_is_missing(cls, value):
        """Treat "" like an absent date so it is reported as a missing field."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EventResponse(BaseModel):
    model_config = _CAMEL

    id: str
    title: str
    date: str
    description: str
    tour_id: str

    @classmethod
    def from_event(cls, ev: Event) -> "EventResponse":
        return cls(id=ev.id, title=ev.title, date=ev.date, description=ev.description, tour_id=ev.tour_id)
