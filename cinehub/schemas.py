"""Request and response models for the HTTP API."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from cinehub.models import EMAIL_PATTERN, User

PASSWORD_RULES = (
    "Password must contain at least one upper-case letter, one lower-case letter and a number"
)

NON_NULLABLE_MOVIE_FIELDS = (
    "title",
    "description",
    "release_date",
    "duration",
    "genres",
    "production_companies",
    "spoken_languages",
)


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email")
    return value


def _check_password(value: str) -> str:
    if not User.is_strong_password(value):
        raise ValueError(PASSWORD_RULES)
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value):
        return _check_email(value)


class RegisterRequest(BaseModel):
    """Also used for POST /users."""

    name: str = Field(min_length=3, max_length=100)
    email: str = Field(max_length=255)
    password: str = Field(min_length=6, max_length=50)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value):
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value):
        return _check_password(value)


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[str] = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value):
        return _check_email(value)


class UpdatePasswordRequest(BaseModel):
    current_password: str = Field(min_length=6)
    new_password: str = Field(min_length=6, max_length=50)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value):
        return _check_password(value)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AuthResponse(BaseModel):
    access_token: str
    user: Dict[str, str]


class CreateMovieRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    original_title: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    description: str = Field(min_length=10)
    release_date: datetime
    duration: int = Field(ge=1, le=1000)
    status: Optional[str] = Field(None, max_length=50)
    age_rating: Optional[str] = Field(None, max_length=20)
    budget: Optional[float] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)
    profit: Optional[float] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    trailer_url: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    production_companies: List[str] = Field(default_factory=list)
    spoken_languages: List[str] = Field(default_factory=list)
    vote_average: Optional[float] = Field(None, ge=0, le=10)
    vote_count: Optional[int] = Field(None, ge=0)
    popularity: Optional[float] = Field(None, ge=0)

    @field_validator("release_date")
    @classmethod
    def release_date_as_utc(cls, value):
        return as_utc(value)


class UpdateMovieRequest(BaseModel):
    """Partial update; only fields sent by the client are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    original_title: Optional[str] = Field(None, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, min_length=10)
    release_date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1, le=1000)
    status: Optional[str] = Field(None, max_length=50)
    age_rating: Optional[str] = Field(None, max_length=20)
    budget: Optional[float] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)
    profit: Optional[float] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    trailer_url: Optional[str] = None
    genres: Optional[List[str]] = None
    production_companies: Optional[List[str]] = None
    spoken_languages: Optional[List[str]] = None
    vote_average: Optional[float] = Field(None, ge=0, le=10)
    vote_count: Optional[int] = Field(None, ge=0)
    popularity: Optional[float] = Field(None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def reject_null_required_fields(cls, data):
        if isinstance(data, dict):
            nulls = [f for f in NON_NULLABLE_MOVIE_FIELDS if f in data and data[f] is None]
            if nulls:
                raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return data

    @field_validator("release_date")
    @classmethod
    def release_date_as_utc(cls, value):
        return as_utc(value)


class MovieResponse(BaseModel):
    id: str
    title: str
    original_title: Optional[str] = None
    subtitle: Optional[str] = None
    description: str
    release_date: Optional[str] = None
    duration: int
    status: Optional[str] = None
    age_rating: Optional[str] = None
    budget: Optional[float] = None
    revenue: Optional[float] = None
    profit: Optional[float] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    trailer_url: Optional[str] = None
    genres: List[str] = []
    production_companies: List[str] = []
    spoken_languages: List[str] = []
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    user_id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_owner: Optional[bool] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MovieListResponse(BaseModel):
    data: List[MovieResponse]
    pagination: Pagination


SortField = Literal["release_date", "title", "popularity", "vote_average", "created_at"]
SortOrder = Literal["asc", "desc"]


def movie_response(movie, current_user_id=None) -> MovieResponse:
    return MovieResponse(**movie.to_dict(current_user_id))


def user_response(user) -> UserResponse:
    return UserResponse(**user.to_dict())


def dump_update(request: BaseModel) -> Dict[str, Any]:
    return request.model_dump(exclude_unset=True)
