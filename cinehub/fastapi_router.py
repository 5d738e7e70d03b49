"""FastAPI routers for the cinehub HTTP API."""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, NoReturn, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cinehub.auth import AuthService, verify_access_token
from cinehub.errors import (
    CinehubError,
    EmailInUseError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidMovieError,
    InvalidUserError,
    MovieNotFoundError,
    UserNotFoundError,
)
from cinehub.models import User
from cinehub.movies import MovieService
from cinehub.schemas import (
    AuthResponse,
    CreateMovieRequest,
    LoginRequest,
    MovieListResponse,
    MovieResponse,
    RegisterRequest,
    SortField,
    SortOrder,
    UpdateMovieRequest,
    UpdatePasswordRequest,
    UpdateUserRequest,
    UserResponse,
    as_utc,
    dump_update,
    movie_response,
    user_response,
)
from cinehub.users import UserService

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (MovieNotFoundError, 404),
    (UserNotFoundError, 404),
    (ForbiddenError, 403),
    (EmailInUseError, 409),
    (InvalidCredentialsError, 401),
    (InvalidMovieError, 400),
    (InvalidUserError, 400),
)


def raise_http_error(error: CinehubError) -> NoReturn:
    """Translate a domain error into the matching HTTPException."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            raise HTTPException(status_code=status_code, detail=str(error)) from error
    logger.error(f"Unhandled cinehub error: {error}", exc_info=error)
    raise HTTPException(status_code=500, detail="Internal server error") from error


def _parse_id(value: str, what: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {what} ID format") from e


def create_current_user_dependency(
    auth_service_factory: Callable[[], AuthService], jwt_secret: str
) -> Callable:
    """
    Build the dependency that resolves the bearer token to a User.

    Missing, invalid or expired tokens and tokens of deleted users give 401.
    """
    bearer = HTTPBearer(auto_error=False)

    async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    ) -> User:
        if credentials is None:
            raise HTTPException(status_code=401, detail="Missing bearer token")

        payload = verify_access_token(credentials.credentials, jwt_secret)
        if not payload or "sub" not in payload:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        try:
            return await auth_service_factory().validate_user(payload["sub"])
        except InvalidCredentialsError as e:
            raise HTTPException(status_code=401, detail="User not found") from e

    return get_current_user


def create_auth_router(auth_service_factory: Callable[[], AuthService]) -> APIRouter:
    """Public login and registration endpoints."""
    router = APIRouter(prefix="/auth", tags=["auth"])

    async def get_auth_service() -> AuthService:
        return auth_service_factory()

    @router.post("/login", response_model=AuthResponse)
    async def login(
        request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)
    ):
        try:
            return await auth_service.login(request.email, request.password)
        except CinehubError as e:
            raise_http_error(e)

    @router.post("/register", response_model=AuthResponse, status_code=201)
    async def register(
        request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)
    ):
        try:
            return await auth_service.register(request.name, request.email, request.password)
        except CinehubError as e:
            raise_http_error(e)

    return router


def create_users_router(
    user_service_factory: Callable[[], UserService],
    get_current_user: Callable,
) -> APIRouter:
    """User account endpoints. Users may only modify their own account."""
    router = APIRouter(prefix="/users", tags=["users"])

    async def get_user_service() -> UserService:
        return user_service_factory()

    def ensure_self(user_id: UUID, current_user: User) -> None:
        if str(user_id) != str(current_user.id):
            raise HTTPException(
                status_code=403, detail="You can only modify your own account"
            )

    @router.post("", response_model=UserResponse, status_code=201)
    async def create_user(
        request: RegisterRequest, user_service: UserService = Depends(get_user_service)
    ):
        try:
            user = await user_service.create(request.name, request.email, request.password)
        except CinehubError as e:
            raise_http_error(e)
        return user_response(user)

    @router.get("", response_model=List[UserResponse])
    async def list_users(
        user_service: UserService = Depends(get_user_service),
        _: User = Depends(get_current_user),
    ):
        users = await user_service.find_all()
        return [user_response(user) for user in users]

    @router.get("/{user_id}", response_model=UserResponse)
    async def get_user(
        user_id: str,
        user_service: UserService = Depends(get_user_service),
        _: User = Depends(get_current_user),
    ):
        try:
            user = await user_service.find_one(_parse_id(user_id, "user"))
        except CinehubError as e:
            raise_http_error(e)
        return user_response(user)

    @router.patch("/{user_id}", response_model=UserResponse)
    async def update_user(
        user_id: str,
        request: UpdateUserRequest,
        user_service: UserService = Depends(get_user_service),
        current_user: User = Depends(get_current_user),
    ):
        user_uuid = _parse_id(user_id, "user")
        ensure_self(user_uuid, current_user)
        try:
            user = await user_service.update(
                user_uuid, name=request.name, email=request.email
            )
        except CinehubError as e:
            raise_http_error(e)
        return user_response(user)

    @router.patch("/{user_id}/password", status_code=204)
    async def update_password(
        user_id: str,
        request: UpdatePasswordRequest,
        user_service: UserService = Depends(get_user_service),
        current_user: User = Depends(get_current_user),
    ):
        user_uuid = _parse_id(user_id, "user")
        ensure_self(user_uuid, current_user)
        try:
            await user_service.update_password(
                user_uuid, request.current_password, request.new_password
            )
        except CinehubError as e:
            raise_http_error(e)
        return Response(status_code=204)

    @router.delete("/{user_id}", status_code=204)
    async def delete_user(
        user_id: str,
        user_service: UserService = Depends(get_user_service),
        current_user: User = Depends(get_current_user),
    ):
        user_uuid = _parse_id(user_id, "user")
        ensure_self(user_uuid, current_user)
        try:
            await user_service.remove(user_uuid)
        except CinehubError as e:
            raise_http_error(e)
        return Response(status_code=204)

    return router


def create_movies_router(
    movie_service_factory: Callable[[], MovieService],
    get_current_user: Callable,
) -> APIRouter:
    """Movie endpoints. Reads are open to any signed-in user, writes to the owner."""
    router = APIRouter(prefix="/movies", tags=["movies"])

    async def get_movie_service() -> MovieService:
        return movie_service_factory()

    @router.post("", response_model=MovieResponse, status_code=201)
    async def create_movie(
        request: CreateMovieRequest,
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            movie = await movie_service.create(current_user.id, request.model_dump())
        except CinehubError as e:
            raise_http_error(e)
        return movie_response(movie, current_user.id)

    @router.get("", response_model=MovieListResponse)
    async def list_movies(
        search: Optional[str] = Query(None),
        min_duration: Optional[int] = Query(None, ge=1),
        max_duration: Optional[int] = Query(None, le=1000),
        start_date: Optional[datetime] = Query(None),
        end_date: Optional[datetime] = Query(None),
        genre: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        sort_by: SortField = Query("release_date"),
        sort_order: SortOrder = Query("desc"),
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            result = await movie_service.find_all(
                search=search,
                min_duration=min_duration,
                max_duration=max_duration,
                start_date=as_utc(start_date),
                end_date=as_utc(end_date),
                genre=genre,
                page=page,
                limit=limit,
                sort_by=sort_by,
                sort_order=sort_order,
            )
        except CinehubError as e:
            raise_http_error(e)
        except Exception as e:
            logger.exception("Error listing movies")
            raise HTTPException(status_code=500, detail="Internal server error") from e

        return {
            "data": [movie_response(m, current_user.id) for m in result["data"]],
            "pagination": result["pagination"],
        }

    @router.get("/{movie_id}", response_model=MovieResponse)
    async def get_movie(
        movie_id: str,
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            movie = await movie_service.find_one(_parse_id(movie_id, "movie"))
        except CinehubError as e:
            raise_http_error(e)
        return movie_response(movie, current_user.id)

    @router.patch("/{movie_id}", response_model=MovieResponse)
    async def update_movie(
        movie_id: str,
        request: UpdateMovieRequest,
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            movie = await movie_service.update(
                _parse_id(movie_id, "movie"), current_user.id, dump_update(request)
            )
        except CinehubError as e:
            raise_http_error(e)
        return movie_response(movie, current_user.id)

    @router.delete("/{movie_id}", status_code=204)
    async def delete_movie(
        movie_id: str,
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            await movie_service.remove(_parse_id(movie_id, "movie"), current_user.id)
        except CinehubError as e:
            raise_http_error(e)
        return Response(status_code=204)

    @router.post("/{movie_id}/poster", response_model=MovieResponse)
    async def upload_poster(
        movie_id: str,
        file: UploadFile = File(...),
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            movie = await movie_service.upload_poster(
                _parse_id(movie_id, "movie"),
                current_user.id,
                file.filename or "poster",
                await file.read(),
                file.content_type or "image/jpeg",
            )
        except CinehubError as e:
            raise_http_error(e)
        return movie_response(movie, current_user.id)

    @router.post("/{movie_id}/backdrop", response_model=MovieResponse)
    async def upload_backdrop(
        movie_id: str,
        file: UploadFile = File(...),
        movie_service: MovieService = Depends(get_movie_service),
        current_user: User = Depends(get_current_user),
    ):
        try:
            movie = await movie_service.upload_backdrop(
                _parse_id(movie_id, "movie"),
                current_user.id,
                file.filename or "backdrop",
                await file.read(),
                file.content_type or "image/jpeg",
            )
        except CinehubError as e:
            raise_http_error(e)
        return movie_response(movie, current_user.id)

    return router


def create_health_router(
    db_pool_factory: Callable, environment: str = "development", version: str = "0.1.0"
) -> APIRouter:
    """Public liveness endpoints."""
    router = APIRouter(prefix="/health", tags=["health"])
    started_at = time.monotonic()

    async def check_database() -> dict:
        start = time.monotonic()
        try:
            async with db_pool_factory().acquire() as conn:
                server_version = await conn.fetchval("SHOW server_version")
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "down", "error": str(e)}
        return {
            "status": "up",
            "response_time": f"{int((time.monotonic() - start) * 1000)}ms",
            "version": server_version,
        }

    @router.get("")
    async def health():
        database = await check_database()
        return {
            "status": "healthy" if database["status"] == "up" else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": int(time.monotonic() - started_at),
            "environment": environment,
            "version": version,
            "checks": {"database": database},
        }

    @router.get("/database")
    async def health_database():
        return await check_database()

    return router

