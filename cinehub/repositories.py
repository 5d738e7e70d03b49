"""Database repositories for users and movies."""

from typing import Any, Optional
from uuid import UUID, uuid4

import asyncpg

from cinehub.errors import MovieNotFoundError, UserNotFoundError
from cinehub.models import Movie, User

MOVIE_COLUMNS = (
    "title",
    "original_title",
    "subtitle",
    "description",
    "release_date",
    "duration",
    "status",
    "age_rating",
    "budget",
    "revenue",
    "profit",
    "poster_url",
    "backdrop_url",
    "trailer_url",
    "genres",
    "production_companies",
    "spoken_languages",
    "vote_average",
    "vote_count",
    "popularity",
)

MOVIE_SORT_COLUMNS = ("release_date", "title", "popularity", "vote_average", "created_at")


def _to_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class UserRepository:
    """Database layer for user operations."""

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def create(self, name: str, email: str, password: str) -> User:
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO users (id, name, email, password)
                VALUES ($1, $2, $3, $4)
                RETURNING *
                """,
                uuid4(),
                name,
                email,
                password,
            )
        return self._row_to_user(row)

    async def find_all(self) -> list[User]:
        async with self.db_pool.acquire() as conn:
            rows = await conn.fetch("SELECT * FROM users ORDER BY created_at DESC")
        return [self._row_to_user(row) for row in rows]

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
        return self._row_to_user(row) if row else None

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM users WHERE lower(email) = lower($1)", email
            )
        return self._row_to_user(row) if row else None

    async def update(
        self, user_id: UUID, name: Optional[str] = None, email: Optional[str] = None
    ) -> User:
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                UPDATE users
                SET name = COALESCE($2, name),
                    email = COALESCE($3, email),
                    updated_at = now()
                WHERE id = $1
                RETURNING *
                """,
                user_id,
                name,
                email,
            )
        if not row:
            raise UserNotFoundError(str(user_id))
        return self._row_to_user(row)

    async def update_password(self, user_id: UUID, password: str) -> None:
        async with self.db_pool.acquire() as conn:
            await conn.execute(
                "UPDATE users SET password = $2, updated_at = now() WHERE id = $1",
                user_id,
                password,
            )

    async def delete(self, user_id: UUID) -> None:
        """Delete a user; their movies go with them (ON DELETE CASCADE)."""
        async with self.db_pool.acquire() as conn:
            await conn.execute("DELETE FROM users WHERE id = $1", user_id)

    def _row_to_user(self, row: asyncpg.Record) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password=row["password"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class MovieRepository:
    """Database layer for movie operations."""

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def create(self, user_id: UUID, data: dict[str, Any]) -> Movie:
        values = {column: data.get(column) for column in MOVIE_COLUMNS}
        for column in ("genres", "production_companies", "spoken_languages"):
            values[column] = values[column] or []

        columns = ["id", "user_id", *values.keys()]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))

        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(
                f"INSERT INTO movies ({', '.join(columns)}) "
                f"VALUES ({placeholders}) RETURNING *",
                uuid4(),
                user_id,
                *values.values(),
            )
        return self._row_to_movie(row)

    async def find_by_id(self, movie_id: UUID) -> Optional[Movie]:
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM movies WHERE id = $1", movie_id)
        return self._row_to_movie(row) if row else None

    async def find_by_id_with_owner(
        self, movie_id: UUID
    ) -> Optional[tuple[Movie, Optional[User]]]:
        """Fetch a movie together with its owner, or None if the movie is gone."""
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT m.*,
                       u.id AS owner_id,
                       u.name AS owner_name,
                       u.email AS owner_email,
                       u.password AS owner_password,
                       u.created_at AS owner_created_at,
                       u.updated_at AS owner_updated_at
                FROM movies m
                LEFT JOIN users u ON u.id = m.user_id
                WHERE m.id = $1
                """,
                movie_id,
            )

        if not row:
            return None

        owner = None
        if row["owner_id"] is not None:
            owner = User(
                id=row["owner_id"],
                name=row["owner_name"],
                email=row["owner_email"],
                password=row["owner_password"],
                created_at=row["owner_created_at"],
                updated_at=row["owner_updated_at"],
            )
        return self._row_to_movie(row), owner

    async def find_all(
        self,
        *,
        search: Optional[str] = None,
        min_duration: Optional[int] = None,
        max_duration: Optional[int] = None,
        start_date=None,
        end_date=None,
        genre: Optional[str] = None,
        user_id: Optional[UUID] = None,
        skip: int = 0,
        take: int = 10,
        sort_by: str = "release_date",
        sort_order: str = "desc",
    ) -> tuple[list[Movie], int]:
        """List movies matching the filters. Returns (page, total matches)."""
        where = "WHERE 1=1"
        params = []
        param_idx = 1

        if user_id:
            where += f" AND user_id = ${param_idx}"
            params.append(user_id)
            param_idx += 1

        if search:
            where += (
                f" AND (title ILIKE ${param_idx}"
                f" OR original_title ILIKE ${param_idx}"
                f" OR description ILIKE ${param_idx})"
            )
            params.append(f"%{search}%")
            param_idx += 1

        if min_duration is not None:
            where += f" AND duration >= ${param_idx}"
            params.append(min_duration)
            param_idx += 1

        if max_duration is not None:
            where += f" AND duration <= ${param_idx}"
            params.append(max_duration)
            param_idx += 1

        if start_date is not None:
            where += f" AND release_date >= ${param_idx}"
            params.append(start_date)
            param_idx += 1

        if end_date is not None:
            where += f" AND release_date <= ${param_idx}"
            params.append(end_date)
            param_idx += 1

        if genre:
            where += f" AND ${param_idx} = ANY(genres)"
            params.append(genre)
            param_idx += 1

        if sort_by not in MOVIE_SORT_COLUMNS:
            raise ValueError(f"Unsupported sort column: {sort_by}")
        direction = "ASC" if sort_order == "asc" else "DESC"

        query = (
            f"SELECT * FROM movies {where} ORDER BY {sort_by} {direction} "
            f"LIMIT ${param_idx} OFFSET ${param_idx + 1}"
        )

        async with self.db_pool.acquire() as conn:
            rows = await conn.fetch(query, *params, take, skip)
            total = await conn.fetchval(f"SELECT COUNT(*) FROM movies {where}", *params)

        return [self._row_to_movie(row) for row in rows], total

    async def update(self, movie_id: UUID, data: dict[str, Any]) -> Movie:
        """Update the given columns; unknown keys are ignored."""
        changes = {k: v for k, v in data.items() if k in MOVIE_COLUMNS}
        if not changes:
            movie = await self.find_by_id(movie_id)
            if movie is None:
                raise MovieNotFoundError(str(movie_id))
            return movie

        assignments = ", ".join(
            f"{column} = ${i}" for i, column in enumerate(changes, start=2)
        )
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(
                f"UPDATE movies SET {assignments}, updated_at = now() "
                f"WHERE id = $1 RETURNING *",
                movie_id,
                *changes.values(),
            )
        if not row:
            raise MovieNotFoundError(str(movie_id))
        return self._row_to_movie(row)

    async def delete(self, movie_id: UUID) -> None:
        async with self.db_pool.acquire() as conn:
            await conn.execute("DELETE FROM movies WHERE id = $1", movie_id)

    def _row_to_movie(self, row: asyncpg.Record) -> Movie:
        """Convert a database row to a Movie model."""
        return Movie(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            release_date=row["release_date"],
            duration=row["duration"],
            user_id=row["user_id"],
            original_title=row["original_title"],
            subtitle=row["subtitle"],
            status=row["status"],
            age_rating=row["age_rating"],
            budget=_to_float(row["budget"]),
            revenue=_to_float(row["revenue"]),
            profit=_to_float(row["profit"]),
            poster_url=row["poster_url"],
            backdrop_url=row["backdrop_url"],
            trailer_url=row["trailer_url"],
            genres=row["genres"],
            production_companies=row["production_companies"],
            spoken_languages=row["spoken_languages"],
            vote_average=_to_float(row["vote_average"]),
            vote_count=row["vote_count"],
            popularity=_to_float(row["popularity"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
