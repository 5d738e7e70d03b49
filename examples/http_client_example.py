"""Example of using the HTTP client to add a movie and get a release reminder."""

import asyncio
from datetime import datetime, timedelta, timezone

from cinehub import CinehubHttpClient, RemoteHttpError


async def main():
    """Register, add an upcoming movie and push its release date back."""

    client = CinehubHttpClient(base_url="http://localhost:3000", timeout=10.0)

    try:
        await client.register("Movie Fan", "fan@example.com", "Secret123")

        # Releases in 3 minutes; the worker emails the owner at that time
        release_date = datetime.now(timezone.utc) + timedelta(minutes=3)
        movie = await client.create_movie(
            {
                "title": "The Long Wait",
                "description": "A movie about waiting for a release date.",
                "release_date": release_date.isoformat(),
                "duration": 120,
                "genres": ["Drama"],
            }
        )
        print(f"Movie created: {movie['id']}")

        # Moving the release date replaces the scheduled reminder
        movie = await client.update_movie(
            movie["id"], {"release_date": (release_date + timedelta(days=1)).isoformat()}
        )
        print(f"Release moved to {movie['release_date']}")

        page = await client.list_movies(search="wait", sort_by="title", sort_order="asc")
        print(f"Found {page['pagination']['total']} movies")

    except RemoteHttpError as e:
        print(f"Error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
