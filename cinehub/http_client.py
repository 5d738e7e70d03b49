"""HTTP client for the cinehub API."""

from typing import Any, Dict, Optional

import aiohttp

from cinehub.errors import RemoteHttpError


class CinehubHttpClient:
    """HTTP client for calling the cinehub API."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL of the API (e.g., "http://localhost:3000")
            access_token: Optional bearer token; set automatically by login/register
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[aiohttp.FormData] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            try:
                async with session.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    data=data,
                    headers=self._headers(),
                ) as resp:
                    response_body = await resp.text()

                    if resp.status >= 400:
                        raise RemoteHttpError(
                            status_code=resp.status,
                            message=f"{method} {path} failed: {response_body}",
                            response_body=response_body,
                        )

                    if resp.status == 204:
                        return None

                    return await resp.json()

            except aiohttp.ClientError as e:
                raise RemoteHttpError(
                    status_code=0,
                    message=f"Network error: {str(e)}",
                ) from e

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        """Register a user and keep the returned token for later calls."""
        result = await self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        self.access_token = result["access_token"]
        return result

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and keep the returned token for later calls."""
        result = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        self.access_token = result["access_token"]
        return result

    def logout(self) -> None:
        self.access_token = None

    async def list_movies(self, **filters: Any) -> Dict[str, Any]:
        """
        List movies.

        Accepts the API's query filters, e.g. search, genre, page, limit,
        sort_by, sort_order. None values are dropped.
        """
        params = {k: str(v) for k, v in filters.items() if v is not None}
        return await self._request("GET", "/movies", params=params)

    async def get_movie(self, movie_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/movies/{movie_id}")

    async def create_movie(self, movie: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/movies", json=movie)

    async def update_movie(self, movie_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/movies/{movie_id}", json=changes)

    async def delete_movie(self, movie_id: str) -> None:
        await self._request("DELETE", f"/movies/{movie_id}")

    async def upload_poster(
        self, movie_id: str, filename: str, content: bytes, content_type: str = "image/jpeg"
    ) -> Dict[str, Any]:
        return await self._upload(movie_id, "poster", filename, content, content_type)

    async def upload_backdrop(
        self, movie_id: str, filename: str, content: bytes, content_type: str = "image/jpeg"
    ) -> Dict[str, Any]:
        return await self._upload(movie_id, "backdrop", filename, content, content_type)

    async def _upload(
        self, movie_id: str, kind: str, filename: str, content: bytes, content_type: str
    ) -> Dict[str, Any]:
        form = aiohttp.FormData()
        form.add_field("file", content, filename=filename, content_type=content_type)
        return await self._request("POST", f"/movies/{movie_id}/{kind}", data=form)
