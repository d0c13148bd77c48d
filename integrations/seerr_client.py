from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx


class ErrorKind(Enum):
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    OTHER = "other"


class SeerrError(Exception):
    """Non-2xx response from the Seerr API."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        if status == 403:
            self.kind = ErrorKind.PERMISSION
        elif status == 404:
            self.kind = ErrorKind.NOT_FOUND
        elif status == 409 or "already" in (body or "").lower():
            self.kind = ErrorKind.CONFLICT
        else:
            self.kind = ErrorKind.OTHER
        super().__init__(f"Seerr API error ({status}): {body}")


class SeerrClient:
    def __init__(self, base_url: str, api_key: str):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def _new_client(self) -> httpx.AsyncClient:
        # Per-call clients so nothing is bound to a particular event loop
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-Api-Key": self.api_key, "Content-Type": "application/json"},
            timeout=20.0,
        )

    @staticmethod
    def _check(r: httpx.Response) -> Any:
        if not 200 <= r.status_code < 300:
            raise SeerrError(r.status_code, r.text)
        return r.json()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        async with self._new_client() as client:
            if params:
                r = await client.get(path, params=params)
            else:
                r = await client.get(path)
            return self._check(r)

    async def _post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        async with self._new_client() as client:
            if body is not None:
                r = await client.post(path, json=body)
            else:
                r = await client.post(path)
            return self._check(r)

    # Search & details
    async def search(self, query: str) -> Dict[str, Any]:
        # Seerr rejects form-style '+' for spaces; percent-encode everything
        encoded = quote(query, safe="-_.!~*'()")
        return await self._get(f"/api/v1/search?query={encoded}")

    async def get_movie_details(self, tmdb_id: int) -> Dict[str, Any]:
        return await self._get(f"/api/v1/movie/{tmdb_id}")

    async def get_tv_details(self, tmdb_id: int) -> Dict[str, Any]:
        return await self._get(f"/api/v1/tv/{tmdb_id}")

    # Requests
    async def request_movie(self, tmdb_id: int) -> Dict[str, Any]:
        return await self._post("/api/v1/request", {"mediaType": "movie", "mediaId": tmdb_id, "is4k": False})

    async def request_tv(self, tmdb_id: int, seasons: List[int]) -> Dict[str, Any]:
        return await self._post(
            "/api/v1/request",
            {"mediaType": "tv", "mediaId": tmdb_id, "seasons": list(seasons), "is4k": False},
        )

    async def list_requests(self, filter: Optional[str] = None, take: int = 20) -> Dict[str, Any]:
        params: Dict[str, Any] = {"take": take}
        if filter:
            params["filter"] = filter
        return await self._get("/api/v1/request", params=params)

    async def approve_request(self, request_id: int) -> Dict[str, Any]:
        return await self._post(f"/api/v1/request/{request_id}/approve")

    async def decline_request(self, request_id: int) -> Dict[str, Any]:
        return await self._post(f"/api/v1/request/{request_id}/decline")

    # Discovery
    async def discover_trending(self, page: int = 1) -> Dict[str, Any]:
        return await self._get("/api/v1/discover/trending", params={"page": page})

    async def discover_upcoming_movies(self, page: int = 1) -> Dict[str, Any]:
        return await self._get("/api/v1/discover/movies/upcoming", params={"page": page})

    async def discover_upcoming_tv(self, page: int = 1) -> Dict[str, Any]:
        return await self._get("/api/v1/discover/tv/upcoming", params={"page": page})

    @staticmethod
    def _discover_params(*, date_prefix: str, year: Optional[int], genre: Optional[int],
                         min_rating: Optional[float], sort_by: Optional[str], page: Optional[int]) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if page:
            params["page"] = page
        if sort_by:
            params["sortBy"] = sort_by
        if year:
            params[f"{date_prefix}Gte"] = f"{year}-01-01"
            params[f"{date_prefix}Lte"] = f"{year}-12-31"
        if genre:
            params["genre"] = genre
        if min_rating:
            params["voteAverageGte"] = min_rating
        return params

    async def discover_movies(self, *, year: Optional[int] = None, genre: Optional[int] = None,
                              min_rating: Optional[float] = None, sort_by: Optional[str] = None,
                              page: Optional[int] = None) -> Dict[str, Any]:
        params = self._discover_params(date_prefix="primaryReleaseDate", year=year, genre=genre,
                                       min_rating=min_rating, sort_by=sort_by, page=page)
        return await self._get("/api/v1/discover/movies", params=params)

    async def discover_tv(self, *, year: Optional[int] = None, genre: Optional[int] = None,
                          min_rating: Optional[float] = None, sort_by: Optional[str] = None,
                          page: Optional[int] = None) -> Dict[str, Any]:
        params = self._discover_params(date_prefix="firstAirDate", year=year, genre=genre,
                                       min_rating=min_rating, sort_by=sort_by, page=page)
        return await self._get("/api/v1/discover/tv", params=params)

    async def get_similar_movies(self, tmdb_id: int, page: int = 1) -> Dict[str, Any]:
        return await self._get(f"/api/v1/movie/{tmdb_id}/similar", params={"page": page})

    async def get_similar_tv(self, tmdb_id: int, page: int = 1) -> Dict[str, Any]:
        return await self._get(f"/api/v1/tv/{tmdb_id}/similar", params={"page": page})

    # Ratings
    async def get_movie_ratings(self, tmdb_id: int) -> Dict[str, Any]:
        """Combined ratings: {"rt": {...}, "imdb": {...}}, either may be absent."""
        return await self._get(f"/api/v1/movie/{tmdb_id}/ratingscombined")

    async def get_tv_ratings(self, tmdb_id: int) -> Dict[str, Any]:
        """Rotten Tomatoes rating object for a series."""
        return await self._get(f"/api/v1/tv/{tmdb_id}/ratings")
