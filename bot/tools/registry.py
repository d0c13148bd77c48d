from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from integrations.omdb_client import OmdbClient
from integrations.seerr_client import SeerrClient
from .schemas import (
    DiscoverMoviesInput,
    DiscoverTrendingInput,
    DiscoverTvInput,
    DiscoverUpcomingInput,
    ListRequestsInput,
    MediaRefInput,
    RequestIdInput,
    RequestMediaInput,
    SearchMediaInput,
    VerifyImdbInput,
)
from .tool_impl_omdb import make_verify_imdb
from .tool_impl_seerr import (
    make_approve_request,
    make_decline_request,
    make_discover_movies,
    make_discover_trending,
    make_discover_tv,
    make_discover_upcoming,
    make_get_media_details,
    make_get_ratings,
    make_get_similar,
    make_list_requests,
    make_request_media,
    make_search_media,
)


log = logging.getLogger("seerrbot.tools")

ToolCallable = Callable[[Any], Awaitable[str]]


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: Dict[str, Tuple[Type[BaseModel], ToolCallable]] = {}

    def register(self, name: str, model: Type[BaseModel], fn: ToolCallable) -> None:
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = (model, fn)

    def get(self, name: str) -> ToolCallable:
        return self._tools[name][1]

    def names(self) -> List[str]:
        return sorted(self._tools.keys())

    async def dispatch(self, name: str, args: Optional[Dict[str, Any]]) -> str:
        """Validate args and run a tool; every failure comes back as text."""
        entry = self._tools.get(name)
        if entry is None:
            return f"Unknown tool: {name}"
        model, fn = entry
        try:
            parsed = model.model_validate(args or {})
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in e.errors()
            )
            return f"Invalid input for {name}: {details}"
        try:
            return await fn(parsed)
        except Exception as e:
            log.warning("tool failed", extra={"tool": name, "error": str(e)})
            return f"Error: {e}"


_MEDIA_TYPE = {"type": "string", "enum": ["movie", "tv"], "description": "Whether this is a movie or TV show"}
_TMDB_ID = {"type": "integer", "description": "The TMDB ID of the movie or TV show"}


def _define_openai_tools() -> List[Dict[str, Any]]:
    def fn(name: str, description: str, params: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": name,
                "description": description,
                "parameters": {
                    "type": "object",
                    "properties": params,
                    "required": required or [],
                    "additionalProperties": False,
                },
            },
        }

    return [
        fn("search_media", "Search Seerr for movies or TV shows by title. Returns matching media with their TMDB IDs. Handles a year in the query (e.g. 'Anaconda 2025' or 'Anaconda (2025)').", {
            "query": {"type": "string", "description": "Movie or TV show title, optionally with year"},
        }, ["query"]),
        fn("get_media_details", "Get detailed information about a movie or TV show including IMDB ID, request status, and seasons (for TV shows).", {
            "tmdb_id": _TMDB_ID,
            "media_type": _MEDIA_TYPE,
        }, ["tmdb_id", "media_type"]),
        fn("verify_imdb", "Verify a media selection against IMDB data. Pass an IMDB ID for a direct lookup, or a title to search.", {
            "imdb_id": {"type": ["string", "null"], "description": "IMDB ID to look up directly (e.g. tt1375666)"},
            "title": {"type": ["string", "null"], "description": "Title to search for on IMDB"},
            "year": {"type": ["string", "null"], "description": "Release year to narrow the search"},
            "media_type": {"type": ["string", "null"], "enum": ["movie", "series", None], "description": "IMDB media type"},
        }),
        fn("request_media", "Submit a media request to Seerr. Movies need no seasons. For TV shows you MUST specify which seasons to request.", {
            "tmdb_id": _TMDB_ID,
            "media_type": _MEDIA_TYPE,
            "seasons": {"type": ["array", "null"], "items": {"type": "integer"}, "description": "For TV: season numbers to request, e.g. [1, 2, 3]"},
        }, ["tmdb_id", "media_type"]),
        fn("list_requests", "List media requests in Seerr with requester and status. Defaults to pending requests awaiting approval.", {
            "status": {"type": ["string", "null"], "enum": ["pending", "approved", "processing", "available", "failed", None], "description": "Filter by status (default: pending)"},
        }),
        fn("approve_request", "Approve a pending media request. This sends it to Radarr/Sonarr for downloading.", {
            "request_id": {"type": "integer", "description": "The request ID to approve (shown as #ID in list_requests)"},
        }, ["request_id"]),
        fn("decline_request", "Decline a pending media request.", {
            "request_id": {"type": "integer", "description": "The request ID to decline (shown as #ID in list_requests)"},
        }, ["request_id"]),
        fn("discover_trending", "Get trending movies and TV shows right now. Use for 'what's trending', 'what's popular' or 'what's hot'.", {
            "media_type": {"type": ["string", "null"], "enum": ["movie", "tv", "all", None], "description": "Filter by media type (default: all)"},
        }),
        fn("discover_upcoming", "Get upcoming movies or TV shows. Use for 'what's coming out' or 'upcoming releases'.", {
            "media_type": _MEDIA_TYPE,
        }, ["media_type"]),
        fn("discover_movies", "Discover movies by year, genre, or rating, e.g. 'top films of 2026', 'best comedies'. Sorted by popularity by default.", {
            "year": {"type": ["integer", "null"], "description": "Release year"},
            "genre": {"type": ["string", "null"], "description": "Genre name (e.g. 'comedy', 'sci-fi', 'horror')"},
            "min_rating": {"type": ["number", "null"], "description": "Minimum rating (0-10)"},
            "sort_by": {"type": ["string", "null"], "enum": ["popularity", "rating", "release_date", None], "description": "Sort order (default: popularity)"},
        }),
        fn("discover_tv", "Discover TV shows by year, genre, or rating, e.g. 'best drama series of 2025'. Sorted by popularity by default.", {
            "year": {"type": ["integer", "null"], "description": "First air year"},
            "genre": {"type": ["string", "null"], "description": "Genre name (e.g. 'drama', 'sci-fi', 'reality')"},
            "min_rating": {"type": ["number", "null"], "description": "Minimum rating (0-10)"},
            "sort_by": {"type": ["string", "null"], "enum": ["popularity", "rating", "first_air_date", None], "description": "Sort order (default: popularity)"},
        }),
        fn("get_similar", "Find movies or TV shows similar to a given title. Use for 'movies like X' (search first to get the TMDB ID).", {
            "tmdb_id": _TMDB_ID,
            "media_type": _MEDIA_TYPE,
        }, ["tmdb_id", "media_type"]),
        fn("get_ratings", "Get Rotten Tomatoes and IMDB ratings for a movie or TV show.", {
            "tmdb_id": _TMDB_ID,
            "media_type": _MEDIA_TYPE,
        }, ["tmdb_id", "media_type"]),
    ]


def build_tools_and_registry(seerr: SeerrClient, omdb: OmdbClient) -> Tuple[List[Dict[str, Any]], ToolRegistry]:
    tools = ToolRegistry()
    # Lookup
    tools.register("search_media", SearchMediaInput, make_search_media(seerr))
    tools.register("get_media_details", MediaRefInput, make_get_media_details(seerr))
    tools.register("verify_imdb", VerifyImdbInput, make_verify_imdb(omdb))

    # Requests
    tools.register("request_media", RequestMediaInput, make_request_media(seerr))
    tools.register("list_requests", ListRequestsInput, make_list_requests(seerr))
    tools.register("approve_request", RequestIdInput, make_approve_request(seerr))
    tools.register("decline_request", RequestIdInput, make_decline_request(seerr))

    # Discovery
    tools.register("discover_trending", DiscoverTrendingInput, make_discover_trending(seerr))
    tools.register("discover_upcoming", DiscoverUpcomingInput, make_discover_upcoming(seerr))
    tools.register("discover_movies", DiscoverMoviesInput, make_discover_movies(seerr))
    tools.register("discover_tv", DiscoverTvInput, make_discover_tv(seerr))
    tools.register("get_similar", MediaRefInput, make_get_similar(seerr))
    tools.register("get_ratings", MediaRefInput, make_get_ratings(seerr))

    openai_tools = _define_openai_tools()
    return openai_tools, tools
