from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from integrations.seerr_client import ErrorKind, SeerrClient, SeerrError
from .formatting import (
    MAX_LIST_RESULTS,
    MOVIE_GENRE_MAP,
    MOVIE_SORT_MAP,
    TV_GENRE_MAP,
    TV_SORT_MAP,
    format_date,
    format_filter_description,
    format_media_result,
    format_timestamp,
    get_request_status_text,
    item_date,
    join_sections,
    media_status_of,
    parse_year_from_query,
    poster_tag,
    tmdb_url,
    year_of,
)
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
)


def _kind_label(media_type: str, plural: bool = False) -> str:
    if media_type == "movie":
        return "movies" if plural else "movie"
    return "TV shows" if plural else "TV show"


def make_search_media(seerr: SeerrClient) -> Callable[[SearchMediaInput], Awaitable[str]]:
    async def impl(args: SearchMediaInput) -> str:
        title, target_year = parse_year_from_query(args.query)
        response = await seerr.search(title)
        results = [r for r in response.get("results") or [] if r.get("mediaType") in ("movie", "tv")]
        if not results:
            return f'No results found for "{title}". Try a different search term.'

        if target_year:
            # Stable partition: same-year matches first, original order otherwise
            matching = [r for r in results if year_of(item_date(r)) == target_year]
            others = [r for r in results if year_of(item_date(r)) != target_year]
            results = matching + others
        results = results[:MAX_LIST_RESULTS]

        lines = []
        for i, r in enumerate(results):
            name = r.get("title") or r.get("name") or "Unknown"
            kind = "Movie" if r["mediaType"] == "movie" else "TV"
            lines.append(
                f"{i + 1}. {name} ({year_of(item_date(r)) or 'TBA'}) - {kind} - "
                f"TMDB:{r.get('id')} - {tmdb_url(r['mediaType'], r.get('id'))}"
            )
        year_note = f" (prioritizing {target_year})" if target_year else ""
        total = response.get("totalResults", len(results))
        return (
            f"Found {total} results{year_note}. Top matches:\n\n"
            + "\n".join(lines)
            + poster_tag(results[0].get("posterPath"))
        )

    return impl


def _format_movie_details(movie: Dict[str, Any]) -> str:
    lines = [
        f"Movie: {movie.get('title')} ({year_of(movie.get('releaseDate')) or 'N/A'})",
        f"Status: {media_status_of(movie)}",
        f"Rating: {float(movie.get('voteAverage') or 0):.1f}/10",
        f"Runtime: {movie.get('runtime') or 'N/A'} minutes",
        f"Genres: {', '.join(g.get('name', '') for g in movie.get('genres') or [])}",
        f"TMDB: {tmdb_url('movie', movie.get('id'))}",
    ]
    if movie.get("imdbId"):
        lines.append(f"IMDB: https://www.imdb.com/title/{movie['imdbId']}")
    lines.append("")
    lines.append(f"Overview: {movie.get('overview') or 'No overview available.'}")
    return "\n".join(lines) + poster_tag(movie.get("posterPath"))


def _format_tv_details(tv: Dict[str, Any]) -> str:
    lines = [
        f"TV Show: {tv.get('name')} ({year_of(tv.get('firstAirDate')) or 'N/A'})",
        f"Status: {media_status_of(tv)}",
        f"Rating: {float(tv.get('voteAverage') or 0):.1f}/10",
        f"Seasons: {tv.get('numberOfSeasons')} ({tv.get('numberOfEpisodes')} episodes)",
        f"Genres: {', '.join(g.get('name', '') for g in tv.get('genres') or [])}",
        f"Show Status: {tv.get('status')}",
        f"TMDB: {tmdb_url('tv', tv.get('id'))}",
    ]
    imdb_id = (tv.get("externalIds") or {}).get("imdbId")
    if imdb_id:
        lines.append(f"IMDB: https://www.imdb.com/title/{imdb_id}")
    lines.append("")
    for s in tv.get("seasons") or []:
        # Season 0 holds specials
        if (s.get("seasonNumber") or 0) <= 0:
            continue
        aired = f" ({year_of(s['airDate'])})" if s.get("airDate") else ""
        lines.append(f"  S{s['seasonNumber']}: {s.get('episodeCount')} eps{aired}")
    lines.append("")
    lines.append(f"Overview: {tv.get('overview') or 'No overview available.'}")
    return "\n".join(lines) + poster_tag(tv.get("posterPath"))


def make_get_media_details(seerr: SeerrClient) -> Callable[[MediaRefInput], Awaitable[str]]:
    async def impl(args: MediaRefInput) -> str:
        if args.media_type == "movie":
            return _format_movie_details(await seerr.get_movie_details(args.tmdb_id))
        return _format_tv_details(await seerr.get_tv_details(args.tmdb_id))

    return impl


def make_request_media(seerr: SeerrClient) -> Callable[[RequestMediaInput], Awaitable[str]]:
    async def impl(args: RequestMediaInput) -> str:
        if args.media_type == "tv" and not args.seasons:
            return (
                "Error: For TV shows, you must specify which seasons to request. "
                "Use get_media_details first to see available seasons."
            )
        try:
            if args.media_type == "movie":
                response = await seerr.request_movie(args.tmdb_id)
            else:
                response = await seerr.request_tv(args.tmdb_id, args.seasons or [])
        except SeerrError as e:
            if e.kind is ErrorKind.CONFLICT:
                return "This media has already been requested or is already available."
            raise

        status = get_request_status_text(response.get("status"))
        created = format_timestamp(response.get("createdAt"))
        if args.media_type == "movie":
            return (
                "Movie request submitted successfully!\n"
                f"Request ID: {response.get('id')}\n"
                f"Status: {status}\n"
                f"Created: {created}"
            )
        seasons_list = ", ".join(str(n) for n in sorted(args.seasons or []))
        return (
            "TV show request submitted successfully!\n"
            f"Request ID: {response.get('id')}\n"
            f"Seasons requested: {seasons_list}\n"
            f"Status: {status}\n"
            f"Created: {created}"
        )

    return impl


async def _fetch_media_title(seerr: SeerrClient, req: Dict[str, Any]) -> Tuple[str, str]:
    tmdb_id = (req.get("media") or {}).get("tmdbId")
    try:
        if req.get("type") == "movie":
            details = await seerr.get_movie_details(tmdb_id)
            return details.get("title") or f"Unknown (TMDB {tmdb_id})", year_of(details.get("releaseDate"))
        details = await seerr.get_tv_details(tmdb_id)
        return details.get("name") or f"Unknown (TMDB {tmdb_id})", year_of(details.get("firstAirDate"))
    except Exception:
        # A missing title must not sink the whole listing
        return f"Unknown (TMDB {tmdb_id})", ""


def _requester_name(user: Dict[str, Any]) -> str:
    return user.get("displayName") or user.get("username") or (user.get("email") or "unknown").split("@")[0]


def make_list_requests(seerr: SeerrClient) -> Callable[[ListRequestsInput], Awaitable[str]]:
    async def impl(args: ListRequestsInput) -> str:
        status_filter = args.status or "pending"
        response = await seerr.list_requests(status_filter)
        results: List[Dict[str, Any]] = response.get("results") or []
        if not results:
            return f"No {status_filter} requests found."

        titles = await asyncio.gather(*(_fetch_media_title(seerr, req) for req in results))

        lines = []
        for req, (title, year) in zip(results, titles):
            kind = "Movie" if req.get("type") == "movie" else "TV"
            season_info = ""
            if req.get("type") == "tv" and req.get("seasons"):
                season_info = " S" + ", ".join(str(s.get("seasonNumber")) for s in req["seasons"])
            year_str = f" ({year})" if year else ""
            lines.append(
                f"#{req.get('id')}: {title}{year_str} - {kind}{season_info} | "
                f"Requested by: {_requester_name(req.get('requestedBy') or {})} | "
                f"Status: {get_request_status_text(req.get('status'))} | "
                f"{format_date(req.get('createdAt'))}"
            )

        total = (response.get("pageInfo") or {}).get("results", len(results))
        shown = len(results)
        count = f"{shown} of {total}" if total > shown else f"{shown}"
        return f"{status_filter.capitalize()} requests ({count}):\n\n" + "\n".join(lines)

    return impl


def _request_error_text(e: SeerrError, request_id: int, action: str) -> str:
    if e.kind is ErrorKind.PERMISSION:
        return "Permission denied. The API key doesn't have MANAGE_REQUESTS permission."
    if e.kind is ErrorKind.NOT_FOUND:
        return f"Request #{request_id} not found. Use list_requests to see available requests."
    return f"Error {action} request: {e}"


def _request_media_label(response: Dict[str, Any]) -> Tuple[str, str]:
    media = response.get("media") or {}
    title = media.get("title") or media.get("name") or f"TMDB {media.get('tmdbId')}"
    kind = "Movie" if response.get("type") == "movie" else "TV Show"
    return kind, title


def make_approve_request(seerr: SeerrClient) -> Callable[[RequestIdInput], Awaitable[str]]:
    async def impl(args: RequestIdInput) -> str:
        try:
            response = await seerr.approve_request(args.request_id)
        except SeerrError as e:
            return _request_error_text(e, args.request_id, "approving")
        kind, title = _request_media_label(response)
        processor = "Radarr" if response.get("type") == "movie" else "Sonarr"
        return (
            f"Approved request #{args.request_id}!\n{kind}: {title}\n"
            f"The request has been sent to {processor} for processing."
        )

    return impl


def make_decline_request(seerr: SeerrClient) -> Callable[[RequestIdInput], Awaitable[str]]:
    async def impl(args: RequestIdInput) -> str:
        try:
            response = await seerr.decline_request(args.request_id)
        except SeerrError as e:
            return _request_error_text(e, args.request_id, "declining")
        kind, title = _request_media_label(response)
        return f"Declined request #{args.request_id}.\n{kind}: {title}\nThe requester will be notified."

    return impl


def make_discover_trending(seerr: SeerrClient) -> Callable[[DiscoverTrendingInput], Awaitable[str]]:
    async def impl(args: DiscoverTrendingInput) -> str:
        response = await seerr.discover_trending()
        results = response.get("results") or []
        if not results:
            return "No trending content found."
        if args.media_type and args.media_type != "all":
            results = [r for r in results if r.get("mediaType") == args.media_type]
        results = [r for r in results if r.get("mediaType") in ("movie", "tv")][:MAX_LIST_RESULTS]
        if not results:
            return "No trending content found."
        sections = [format_media_result(r, i, r["mediaType"], show_media_type=True) for i, r in enumerate(results)]
        return join_sections("Trending now:", sections)

    return impl


def make_discover_upcoming(seerr: SeerrClient) -> Callable[[DiscoverUpcomingInput], Awaitable[str]]:
    async def impl(args: DiscoverUpcomingInput) -> str:
        if args.media_type == "movie":
            response = await seerr.discover_upcoming_movies()
        else:
            response = await seerr.discover_upcoming_tv()
        label = _kind_label(args.media_type, plural=True)
        results = (response.get("results") or [])[:MAX_LIST_RESULTS]
        if not results:
            return f"No upcoming {label} found."
        sections = [format_media_result(r, i, args.media_type, use_full_date=True) for i, r in enumerate(results)]
        return join_sections(f"Upcoming {label}:", sections)

    return impl


def make_discover_movies(seerr: SeerrClient) -> Callable[[DiscoverMoviesInput], Awaitable[str]]:
    async def impl(args: DiscoverMoviesInput) -> str:
        # Unknown genre names simply drop the filter
        genre_id = MOVIE_GENRE_MAP.get(args.genre.lower()) if args.genre else None
        response = await seerr.discover_movies(
            year=args.year,
            genre=genre_id,
            min_rating=args.min_rating,
            sort_by=MOVIE_SORT_MAP[args.sort_by or "popularity"],
        )
        results = (response.get("results") or [])[:MAX_LIST_RESULTS]
        if not results:
            return "No movies found matching criteria."
        sections = [format_media_result(r, i, "movie") for i, r in enumerate(results)]
        desc = format_filter_description(args.year, args.genre, args.min_rating)
        return join_sections(f"Top movies{desc}:", sections)

    return impl


def make_discover_tv(seerr: SeerrClient) -> Callable[[DiscoverTvInput], Awaitable[str]]:
    async def impl(args: DiscoverTvInput) -> str:
        genre_id = TV_GENRE_MAP.get(args.genre.lower()) if args.genre else None
        response = await seerr.discover_tv(
            year=args.year,
            genre=genre_id,
            min_rating=args.min_rating,
            sort_by=TV_SORT_MAP[args.sort_by or "popularity"],
        )
        results = (response.get("results") or [])[:MAX_LIST_RESULTS]
        if not results:
            return "No TV shows found matching criteria."
        sections = [format_media_result(r, i, "tv") for i, r in enumerate(results)]
        desc = format_filter_description(args.year, args.genre, args.min_rating)
        return join_sections(f"Top TV shows{desc}:", sections)

    return impl


def make_get_similar(seerr: SeerrClient) -> Callable[[MediaRefInput], Awaitable[str]]:
    async def impl(args: MediaRefInput) -> str:
        if args.media_type == "movie":
            response = await seerr.get_similar_movies(args.tmdb_id)
        else:
            response = await seerr.get_similar_tv(args.tmdb_id)
        label = _kind_label(args.media_type, plural=True)
        results = (response.get("results") or [])[:MAX_LIST_RESULTS]
        if not results:
            return f"No similar {label} found."
        sections = [format_media_result(r, i, args.media_type) for i, r in enumerate(results)]
        return join_sections(f"Similar {label}:", sections)

    return impl


def _format_rt_score(rt: Dict[str, Any]) -> List[str]:
    parts = []
    if rt.get("criticsScore"):
        parts.append(f"{rt['criticsScore']}% Critics")
    if rt.get("audienceScore"):
        parts.append(f"{rt['audienceScore']}% Audience")
    if not parts:
        return []
    lines = [f"Rotten Tomatoes: {' / '.join(parts)}"]
    if rt.get("url"):
        lines.append(f"  {rt['url']}")
    return lines


def make_get_ratings(seerr: SeerrClient) -> Callable[[MediaRefInput], Awaitable[str]]:
    async def impl(args: MediaRefInput) -> str:
        label = _kind_label(args.media_type)
        lines: List[str] = []
        try:
            if args.media_type == "movie":
                ratings = await seerr.get_movie_ratings(args.tmdb_id) or {}
                if ratings.get("rt"):
                    lines.extend(_format_rt_score(ratings["rt"]))
                imdb = ratings.get("imdb") or {}
                if imdb.get("criticsScore"):
                    lines.append(f"IMDB: {imdb['criticsScore']}/10")
                    if imdb.get("url"):
                        lines.append(f"  {imdb['url']}")
            else:
                lines.extend(_format_rt_score(await seerr.get_tv_ratings(args.tmdb_id) or {}))
        except SeerrError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                return f"No ratings found for this {label}."
            return f"Error fetching ratings: {e}"
        if not lines:
            return f"No ratings available for this {label}."
        return "\n".join(lines)

    return impl
