from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w342"
SECTION_SEPARATOR = "\n\n---\n\n"
MAX_LIST_RESULTS = 10

# TMDB genre ids; several aliases map to one id
MOVIE_GENRE_MAP: Dict[str, int] = {
    "action": 28,
    "adventure": 12,
    "animation": 16,
    "comedy": 35,
    "crime": 80,
    "documentary": 99,
    "drama": 18,
    "family": 10751,
    "fantasy": 14,
    "history": 36,
    "horror": 27,
    "music": 10402,
    "mystery": 9648,
    "romance": 10749,
    "science fiction": 878,
    "sci-fi": 878,
    "scifi": 878,
    "thriller": 53,
    "war": 10752,
    "western": 37,
}

TV_GENRE_MAP: Dict[str, int] = {
    "action & adventure": 10759,
    "action": 10759,
    "adventure": 10759,
    "animation": 16,
    "comedy": 35,
    "crime": 80,
    "documentary": 99,
    "drama": 18,
    "family": 10751,
    "kids": 10762,
    "mystery": 9648,
    "news": 10763,
    "reality": 10764,
    "sci-fi & fantasy": 10765,
    "science fiction": 10765,
    "sci-fi": 10765,
    "scifi": 10765,
    "fantasy": 10765,
    "soap": 10766,
    "talk": 10767,
    "war & politics": 10768,
    "war": 10768,
    "western": 37,
}

MOVIE_SORT_MAP: Dict[str, str] = {
    "popularity": "popularity.desc",
    "rating": "vote_average.desc",
    "release_date": "release_date.desc",
}

TV_SORT_MAP: Dict[str, str] = {
    "popularity": "popularity.desc",
    "rating": "vote_average.desc",
    "first_air_date": "first_air_date.desc",
}

# Tried in order; all anchored at the end of the query
_YEAR_PATTERNS = [
    re.compile(r"\((\d{4})\)\s*$"),
    re.compile(r"\[(\d{4})\]\s*$"),
    re.compile(r"\s*-\s*(\d{4})\s*$"),
    re.compile(r"\s+(\d{4})\s*$"),
]


def parse_year_from_query(query: str) -> Tuple[str, Optional[str]]:
    """Split a trailing year off a search query.

    >>> parse_year_from_query("Anaconda (2025)")
    ('Anaconda', '2025')
    >>> parse_year_from_query("Blade Runner 2049")
    ('Blade Runner', '2049')
    """
    for pattern in _YEAR_PATTERNS:
        m = pattern.search(query)
        if m:
            return pattern.sub("", query, count=1).strip(), m.group(1)
    return query, None


def get_media_status_text(status: Optional[int]) -> str:
    return {
        2: "Pending",
        3: "Requested",
        4: "Partially Available",
        5: "Available",
        6: "Blacklisted",
    }.get(status or 0, "Not Requested")


def media_status_of(item: Dict[str, Any]) -> str:
    info = item.get("mediaInfo")
    if not info:
        return "Not Requested"
    return get_media_status_text(info.get("status"))


def get_request_status_text(status: Optional[int]) -> str:
    return {
        1: "Pending",
        2: "Approved",
        3: "Declined",
        4: "Failed",
        5: "Completed",
    }.get(status or 0, "Unknown")


def truncate_overview(overview: Optional[str], max_length: int = 200) -> str:
    if not overview:
        return "No overview available."
    if len(overview) <= max_length:
        return overview
    return overview[:max_length] + "..."


def poster_tag(poster_path: Optional[str]) -> str:
    return f"\n[POSTER:{TMDB_IMAGE_BASE}{poster_path}]" if poster_path else ""


def tmdb_url(media_type: str, tmdb_id: Any) -> str:
    return f"https://www.themoviedb.org/{media_type}/{tmdb_id}"


def year_of(date_str: Optional[str]) -> str:
    return (date_str or "")[:4]


def item_date(item: Dict[str, Any]) -> str:
    return item.get("releaseDate") or item.get("firstAirDate") or ""


def format_media_result(result: Dict[str, Any], index: int, media_type: str, *,
                        show_media_type: bool = False, use_full_date: bool = False) -> str:
    """One numbered list section as shown by the discovery tools."""
    title = result.get("title") or result.get("name") or "Unknown"
    date_field = result.get("releaseDate") if media_type == "movie" else result.get("firstAirDate")
    if use_full_date:
        date_display = date_field or "TBA"
    else:
        date_display = year_of(date_field) or "TBA"
    type_label = f" - {'Movie' if media_type == 'movie' else 'TV'}" if show_media_type else ""
    vote = result.get("voteAverage")
    rating = f"{float(vote):.1f}/10" if vote else "N/A"
    return (
        f"{index + 1}. {title} ({date_display}){type_label}\n"
        f"Rating: {rating}\n"
        f"{tmdb_url(media_type, result.get('id'))}\n\n"
        f"{truncate_overview(result.get('overview'))}{poster_tag(result.get('posterPath'))}"
    )


def join_sections(header: str, sections: List[str]) -> str:
    return f"{header}\n\n{SECTION_SEPARATOR.join(sections)}"


def format_filter_description(year: Optional[int], genre: Optional[str], min_rating: Optional[float]) -> str:
    filters: List[str] = []
    if year:
        filters.append(f"from {year}")
    if genre:
        filters.append(genre)
    if min_rating:
        filters.append(f"rated {min_rating:g}+")
    return f" ({', '.join(filters)})" if filters else ""


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_timestamp(value: Optional[str]) -> str:
    dt = _parse_iso(value)
    return dt.strftime("%Y-%m-%d %H:%M") if dt else (value or "unknown")


def format_date(value: Optional[str]) -> str:
    dt = _parse_iso(value)
    return dt.strftime("%Y-%m-%d") if dt else (value or "unknown")
