from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from integrations.omdb_client import OmdbClient
from .schemas import VerifyImdbInput


def _format_verification(details: Dict[str, Any]) -> str:
    lines = [
        "IMDB Verification:",
        f"Title: {details.get('Title')} ({details.get('Year')})",
        f"IMDB ID: {details.get('imdbID')}",
        f"Type: {details.get('Type')}",
        f"Rating: {details.get('imdbRating')}/10 ({details.get('imdbVotes')} votes)",
        f"Genre: {details.get('Genre')}",
        f"Director: {details.get('Director')}",
        f"Actors: {details.get('Actors')}",
    ]
    if details.get("totalSeasons"):
        lines.append(f"Seasons: {details['totalSeasons']}")
    lines.append("")
    lines.append(f"Plot: {details.get('Plot')}")
    return "\n".join(lines)


def make_verify_imdb(omdb: OmdbClient) -> Callable[[VerifyImdbInput], Awaitable[str]]:
    async def impl(args: VerifyImdbInput) -> str:
        if args.imdb_id:
            details = await omdb.get_by_imdb_id(args.imdb_id)
            if details.get("Response") == "False":
                return f"IMDB lookup failed: {details.get('Error') or 'Not found'}"
            return _format_verification(details)

        if args.title:
            found = await omdb.search_by_title(args.title, year=args.year, type=args.media_type)
            hits = found.get("Search") or []
            if found.get("Response") == "False" or not hits:
                return f"IMDB search failed: {found.get('Error') or 'No results found'}"
            lines = [
                f"{i + 1}. {r.get('Title')} ({r.get('Year')}) - {r.get('Type')} [{r.get('imdbID')}]"
                for i, r in enumerate(hits[:5])
            ]
            return f'IMDB Search Results for "{args.title}":\n\n' + "\n".join(lines)

        return "Please provide either an IMDB ID or a title to search."

    return impl
