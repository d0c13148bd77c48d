import pytest

from bot.tools.formatting import (
    MOVIE_GENRE_MAP,
    TV_GENRE_MAP,
    format_filter_description,
    format_media_result,
    get_media_status_text,
    get_request_status_text,
    parse_year_from_query,
    truncate_overview,
)


@pytest.mark.parametrize("query,expected", [
    ("Anaconda (2025)", ("Anaconda", "2025")),
    ("Anaconda [2025]", ("Anaconda", "2025")),
    ("Anaconda - 2025", ("Anaconda", "2025")),
    ("Anaconda 2025", ("Anaconda", "2025")),
    ("Anaconda (2025)  ", ("Anaconda", "2025")),
    ("Anaconda", ("Anaconda", None)),
    ("2001: A Space Odyssey", ("2001: A Space Odyssey", None)),
    ("Blade Runner 2049", ("Blade Runner", "2049")),
])
def test_parse_year_from_query(query, expected):
    assert parse_year_from_query(query) == expected


def test_parenthesised_year_wins_over_bare_year():
    # Only the trailing "(1999)" is stripped; the bare year stays in the title
    assert parse_year_from_query("Blade Runner 2049 (1999)") == ("Blade Runner 2049", "1999")


def test_status_tables():
    assert get_media_status_text(None) == "Not Requested"
    assert get_media_status_text(1) == "Not Requested"
    assert get_media_status_text(2) == "Pending"
    assert get_media_status_text(3) == "Requested"
    assert get_media_status_text(4) == "Partially Available"
    assert get_media_status_text(5) == "Available"
    assert get_media_status_text(6) == "Blacklisted"
    assert get_request_status_text(1) == "Pending"
    assert get_request_status_text(5) == "Completed"
    assert get_request_status_text(99) == "Unknown"


def test_truncate_overview():
    assert truncate_overview(None) == "No overview available."
    assert truncate_overview("") == "No overview available."
    assert truncate_overview("short") == "short"
    long = "x" * 250
    out = truncate_overview(long)
    assert out == "x" * 200 + "..."


def test_format_media_result_layout():
    r = {"id": 603, "title": "The Matrix", "releaseDate": "1999-03-31", "voteAverage": 8.2,
         "overview": "A hacker learns the truth.", "posterPath": "/m.jpg"}
    out = format_media_result(r, 0, "movie")
    assert out == (
        "1. The Matrix (1999)\n"
        "Rating: 8.2/10\n"
        "https://www.themoviedb.org/movie/603\n\n"
        "A hacker learns the truth.\n"
        "[POSTER:https://image.tmdb.org/t/p/w342/m.jpg]"
    )


def test_format_media_result_variants():
    r = {"id": 1, "name": "Show", "firstAirDate": "2026-02-01", "voteAverage": 0}
    out = format_media_result(r, 2, "tv", show_media_type=True, use_full_date=True)
    assert out.startswith("3. Show (2026-02-01) - TV\nRating: N/A\n")
    assert "[POSTER:" not in out
    missing = format_media_result({"id": 2, "title": "X"}, 0, "movie")
    assert missing.startswith("1. X (TBA)")


def test_filter_description():
    assert format_filter_description(None, None, None) == ""
    assert format_filter_description(2026, "comedy", 7.0) == " (from 2026, comedy, rated 7+)"
    assert format_filter_description(None, None, 7.5) == " (rated 7.5+)"


def test_genre_aliases():
    assert MOVIE_GENRE_MAP["sci-fi"] == MOVIE_GENRE_MAP["science fiction"] == 878
    assert TV_GENRE_MAP["sci-fi"] == 10765
    assert TV_GENRE_MAP["action"] == 10759
