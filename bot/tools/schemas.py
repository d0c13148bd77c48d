"""
Input models for the agent tools.

Arguments arrive as JSON text from the model; the registry validates them
against these models before a tool runs, so tool bodies can trust types.
Optional fields accept an explicit null because models often send one.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


MediaType = Literal["movie", "tv"]


class SearchMediaInput(BaseModel):
    query: str = Field(..., min_length=1, description="Title to search for, optionally with a year")


class MediaRefInput(BaseModel):
    """A TMDB id plus its kind; shared by details, similar and ratings."""

    tmdb_id: int = Field(..., description="TMDB id of the movie or show")
    media_type: MediaType = Field(..., description="movie or tv")


class VerifyImdbInput(BaseModel):
    # Models often send the year as a number
    model_config = ConfigDict(coerce_numbers_to_str=True)

    imdb_id: Optional[str] = Field(None, description="IMDB id such as tt1375666")
    title: Optional[str] = Field(None, description="Title to search OMDb for")
    year: Optional[str] = Field(None, description="Release year to narrow the search")
    media_type: Optional[Literal["movie", "series"]] = Field(None, description="OMDb type filter")


class RequestMediaInput(BaseModel):
    tmdb_id: int
    media_type: MediaType
    seasons: Optional[List[int]] = Field(None, description="Season numbers, required for TV")


class ListRequestsInput(BaseModel):
    status: Optional[Literal["pending", "approved", "processing", "available", "failed"]] = None


class RequestIdInput(BaseModel):
    request_id: int = Field(..., description="Seerr request id as shown by list_requests")


class DiscoverTrendingInput(BaseModel):
    media_type: Optional[Literal["movie", "tv", "all"]] = None


class DiscoverUpcomingInput(BaseModel):
    media_type: MediaType


class DiscoverMoviesInput(BaseModel):
    year: Optional[int] = None
    genre: Optional[str] = None
    min_rating: Optional[float] = Field(None, ge=0, le=10)
    sort_by: Optional[Literal["popularity", "rating", "release_date"]] = None


class DiscoverTvInput(BaseModel):
    year: Optional[int] = None
    genre: Optional[str] = None
    min_rating: Optional[float] = Field(None, ge=0, le=10)
    sort_by: Optional[Literal["popularity", "rating", "first_air_date"]] = None
