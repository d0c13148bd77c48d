import pytest
from unittest.mock import patch, Mock, AsyncMock

from integrations.seerr_client import ErrorKind, SeerrClient, SeerrError


def make_response(data, status_code=200, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = data
    resp.text = text
    return resp


def setup_async_client(mock_async_client, response_by_method):
    client = AsyncMock()
    mock_async_client.return_value = client
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    for method_name, resp in response_by_method.items():
        getattr(client, method_name).return_value = resp
    return client


@pytest.mark.asyncio
async def test_client_sends_api_key_header():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        setup_async_client(MockAsyncClient, {"get": make_response({"id": 1})})

        sc = SeerrClient("http://seerr:5055/", "secret")
        await sc.get_movie_details(1)

        kwargs = MockAsyncClient.call_args.kwargs
        assert kwargs["base_url"] == "http://seerr:5055"
        assert kwargs["headers"]["X-Api-Key"] == "secret"
        assert kwargs["headers"]["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_search_percent_encodes_spaces():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        client = setup_async_client(MockAsyncClient, {"get": make_response({"results": []})})

        sc = SeerrClient("http://seerr:5055", "secret")
        await sc.search("The Matrix: Reloaded & more")

        client.get.assert_called_once_with("/api/v1/search?query=The%20Matrix%3A%20Reloaded%20%26%20more")


@pytest.mark.asyncio
async def test_details_endpoints():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        client = setup_async_client(MockAsyncClient, {"get": make_response({"title": "Inception"})})

        sc = SeerrClient("http://seerr:5055", "secret")
        out = await sc.get_movie_details(27205)
        assert out == {"title": "Inception"}
        client.get.assert_called_with("/api/v1/movie/27205")

        await sc.get_tv_details(1399)
        client.get.assert_called_with("/api/v1/tv/1399")

        await sc.get_movie_ratings(27205)
        client.get.assert_called_with("/api/v1/movie/27205/ratingscombined")

        await sc.get_tv_ratings(1399)
        client.get.assert_called_with("/api/v1/tv/1399/ratings")


@pytest.mark.asyncio
async def test_request_payloads():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        client = setup_async_client(MockAsyncClient, {"post": make_response({"id": 5}, status_code=201)})

        sc = SeerrClient("http://seerr:5055", "secret")
        out = await sc.request_movie(27205)
        assert out == {"id": 5}
        client.post.assert_called_with(
            "/api/v1/request", json={"mediaType": "movie", "mediaId": 27205, "is4k": False}
        )

        await sc.request_tv(1399, [1, 2])
        client.post.assert_called_with(
            "/api/v1/request", json={"mediaType": "tv", "mediaId": 1399, "seasons": [1, 2], "is4k": False}
        )


@pytest.mark.asyncio
async def test_approve_and_decline_post_without_body():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        client = setup_async_client(MockAsyncClient, {"post": make_response({"id": 9})})

        sc = SeerrClient("http://seerr:5055", "secret")
        await sc.approve_request(9)
        client.post.assert_called_with("/api/v1/request/9/approve")
        await sc.decline_request(9)
        client.post.assert_called_with("/api/v1/request/9/decline")


@pytest.mark.asyncio
async def test_list_requests_params():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        client = setup_async_client(MockAsyncClient, {"get": make_response({"results": []})})

        sc = SeerrClient("http://seerr:5055", "secret")
        await sc.list_requests("pending")
        client.get.assert_called_with("/api/v1/request", params={"take": 20, "filter": "pending"})

        await sc.list_requests()
        client.get.assert_called_with("/api/v1/request", params={"take": 20})


@pytest.mark.asyncio
async def test_discover_params_for_year_genre_rating():
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        client = setup_async_client(MockAsyncClient, {"get": make_response({"results": []})})

        sc = SeerrClient("http://seerr:5055", "secret")
        await sc.discover_movies(year=2026, genre=35, min_rating=7.0, sort_by="popularity.desc")
        client.get.assert_called_with("/api/v1/discover/movies", params={
            "sortBy": "popularity.desc",
            "primaryReleaseDateGte": "2026-01-01",
            "primaryReleaseDateLte": "2026-12-31",
            "genre": 35,
            "voteAverageGte": 7.0,
        })

        await sc.discover_tv(year=2020)
        client.get.assert_called_with("/api/v1/discover/tv", params={
            "firstAirDateGte": "2020-01-01",
            "firstAirDateLte": "2020-12-31",
        })

        await sc.discover_trending()
        client.get.assert_called_with("/api/v1/discover/trending", params={"page": 1})

        await sc.discover_upcoming_tv()
        client.get.assert_called_with("/api/v1/discover/tv/upcoming", params={"page": 1})

        await sc.get_similar_movies(603)
        client.get.assert_called_with("/api/v1/movie/603/similar", params={"page": 1})


@pytest.mark.asyncio
@pytest.mark.parametrize("status,body,kind", [
    (403, "Forbidden", ErrorKind.PERMISSION),
    (404, "Not Found", ErrorKind.NOT_FOUND),
    (409, "Conflict", ErrorKind.CONFLICT),
    (400, "Request for this media already exists", ErrorKind.CONFLICT),
    (500, "Internal Server Error", ErrorKind.OTHER),
])
async def test_non_2xx_raises_seerr_error(status, body, kind):
    with patch('integrations.seerr_client.httpx.AsyncClient') as MockAsyncClient:
        setup_async_client(MockAsyncClient, {"get": make_response(None, status_code=status, text=body)})

        sc = SeerrClient("http://seerr:5055", "secret")
        with pytest.raises(SeerrError) as excinfo:
            await sc.get_movie_details(1)

        err = excinfo.value
        assert err.status == status
        assert err.kind is kind
        assert str(err) == f"Seerr API error ({status}): {body}"
