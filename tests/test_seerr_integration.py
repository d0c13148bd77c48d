import pytest

from integrations.seerr_client import ErrorKind, SeerrClient, SeerrError


@pytest.mark.integration
class TestSeerrIntegration:
    """Read-only checks against a live Seerr server. Nothing is requested or approved."""

    @pytest.fixture(scope="class")
    def seerr(self, seerr_config):
        return SeerrClient(seerr_config["url"], seerr_config["api_key"])

    @pytest.mark.asyncio
    async def test_search_with_spaces(self, seerr):
        out = await seerr.search("The Matrix")
        assert isinstance(out.get("results"), list)
        assert any(r.get("id") == 603 for r in out["results"])

    @pytest.mark.asyncio
    async def test_movie_and_tv_details(self, seerr):
        movie = await seerr.get_movie_details(27205)
        assert movie["title"] == "Inception"
        tv = await seerr.get_tv_details(1399)
        assert any(s.get("seasonNumber") == 1 for s in tv.get("seasons", []))

    @pytest.mark.asyncio
    async def test_discover_endpoints(self, seerr):
        trending = await seerr.discover_trending()
        upcoming = await seerr.discover_upcoming_movies()
        assert isinstance(trending.get("results"), list)
        assert isinstance(upcoming.get("results"), list)

    @pytest.mark.asyncio
    async def test_list_pending_requests(self, seerr):
        out = await seerr.list_requests("pending")
        assert "pageInfo" in out

    @pytest.mark.asyncio
    async def test_unknown_request_is_not_found(self, seerr):
        with pytest.raises(SeerrError) as excinfo:
            await seerr.approve_request(999999999)
        assert excinfo.value.kind in (ErrorKind.NOT_FOUND, ErrorKind.PERMISSION)
