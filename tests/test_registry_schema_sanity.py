import pytest

from bot.tools.registry import ToolRegistry, _define_openai_tools, build_tools_and_registry
from bot.tools.schemas import RequestIdInput, SearchMediaInput


EXPECTED_TOOLS = {
    "search_media", "get_media_details", "verify_imdb", "request_media", "list_requests",
    "approve_request", "decline_request", "discover_trending", "discover_upcoming",
    "discover_movies", "discover_tv", "get_similar", "get_ratings",
}


def _param_types(prop):
    t = prop.get("type")
    return t if isinstance(t, list) else [t]


def test_array_params_have_items():
    for t in _define_openai_tools():
        params = t["function"]["parameters"]["properties"]
        for name, prop in params.items():
            if "array" in _param_types(prop):
                assert "items" in prop, f"array param {name} missing items"


def test_declared_tools_match_registry():
    tools, registry = build_tools_and_registry(seerr=object(), omdb=object())
    declared = {t["function"]["name"] for t in tools}
    assert declared == EXPECTED_TOOLS
    assert set(registry.names()) == EXPECTED_TOOLS


def test_schema_properties_match_input_models():
    _, registry = build_tools_and_registry(seerr=object(), omdb=object())
    for t in _define_openai_tools():
        fn = t["function"]
        model, _ = registry._tools[fn["name"]]
        assert set(fn["parameters"]["properties"]) == set(model.model_fields), fn["name"]
        # Every required schema field is required on the model too
        for req in fn["parameters"]["required"]:
            assert model.model_fields[req].is_required(), (fn["name"], req)


def test_nullable_enums_include_none():
    for t in _define_openai_tools():
        for prop in t["function"]["parameters"]["properties"].values():
            if "enum" in prop and "null" in _param_types(prop):
                assert None in prop["enum"]


def test_duplicate_registration_rejected():
    reg = ToolRegistry()

    async def noop(args):
        return ""

    reg.register("x", SearchMediaInput, noop)
    with pytest.raises(ValueError):
        reg.register("x", SearchMediaInput, noop)


@pytest.mark.asyncio
async def test_dispatch_reports_validation_errors_as_text():
    reg = ToolRegistry()

    async def approve(args: RequestIdInput) -> str:
        return f"approved {args.request_id}"

    reg.register("approve_request", RequestIdInput, approve)

    assert await reg.dispatch("approve_request", {"request_id": 5}) == "approved 5"
    out = await reg.dispatch("approve_request", {})
    assert out.startswith("Invalid input for approve_request: request_id:")
    out = await reg.dispatch("approve_request", {"request_id": "abc"})
    assert out.startswith("Invalid input for approve_request: request_id:")


@pytest.mark.asyncio
async def test_dispatch_turns_tool_exceptions_into_text():
    reg = ToolRegistry()

    async def boom(args):
        raise RuntimeError("upstream down")

    reg.register("search_media", SearchMediaInput, boom)
    assert await reg.dispatch("search_media", {"query": "x"}) == "Error: upstream down"
    assert await reg.dispatch("nope", {}) == "Unknown tool: nope"


@pytest.mark.asyncio
async def test_tv_request_without_seasons_through_registry():
    class NoCalls:
        def __getattr__(self, name):
            raise AssertionError(f"unexpected call {name}")

    _, registry = build_tools_and_registry(seerr=NoCalls(), omdb=NoCalls())
    out = await registry.dispatch("request_media", {"tmdb_id": 1399, "media_type": "tv"})
    assert out.startswith("Error: For TV shows, you must specify which seasons to request.")
