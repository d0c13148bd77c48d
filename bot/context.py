from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config.loader import (
    Settings,
    load_runtime_config,
    load_settings,
    resolve_agent_limits,
    resolve_llm_selection,
    resolve_session_limits,
    resolve_session_timing,
)
from integrations.http_client import HttpConfig, SharedHttpClient
from integrations.omdb_client import OmdbClient
from integrations.seerr_client import SeerrClient
from llm.clients import LLMClient
from .agent import Agent
from .sessions import SessionStore
from .tools.registry import build_tools_and_registry


log = logging.getLogger("seerrbot.bot")


@dataclass
class BotContext:
    """Everything that lives for the whole process, built once at startup."""

    settings: Settings
    llm: LLMClient
    seerr: SeerrClient
    omdb: OmdbClient
    http: SharedHttpClient
    agent: Agent
    sessions: SessionStore
    sweep_interval_sec: float

    async def aclose(self) -> None:
        await self.http.close()


def build_context(project_root: Path, settings: Optional[Settings] = None) -> BotContext:
    settings = settings or load_settings(project_root)
    rc = load_runtime_config(project_root)

    provider, selection = resolve_llm_selection(project_root, "chat", settings)
    api_key = settings.openrouter_api_key if provider == "openrouter" else settings.openai_api_key
    llm = LLMClient(api_key or "", provider=provider)

    http = SharedHttpClient(config=HttpConfig.from_runtime_config(rc))
    seerr = SeerrClient(settings.seerr_url or "", settings.seerr_api_key or "")
    omdb = OmdbClient(settings.omdb_api_key or "", http=http)
    openai_tools, registry = build_tools_and_registry(seerr, omdb)

    max_iterations, max_tokens = resolve_agent_limits(rc)
    agent = Agent(
        llm=llm,
        registry=registry,
        openai_tools=openai_tools,
        model=selection["model"],
        max_iterations=max_iterations,
        max_tokens=max_tokens,
        params=selection.get("params") or {},
    )

    ttl_seconds, sweep_sec = resolve_session_timing(rc)
    max_messages, max_session_tokens = resolve_session_limits(rc)
    sessions = SessionStore(
        ttl_seconds=ttl_seconds,
        llm_client=llm,
        max_messages=max_messages,
        max_tokens=max_session_tokens,
    )

    log.info("context ready", extra={"provider": provider, "model": selection["model"], "tools": len(openai_tools)})
    return BotContext(
        settings=settings,
        llm=llm,
        seerr=seerr,
        omdb=omdb,
        http=http,
        agent=agent,
        sessions=sessions,
        sweep_interval_sec=sweep_sec,
    )
