from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


DEFAULT_MAX_ITERATIONS = 10
DEFAULT_MAX_TOKENS = 2048
DEFAULT_SESSION_TTL_MINUTES = 30
DEFAULT_SWEEP_INTERVAL_SEC = 600
DEFAULT_SESSION_MAX_MESSAGES = 40
DEFAULT_SESSION_MAX_TOKENS = 32_000


@dataclass
class Settings:
    discord_token: Optional[str]
    openai_api_key: Optional[str]
    openrouter_api_key: Optional[str]
    seerr_url: Optional[str]
    seerr_api_key: Optional[str]
    omdb_api_key: Optional[str]
    discord_development_guild_id: Optional[str]


def load_settings(project_root: Path) -> Settings:
    env_path = project_root / ".env"
    load_dotenv(env_path)

    return Settings(
        discord_token=os.getenv("DISCORD_TOKEN"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY"),
        seerr_url=os.getenv("SEERR_URL"),
        seerr_api_key=os.getenv("SEERR_API_KEY"),
        omdb_api_key=os.getenv("OMDB_API_KEY"),
        discord_development_guild_id=os.getenv("DISCORD_GUILD_ID"),
    )


def load_runtime_config(project_root: Path) -> dict:
    config_path = project_root / "config" / "config.yaml"
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def resolve_llm_selection(project_root: Path, role: str, settings: Settings | None = None) -> tuple[str, dict]:
    """Return (provider, selection) for a given role.

    Selection is a dict with at least:
      - model: str
      - params: dict[str, Any] of extra request params (e.g., temperature)

    Supports both string config and object config shape:
      llm.providers.PROVIDER.ROLE: "model-name" | { model, params? }
    """
    rc = load_runtime_config(project_root)
    providers_cfg = (rc.get("llm", {}) or {}).get("providers", {}) or {}
    priority = providers_cfg.get("priority") or []

    if settings is None:
        settings = load_settings(project_root)

    def has_api_key(p: str) -> bool:
        if p == "openai":
            return bool(settings.openai_api_key)
        if p == "openrouter":
            return bool(settings.openrouter_api_key)
        return False

    def coerce_selection(raw: object) -> dict:
        if isinstance(raw, str):
            return {"model": raw, "params": {}}
        if isinstance(raw, dict):
            model = raw.get("model") or raw.get("name") or raw.get("id")
            sel = {
                "model": str(model) if model else "",
                "params": dict(raw.get("params", {}) or {}),
            }
            # Top-level known params are merged for convenience
            for k in ("temperature", "top_p", "max_tokens"):
                if k in raw and k not in sel["params"]:
                    sel["params"][k] = raw[k]
            return sel
        return {"model": "", "params": {}}

    for p in priority:
        models = providers_cfg.get(p, {}) or {}
        raw = models.get(role)
        if raw and has_api_key(p):
            return p, coerce_selection(raw)

    # Fallbacks if priority missing or no key available
    if settings.openai_api_key:
        raw = (providers_cfg.get("openai", {}) or {}).get(role) or "gpt-4o-mini"
        return "openai", coerce_selection(raw)
    if settings.openrouter_api_key:
        raw = (providers_cfg.get("openrouter", {}) or {}).get(role) or "openai/gpt-4o-mini"
        return "openrouter", coerce_selection(raw)

    return "openai", {"model": "gpt-4o-mini", "params": {}}


def resolve_agent_limits(runtime_config: dict) -> tuple[int, int]:
    """Return (max_iterations, max_tokens) from the llm section."""
    llm_cfg = runtime_config.get("llm", {}) or {}
    max_iterations = int(llm_cfg.get("maxIterations", DEFAULT_MAX_ITERATIONS))
    max_tokens = int(llm_cfg.get("maxTokens", DEFAULT_MAX_TOKENS))
    return max(1, max_iterations), max_tokens


def resolve_session_timing(runtime_config: dict) -> tuple[float, float]:
    """Return (ttl_seconds, sweep_interval_seconds) from the sessions section."""
    sess_cfg = runtime_config.get("sessions", {}) or {}
    ttl_minutes = float(sess_cfg.get("ttlMinutes", DEFAULT_SESSION_TTL_MINUTES))
    sweep_sec = float(sess_cfg.get("sweepIntervalSec", DEFAULT_SWEEP_INTERVAL_SEC))
    return ttl_minutes * 60.0, sweep_sec


def resolve_session_limits(runtime_config: dict) -> tuple[int, int]:
    """Return (max_messages, max_tokens) kept per stored session."""
    sess_cfg = runtime_config.get("sessions", {}) or {}
    max_messages = int(sess_cfg.get("maxMessages", DEFAULT_SESSION_MAX_MESSAGES))
    max_tokens = int(sess_cfg.get("maxTokens", DEFAULT_SESSION_MAX_TOKENS))
    return max(2, max_messages), max_tokens


def missing_settings(settings: Settings) -> list[str]:
    """Names of required environment variables that are unset or blank."""
    required = {
        "DISCORD_TOKEN": settings.discord_token,
        "SEERR_URL": settings.seerr_url,
        "SEERR_API_KEY": settings.seerr_api_key,
        "OMDB_API_KEY": settings.omdb_api_key,
    }
    missing = [name for name, v in required.items() if v is None or str(v).strip() == ""]
    if not (settings.openai_api_key or settings.openrouter_api_key):
        missing.append("OPENAI_API_KEY or OPENROUTER_API_KEY")
    return missing
