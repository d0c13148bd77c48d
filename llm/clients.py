from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
import tiktoken


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class LLMClient:
    """Async Chat Completions client for OpenAI or OpenRouter.

    OpenRouter speaks the same wire protocol, so both providers share one
    AsyncOpenAI instance that differs only in base_url and tracking headers.
    """

    def __init__(self, api_key: str, provider: str = "openai"):
        self.provider = provider
        if provider == "openrouter":
            self.async_client = AsyncOpenAI(base_url=OPENROUTER_BASE_URL, api_key=api_key)
            referer = os.getenv("OPENROUTER_SITE_URL") or "https://github.com/seerrbot/seerrbot"
            app_title = os.getenv("OPENROUTER_APP_NAME") or "SeerrBot"
            self._default_headers: Dict[str, str] = {
                "HTTP-Referer": referer,
                "X-Title": app_title,
            }
        else:
            self.async_client = AsyncOpenAI(api_key=api_key)
            self._default_headers = {}
        # Loaded on first use; fetching the BPE file hits the network
        self._encoding: Optional[tiktoken.Encoding] = None

    def count_tokens(self, messages: List[Dict[str, Any]]) -> int:
        """Count the tokens in a conversation (content, tool call names and arguments)."""
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding("cl100k_base")
        enc = self._encoding
        total_tokens = 0
        for message in messages:
            if message.get("content"):
                total_tokens += len(enc.encode(str(message["content"])))
            for tool_call in message.get("tool_calls") or []:
                fn = tool_call.get("function", {}) or {}
                if fn.get("arguments"):
                    total_tokens += len(enc.encode(fn["arguments"]))
                if fn.get("name"):
                    total_tokens += len(enc.encode(fn["name"]))
        return total_tokens

    def _normalize_params(self, model: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Coerce token-limit aliases to the key the target model accepts.

        OpenAI reasoning models (gpt-5, o1, o3) want max_completion_tokens;
        everything else, including every OpenRouter model, wants max_tokens.
        """
        out = dict(params)
        alt_val = None
        for k in ("max_response_tokens", "max_output_tokens", "max_completion_tokens"):
            if k in out:
                if alt_val is None:
                    alt_val = out[k]
                out.pop(k, None)
        model_lower = (model or "").lower()
        prefers_completion = self.provider == "openai" and model_lower.startswith(("gpt-5", "o1", "o3"))
        if prefers_completion:
            if "max_tokens" in out:
                out["max_completion_tokens"] = out.pop("max_tokens")
            elif alt_val is not None:
                out["max_completion_tokens"] = alt_val
        elif "max_tokens" not in out and alt_val is not None:
            out["max_tokens"] = alt_val
        return out

    async def achat(self, *, model: str, messages: List[Dict[str, Any]], tools: Optional[List[Dict[str, Any]]] = None, tool_choice: Optional[str] = None, **kwargs: Any) -> Any:
        params: Dict[str, Any] = {"model": model, "messages": messages}
        if tools is not None:
            params["tools"] = tools
        if tool_choice is not None:
            params["tool_choice"] = tool_choice
        kwargs = self._normalize_params(model, kwargs)
        if self._default_headers:
            provided_headers = kwargs.pop("extra_headers", None)
            extra_headers = dict(self._default_headers)
            if isinstance(provided_headers, dict):
                extra_headers.update(provided_headers)
            params["extra_headers"] = extra_headers
        params.update(kwargs)
        return await self.async_client.chat.completions.create(**params)
