from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING
import json
import logging
import time

import openai

from .agent_prompt import build_system_prompt
from .tools.registry import ToolRegistry

if TYPE_CHECKING:
    from llm.clients import LLMClient
    from .sessions import Session


AGENT_ERROR_MESSAGE = "Sorry, I encountered an error processing your request. Please try again."
ITERATION_LIMIT_MESSAGE = (
    "Sorry, I couldn't finish that request within the allowed number of steps. "
    "Please try rephrasing it or breaking it into smaller parts."
)
NO_RESPONSE_MESSAGE = "No response"


@dataclass
class AgentResult:
    text: str
    messages: List[Dict[str, Any]] = field(default_factory=list)
    # "final_answer", "iteration_limit" or "error"
    reason: str = "final_answer"


class Agent:
    """Runs one user message to completion against the completion endpoint.

    Each run copies the prior history, appends the new user turn and then only
    ever appends: assistant turns, then the tool-result turns answering them.
    The system prompt is sent with every call but never stored.
    """

    def __init__(
        self,
        *,
        llm: "LLMClient",
        registry: ToolRegistry,
        openai_tools: List[Dict[str, Any]],
        model: str,
        max_iterations: int = 10,
        max_tokens: int = 2048,
        params: Optional[Dict[str, Any]] = None,
        system_prompt_builder: Callable[[], str] = build_system_prompt,
    ):
        self.llm = llm
        self.registry = registry
        self.openai_tools = openai_tools
        self.model = model
        self.max_iterations = max(1, int(max_iterations))
        self.max_tokens = max_tokens
        self.params = dict(params or {})
        self.system_prompt_builder = system_prompt_builder
        self.log = logging.getLogger("seerrbot.agent")

    async def _achat_once(self, messages: List[Dict[str, Any]]) -> Any:
        kwargs = dict(self.params)
        kwargs.setdefault("max_tokens", self.max_tokens)
        return await self.llm.achat(
            model=self.model,
            messages=[{"role": "system", "content": self.system_prompt_builder()}] + messages,
            tools=self.openai_tools,
            tool_choice="auto",
            **kwargs,
        )

    async def _run_tool_call(self, tc: Any) -> Dict[str, Any]:
        name = tc.function.name
        raw_args = tc.function.arguments or "{}"
        t0 = time.monotonic()
        try:
            args = json.loads(raw_args)
        except json.JSONDecodeError as e:
            result = f"Invalid input for {name}: arguments are not valid JSON ({e.msg})"
        else:
            if not isinstance(args, dict):
                result = f"Invalid input for {name}: arguments must be a JSON object"
            else:
                result = await self.registry.dispatch(name, args)
        duration_ms = int((time.monotonic() - t0) * 1000)
        self.log.info("tool done", extra={"tool": name, "duration_ms": duration_ms, "preview": result[:200]})
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug("tool args", extra={"tool": name, "tool_args": raw_args})
        return {"role": "tool", "tool_call_id": tc.id, "name": name, "content": result}

    async def run(self, user_message: str, prior: Optional["Session"] = None) -> AgentResult:
        messages: List[Dict[str, Any]] = list(prior.messages) if prior is not None else []
        messages.append({"role": "user", "content": user_message})

        for iter_idx in range(self.max_iterations):
            self.log.info(f"agent iteration {iter_idx + 1}/{self.max_iterations}")
            try:
                resp = await self._achat_once(messages)
            except openai.APIError as e:
                self.log.exception("completion request failed", extra={"iteration": iter_idx + 1, "error": str(e)})
                return AgentResult(AGENT_ERROR_MESSAGE, messages, reason="error")

            # Some providers answer 200 with an error body and no choices
            choices = getattr(resp, "choices", None)
            msg = getattr(choices[0], "message", None) if choices else None
            if msg is None:
                self.log.error("completion returned no message", extra={
                    "iteration": iter_idx + 1,
                    "error": str(getattr(resp, "error", None)),
                })
                return AgentResult(AGENT_ERROR_MESSAGE, messages, reason="error")

            tool_calls = getattr(msg, "tool_calls", None)
            if not tool_calls:
                text = msg.content or NO_RESPONSE_MESSAGE
                messages.append({"role": "assistant", "content": text})
                self.log.info("no tool calls; returning final answer", extra={"iterations": iter_idx + 1})
                return AgentResult(text, messages, reason="final_answer")

            messages.append({
                "role": "assistant",
                "content": msg.content or "",
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": getattr(tc, "type", None) or "function",
                        "function": {"name": tc.function.name, "arguments": tc.function.arguments},
                    }
                    for tc in tool_calls
                ],
            })
            # Sequential, in emission order
            for tc in tool_calls:
                self.log.info(f"tool call requested: {tc.function.name}")
                messages.append(await self._run_tool_call(tc))

        # Every tool-call turn above already has its results, so the history stays replayable
        self.log.warning("iteration limit reached", extra={"max_iterations": self.max_iterations})
        messages.append({"role": "assistant", "content": ITERATION_LIMIT_MESSAGE})
        return AgentResult(ITERATION_LIMIT_MESSAGE, messages, reason="iteration_limit")
