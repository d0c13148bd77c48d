from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from llm.clients import LLMClient


DEFAULT_SESSION_TTL_SECONDS: float = 30 * 60

# Stored history limits; the oldest whole exchanges are dropped first
MAX_HISTORY_MESSAGES: int = 40
MAX_CONVERSATION_TOKENS: int = 32_000

log = logging.getLogger("seerrbot.sessions")


@dataclass
class Session:
    messages: List[Dict[str, Any]] = field(default_factory=list)
    last_activity: float = 0.0


class SessionStore:
    """In-memory conversation history keyed by Discord user id.

    A session idle for longer than the TTL is treated as absent: ``get`` drops
    it on sight and ``sweep`` removes any that nobody asked for.

    ``set`` trims history to ``max_messages`` and, when a token counter is
    available, to ``max_tokens``. Cuts happen only at user turns so an
    assistant tool-call turn is never separated from its tool results.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic,
                 llm_client: Optional["LLMClient"] = None,
                 max_messages: int = MAX_HISTORY_MESSAGES,
                 max_tokens: int = MAX_CONVERSATION_TOKENS) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_messages = max_messages
        self.max_tokens = max_tokens
        self._clock = clock
        self._llm_client = llm_client
        self._sessions: Dict[str, Session] = {}

    def _over_budget(self, messages: List[Dict[str, Any]]) -> bool:
        if len(messages) > self.max_messages:
            return True
        if self._llm_client is None:
            return False
        return self._llm_client.count_tokens(messages) > self.max_tokens

    def _trim(self, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Drop the oldest exchanges until the history fits.

        The latest exchange is always kept, even when it alone is over budget.
        """
        while self._over_budget(messages):
            next_user = next((i for i, m in enumerate(messages) if i > 0 and m.get("role") == "user"), None)
            if next_user is None:
                break
            messages = messages[next_user:]
        return messages

    def _expired(self, session: Session, now: float) -> bool:
        return now - session.last_activity > self.ttl_seconds

    def get(self, user_id: str) -> Optional[Session]:
        session = self._sessions.get(user_id)
        if session is None:
            return None
        if self._expired(session, self._clock()):
            del self._sessions[user_id]
            log.debug("session expired", extra={"user_id": user_id})
            return None
        return session

    def set(self, user_id: str, messages: List[Dict[str, Any]]) -> Session:
        kept = self._trim(list(messages))
        if len(kept) < len(messages):
            log.debug("session trimmed", extra={
                "user_id": user_id, "dropped": len(messages) - len(kept), "kept": len(kept),
            })
        session = Session(messages=kept, last_activity=self._clock())
        self._sessions[user_id] = session
        return session

    def clear(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)

    def sweep(self) -> int:
        now = self._clock()
        expired = [uid for uid, s in self._sessions.items() if self._expired(s, now)]
        for uid in expired:
            del self._sessions[uid]
        if expired:
            log.info("swept expired sessions", extra={"removed": len(expired), "remaining": len(self._sessions)})
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def token_count(self, user_id: str) -> int:
        """Approximate prompt size of a session; 0 without a token counter."""
        session = self._sessions.get(user_id)
        if session is None or self._llm_client is None:
            return 0
        return self._llm_client.count_tokens(session.messages)
