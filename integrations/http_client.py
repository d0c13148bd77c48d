from __future__ import annotations

import asyncio
import json as jsonlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    connect_timeout_ms: int = 2000
    read_timeout_ms: int = 8000
    total_timeout_ms: int = 12000
    max_connections: int = 100
    retry_max: int = 1
    backoff_base_ms: int = 100

    @classmethod
    def from_runtime_config(cls, runtime_config: dict) -> "HttpConfig":
        http_cfg = runtime_config.get("http", {}) or {}
        return cls(
            connect_timeout_ms=int(http_cfg.get("connectTimeoutMs", cls.connect_timeout_ms)),
            read_timeout_ms=int(http_cfg.get("readTimeoutMs", cls.read_timeout_ms)),
            total_timeout_ms=int(http_cfg.get("totalTimeoutMs", cls.total_timeout_ms)),
            max_connections=int(http_cfg.get("maxConnections", cls.max_connections)),
            retry_max=int(http_cfg.get("retryMax", cls.retry_max)),
            backoff_base_ms=int(http_cfg.get("backoffBaseMs", cls.backoff_base_ms)),
        )


@dataclass
class HttpResponse:
    """Fully-read response; the underlying connection is already released."""

    status: int
    text: str

    def json(self) -> Any:
        return jsonlib.loads(self.text) if self.text else None


class SharedHttpClient:
    """Pooled aiohttp session shared by the public-API integrations.

    The session is created lazily on first request so the client can be
    constructed outside of a running event loop.
    """

    def __init__(self, base_headers: Optional[Dict[str, str]] = None, config: Optional[HttpConfig] = None) -> None:
        self._cfg = config or HttpConfig()
        self._base_headers = base_headers or {}
        self._session: Optional[aiohttp.ClientSession] = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            cfg = self._cfg
            timeout = aiohttp.ClientTimeout(
                total=cfg.total_timeout_ms / 1000.0,
                connect=cfg.connect_timeout_ms / 1000.0,
                sock_read=cfg.read_timeout_ms / 1000.0,
            )
            connector = aiohttp.TCPConnector(
                limit=cfg.max_connections,
                limit_per_host=max(1, cfg.max_connections // 4),
                keepalive_timeout=30,
                use_dns_cache=True,
                ttl_dns_cache=300,
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers=self._base_headers,
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def request(self, method: str, url: str, *, params: Optional[Dict[str, Any]] = None,
                      json: Any = None, headers: Optional[Dict[str, str]] = None,
                      allow_retry_on_methods: Optional[set] = None) -> HttpResponse:
        allow_retry_on_methods = allow_retry_on_methods or {"GET", "HEAD", "OPTIONS"}
        session = self._ensure_session()
        attempt = 0
        start = time.time()
        while True:
            try:
                t0 = time.time()
                async with session.request(method, url, params=params, json=json, headers=headers) as resp:
                    body = await resp.text()
                    duration_ms = int((time.time() - t0) * 1000)
                    status = resp.status
                    # Retry on 429/5xx for idempotent methods
                    if method.upper() in allow_retry_on_methods and status in (429, 500, 502, 503, 504):
                        self._log_req(method, url, status, duration_ms, attempt, retried=True)
                        if attempt < self._cfg.retry_max:
                            await asyncio.sleep(self._backoff(attempt))
                            attempt += 1
                            continue
                    self._log_req(method, url, status, duration_ms, attempt, retried=False)
                    return HttpResponse(status=status, text=body)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                retriable = method.upper() in allow_retry_on_methods
                if retriable and attempt < self._cfg.retry_max:
                    self._log_req(method, url, -1, int((time.time() - start) * 1000), attempt, retried=True, error=str(e))
                    await asyncio.sleep(self._backoff(attempt))
                    attempt += 1
                    continue
                self._log_req(method, url, -1, int((time.time() - start) * 1000), attempt, retried=False, error=str(e))
                raise

    def _backoff(self, attempt: int) -> float:
        base = self._cfg.backoff_base_ms / 1000.0
        return min(2.0, base * (2 ** attempt))

    def _log_req(self, method: str, url: str, status: int, duration_ms: int, attempt: int, retried: bool, error: Optional[str] = None) -> None:
        safe_url = url.split("?")[0]
        extra = {"method": method, "url": safe_url, "status": status, "duration_ms": duration_ms, "attempt": attempt, "retried": retried}
        if error:
            extra["error"] = error
        logger.info("http_request", extra=extra)
