from __future__ import annotations

from typing import Any, Dict, Optional

from integrations.http_client import SharedHttpClient


class OmdbClient:
    """OMDb lookups used to cross-check a selection against IMDB data.

    OMDb answers 200 for misses too; callers inspect ``Response`` ("True" or
    "False") and ``Error`` in the returned payload.
    """

    def __init__(self, api_key: str, http: Optional[SharedHttpClient] = None):
        self.api_key = api_key
        self._client = http or SharedHttpClient()
        self._base = "https://www.omdbapi.com/"

    async def close(self) -> None:
        await self._client.close()

    def _get_params(self, **kwargs) -> Dict[str, Any]:
        params: Dict[str, Any] = {"apikey": self.api_key}
        params.update({k: v for k, v in kwargs.items() if v is not None})
        return params

    async def _get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        resp = await self._client.request("GET", self._base, params=params)
        data = resp.json()
        if not isinstance(data, dict):
            return {"Response": "False", "Error": f"Unexpected OMDb response (HTTP {resp.status})"}
        return data

    async def search_by_title(self, title: str, year: Optional[str] = None, type: Optional[str] = None) -> Dict[str, Any]:
        return await self._get(self._get_params(s=title, y=year, type=type))

    async def get_by_imdb_id(self, imdb_id: str) -> Dict[str, Any]:
        return await self._get(self._get_params(i=imdb_id, plot="short"))
