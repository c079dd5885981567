"""Solscan Pro API client: token markets and top holders (API key required)."""

import httpx
from loguru import logger
from pydantic import ValidationError

from holders_intel.parsers.api_usage import UsageRecorder, track_call
from holders_intel.parsers.solscan.models import SolscanHolder, SolscanMarket

BASE_URL = "https://pro-api.solscan.io/v2.0"


class SolscanApiError(Exception):
    pass


class SolscanClient:
    """Async REST client for Solscan Pro v2 (one attempt per call, no retries)."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 10.0,
        recorder: UsageRecorder | None = None,
    ) -> None:
        self._recorder = recorder
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json", "token": api_key},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict, endpoint: str, mint: str) -> object:
        async with track_call(self._recorder, "solscan", endpoint, mint) as trace:
            resp = await self._client.get(path, params=params)
            trace.status = resp.status_code
            if resp.status_code != 200:
                raise SolscanApiError(f"HTTP {resp.status_code}")
            data = resp.json()
            if isinstance(data, dict) and data.get("success") is False:
                raise SolscanApiError(f"Unsuccessful response: {data.get('errors') or data}")
            return data.get("data") if isinstance(data, dict) else None

    async def get_markets(self, mint: str) -> list[SolscanMarket]:
        """Pools / markets trading ``mint``."""
        data = await self._get("/token/markets", {"address": mint}, "token/markets", mint)
        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            return []

        markets: list[SolscanMarket] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                markets.append(SolscanMarket.model_validate(item))
            except ValidationError as e:
                logger.debug(f"[SOLSCAN] Skipping malformed market for {mint[:12]}: {e}")
        return markets

    async def get_top_holders(self, mint: str, page_size: int = 50) -> list[SolscanHolder]:
        """Top holders of ``mint``, largest first."""
        data = await self._get(
            "/token/holders",
            {"address": mint, "page": 1, "page_size": page_size},
            "token/holders",
            mint,
        )
        items = data.get("items", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            return []

        holders: list[SolscanHolder] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                holders.append(SolscanHolder.model_validate(item))
            except ValidationError as e:
                logger.debug(f"[SOLSCAN] Skipping malformed holder for {mint[:12]}: {e}")
        return holders
