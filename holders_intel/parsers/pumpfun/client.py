"""Pump.fun frontend API client: coin metadata and creator launch history."""

import math

import httpx
from loguru import logger

from holders_intel.parsers.api_usage import UsageRecorder, track_call
from holders_intel.parsers.pumpfun.models import PumpfunCoin, PumpfunCreatorHistory, PumpfunToken

BASE_URL = "https://frontend-api-v3.pump.fun"


class PumpfunClient:
    """Async HTTP client for Pump.fun frontend API (free, no key, no retries)."""

    def __init__(self, *, timeout: float = 5.0, recorder: UsageRecorder | None = None) -> None:
        self._recorder = recorder
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_json(self, url: str, endpoint: str, mint: str, params: dict | None = None):
        """GET returning parsed JSON, ``{}`` for 404, None on any failure."""
        try:
            async with track_call(self._recorder, "pumpfun", endpoint, mint) as trace:
                resp = await self._client.get(url, params=params)
                trace.status = resp.status_code
                if resp.status_code == 404:
                    return {}
                if resp.status_code != 200:
                    logger.debug(f"[PUMPFUN] HTTP {resp.status_code} for {endpoint}")
                    return None
                return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"[PUMPFUN] {type(e).__name__} for {endpoint}: {e}")
            return None

    async def get_coin(self, mint: str) -> PumpfunCoin | None:
        """Launch metadata for ``mint``; None when unknown or unavailable."""
        data = await self._get_json(f"{BASE_URL}/coins/{mint}", "coins", mint)
        if not isinstance(data, dict) or not data.get("mint"):
            return None
        return _parse_coin(data)

    async def get_creator_history(self, wallet: str, mint: str | None = None) -> PumpfunCreatorHistory | None:
        """Fetch all tokens created by a wallet on Pump.fun."""
        url = f"{BASE_URL}/coins/user-created-coins/{wallet}"
        params = {"limit": 50, "offset": 0, "includeNsfw": "true"}
        data = await self._get_json(url, "user-created-coins", mint or wallet, params)
        if data is None:
            return None
        return _parse_creator_history(data)


def _parse_coin(data: dict) -> PumpfunCoin:
    return PumpfunCoin(
        mint=data.get("mint", ""),
        name=data.get("name", "") or "",
        symbol=data.get("symbol", "") or "",
        creator=data.get("creator", "") or "",
        twitter=data.get("twitter") or None,
        telegram=data.get("telegram") or None,
        website=data.get("website") or None,
        complete=bool(data.get("complete", False)),
        created_timestamp=_safe_int(data.get("created_timestamp")),
        usd_market_cap=_safe_float(data.get("usd_market_cap")),
    )


def _parse_creator_history(data: list | dict) -> PumpfunCreatorHistory:
    """Parse Pump.fun API response for creator tokens."""
    # API returns a list of token objects (or {"coins": [...]} on newer versions)
    if isinstance(data, dict):
        data = data.get("coins", [])
    tokens_list = data if isinstance(data, list) else []

    tokens: list[PumpfunToken] = []
    for item in tokens_list:
        if not isinstance(item, dict):
            continue
        tokens.append(PumpfunToken(
            mint=item.get("mint", ""),
            name=item.get("name", "") or "",
            symbol=item.get("symbol", "") or "",
            created_timestamp=_safe_int(item.get("created_timestamp")),
            usd_market_cap=_safe_float(item.get("usd_market_cap")),
        ))

    dead_count = sum(1 for t in tokens if t.is_dead)

    return PumpfunCreatorHistory(
        total_tokens=len(tokens),
        dead_token_count=dead_count,
        tokens=tokens,
    )


def _safe_int(val: object) -> int:
    if val is None:
        return 0
    try:
        return int(val)
    except (ValueError, TypeError):
        return 0


def _safe_float(val: object) -> float:
    if val is None:
        return 0.0
    try:
        number = float(val)
    except (ValueError, TypeError):
        return 0.0
    return number if math.isfinite(number) else 0.0
