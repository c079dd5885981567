import httpx
from loguru import logger
from pydantic import ValidationError

from holders_intel.parsers.api_usage import UsageRecorder, track_call
from holders_intel.parsers.dexscreener.models import DexScreenerOrder, DexScreenerPair

BASE_URL = "https://api.dexscreener.com"


class DexScreenerApiError(Exception):
    pass


class DexScreenerClient:
    """Async REST client for DexScreener public API (no auth required)."""

    def __init__(self, *, timeout: float = 10.0, recorder: UsageRecorder | None = None) -> None:
        self._recorder = recorder
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def _get(self, path: str, endpoint: str, mint: str) -> object:
        """Single GET; non-200 raises DexScreenerApiError, 404 returns None."""
        async with track_call(self._recorder, "dexscreener", endpoint, mint) as trace:
            response = await self._client.get(path)
            trace.status = response.status_code
            if response.status_code == 404:
                return None
            if response.status_code != 200:
                raise DexScreenerApiError(f"HTTP {response.status_code}")
            return response.json()

    async def get_token_pairs(self, token_address: str) -> list[DexScreenerPair]:
        """Get all pairs for a token on Solana."""
        data = await self._get(
            f"/token-pairs/v1/solana/{token_address}", "token-pairs", token_address,
        )
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("pairs", data.get("pair", []))
            if not isinstance(data, list):
                data = [data] if data else []
        if not isinstance(data, list):
            return []

        pairs: list[DexScreenerPair] = []
        for item in data:
            try:
                pairs.append(DexScreenerPair.model_validate(item))
            except ValidationError as e:
                logger.debug(f"[DEXSCREENER] Skipping malformed pair for {token_address[:12]}: {e}")
        return pairs

    async def get_orders(self, token_address: str) -> list[DexScreenerOrder]:
        """Paid orders (profile, community takeover, ads) for a token."""
        data = await self._get(
            f"/orders/v1/solana/{token_address}", "orders", token_address,
        )
        if isinstance(data, dict):
            data = data.get("orders", [])
        if not isinstance(data, list):
            return []

        orders: list[DexScreenerOrder] = []
        for item in data:
            try:
                orders.append(DexScreenerOrder.model_validate(item))
            except ValidationError:
                continue
        return orders

    async def close(self) -> None:
        await self._client.aclose()
