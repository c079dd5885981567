"""CoinGecko client: second public price oracle (token price by contract)."""

from decimal import Decimal, InvalidOperation

import httpx
from loguru import logger

from holders_intel.parsers.api_usage import UsageRecorder, track_call

PUBLIC_URL = "https://api.coingecko.com/api/v3"
PRO_URL = "https://pro-api.coingecko.com/api/v3"


class CoinGeckoClient:
    """Async HTTP client for CoinGecko simple token price (single attempt per call)."""

    def __init__(
        self,
        api_key: str = "",
        *,
        timeout: float = 5.0,
        recorder: UsageRecorder | None = None,
    ) -> None:
        self._recorder = recorder
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-pro-api-key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=PRO_URL if api_key else PUBLIC_URL,
            timeout=timeout,
            headers=headers,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token_price(self, mint: str) -> Decimal | None:
        """USD price of a Solana token by mint; None on any failure."""
        params = {"contract_addresses": mint, "vs_currencies": "usd"}
        try:
            async with track_call(self._recorder, "coingecko", "simple/token_price", mint) as trace:
                resp = await self._client.get("/simple/token_price/solana", params=params)
                trace.status = resp.status_code
                if resp.status_code != 200:
                    logger.debug(f"[COINGECKO] HTTP {resp.status_code} for {mint[:12]}")
                    return None
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"[COINGECKO] {type(e).__name__} for {mint[:12]}: {e}")
            return None

        if not isinstance(data, dict):
            return None
        # Keys are lower-cased contract addresses on some API versions
        entry = data.get(mint) or data.get(mint.lower())
        if not isinstance(entry, dict) or entry.get("usd") is None:
            return None
        try:
            return Decimal(str(entry["usd"]))
        except InvalidOperation:
            return None
