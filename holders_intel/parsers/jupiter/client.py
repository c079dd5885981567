"""Jupiter Price API client: first public price oracle.

Keyless works at a low rate; an API key (x-api-key) lifts the limit.
"""

from decimal import Decimal, InvalidOperation

import httpx
from loguru import logger

from holders_intel.parsers.api_usage import UsageRecorder, track_call
from holders_intel.parsers.jupiter.models import JupiterPrice

BASE_URL = "https://api.jup.ag/price/v2"


class JupiterClient:
    """Async HTTP client for Jupiter pricing (single attempt per call)."""

    def __init__(
        self,
        api_key: str = "",
        *,
        timeout: float = 5.0,
        recorder: UsageRecorder | None = None,
    ) -> None:
        self._recorder = recorder
        headers: dict[str, str] = {}
        if api_key:
            headers["x-api-key"] = api_key
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_price(self, mint: str) -> JupiterPrice | None:
        """Fetch the USD price for a single token; None on any failure."""
        params = {"ids": mint, "showExtraInfo": "true"}
        try:
            async with track_call(self._recorder, "jupiter", "price", mint) as trace:
                resp = await self._client.get(BASE_URL, params=params)
                trace.status = resp.status_code
                if resp.status_code != 200:
                    logger.debug(f"[JUPITER] HTTP {resp.status_code} for {mint[:12]}")
                    return None
                return _parse_price(resp.json(), mint)
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"[JUPITER] {type(e).__name__} for {mint[:12]}: {e}")
            return None


def _parse_price(data: object, mint: str) -> JupiterPrice | None:
    """Parse a Jupiter price response for a single mint.

    Handles the v2 ``{"data": {mint: {"price": ...}}}`` envelope and the
    flat v3 ``{mint: {"usdPrice": ...}}`` form.
    """
    if not isinstance(data, dict):
        return None
    container = data.get("data") if isinstance(data.get("data"), dict) else data
    token_data = container.get(mint)
    if not isinstance(token_data, dict):
        return None

    price_raw = token_data.get("price", token_data.get("usdPrice"))
    if price_raw is None:
        return None
    try:
        price = Decimal(str(price_raw))
    except InvalidOperation:
        return None

    extra = token_data.get("extraInfo")
    return JupiterPrice(
        id=mint,
        mint_symbol=token_data.get("mintSymbol", ""),
        price=price,
        confidence_level=extra.get("confidenceLevel") if isinstance(extra, dict) else None,
    )
