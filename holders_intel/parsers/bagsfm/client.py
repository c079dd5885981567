"""bags.fm public API client: token launch metadata (creator wallet, socials)."""

from dataclasses import dataclass

import httpx
from loguru import logger

from holders_intel.parsers.api_usage import UsageRecorder, track_call

BASE_URL = "https://api.bags.fm/api/v1"


@dataclass
class BagsToken:
    mint: str
    creator: str = ""
    name: str = ""
    symbol: str = ""
    twitter: str | None = None
    telegram: str | None = None
    website: str | None = None


class BagsClient:
    """Async HTTP client for bags.fm (no key, single attempt)."""

    def __init__(self, *, timeout: float = 5.0, recorder: UsageRecorder | None = None) -> None:
        self._recorder = recorder
        self._client = httpx.AsyncClient(base_url=BASE_URL, timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token(self, mint: str) -> BagsToken | None:
        try:
            async with track_call(self._recorder, "bagsfm", "token", mint) as trace:
                resp = await self._client.get(f"/token/{mint}")
                trace.status = resp.status_code
                if resp.status_code != 200:
                    logger.debug(f"[BAGS] HTTP {resp.status_code} for {mint[:12]}")
                    return None
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"[BAGS] {type(e).__name__} for {mint[:12]}: {e}")
            return None

        return _parse_token(data, mint)


def _parse_token(data: object, mint: str) -> BagsToken | None:
    """Parse a token payload; the API wraps it in ``response`` or ``data``."""
    if not isinstance(data, dict):
        return None
    body = data.get("response") or data.get("data") or data
    if not isinstance(body, dict):
        return None

    creator = (
        body.get("creator")
        or body.get("creatorWallet")
        or body.get("creator_wallet")
        or body.get("deployer")
        or ""
    )
    if isinstance(creator, dict):
        creator = creator.get("wallet") or creator.get("address") or ""

    return BagsToken(
        mint=mint,
        creator=creator if isinstance(creator, str) else "",
        name=body.get("name", "") or "",
        symbol=body.get("symbol", "") or "",
        twitter=body.get("twitter") or None,
        telegram=body.get("telegram") or None,
        website=body.get("website") or None,
    )
