"""Solana JSON-RPC client: token account index queries for a single endpoint."""

from typing import Any

import httpx
from loguru import logger

from holders_intel.errors import redact_url
from holders_intel.parsers.api_usage import UsageRecorder, track_call
from holders_intel.parsers.known_addresses import TOKEN_PROGRAM_ID
from holders_intel.parsers.solana_rpc.models import TokenAccountRecord, parse_program_accounts

# Legacy SPL token accounts are fixed-size; Token-2022 accounts vary with extensions
SPL_TOKEN_ACCOUNT_SIZE = 165
MULTIPLE_ACCOUNTS_BATCH = 100
PROGRAM_ACCOUNTS_CREDITS = 100


class RpcError(Exception):
    pass


class SolanaRpcClient:
    """Async JSON-RPC client bound to one endpoint URL (no retries)."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 15.0,
        recorder: UsageRecorder | None = None,
    ) -> None:
        self._url = url
        self.label = redact_url(url)
        self._recorder = recorder
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(
        self,
        method: str,
        params: list[Any],
        *,
        token_mint: str | None = None,
        credits: int = 1,
    ) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        async with track_call(
            self._recorder, "rpc", method, token_mint,
            credits=credits, metadata={"endpoint": self.label},
        ) as trace:
            resp = await self._client.post(self._url, json=payload)
            trace.status = resp.status_code
            if resp.status_code != 200:
                raise RpcError(f"HTTP {resp.status_code}")

            data = resp.json()
            if not isinstance(data, dict):
                raise RpcError("Malformed RPC response")
            if data.get("error"):
                err = data["error"]
                message = err.get("message", err) if isinstance(err, dict) else err
                raise RpcError(f"RPC error: {message}")
            return data.get("result")

    async def get_token_accounts_by_mint(
        self, mint: str, program_id: str = TOKEN_PROGRAM_ID,
    ) -> list[TokenAccountRecord]:
        """All non-zero token accounts of ``mint`` owned by ``program_id``."""
        filters: list[dict[str, Any]] = [{"memcmp": {"offset": 0, "bytes": mint}}]
        if program_id == TOKEN_PROGRAM_ID:
            filters.insert(0, {"dataSize": SPL_TOKEN_ACCOUNT_SIZE})

        result = await self._call(
            "getProgramAccounts",
            [program_id, {"encoding": "jsonParsed", "commitment": "confirmed", "filters": filters}],
            token_mint=mint,
            credits=PROGRAM_ACCOUNTS_CREDITS,
        )
        return parse_program_accounts(result, mint, program_id)

    async def get_account_programs(
        self, addresses: list[str], *, token_mint: str | None = None,
    ) -> dict[str, str]:
        """Map each existing account address to the program that owns it.

        Addresses with no on-chain account (e.g. data-less PDAs) are omitted.
        """
        programs: dict[str, str] = {}
        for start in range(0, len(addresses), MULTIPLE_ACCOUNTS_BATCH):
            batch = addresses[start:start + MULTIPLE_ACCOUNTS_BATCH]
            result = await self._call(
                "getMultipleAccounts",
                [batch, {"encoding": "base64", "dataSlice": {"offset": 0, "length": 0}}],
                token_mint=token_mint,
            )
            values = result.get("value", []) if isinstance(result, dict) else []
            for address, account in zip(batch, values):
                if isinstance(account, dict) and account.get("owner"):
                    programs[address] = account["owner"]
        logger.debug(f"[RPC] Resolved owning program for {len(programs)}/{len(addresses)} owners")
        return programs
