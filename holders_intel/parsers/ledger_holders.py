"""Ledger holder fetcher: every token account of a mint, with RPC failover.

Candidates are the cross product of RPC endpoints and token program
variants, ordered endpoint-first: for each endpoint the legacy SPL Token
program is queried, then Token-2022 on the same endpoint. The first
non-empty result wins. When every combination errors or comes back empty
the report cannot be built and ``LedgerFetchError`` is raised.
"""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial

from loguru import logger

from holders_intel.errors import FallbackExhausted, LedgerFetchError
from holders_intel.parsers.api_usage import UsageRecorder
from holders_intel.parsers.fallback import Candidate, first_success
from holders_intel.parsers.known_addresses import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID
from holders_intel.parsers.solana_rpc.client import SolanaRpcClient
from holders_intel.parsers.solana_rpc.models import TokenAccountRecord

PROGRAM_VARIANTS: tuple[tuple[str, str], ...] = (
    (TOKEN_PROGRAM_ID, "spl-token"),
    (TOKEN_2022_PROGRAM_ID, "token-2022"),
)


@dataclass(frozen=True)
class LedgerHolderSet:
    """Non-zero token accounts of a mint plus where they came from."""

    token_mint: str
    endpoint: str  # redacted label of the winning endpoint
    program_id: str
    program_variant: str
    accounts: tuple[TokenAccountRecord, ...]
    # owner wallet -> program owning that wallet account (top-N owners only)
    owner_programs: Mapping[str, str] = field(default_factory=dict)
    attempts: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class _QueryResult:
    client: SolanaRpcClient
    program_id: str
    variant: str
    records: list[TokenAccountRecord]


class LedgerHolderFetcher:
    def __init__(
        self,
        endpoints: Sequence[str],
        *,
        timeout: float = 15.0,
        recorder: UsageRecorder | None = None,
        owner_program_lookup_limit: int = 100,
    ) -> None:
        self._timeout = timeout
        self._owner_lookup_limit = owner_program_lookup_limit
        self._clients = [
            SolanaRpcClient(url, timeout=timeout, recorder=recorder) for url in endpoints
        ]

    @property
    def endpoints(self) -> list[str]:
        return [c.label for c in self._clients]

    async def close(self) -> None:
        for client in self._clients:
            await client.close()

    async def fetch(self, mint: str) -> LedgerHolderSet:
        """Fetch all non-zero holders of ``mint``.

        Raises:
            LedgerFetchError: no endpoint/program combination returned accounts.
        """
        candidates = [
            Candidate(
                label=f"{client.label} [{variant}]",
                fetch=partial(self._query, client, mint, program_id, variant),
            )
            for client in self._clients
            for program_id, variant in PROGRAM_VARIANTS
        ]

        try:
            winner = await first_success(
                candidates,
                accept=lambda r: bool(r.records),
                describe_reject=lambda r: "0 accounts",
                tag="RPC",
            )
        except FallbackExhausted as e:
            logger.error(f"[RPC] No holder accounts for {mint[:12]} after {len(e.attempts)} attempts")
            raise LedgerFetchError(mint, e.attempts) from e

        result = winner.value
        logger.info(
            f"[RPC] {mint[:12]}: {len(result.records)} accounts "
            f"via {winner.label} ({len(winner.attempts)} failed attempts)"
        )

        owner_programs = await self._resolve_owner_programs(result.client, mint, result.records)

        return LedgerHolderSet(
            token_mint=mint,
            endpoint=result.client.label,
            program_id=result.program_id,
            program_variant=result.variant,
            accounts=tuple(result.records),
            owner_programs=owner_programs,
            attempts=winner.attempts,
        )

    async def _query(
        self, client: SolanaRpcClient, mint: str, program_id: str, variant: str,
    ) -> _QueryResult:
        records = await asyncio.wait_for(
            client.get_token_accounts_by_mint(mint, program_id), timeout=self._timeout,
        )
        return _QueryResult(client=client, program_id=program_id, variant=variant, records=records)

    async def _resolve_owner_programs(
        self, client: SolanaRpcClient, mint: str, records: list[TokenAccountRecord],
    ) -> dict[str, str]:
        """Owning program of the largest owner wallets; empty on any failure."""
        if self._owner_lookup_limit <= 0:
            return {}

        owners: list[str] = []
        seen: set[str] = set()
        for rec in sorted(records, key=lambda r: r.ui_amount, reverse=True):
            if rec.owner not in seen:
                seen.add(rec.owner)
                owners.append(rec.owner)
            if len(owners) >= self._owner_lookup_limit:
                break

        try:
            return await asyncio.wait_for(
                client.get_account_programs(owners, token_mint=mint), timeout=self._timeout,
            )
        except Exception as e:
            logger.warning(f"[RPC] Owner program lookup failed for {mint[:12]}: {e}")
            return {}
