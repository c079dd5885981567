"""Known Solana program ids and wallet addresses used for LP detection.

Tables are immutable and versioned. ``DEFAULT_TABLES`` is built once at
import; the pool registry and the holder classifier receive a
``KnownAddressTables`` instance so tests can swap in their own.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLwmzm7yP2cR7jWJh4B"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
WSOL_MINT = "So11111111111111111111111111111111111111112"

TABLES_VERSION = "2025.2"

# program id → label
_DEX_PROGRAMS: dict[str, str] = {
    # Pump.fun ecosystem (bags.fm and bonk.fun reuse the same programs)
    "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA": "Pump.fun AMM",
    "PumpkFHPjXpQWCNPxhj3mwmEzxxDfRJqr1yBqNLR3cg": "Pump.fun Bonding Curve",
    "MoonCVVNZFSYkqNXP6bxHLPL6QQJiMagDL3qcqUQTrG": "Moonshot",
    # Raydium
    "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8": "Raydium V4",
    "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK": "Raydium CLMM",
    "27haf8L6oxUeXrHrgEgsexjSY5hbVUWEmvv9Nyytg3Ct": "Raydium V3",
    "LanMV9sAd7wArD4vJFi2qDdfnVhFxYSUg6eADduJ3uj": "Raydium LaunchLab",
    "CPMDWBwJDtYax9qW7AyRuVC19Cc4L4Vcy4n2BHAbHkCW": "Raydium CP-Swap",
    "5quBtoiQqxF9Jv6KYKctB59NT3gtJD2Y65kdnB1Uev3h": "Raydium Stable",
    # Orca
    "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc": "Orca Whirlpool",
    "9W959DqEETiGZocYWCQPaJ6sBmUzgfxXfqGeTEdp3aQP": "Orca V2",
    "DjVE6JNiYqPL2QXyCUUh8rNjHrbz9hXHNYt99MQ59qw1": "Orca V1",
    # Meteora
    "LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo": "Meteora DLMM",
    "Eo7WjKq67rjJQSZxS6z3YkapzY3eMj6Xy8X5EQVn5UaB": "Meteora DLMM V2",
    "EyGdBX4EHWvZhG8kEF39yvEPBHcEF2ZaKGrYdcBCTm6h": "Meteora Pools",
    "Gswppe6ERWKpUTXvRPfXdzHhiCyJvLadVvXGfdpBqcE1": "Meteora Dynamic",
    # Jupiter
    "jupoNjAxXgZ4rjzxzPMP4oxduvQsQtZzyknqvzYNrNu": "Jupiter LO",
    "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4": "Jupiter V6",
    # OpenBook / Serum
    "opnb2LAfJYbRMAHHvqjCwQxanZn7ReEHp1k81EohpZb": "OpenBook V2",
    "srmqPvymJeFKQ4zGQed1GFppgkRHL9kaELCbyksJtPX": "OpenBook V1",
    "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin": "Serum V3",
    # Other DEXs
    "FLUXubRmkEi2q6K3Y9kBPg9248ggaZVsoSFhtJHSrm1X": "Fluxbeam",
    "2wT8Yq49kHgDzXuPxZSaeLaH1qbmGXtEyPy64bL7aD3c": "Lifinity V2",
    "EewxydAPCCVuNEyrVN68PuSYdQ7wKn27V9Gjeoi8dy3S": "Lifinity V1",
    "CURVGoZn8zycx6FXwwevgBTB2gVvdbGTEpvMJDbgs2t4": "Aldrin V2",
    "H8W3ctz92svYg6mkn1UtGfu2aQr2fnUFHM1RhScEtQDt": "Cropper",
    "SSwpkEEcbUqx4vtoEByFjSkhKdCT862DNVb52nZg1UZ": "Saros",
    "PhoeNiXZ8ByJGLkxNfZRnkUfjvmuYqLR89jjFHGqdXY": "Phoenix",
    "GFXsSL5sSaDfNFQUYsHekbWBW1TsFdjDYzACh62tEHxn": "GooseFX",
}

_BONDING_CURVE_PROGRAMS: dict[str, str] = {
    "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P": "Pump.fun Bonding Curve",
    "PumpkFHPjXpQWCNPxhj3mwmEzxxDfRJqr1yBqNLR3cg": "Pump.fun Bonding Curve",
    "MoonCVVNZFSYkqNXP6bxHLPL6QQJiMagDL3qcqUQTrG": "Moonshot Bonding Curve",
    "dbcij3LWUppWqq96dh6gJWwBifmcGfLSB5D4DuSMaqN": "Meteora DBC Bonding Curve",
}

_KNOWN_LP_WALLETS = frozenset({
    # Pump.fun bonding curve, fee, migration and treasury wallets
    "CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM",
    "39azUYFWPz3VHgKCf3VChUwbpURdCHRxjWVowf5jUJjg",
    "Ce6TQqeHC9p8KetsN6JsjHK7UTZk7nasjjnr7XxXp9F1",
    "BVMxnagMaVBDtVFkSy2n9sVZpL2E2HNwMnvMECNRSqWM",
    # Raydium LP authorities and vaults
    "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1",
    "7YttLkHDoNj9wyDur5pM1ejNaAvT9X4eqaYcHQqtj2G5",
    "Hq1fCvvjNLf75h1LDoxZ5izJVmxNWjPzWd4sGgw6suGq",
    "3uaZBfHPfmpAHW7dsimC1SnyR61X4bJqQZKWmRSCXJxv",
    "GThUX1Atko4tqhN2NaiTazWSeFWMuiUvfFnyJyUghFMJ",
    # Meteora DLMM
    "6C4d4fQo9qupzMWkVN5BbPnHQf9wKDBRSCLbJMM7xWr7",
    # Orca vaults
    "DjVE6JNiYqPL2QXyCUUh8rNjHrbz9hXHNYt99MQ59qw1",
    "TSLvdd1pWpHVjahSpsvCXUbgwsL3JAcvokwaKt1eokM",
})

_BURN_ADDRESSES = frozenset({
    SYSTEM_PROGRAM_ID,
    WSOL_MINT,
    "1nc1nerator11111111111111111111111111111111",
    TOKEN_PROGRAM_ID,
    "deadbeefdeadbeefdeadbeefdeadbeefdeadbeef11",
})


@dataclass(frozen=True)
class KnownAddressTables:
    """Immutable lookup tables for programs and wallets with known roles."""

    version: str
    dex_programs: Mapping[str, str] = field(default_factory=dict)
    bonding_curve_programs: Mapping[str, str] = field(default_factory=dict)
    known_lp_wallets: frozenset[str] = frozenset()
    burn_addresses: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        # Freeze the mappings so a shared instance can't be edited in place
        object.__setattr__(self, "dex_programs", MappingProxyType(dict(self.dex_programs)))
        object.__setattr__(
            self, "bonding_curve_programs", MappingProxyType(dict(self.bonding_curve_programs))
        )
        object.__setattr__(self, "known_lp_wallets", frozenset(self.known_lp_wallets))
        object.__setattr__(self, "burn_addresses", frozenset(self.burn_addresses))

    def program_label(self, program_id: str | None) -> str | None:
        """Label for a DEX or bonding-curve program id, DEX table first."""
        if not program_id:
            return None
        label = self.dex_programs.get(program_id)
        if label is not None:
            return label
        return self.bonding_curve_programs.get(program_id)

    def is_bonding_curve(self, program_id: str | None) -> bool:
        return bool(program_id) and program_id in self.bonding_curve_programs

    @property
    def pool_program_ids(self) -> frozenset[str]:
        return frozenset(self.dex_programs) | frozenset(self.bonding_curve_programs)


DEFAULT_TABLES = KnownAddressTables(
    version=TABLES_VERSION,
    dex_programs=_DEX_PROGRAMS,
    bonding_curve_programs=_BONDING_CURVE_PROGRAMS,
    known_lp_wallets=_KNOWN_LP_WALLETS,
    burn_addresses=_BURN_ADDRESSES,
)
