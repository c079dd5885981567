"""Data models for Pump.fun frontend API responses."""

from dataclasses import dataclass, field


@dataclass
class PumpfunCoin:
    """Launch metadata for a single Pump.fun coin."""

    mint: str = ""
    name: str = ""
    symbol: str = ""
    creator: str = ""
    twitter: str | None = None
    telegram: str | None = None
    website: str | None = None
    complete: bool = False  # bonding curve finished and migrated
    created_timestamp: int = 0
    usd_market_cap: float = 0.0


@dataclass
class PumpfunToken:
    """A token created by a wallet on Pump.fun."""

    mint: str = ""
    name: str = ""
    symbol: str = ""
    created_timestamp: int = 0
    usd_market_cap: float = 0.0

    @property
    def is_dead(self) -> bool:
        """Token is dead if mcap < $100 or effectively zero."""
        return self.usd_market_cap < 100


@dataclass
class PumpfunCreatorHistory:
    """Creator history summary from Pump.fun."""

    total_tokens: int = 0
    dead_token_count: int = 0
    tokens: list[PumpfunToken] = field(default_factory=list)
