"""Pydantic models for the holders report request and JSON response.

Field names are snake_case in Python and camelCase on the wire; dump with
``by_alias=True, exclude_none=True`` so absent optionals are omitted.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

BASE58_PATTERN = r"^[1-9A-HJ-NP-Za-km-z]{32,44}$"


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class ReportRequest(CamelModel):
    token_mint: str = Field(pattern=BASE58_PATTERN)
    manual_price: float | None = Field(default=None, gt=0)


class HolderOut(CamelModel):
    rank: int
    owner_address: str
    token_account_address: str
    account_owner_program: str
    owner_program: str | None = None
    balance_raw: str
    balance: float
    usd_value: float
    percentage_of_supply: float

    is_liquidity_pool: bool
    lp_confidence: str | None = None  # "verified" | "heuristic"
    lp_confidence_score: int = 0
    lp_detection_reason: str | None = None
    lp_origin_source: str | None = None
    detected_platform: str | None = None

    tier: str | None = None
    simple_tier: str | None = None
    is_dust_wallet: bool = False
    is_small_wallet: bool = False
    is_medium_wallet: bool = False
    is_large_wallet: bool = False
    is_real_wallet: bool = False
    is_boss_wallet: bool = False
    is_kingpin_wallet: bool = False
    is_super_boss_wallet: bool = False
    is_baby_whale_wallet: bool = False
    is_true_whale_wallet: bool = False


class TierStatOut(CamelModel):
    count: int = 0
    balance: float = 0.0
    usd_value: float = 0.0
    percentage_of_supply: float = 0.0


class SimpleTiersOut(CamelModel):
    dust: TierStatOut
    retail: TierStatOut
    serious: TierStatOut
    whales: TierStatOut


class DistributionStatsOut(CamelModel):
    top5_percentage: float
    top10_percentage: float
    top20_percentage: float
    top5_percentage_of_total: float
    top10_percentage_of_total: float
    top20_percentage_of_total: float


class CirculatingSupplyOut(CamelModel):
    tokens: float
    percentage: float
    usd_value: float


class HealthScoreOut(CamelModel):
    score: int
    grade: str
    deductions: dict[str, int] = {}


class PotentialDevWalletOut(CamelModel):
    address: str
    balance: float
    usd_value: float
    percentage_of_supply: float
    confidence: int
    reason: str


class SocialsOut(CamelModel):
    twitter: str | None = None
    telegram: str | None = None
    website: str | None = None
    discord: str | None = None


class DexStatusOut(CamelModel):
    has_paid_profile: bool = False
    has_cto: bool = Field(default=False, alias="hasCTO")
    has_active_ads: bool = False
    is_boosted: bool = False
    active_boosts: int = 0


class LaunchpadInfoOut(CamelModel):
    name: str
    detected: bool
    confidence: str


class CreatorInfoOut(CamelModel):
    platform: str
    creator_address: str | None = None
    name: str | None = None
    symbol: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    website: str | None = None
    total_launches: int | None = None
    dead_launches: int | None = None
    holds_token: bool = False


class InsiderOut(CamelModel):
    wallet: str
    percentage: float
    insider_type: str


class ClusterOut(CamelModel):
    id: str
    member_addresses: list[str]
    total_percentage: float
    cluster_type: str


class InsidersGraphOut(CamelModel):
    shape: str
    has_insiders: bool
    insider_count: int
    total_insider_percentage: float
    bundled_percentage: float
    bundled_wallets: list[str]
    clusters: list[ClusterOut]
    top_insiders: list[InsiderOut]
    warnings: list[str] = []


class DataSourcesOut(CamelModel):
    rpc_endpoint: str
    token_program: str
    token_program_variant: str
    rpc_failed_attempts: int = 0
    pool_registry: dict[str, int] = {}
    verified_lp_account: str | None = None
    verified_lp_source: str | None = None
    price_attempts: list[str] = []
    known_address_tables_version: str


class HoldersReport(CamelModel):
    token_mint: str
    total_holders: int
    liquidity_pools_detected: int
    lp_balance: float
    lp_percentage_of_supply: float
    non_lp_holders: int
    non_lp_balance: float

    dust_wallets: int
    small_wallets: int
    medium_wallets: int
    large_wallets: int
    real_wallets: int
    boss_wallets: int
    kingpin_wallets: int
    super_boss_wallets: int
    baby_whale_wallets: int
    true_whale_wallets: int

    total_balance: float
    token_price_usd: float = Field(alias="tokenPriceUSD")
    price_source: str
    price_discovery_failed: bool

    holders: list[HolderOut]
    liquidity_pools: list[HolderOut]
    potential_dev_wallet: PotentialDevWalletOut | None = None
    socials: SocialsOut | None = None
    dex_status: DexStatusOut | None = None
    launchpad_info: LaunchpadInfoOut | None = None
    creator_info: CreatorInfoOut | None = None
    insiders_graph: InsidersGraphOut | None = None

    simple_tiers: SimpleTiersOut
    distribution_stats: DistributionStatsOut
    circulating_supply: CirculatingSupplyOut
    risk_flags: list[str]
    health_score: HealthScoreOut

    summary: str
    data_sources: DataSourcesOut
    soft_errors: dict[str, str] = {}
    execution_time_ms: int

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LedgerFailureOut(CamelModel):
    error: str
    token_mint: str
    attempts: list[dict[str, str]]
