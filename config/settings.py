from pydantic_settings import BaseSettings, SettingsConfigDict

PUBLIC_RPC_URL = "https://api.mainnet-beta.solana.com"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Helius (keyed Solana RPC, tried first)
    helius_api_key: str = ""
    helius_rpc_url: str = ""

    # Additional RPC candidates, comma-separated, tried after Helius
    extra_rpc_urls: str = ""

    # Public fallback RPC (always tried last)
    solana_rpc_url: str = PUBLIC_RPC_URL

    # Solscan Pro (markets + top holders): markets leg is skipped without a key
    solscan_api_key: str = ""

    # Price oracles (both work keyless, keys lift rate limits)
    jupiter_api_key: str = ""
    coingecko_api_key: str = ""

    # Per-call timeouts, seconds
    rpc_timeout_sec: float = 15.0
    markets_timeout_sec: float = 10.0
    pairs_timeout_sec: float = 10.0
    insiders_timeout_sec: float = 10.0
    price_timeout_sec: float = 5.0
    creator_timeout_sec: float = 5.0

    # Holder classifier
    lp_heuristic_min_pct: float = 20.0  # % of supply above which an unexplained holder looks like a pool
    owner_program_lookup_limit: int = 100  # top-N owners whose owning program is resolved

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    report_rate_limit: str = "30/minute"  # each report spends ~200 RPC credits

    @property
    def rpc_endpoints(self) -> list[str]:
        """RPC candidates in priority order: keyed first, public fallback last."""
        candidates: list[str] = []
        if self.helius_rpc_url:
            candidates.append(self.helius_rpc_url)
        elif self.helius_api_key:
            candidates.append(f"https://mainnet.helius-rpc.com/?api-key={self.helius_api_key}")
        candidates.extend(u.strip() for u in self.extra_rpc_urls.split(",") if u.strip())
        if self.solana_rpc_url:
            candidates.append(self.solana_rpc_url)

        seen: set[str] = set()
        unique: list[str] = []
        for url in candidates:
            if url not in seen:
                seen.add(url)
                unique.append(url)
        return unique


settings = Settings()
