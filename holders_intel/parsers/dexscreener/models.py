from pydantic import BaseModel


class DexScreenerToken(BaseModel):
    address: str
    name: str | None = None
    symbol: str | None = None

    model_config = {"extra": "ignore"}


class DexScreenerLiquidity(BaseModel):
    usd: float | None = None
    base: float | None = None
    quote: float | None = None

    model_config = {"extra": "ignore"}


class DexScreenerWebsite(BaseModel):
    label: str | None = None
    url: str = ""

    model_config = {"extra": "ignore"}


class DexScreenerSocial(BaseModel):
    type: str = ""
    url: str = ""

    model_config = {"extra": "ignore"}


class DexScreenerInfo(BaseModel):
    imageUrl: str | None = None
    websites: list[DexScreenerWebsite] = []
    socials: list[DexScreenerSocial] = []

    model_config = {"extra": "ignore"}


class DexScreenerBoosts(BaseModel):
    active: int = 0

    model_config = {"extra": "ignore"}


class DexScreenerPair(BaseModel):
    chainId: str = ""
    dexId: str = ""
    pairAddress: str = ""
    labels: list[str] = []
    baseToken: DexScreenerToken | None = None
    quoteToken: DexScreenerToken | None = None
    priceUsd: str | None = None
    liquidity: DexScreenerLiquidity | None = None
    fdv: float | None = None
    pairCreatedAt: int | None = None
    info: DexScreenerInfo | None = None
    boosts: DexScreenerBoosts | None = None

    model_config = {"extra": "ignore"}

    @property
    def price_usd(self) -> float:
        """Quoted USD price, 0.0 when missing or unparsable."""
        try:
            return float(self.priceUsd) if self.priceUsd else 0.0
        except ValueError:
            return 0.0

    @property
    def liquidity_usd(self) -> float:
        if self.liquidity is None:
            return 0.0
        return self.liquidity.usd or 0.0


class DexScreenerOrder(BaseModel):
    """A paid order (profile, CTO, ad) placed for a token."""

    type: str = ""  # tokenProfile | communityTakeover | tokenAd | trendingBarAd
    status: str = ""  # processing | cancelled | on-hold | approved | rejected
    paymentTimestamp: int | None = None

    model_config = {"extra": "ignore"}

    @property
    def approved(self) -> bool:
        return self.status == "approved"
