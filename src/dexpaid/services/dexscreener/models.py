"""Pydantic models for DexScreener API responses.

This module defines data models for parsing DexScreener API responses.
Models use Pydantic for validation and type coercion; field aliases follow
the camelCase names used on the wire.

API Documentation: https://docs.dexscreener.com/api/reference
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

APPROVED_STATUS = "approved"


class TokenLink(BaseModel):
    """A link attached to a token profile (website, twitter, telegram...)."""

    model_config = ConfigDict(frozen=True)

    type: str | None = None
    label: str | None = None
    url: str


class TokenProfile(BaseModel):
    """Token from the latest profiles endpoint.

    Attributes:
        url: DexScreener URL for the token.
        chain_id: Blockchain identifier (e.g., "solana", "ethereum").
        token_address: Token contract/mint address.
        icon: URL to token icon image.
        header: URL to the profile header image.
        open_graph: URL to the social preview image.
        description: Token description text.
        links: Ordered list of links published with the profile.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = ""
    chain_id: str = Field(default="", alias="chainId")
    token_address: str = Field(alias="tokenAddress", min_length=1)
    icon: str | None = None
    header: str | None = None
    open_graph: str | None = Field(default=None, alias="openGraph")
    description: str | None = None
    links: list[TokenLink] = Field(default_factory=list)

    @field_validator("url", "chain_id", mode="before")
    @classmethod
    def null_to_empty(cls, v: object) -> object:
        """Upstream sends null for either field; the chain filter checks both."""
        return "" if v is None else v


class Order(BaseModel):
    """Paid order attached to a token (ads, token profile, boosts...).

    Attributes:
        type: Order type (e.g., "tokenProfile", "tokenAd").
        status: Order status (e.g., "processing", "approved", "cancelled").
        payment_timestamp: Payment time in Unix milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    status: str
    payment_timestamp: int | None = Field(default=None, alias="paymentTimestamp")

    @property
    def is_approved(self) -> bool:
        return self.status == APPROVED_STATUS

    @property
    def paid_at(self) -> datetime | None:
        if self.payment_timestamp is None:
            return None
        return datetime.fromtimestamp(self.payment_timestamp / 1000, tz=UTC)


class PairToken(BaseModel):
    """Token information within a trading pair.

    Attributes:
        address: Token contract/mint address.
        name: Token name.
        symbol: Token ticker symbol.
    """

    address: str
    name: str | None = None
    symbol: str | None = None


class TxnCounts(BaseModel):
    """Buy and sell counts over one window."""

    buys: int = 0
    sells: int = 0


class PairTxns(BaseModel):
    """Transaction counts per window. Only the 5-minute window is used."""

    m5: TxnCounts = Field(default_factory=TxnCounts)


class PriceChange(BaseModel):
    """Price change percentages per window."""

    m5: float | None = None


class PairInfo(BaseModel):
    """Profile info attached to a pair."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str | None = Field(default=None, alias="imageUrl")
    header: str | None = None
    open_graph: str | None = Field(default=None, alias="openGraph")


class TokenPair(BaseModel):
    """Trading pair information from the token-pairs endpoint.

    Attributes:
        chain_id: Blockchain identifier.
        dex_id: DEX identifier (e.g., "raydium", "pumpswap").
        url: DexScreener URL for the pair.
        pair_address: Trading pair contract address.
        base_token: Base token information.
        quote_token: Quote token information.
        txns: Buy/sell counts per window.
        price_change: Price change percentages per window.
        market_cap: Market capitalization in USD.
        info: Pair profile info (image...).
    """

    model_config = ConfigDict(populate_by_name=True)

    chain_id: str = Field(alias="chainId")
    dex_id: str = Field(alias="dexId")
    url: str | None = None
    pair_address: str = Field(alias="pairAddress")
    base_token: PairToken = Field(alias="baseToken")
    quote_token: PairToken | None = Field(default=None, alias="quoteToken")
    txns: PairTxns = Field(default_factory=PairTxns)
    price_change: PriceChange = Field(default_factory=PriceChange, alias="priceChange")
    market_cap: float | None = Field(default=None, alias="marketCap")
    info: PairInfo | None = None


class TokenDetail(BaseModel):
    """Normalized view of a token used to build an alert.

    Derived solely from the base token and aggregate fields of one pair.
    """

    name: str
    symbol: str
    image_url: str | None = None
    market_cap: float | None = None
    m5_buys: int = 0
    m5_sells: int = 0
    m5_price_change: float | None = None

    @classmethod
    def from_pair(cls, pair: TokenPair) -> "TokenDetail":
        """Project a pair onto the fields an alert needs."""
        return cls(
            name=pair.base_token.name,
            symbol=pair.base_token.symbol,
            image_url=pair.info.image_url if pair.info else None,
            market_cap=pair.market_cap,
            m5_buys=pair.txns.m5.buys,
            m5_sells=pair.txns.m5.sells,
            m5_price_change=pair.price_change.m5,
        )
