"""Chain membership check for token profiles."""

from dexpaid.services.dexscreener.models import TokenProfile

DEFAULT_CHAIN = "solana"
DEXSCREENER_WEB_URL = "https://dexscreener.com"


def chain_url_prefix(chain: str) -> str:
    """DexScreener web URL prefix for tokens on a chain."""
    return f"{DEXSCREENER_WEB_URL}/{chain.lower()}/"


def is_target_chain(profile: TokenProfile, chain: str = DEFAULT_CHAIN) -> bool:
    """Check whether a profile belongs to the target chain.

    Upstream data does not reliably populate ``chainId``, so a profile whose
    DexScreener URL points at the chain is accepted as well.

    Args:
        profile: Token profile from the listing endpoint.
        chain: Target chain id, compared case-insensitively.

    Returns:
        True if the chain id matches or the URL has the chain prefix.
    """
    if profile.chain_id.lower() == chain.lower():
        return True
    return profile.url.startswith(chain_url_prefix(chain))
