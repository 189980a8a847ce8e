"""Discord webhook notifier for Dex paid alerts.

Builds one embed per token and posts it to a webhook. Delivery is best
effort: failures are logged and reported through the return value, never
retried and never raised.
"""

import math
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

import structlog
from pydantic import SecretStr

from dexpaid.core.exceptions import FetchError
from dexpaid.services.base import BaseAPIClient
from dexpaid.services.dexscreener.models import TokenDetail, TokenProfile

log = structlog.get_logger(__name__)

DEFAULT_TITLE = "🚀 NEW TOKEN DEX PAID"
NOT_AVAILABLE = "N/A"

# Wide enough to hold any finite float quantized to cents
_PERCENT_CONTEXT = Context(prec=400)


def format_market_cap(market_cap: float | None) -> str:
    """Render market cap as ``$<value>``, or N/A when missing or zero."""
    if not market_cap:
        return NOT_AVAILABLE
    value = int(market_cap) if float(market_cap).is_integer() else market_cap
    return f"${value}"


def format_price_change(change: float | None) -> str:
    """Render a percentage with two decimals, or N/A when missing or not finite."""
    if change is None or not math.isfinite(change):
        return NOT_AVAILABLE
    rounded = Decimal(str(change)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP, context=_PERCENT_CONTEXT
    )
    return f"{rounded}%"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_embed(
    detail: TokenDetail,
    profile: TokenProfile,
    sent_at: datetime,
    title: str = DEFAULT_TITLE,
) -> dict[str, Any]:
    """Build the Discord embed for one token.

    Args:
        detail: Normalized token detail.
        profile: Listing profile the alert originates from.
        sent_at: Send time, rendered as the embed timestamp.
        title: Embed title.

    Returns:
        Embed dict ready to be wrapped in a webhook payload.
    """
    embed: dict[str, Any] = {
        "title": title,
        "description": f"{detail.name} ({detail.symbol})",
    }

    thumbnail = detail.image_url or profile.icon
    if thumbnail:
        embed["thumbnail"] = {"url": thumbnail}

    embed["fields"] = [
        {
            "name": "Market Cap",
            "value": format_market_cap(detail.market_cap),
            "inline": True,
        },
        {
            "name": "M5 Buys / Sells",
            "value": f"{detail.m5_buys} / {detail.m5_sells}",
            "inline": True,
        },
        {
            "name": "M5 Price Change",
            "value": format_price_change(detail.m5_price_change),
            "inline": True,
        },
    ]
    embed["footer"] = {"text": f"Contract: {profile.token_address}"}
    embed["timestamp"] = format_timestamp(sent_at)
    return embed


class DiscordNotifier(BaseAPIClient):
    """Posts token alerts to a Discord webhook.

    The webhook URL carries its own token, so it is kept as a secret and
    never logged.

    Example:
        notifier = DiscordNotifier(settings.discord_webhook_url)
        try:
            await notifier.notify(detail, profile)
        finally:
            await notifier.close()
    """

    def __init__(
        self,
        webhook_url: SecretStr | str,
        title: str = DEFAULT_TITLE,
        timeout: float = 10.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize notifier.

        Args:
            webhook_url: Full Discord webhook URL.
            title: Embed title.
            timeout: Request timeout in seconds.
            clock: Returns the current UTC time (injectable for tests).
        """
        if isinstance(webhook_url, str):
            webhook_url = SecretStr(webhook_url)
        super().__init__(
            service="discord",
            base_url="https://discord.com",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            log_paths=False,
        )
        self._webhook_url = webhook_url
        self.title = title
        self._clock = clock or (lambda: datetime.now(UTC))

    async def notify(self, detail: TokenDetail, profile: TokenProfile) -> bool:
        """Send an alert for one token.

        Args:
            detail: Normalized token detail.
            profile: Listing profile the alert originates from.

        Returns:
            True if the webhook accepted the message, False otherwise.
        """
        embed = build_embed(detail, profile, sent_at=self._clock(), title=self.title)
        payload = {"embeds": [embed]}

        try:
            await self.post(self._webhook_url.get_secret_value(), json=payload)
        except FetchError as e:
            log.error(
                "discord_alert_failed",
                token_address=profile.token_address,
                status_code=e.status_code,
                reason=e.reason,
            )
            return False

        log.info(
            "discord_alert_sent",
            token_address=profile.token_address,
            name=detail.name,
            symbol=detail.symbol,
        )
        return True
