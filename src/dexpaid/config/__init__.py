"""Configuration module for DexPaid Alert.

Usage:
    from dexpaid.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.target_chain)

Note:
    We intentionally don't export a module-level `settings` instance
    because that would fail on import if DISCORD_WEBHOOK_URL isn't set.
    Use `get_settings()` to get the cached instance at runtime.
"""

from dexpaid.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
