"""DexPaid Alert: Discord alerts for DexScreener tokens with an approved Dex payment."""

__version__ = "1.0.0"
