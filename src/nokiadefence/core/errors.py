from __future__ import annotations


class AssetError(ValueError):
    """A map, sprite sheet or music file is missing or malformed."""


class ConfigError(ValueError):
    """The rules configuration failed validation."""
