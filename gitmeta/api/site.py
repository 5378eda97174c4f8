"""Endpoint resolution for a Datadog site."""

from __future__ import annotations

from gitmeta.core.config import UploadConfig

__all__ = [
    "SRCMAP_PATH",
    "api_base_url",
    "intake_base_url",
]

SRCMAP_PATH = "api/v2/srcmap"


def api_base_url(site: str) -> str:
    """Public API host, used by the GitDB sync, key validation and metrics."""
    return f"https://api.{site}"


def intake_base_url(config: UploadConfig) -> str:
    """Source map intake host, unless overridden through the environment."""
    if config.intake_url:
        return config.intake_url.rstrip("/")
    return f"https://sourcemap-intake.{config.site}"
