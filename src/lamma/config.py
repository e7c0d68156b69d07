"""CLI configuration: a singleton LammaConfig resolved at startup."""

from __future__ import annotations

from functools import lru_cache

from lamma_common import LammaConfig


@lru_cache(maxsize=1)
def get_config() -> LammaConfig:
    """Return the global LammaConfig (resolved once, cached)."""
    return LammaConfig()
