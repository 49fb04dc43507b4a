"""Shared utilities for analogbind."""

from analogbind.core.utils.math import clamp, round_to

__all__ = [
    "clamp",
    "round_to",
]
