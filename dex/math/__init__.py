"""Exact integer math helpers for pool accounting."""

from dex.math.sqrt import isqrt

__all__ = ["isqrt"]
