"""HTTP API for a single liquidity pool."""
