"""AMM (Automated Market Maker) pricing curves."""

from dex.amm.base import AMM, SwapResult
from dex.amm.constant_product import ConstantProduct, constant_product, quote

__all__ = [
    # Base classes
    "AMM",
    "SwapResult",
    # Constant product
    "ConstantProduct",
    "constant_product",
    "quote",
]
