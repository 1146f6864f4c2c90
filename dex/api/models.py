"""Pydantic request/response models for the pool HTTP API.

Amounts travel as decimal strings so values up to 2^256-1 survive JSON
clients that only have 53-bit numbers.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from dex.constants import UINT256_MAX
from dex.pool import Direction


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Non-empty account or asset identifier
Identifier = Annotated[str, Field(min_length=1, max_length=128)]


class ProvideLiquidityRequest(BaseModel):
    participant: Identifier
    amount1: Uint256
    amount2: Uint256


class ProvideLiquidityResponse(BaseModel):
    shares_minted: Uint256 = Field(alias="sharesMinted")

    model_config = {"populate_by_name": True}


class WithdrawLiquidityRequest(BaseModel):
    participant: Identifier
    shares: Uint256


class WithdrawLiquidityResponse(BaseModel):
    amount1: Uint256
    amount2: Uint256


class SwapRequest(BaseModel):
    participant: Identifier
    direction: Direction = Field(description="'1->2' sells asset1, '2->1' sells asset2")
    amount_in: Uint256 = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class PoolStateResponse(BaseModel):
    """Snapshot of the pool reserves, supply and prices."""

    asset1: str
    asset2: str
    reserve1: Uint256
    reserve2: Uint256
    total_shares: Uint256 = Field(alias="totalShares")
    price: Uint256 = Field(description="floor(reserve2 / reserve1), 0 when empty")
    price_precise: str = Field(alias="pricePrecise", description="reserve2 / reserve1 as a decimal string")

    model_config = {"populate_by_name": True}


class SharesResponse(BaseModel):
    participant: str
    shares: Uint256


class MintRequest(BaseModel):
    asset: Identifier
    account: Identifier
    amount: Uint256


class ApproveRequest(BaseModel):
    asset: Identifier
    owner: Identifier
    spender: Identifier | None = Field(
        default=None, description="Defaults to the pool's own ledger account"
    )
    amount: Uint256


class AllowanceResponse(BaseModel):
    asset: str
    owner: str
    spender: str
    allowance: Uint256


class BalanceResponse(BaseModel):
    asset: str
    account: str
    balance: Uint256


class ErrorResponse(BaseModel):
    error: str
    detail: str
