"""API endpoints for the liquidity pool service."""

import os
from functools import lru_cache
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from dex.api.models import (
    AllowanceResponse,
    ApproveRequest,
    BalanceResponse,
    ErrorResponse,
    MintRequest,
    PoolStateResponse,
    ProvideLiquidityRequest,
    ProvideLiquidityResponse,
    QuoteResponse,
    SharesResponse,
    SwapRequest,
    SwapResponse,
    WithdrawLiquidityRequest,
    WithdrawLiquidityResponse,
)
from dex.constants import UINT256_MAX
from dex.events import event_to_dict
from dex.ledger import InMemoryLedger
from dex.pool import Direction, Pool

logger = structlog.get_logger()

router = APIRouter(responses={400: {"model": ErrorResponse}})

# Asset pair served by the default pool
# Configurable via environment variables DEX_ASSET1 / DEX_ASSET2
ASSET1 = os.environ.get("DEX_ASSET1", "TKA")
ASSET2 = os.environ.get("DEX_ASSET2", "TKB")


@lru_cache(maxsize=1)
def get_default_pool() -> Pool:
    """Create the process-wide pool backed by an in-memory ledger."""
    logger.info("default_pool_init", asset1=ASSET1, asset2=ASSET2)
    return Pool(ASSET1, ASSET2, InMemoryLedger())


def get_pool() -> Pool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a fresh pool:
        app.dependency_overrides[get_pool] = lambda: pool
    """
    return get_default_pool()


def get_ledger(pool: Pool = Depends(get_pool)) -> InMemoryLedger:
    """Ledger behind the pool, for the mint/approve/balance endpoints."""
    if not isinstance(pool.ledger, InMemoryLedger):
        raise HTTPException(status_code=501, detail="Pool ledger does not support direct access")
    return pool.ledger


def _state(pool: Pool) -> PoolStateResponse:
    snapshot = pool.snapshot()
    return PoolStateResponse(
        asset1=snapshot.asset1,
        asset2=snapshot.asset2,
        reserve1=str(snapshot.reserve1),
        reserve2=str(snapshot.reserve2),
        total_shares=str(snapshot.total_shares),
        price=str(pool.get_price()),
        price_precise=str(pool.get_price_precise()),
    )


@router.get("/pool")
def pool_state(pool: Pool = Depends(get_pool)) -> PoolStateResponse:
    """Current reserves, share supply and spot prices."""
    return _state(pool)


@router.get("/pool/shares/{participant}")
def pool_shares(participant: str, pool: Pool = Depends(get_pool)) -> SharesResponse:
    return SharesResponse(participant=participant, shares=str(pool.shares_of(participant)))


@router.get("/pool/events")
def pool_events(pool: Pool = Depends(get_pool)) -> list[dict[str, Any]]:
    """Every event emitted by the pool, oldest first."""
    return [event_to_dict(event) for event in list(pool.events)]


@router.get("/quote", response_model_by_alias=True)
def quote(
    amount_in: int = Query(alias="amountIn", ge=0, le=UINT256_MAX),
    direction: Direction = Query(default=Direction.ONE_FOR_TWO),
    pool: Pool = Depends(get_pool),
) -> QuoteResponse:
    """Output a swap would receive at the current reserves (no state change)."""
    amount_out = pool.quote_swap(direction, amount_in)
    return QuoteResponse(amount_in=str(amount_in), amount_out=str(amount_out))


@router.post("/liquidity/add", response_model_by_alias=True)
def provide_liquidity(
    request: ProvideLiquidityRequest, pool: Pool = Depends(get_pool)
) -> ProvideLiquidityResponse:
    minted = pool.provide_liquidity(request.participant, int(request.amount1), int(request.amount2))
    return ProvideLiquidityResponse(shares_minted=str(minted))


@router.post("/liquidity/remove")
def withdraw_liquidity(
    request: WithdrawLiquidityRequest, pool: Pool = Depends(get_pool)
) -> WithdrawLiquidityResponse:
    amount1, amount2 = pool.withdraw_liquidity(request.participant, int(request.shares))
    return WithdrawLiquidityResponse(amount1=str(amount1), amount2=str(amount2))


@router.post("/swap", response_model_by_alias=True)
def swap(request: SwapRequest, pool: Pool = Depends(get_pool)) -> SwapResponse:
    amount_out = pool.swap(request.participant, request.direction, int(request.amount_in))
    return SwapResponse(amount_out=str(amount_out))


@router.post("/ledger/mint")
def ledger_mint(request: MintRequest, ledger: InMemoryLedger = Depends(get_ledger)) -> BalanceResponse:
    """Credit test funds to an account."""
    ledger.mint(request.asset, request.account, int(request.amount))
    balance = ledger.balance_of(request.asset, request.account)
    return BalanceResponse(asset=request.asset, account=request.account, balance=str(balance))


@router.post("/ledger/approve")
def ledger_approve(
    request: ApproveRequest,
    pool: Pool = Depends(get_pool),
    ledger: InMemoryLedger = Depends(get_ledger),
) -> AllowanceResponse:
    """Authorise the pool (or another spender) to pull the owner's funds."""
    spender = request.spender if request.spender is not None else pool.account
    ledger.approve(request.asset, request.owner, spender, int(request.amount))
    return AllowanceResponse(
        asset=request.asset,
        owner=request.owner,
        spender=spender,
        allowance=str(ledger.allowance(request.asset, request.owner, spender)),
    )


@router.get("/ledger/balance/{asset}/{account}")
def ledger_balance(
    asset: str, account: str, ledger: InMemoryLedger = Depends(get_ledger)
) -> BalanceResponse:
    return BalanceResponse(asset=asset, account=account, balance=str(ledger.balance_of(asset, account)))
