# src/pm_admin/api/router.py
"""Admin REST API. Mutating endpoints are settler only."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.exchange import Exchange
from src.pm_account.application.schemas import FundRequest, FundResponse
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_id, get_exchange
from src.pm_settlement.application.schemas import FeeWithdrawalResponse
from src.pm_trading.application.schemas import FeeUpdateRequest, FeeUpdateResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.put("/fee")
async def update_fee(
    body: FeeUpdateRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    old = await exchange.trading.set_fee(caller, body.fee_bps)
    result = FeeUpdateResponse(old_fee_bps=old, fee_bps=exchange.trading.fee_bps)
    return success_response(result.model_dump(), request)


@router.post("/markets/{market_id}/withdraw-fees")
async def withdraw_fees(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    amount = await exchange.settlement.withdraw_fees(caller, market_id)
    result = FeeWithdrawalResponse(market_id=market_id, recipient=caller, amount=amount)
    return success_response(result.model_dump(), request)


@router.get("/markets/{market_id}/stats")
async def get_market_stats(
    market_id: str,
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    result = await exchange.admin.get_market_stats(market_id)
    return success_response(result, request)


@router.get("/invariants")
async def verify_invariants(
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    result = await exchange.admin.verify_all_invariants()
    return success_response(result, request)


@router.post("/assets/{address}/fund")
async def fund(
    address: str,
    body: FundRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    balance = await exchange.admin.fund(caller, address, body.holder, body.amount)
    result = FundResponse(asset=address, holder=body.holder, amount=body.amount, balance=balance)
    return success_response(result.model_dump(), request)
