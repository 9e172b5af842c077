"""Settlement REST endpoints.

POST /markets/{market_id}/settle  : settler only, after end_time
POST /markets/{market_id}/redeem  : burn the caller's winning tokens for collateral
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.exchange import Exchange
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_id, get_exchange
from src.pm_market.application.schemas import MarketDetail
from src.pm_settlement.application.schemas import RedemptionResult, SettleRequest

router = APIRouter(prefix="/markets", tags=["settlement"])


@router.post("/{market_id}/settle")
async def settle(
    market_id: str,
    body: SettleRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    market = await exchange.settlement.settle(caller, market_id, body.winning_token_id)
    detail = MarketDetail.from_domain(market, exchange.registry.now())
    return success_response(detail.model_dump(), request)


@router.post("/{market_id}/redeem")
async def redeem(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    quote = await exchange.settlement.redeem(caller, market_id)
    return success_response(RedemptionResult.from_quote(quote).model_dump(), request)
