"""pm_account REST API: the caller's holdings in one market and outcome-token transfers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.exchange import Exchange
from src.pm_account.application.schemas import PositionResponse, TokenTransferRequest
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_id, get_exchange

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/me/positions/{market_id}")
async def get_my_position(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    data = await exchange.accounts.get_position_view(caller, market_id)
    return success_response(data.model_dump(), request)


@router.post("/me/positions/{market_id}/transfer")
async def transfer_tokens(
    market_id: str,
    body: TokenTransferRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    position = await exchange.accounts.transfer_tokens(
        caller, body.to, market_id, body.token_id, body.amount
    )
    return success_response(PositionResponse.from_domain(position).model_dump(), request)
