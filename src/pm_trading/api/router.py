"""Trading REST endpoints: curve mints and burns, plus side-effect-free quotes.

POST /markets/{market_id}/mint
POST /markets/{market_id}/burn
GET  /markets/{market_id}/quote/mint?token_id=&collateral_in=
GET  /markets/{market_id}/quote/burn?token_id=&token_amount=
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.exchange import Exchange
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_id, get_exchange
from src.pm_trading.application.schemas import BurnRequest, BurnResult, MintRequest, MintResult

router = APIRouter(prefix="/markets", tags=["trading"])


@router.post("/{market_id}/mint")
async def mint(
    market_id: str,
    body: MintRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    quote = await exchange.trading.mint(caller, market_id, body.collateral_in, body.token_id)
    return success_response(MintResult.from_quote(quote).model_dump(), request)


@router.post("/{market_id}/burn")
async def burn(
    market_id: str,
    body: BurnRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    quote = await exchange.trading.burn(caller, market_id, body.token_id, body.token_amount)
    return success_response(BurnResult.from_quote(quote).model_dump(), request)


@router.get("/{market_id}/quote/mint")
async def quote_mint(
    market_id: str,
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
    token_id: int = Query(..., ge=0),
    collateral_in: int = Query(...),
) -> ApiResponse:
    quote = await exchange.trading.quote_mint(market_id, collateral_in, token_id)
    return success_response(MintResult.from_quote(quote).model_dump(), request)


@router.get("/{market_id}/quote/burn")
async def quote_burn(
    market_id: str,
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
    token_id: int = Query(..., ge=0),
    token_amount: int = Query(...),
) -> ApiResponse:
    quote = await exchange.trading.quote_burn(market_id, token_id, token_amount)
    return success_response(BurnResult.from_quote(quote).model_dump(), request)
