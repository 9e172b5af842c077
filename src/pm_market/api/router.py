"""pm_market REST endpoints.

POST /markets                              : create and seed a market
GET  /markets                              : list with cursor pagination
GET  /markets/{market_id}                  : full detail incl. prices and phase
GET  /markets/{market_id}/price/{token_id} : marginal price of one side
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.exchange import Exchange
from src.pm_common.fixed_point import wad_to_display
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_caller_id, get_exchange
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    MarketDetail,
    MarketListResponse,
    PriceResponse,
)

router = APIRouter(prefix="/markets", tags=["markets"])


@router.post("", status_code=201)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    caller: Annotated[str, Depends(get_caller_id)],
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    market = await exchange.registry.create_market(
        creator=caller,
        liquidity=body.liquidity,
        collateral_asset=body.collateral_asset,
        question=body.question,
        end_time=body.end_time,
    )
    detail = MarketDetail.from_domain(market, exchange.registry.now())
    return success_response(detail.model_dump(), request)


@router.get("")
async def list_markets(
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
    settled: bool | None = Query(None, description="Filter by settlement state"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None, description="Market id of the last item seen"),
) -> ApiResponse:
    # fetch one extra to learn whether another page exists
    markets = await exchange.registry.list_markets(settled, cursor, limit + 1)
    has_more = len(markets) > limit
    page = markets[:limit]
    now = exchange.registry.now()
    result = MarketListResponse(
        items=[MarketDetail.from_domain(m, now) for m in page],
        next_cursor=page[-1].id if has_more and page else None,
        has_more=has_more,
    )
    return success_response(result.model_dump(), request)


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    market = await exchange.registry.get_market(market_id)
    detail = MarketDetail.from_domain(market, exchange.registry.now())
    return success_response(detail.model_dump(), request)


@router.get("/{market_id}/price/{token_id}")
async def get_price(
    market_id: str,
    token_id: int,
    request: Request,
    exchange: Annotated[Exchange, Depends(get_exchange)],
) -> ApiResponse:
    market = await exchange.registry.get_market(market_id)
    outcome = exchange.registry.outcome_for_token(market, token_id)
    price = await exchange.registry.price_of(market_id, token_id)
    result = PriceResponse(
        market_id=market_id,
        token_id=str(token_id),
        outcome=outcome.value,
        price=price,
        price_display=wad_to_display(price),
    )
    return success_response(result.model_dump(), request)
