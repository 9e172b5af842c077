"""FastAPI dependencies: caller identity and the running exchange.

Usage in any router:
    from src.pm_gateway.auth.dependencies import get_caller_id, get_exchange

    @router.post("/protected")
    async def protected(
        caller: Annotated[str, Depends(get_caller_id)],
        exchange: Annotated[Exchange, Depends(get_exchange)],
    ):
        ...
"""

from fastapi import Header, Request

from src.exchange import Exchange
from src.pm_common.errors import MissingCallerError


async def get_caller_id(
    request: Request,
    x_account_id: str | None = Header(default=None, alias="X-Account-Id"),
) -> str:
    """Return the caller's account id from the X-Account-Id header.

    Raises MissingCallerError (401) when the header is absent or blank.
    """
    caller = (x_account_id or "").strip()
    if not caller:
        raise MissingCallerError()
    request.state.caller_id = caller
    return caller


async def get_exchange(request: Request) -> Exchange:
    """The Exchange built by the application lifespan."""
    return request.app.state.exchange
