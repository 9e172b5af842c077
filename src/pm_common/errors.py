"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Balances / collateral
  3xxx: Market lifecycle
  4xxx: Trading input
  5xxx: Position / redemption
  6xxx: Authorization
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Balances / collateral ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class CollateralTransferError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Collateral transfer failed: {detail}", 502)


class InsufficientCollateralError(AppError):
    def __init__(self, market_id: str, required: int, available: int) -> None:
        super().__init__(
            2003,
            f"Market {market_id} holds {available} collateral, {required} required",
            422,
        )


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketClosedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market trading stopped: {market_id}", 422)


class InvalidMarketEndTimeError(AppError):
    def __init__(self, end_time: int, now: int) -> None:
        super().__init__(3003, f"Market end time {end_time} is not after now ({now})", 422)


class DuplicateMarketError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3004, f"Market already exists: {market_id}", 409)


class MarketStillOpenError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3005, f"Market has not reached its end time: {market_id}", 422)


class AlreadySettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3006, f"Market already settled: {market_id}", 409)


class MarketNotSettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3007, f"Market not settled: {market_id}", 422)


class InvalidCollateralAssetError(AppError):
    def __init__(self, asset: str | None) -> None:
        super().__init__(3008, f"Invalid collateral asset: {asset!r}", 422)


class InvalidLiquidityError(AppError):
    def __init__(self, liquidity: int) -> None:
        super().__init__(3009, f"Invalid initial liquidity: {liquidity}", 422)


class InvalidQuestionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3010, f"Invalid market question: {detail}", 422)


# --- 4xxx: Trading ---

class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid amount: {detail}", 422)


class InvalidSideError(AppError):
    def __init__(self, token_id: int, market_id: str) -> None:
        super().__init__(4002, f"Token {token_id} is not an outcome of market {market_id}", 422)


class InvalidFeeError(AppError):
    def __init__(self, fee_bps: int) -> None:
        super().__init__(4003, f"Invalid take fee: {fee_bps} bps (allowed 0-2000)", 422)


class InsufficientSupplyError(AppError):
    def __init__(self, requested: int, supply: int) -> None:
        super().__init__(
            4004, f"Insufficient supply: burning {requested} of {supply}", 422
        )


# --- 5xxx: Position ---

class NoWinningTokensError(AppError):
    def __init__(self, holder: str, market_id: str) -> None:
        super().__init__(
            5001, f"No winning tokens to redeem: holder {holder}, market {market_id}", 422
        )


# --- 6xxx: Authorization ---

class NotSettlerError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(6001, f"Caller {caller} is not the settler", 403)


class MissingCallerError(AppError):
    def __init__(self) -> None:
        super().__init__(6002, "Caller identity required (X-Account-Id header)", 401)


# --- 9xxx: System ---

class ArithmeticOverflowError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Arithmetic overflow: {detail}", 422)


class InvariantViolationError(AppError):
    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(9003, "Invariant violated: " + "; ".join(violations), 500)
