"""Unified error codes and custom exceptions.

Error code ranges:
  3xxx: Market
  4xxx: Order
  5xxx: Position / curve sizing
  9xxx: System

Every error is a local validation failure: raising one never leaves a
partially applied request behind. ``http_status`` is the suggested status
for whatever boundary layer maps these onto a wire protocol.
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


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketPhaseError(AppError):
    def __init__(self, market_id: str, phase: str, operation: str) -> None:
        super().__init__(
            3002, f"Market {market_id} in phase {phase} does not support {operation}", 422
        )


class InvalidMarketError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid market: {detail}", 400)


# --- 4xxx: Order ---

class InvalidPriceError(AppError):
    def __init__(self, price: object) -> None:
        super().__init__(4001, f"Price must be a finite number in [0, 1], got {price}", 400)


class InvalidQuantityError(AppError):
    def __init__(self, qty: object) -> None:
        super().__init__(4002, f"Quantity must be a finite number > 0, got {qty}", 400)


class InvalidOutcomeError(AppError):
    def __init__(self, outcome: object) -> None:
        super().__init__(4003, f"Invalid outcome: {outcome}", 400)


class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}", 404)


class InvalidSideError(AppError):
    def __init__(self, side: object) -> None:
        super().__init__(4005, f"Invalid side: {side}", 400)


class OrderNotCancellableError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(4006, f"Order {order_id} in status {status} cannot be cancelled", 422)


class OrderNotOwnedError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4007, f"Order {order_id} is not owned by the requesting user", 403)


class InvalidOrderTypeError(AppError):
    def __init__(self, order_type: object) -> None:
        super().__init__(4008, f"Invalid order type: {order_type}", 400)


# --- 5xxx: Position / curve ---

class InsufficientSharesError(AppError):
    def __init__(self, held: float, requested: float) -> None:
        super().__init__(
            5001, f"Insufficient shares: held {held}, requested {requested}", 422
        )


class AmountTooSmallError(AppError):
    def __init__(self, amount: float) -> None:
        super().__init__(5002, f"Amount too small for minimum purchase: {amount}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
