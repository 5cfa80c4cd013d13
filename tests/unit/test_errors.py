"""Tests for ot_common.errors."""

import pytest

from src.ot_common.errors import (
    AmountTooSmallError,
    AppError,
    InsufficientSharesError,
    InternalError,
    InvalidMarketError,
    InvalidOrderTypeError,
    InvalidOutcomeError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidSideError,
    MarketNotFoundError,
    MarketPhaseError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderNotOwnedError,
)


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=4001, message="bad price", http_status=400)
        assert err.http_status == 400

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)
        assert str(AppError(code=1, message="x")) == "x"


class TestSpecificErrors:
    @pytest.mark.parametrize(
        ("err", "code", "status"),
        [
            (MarketNotFoundError("m1"), 3001, 404),
            (MarketPhaseError("m1", "SANDBOX_CURVE", "order submission"), 3002, 422),
            (InvalidMarketError("empty question"), 3003, 400),
            (InvalidPriceError(1.5), 4001, 400),
            (InvalidQuantityError(-1), 4002, 400),
            (InvalidOutcomeError("MAYBE"), 4003, 400),
            (OrderNotFoundError("o1"), 4004, 404),
            (InvalidSideError("HOLD"), 4005, 400),
            (OrderNotCancellableError("o1", "FILLED"), 4006, 422),
            (OrderNotOwnedError("o1"), 4007, 403),
            (InvalidOrderTypeError("STOP"), 4008, 400),
            (InsufficientSharesError(held=10, requested=20), 5001, 422),
            (AmountTooSmallError(0.01), 5002, 422),
            (InternalError(), 9002, 500),
        ],
    )
    def test_codes_and_statuses(self, err: AppError, code: int, status: int) -> None:
        assert isinstance(err, AppError)
        assert err.code == code
        assert err.http_status == status

    def test_insufficient_shares_message(self) -> None:
        err = InsufficientSharesError(held=10, requested=20)
        assert "10" in err.message
        assert "20" in err.message

    def test_phase_error_names_operation(self) -> None:
        err = MarketPhaseError("m1", "SANDBOX_CURVE", "order submission")
        assert "SANDBOX_CURVE" in err.message
        assert "order submission" in err.message
