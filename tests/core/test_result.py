"""Tests for the Ok/Err result envelope."""

import pytest

from intent_spine.core.errors import ValidationError
from intent_spine.core.result import Err, Ok, collect_results, partition_results, try_result


class TestOkErr:
    def test_ok(self):
        result = Ok(5)
        assert result.is_ok() and not result.is_err()
        assert result.unwrap() == 5
        assert result.map(lambda v: v * 2) == Ok(10)
        assert result.to_dict() == {"ok": True, "value": 5}

    def test_err(self):
        error = ValidationError("bad", field="amount")
        result = Err(error)
        assert result.is_err()
        assert result.unwrap_or(0) == 0
        assert result.map(lambda v: v * 2).error is error
        with pytest.raises(ValidationError):
            result.unwrap()

    def test_err_to_dict(self):
        assert Err(ValidationError("bad")).to_dict()["error"]["error_type"] == "ValidationError"
        assert Err(KeyError("k")).to_dict()["error"] == {"error_type": "KeyError", "message": "'k'"}

    def test_match(self):
        match Ok("v"):
            case Ok(value):
                assert value == "v"
            case Err():
                pytest.fail("expected Ok")


class TestTryResult:
    def test_catches_intent_errors(self):
        def fail():
            raise ValidationError("bad")

        assert isinstance(try_result(fail), Err)
        assert try_result(lambda: 1) == Ok(1)

    def test_programming_errors_propagate(self):
        with pytest.raises(ZeroDivisionError):
            try_result(lambda: 1 / 0)

    def test_custom_catch(self):
        assert isinstance(try_result(lambda: 1 / 0, catch=(ZeroDivisionError,)), Err)


class TestBatches:
    def test_collect_stops_at_first_error(self):
        first = ValidationError("first")
        results = [Ok(1), Err(first), Err(ValidationError("second"))]
        collected = collect_results(results)
        assert isinstance(collected, Err)
        assert collected.error is first

    def test_collect_all_ok(self):
        assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])

    def test_partition_keeps_order(self):
        a, b = ValidationError("a"), ValidationError("b")
        values, errors = partition_results([Err(a), Ok(1), Err(b), Ok(2)])
        assert values == [1, 2]
        assert errors == [a, b]
