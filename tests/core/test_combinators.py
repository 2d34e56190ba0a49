"""Tests for faultline.core.combinators module."""

import pytest

from faultline.core.combinators import (
    all_succeed,
    chain,
    chain_unsafe,
    find_first_success,
    map_all,
    map_each,
    recover,
    run,
    run_unsafe,
)
from faultline.core.context import WrappedError
from faultline.core.errors import InvalidCallbackReturn, InvalidOutcomeShape
from faultline.core.result import Err, Ok


def explode(_=None):
    raise RuntimeError("kaboom")


class TestRun:
    """Test run / run_unsafe."""

    def test_coerces_plain_return(self):
        """A plain return value becomes Ok."""
        assert run(lambda: 42) == Ok(42)

    def test_outcome_return_passes_through(self):
        """An outcome return is kept as-is."""
        assert run(lambda: Err("missing")) == Err("missing")

    def test_converts_exception(self):
        """run turns an exception into Err(WrappedError)."""
        result = run(explode)
        assert isinstance(result, Err)
        chain_ = result.reason
        assert isinstance(chain_, WrappedError)
        assert chain_.raised is True
        assert isinstance(chain_.reason, RuntimeError)
        assert chain_.frame.callback is explode
        assert chain_.__cause__ is chain_.reason

    def test_frame_points_at_raise_site(self):
        """The frame's call site is where the exception was raised."""
        chain_ = run(explode).reason
        assert chain_.frame.call_site.file.endswith("test_combinators.py")
        assert chain_.frame.stack[0].function == "explode"

    def test_run_unsafe_propagates(self):
        """run_unsafe lets exceptions escape."""
        with pytest.raises(RuntimeError, match="kaboom"):
            run_unsafe(explode)

    def test_programming_errors_are_reraised(self):
        """Misuse inside a safe callback is never turned into data."""
        with pytest.raises(InvalidOutcomeShape):
            run(lambda: chain(5, lambda x: x))

    def test_run_unsafe_then_chain_unsafe_on_failure(self):
        """A failure skips the rest of the pipeline."""
        calls = []
        result = chain_unsafe(run_unsafe(lambda: Err("missing")), calls.append)
        assert result == Err("missing")
        assert calls == []


class TestChain:
    """Test chain / chain_unsafe."""

    def test_calls_with_unwrapped_value(self):
        """fn receives the value exactly once."""
        calls = []

        def record(value):
            calls.append(value)
            return value + 1

        assert chain(Ok(1), record) == Ok(2)
        assert calls == [1]

    def test_bare_ok_passes_none(self):
        """fn receives None for Ok()."""
        assert chain(Ok(), lambda value: value) == Ok(None)

    @pytest.mark.parametrize("combinator", [chain, chain_unsafe])
    def test_err_returned_unchanged(self, combinator):
        """Err is returned as the same object and fn is not called."""
        failure = Err("x")
        assert combinator(failure, explode) is failure

    def test_chain_converts_exception(self):
        """chain turns an exception into Err(WrappedError)."""
        result = chain(Ok(1), explode)
        assert isinstance(result.reason, WrappedError)
        assert str(result.reason.reason) == "kaboom"

    def test_chain_unsafe_propagates(self):
        """chain_unsafe lets exceptions escape."""
        with pytest.raises(RuntimeError):
            chain_unsafe(Ok(1), explode)

    def test_validates_outcome(self):
        """A non-outcome argument raises."""
        with pytest.raises(InvalidOutcomeShape):
            chain(("ok", 1), lambda x: x)


class TestRecover:
    """Test recover."""

    def test_ok_untouched(self):
        """Ok is returned without calling fn."""
        success = Ok(1)
        assert recover(success, explode) is success

    def test_outcome_return(self):
        """An outcome returned by fn passes through."""
        assert recover(Err("miss"), lambda reason: Ok("default")) == Ok("default")

    def test_plain_return_becomes_err(self):
        """A plain return becomes the new reason."""
        assert recover(Err("x"), lambda reason: reason * 2) == Err("xx")

    def test_bare_err_passes_none(self):
        """fn receives None for Err()."""
        assert recover(Err(), lambda reason: Ok(reason)) == Ok(None)

    def test_does_not_catch(self):
        """Exceptions from fn propagate."""
        with pytest.raises(RuntimeError):
            recover(Err("x"), explode)


class TestMapAll:
    """Test map_all."""

    def test_collects_in_order(self):
        """Values are collected in input order."""
        assert map_all(Ok([1, 2, 3]), lambda x: Ok(x * 10)) == Ok([10, 20, 30])

    def test_raw_collection(self):
        """A plain iterable is accepted."""
        assert map_all(range(3), lambda x: Ok(x)) == Ok([0, 1, 2])

    def test_bare_ok_values_are_none(self):
        """Bare Ok contributes None."""
        assert map_all([1, 2], lambda x: Ok()) == Ok([None, None])

    def test_mapping_walks_pairs(self):
        """Mappings are walked as (key, value) pairs."""
        prices = Ok({"apple": 2, "pear": 3})
        assert map_all(prices, lambda item: Ok(f"{item[0]}={item[1]}")) == Ok(["apple=2", "pear=3"])

    def test_stops_at_first_failure(self):
        """Remaining elements are not evaluated after a failure."""
        seen = []

        def step(x):
            seen.append(x)
            return Err(f"bad {x}") if x == 2 else Ok(x)

        assert map_all([1, 2, 3, 4], step) == Err("bad 2")
        assert seen == [1, 2]

    def test_err_subject_untouched(self):
        """An Err subject is returned without calling fn."""
        failure = Err("upstream")
        assert map_all(failure, explode) is failure

    def test_empty_collection(self):
        """An empty collection gives Ok([])."""
        assert map_all([], explode) == Ok([])

    def test_non_outcome_callback_return(self):
        """Callbacks must return outcomes."""
        with pytest.raises(InvalidCallbackReturn):
            map_all([1], lambda x: x)

    @pytest.mark.parametrize("subject", [Ok(), Ok(5), "abc", 5])
    def test_invalid_subject(self, subject):
        """Bare Ok, strings and non-iterables are rejected."""
        with pytest.raises(InvalidOutcomeShape):
            map_all(subject, lambda x: Ok(x))


class TestMapEach:
    """Test map_each."""

    def test_never_short_circuits(self):
        """Every element is evaluated."""
        result = map_each([1, 0, 2], lambda x: Ok(x) if x else Err("zero"))
        assert result == Ok([Ok(1), Err("zero"), Ok(2)])

    def test_coerces_and_converts(self):
        """Plain returns are coerced and exceptions become WrappedError."""
        result = map_each([1, 2], lambda x: explode() if x == 2 else x)
        first, second = result.unwrap()
        assert first == Ok(1)
        assert isinstance(second.reason, WrappedError)

    def test_err_subject_untouched(self):
        """An Err subject is returned as-is."""
        failure = Err()
        assert map_each(failure, explode) is failure


class TestFindFirstSuccess:
    """Test find_first_success."""

    def test_returns_first_ok(self):
        """The first Ok wins and later elements are skipped."""
        seen = []

        def lookup(x):
            seen.append(x)
            return Ok(x) if x >= 2 else Err(x)

        assert find_first_success([1, 2, 3], lookup) == Ok(2)
        assert seen == [1, 2]

    def test_plain_mapping(self):
        """A plain dict subject yields its pairs."""
        mirrors = {"eu": False, "us": True}
        assert find_first_success(mirrors, lambda item: Ok(item[0]) if item[1] else Err(item[0])) == Ok("us")

    def test_all_failures_collects_reasons(self):
        """Reasons match the input in length and order, None for bare Err."""
        result = find_first_success(["a", "b", "c"], lambda x: Err() if x == "b" else Err(x))
        assert result == Err(["a", None, "c"])

    def test_non_outcome_callback_return(self):
        """Callbacks must return outcomes."""
        with pytest.raises(InvalidCallbackReturn):
            find_first_success([1], lambda x: None)


class TestAllSucceed:
    """Test all_succeed."""

    def test_discards_values(self):
        """All successes give a bare Ok."""
        assert all_succeed([1, 2], lambda x: Ok(x * 100)) == Ok()

    def test_first_failure(self):
        """The first Err is returned."""
        assert all_succeed([1, 2, 3], lambda x: Err(x) if x > 1 else Ok()) == Err(2)

    def test_non_outcome_callback_return(self):
        """Callbacks must return outcomes."""
        with pytest.raises(InvalidCallbackReturn):
            all_succeed([1], lambda x: True)
