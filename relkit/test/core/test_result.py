"""Tests for relkit.core.result module."""

import pytest

from relkit.core.result import Err, Ok, Result


class TestOk:
    def test_value(self) -> None:
        assert Ok("v1.2.3").value == "v1.2.3"

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"


class TestErr:
    def test_error(self) -> None:
        assert Err("boom").error == "boom"

    def test_frozen(self) -> None:
        result = Err("boom")
        with pytest.raises(AttributeError):
            result.error = "other"  # type: ignore[misc]


class TestPatternMatching:
    """Stages are consumed with match statements."""

    def _describe(self, result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    def test_match_ok(self) -> None:
        assert self._describe(Ok(3)) == "ok 3"

    def test_match_err(self) -> None:
        assert self._describe(Err("bad")) == "err bad"
