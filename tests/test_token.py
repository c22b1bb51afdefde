"""Tests for versa.versioning.token — version validation, parsing, rendering."""

from decimal import Decimal

import pytest

from versa.errors import InvalidVersion
from versa.versioning.token import (
    VersionToken,
    as_version,
    is_valid_version,
    parse_version,
    render_version,
)


class TestIsValidVersion:
    @pytest.mark.parametrize("raw", ["1", "12", "1.0", "2.25", "1.", ".5", "010"])
    def test_valid(self, raw: str) -> None:
        assert is_valid_version(raw) is True

    @pytest.mark.parametrize("raw", ["", ".", "v1", "1.2.3", "-1", "1a", " 1", "1,0"])
    def test_invalid(self, raw: str) -> None:
        assert is_valid_version(raw) is False


class TestParseVersion:
    def test_value_and_raw(self) -> None:
        token = parse_version("2.5")
        assert token.value == Decimal("2.5")
        assert token.raw == "2.5"
        assert str(token) == "2.5"

    def test_invalid_raises(self) -> None:
        with pytest.raises(InvalidVersion) as exc_info:
            parse_version("v2")
        assert exc_info.value.raw == "v2"

    def test_invalid_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_version("")


class TestComparison:
    def test_trailing_zeros_are_equal(self) -> None:
        """1.1 and 1.10 are the same version."""
        assert parse_version("1.1") == parse_version("1.10")
        assert hash(parse_version("1.1")) == hash(parse_version("1.10"))

    def test_numeric_not_lexicographic(self) -> None:
        assert parse_version("1.10") < parse_version("1.2")
        assert parse_version("10") > parse_version("9.9")

    def test_integer_equals_decimal(self) -> None:
        assert parse_version("2") == parse_version("2.0")
        assert parse_version("2") >= parse_version("2.0")
        assert parse_version("2") <= parse_version("2.0")

    def test_sorting(self) -> None:
        tokens = [parse_version(v) for v in ("1.0", "3", "2.5", "0.5")]
        assert [str(t) for t in sorted(tokens, reverse=True)] == ["3", "2.5", "1.0", "0.5"]

    def test_frozen(self) -> None:
        token = parse_version("1.0")
        with pytest.raises(AttributeError):
            token.value = Decimal("2")  # type: ignore[misc]


class TestRender:
    def test_pads_fraction(self) -> None:
        assert parse_version("2").render(1) == "2.0"
        assert parse_version("2").render(2) == "2.00"

    def test_zero_precision(self) -> None:
        assert parse_version("3").render(0) == "3"

    def test_trailing_zero_spellings_render_alike(self) -> None:
        assert parse_version("1.10").render(1) == parse_version("1.1").render(1) == "1.1"

    def test_negative_precision_raises(self) -> None:
        with pytest.raises(ValueError, match="precision"):
            render_version(Decimal("1"), -1)


class TestAsVersion:
    def test_token_passthrough(self) -> None:
        token = parse_version("1.0")
        assert as_version(token) is token

    def test_string(self) -> None:
        assert as_version("1.5") == parse_version("1.5")

    def test_int(self) -> None:
        assert as_version(2) == parse_version("2")

    def test_float_keeps_short_form(self) -> None:
        assert as_version(1.1).value == Decimal("1.1")

    def test_decimal(self) -> None:
        token = as_version(Decimal("3.0"))
        assert isinstance(token, VersionToken)
        assert token == parse_version("3")

    def test_invalid_raises(self) -> None:
        with pytest.raises(InvalidVersion):
            as_version("latest")
