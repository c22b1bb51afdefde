"""Tests for versa.routing.params — path parameter patterns."""

import re

import pytest

from versa.routing.params import CONVERTERS, param_pattern


class TestConverters:
    def test_all_types_registered(self) -> None:
        assert set(CONVERTERS) == {"str", "int", "float", "path"}

    def test_str_pattern_excludes_slash(self) -> None:
        assert re.fullmatch(param_pattern("str"), "alice")
        assert re.fullmatch(param_pattern("str"), "a/b") is None

    def test_int_pattern(self) -> None:
        assert re.fullmatch(param_pattern("int"), "42")
        assert re.fullmatch(param_pattern("int"), "4x") is None

    def test_float_pattern(self) -> None:
        assert re.fullmatch(param_pattern("float"), "9.99")
        assert re.fullmatch(param_pattern("float"), "10")

    def test_path_pattern_matches_slashes(self) -> None:
        assert re.fullmatch(param_pattern("path"), "docs/api/index.html")

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(KeyError):
            param_pattern("uuid")
