"""Tests for versa.cli._resolve — Api import resolution."""

import types

import pytest

from versa.app import Api
from versa.cli._resolve import resolve_api


@pytest.fixture
def _fake_api_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with a versa Api on sys.modules."""

    def create_api() -> Api:
        return Api()

    def broken_factory() -> Api:
        msg = "no config"
        raise RuntimeError(msg)

    mod = types.ModuleType("_fake_versa_api")
    mod.api = Api()  # type: ignore[attr-defined]
    mod.custom = Api()  # type: ignore[attr-defined]
    mod.create_api = create_api  # type: ignore[attr-defined]
    mod.broken_factory = broken_factory  # type: ignore[attr-defined]
    mod.not_an_api = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(__import__("sys").modules, "_fake_versa_api", mod)


@pytest.mark.usefixtures("_fake_api_module")
class TestResolveApi:
    def test_explicit_attribute(self) -> None:
        assert isinstance(resolve_api("_fake_versa_api:api"), Api)

    def test_custom_attribute(self) -> None:
        assert isinstance(resolve_api("_fake_versa_api:custom"), Api)

    def test_default_attribute(self) -> None:
        """Omitting :attr defaults to 'api'."""
        assert isinstance(resolve_api("_fake_versa_api"), Api)

    def test_factory(self) -> None:
        assert isinstance(resolve_api("_fake_versa_api:create_api"), Api)

    def test_failing_factory(self) -> None:
        with pytest.raises(TypeError, match="raised an error: no config"):
            resolve_api("_fake_versa_api:broken_factory")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_api("nonexistent_module_xyz:api")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_api("_fake_versa_api:does_not_exist")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match=r"not a versa\.Api instance"):
            resolve_api("_fake_versa_api:not_an_api")
