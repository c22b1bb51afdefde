"""Tests for versa.cli._check — ``versa check`` subcommand."""

import sys
import types

import pytest

from versa.app import Api
from versa.cli import main
from versa.config import VersionCheck


@pytest.fixture
def _check_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with one passing and one failing Api."""
    passing = Api(check=VersionCheck(scan_packages=("shop",)))
    passing.group("shop.users.UsersV1", version="1.0").route("/users")(lambda: "users")

    failing = Api(check=VersionCheck(scan_packages=("shop",)))
    failing.group("shop.orders.Orders").route("/orders")(lambda: "orders")

    mod = types.ModuleType("_check_test_api")
    mod.passing = passing  # type: ignore[attr-defined]
    mod.failing = failing  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_check_test_api", mod)


@pytest.mark.usefixtures("_check_module")
class TestVersaCheck:
    def test_successful_check(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", "_check_test_api:passing"])
        out = capsys.readouterr().out

        assert "shop.users.UsersV1-v1.0" in out
        assert out.rstrip().endswith("OK")

    def test_failed_check_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_check_test_api:failing"])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Missing version (1):" in out
        assert "shop.orders.Orders" in out

    def test_check_does_not_freeze(self) -> None:
        main(["check", "_check_test_api:passing"])
        assert sys.modules["_check_test_api"].passing._frozen is False

    def test_invalid_import_string(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "nonexistent_module_xyz:api"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
