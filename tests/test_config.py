"""Tests for versa.config — ResolverConfig and VersionCheck frozen dataclasses."""

import logging

import pytest

from versa.config import PROPERTY_PREFIX, ResolverConfig, VersionCheck, log_config
from versa.errors import ConfigurationError
from versa.versioning.token import VersionToken, parse_version


def _props(**values: str) -> dict[str, str]:
    """Build a property mapping; ``__`` in a name stands for ``.``."""
    return {PROPERTY_PREFIX + key.replace("__", "."): value for key, value in values.items()}


class TestResolverConfig:
    def test_defaults(self) -> None:
        cfg = ResolverConfig()

        assert cfg.feature_enabled is True
        assert cfg.fallback_enabled is True
        assert cfg.api_context == ""
        assert cfg.version_context == ""
        assert cfg.min_version is None
        assert cfg.max_version is None
        assert cfg.decimal_digits == 1
        assert cfg.retry_with_base_path is False
        assert cfg.allow_disabled is False
        assert cfg.disabled_fallback_enabled is False

    def test_frozen(self) -> None:
        cfg = ResolverConfig()

        with pytest.raises(AttributeError):
            cfg.fallback_enabled = False  # type: ignore[misc]

    def test_prefix(self) -> None:
        assert ResolverConfig(api_context="api", version_context="v").prefix == "/api/v"
        assert ResolverConfig().prefix == "/"

    def test_feature_off_forces_fallback_off(self) -> None:
        cfg = ResolverConfig(feature_enabled=False, fallback_enabled=True)

        assert cfg.fallback_enabled is False
        assert cfg.fallback_active is False

    def test_fallback_active(self) -> None:
        assert ResolverConfig().fallback_active is True
        assert ResolverConfig(fallback_enabled=False).fallback_active is False

    def test_disabled_fallback_forced_off_when_not_allowed(self) -> None:
        cfg = ResolverConfig(allow_disabled=False, disabled_fallback_enabled=True)
        assert cfg.disabled_fallback_enabled is False

    def test_disabled_fallback_follows_allow_disabled(self) -> None:
        assert ResolverConfig(allow_disabled=True).disabled_fallback_enabled is True
        cfg = ResolverConfig(allow_disabled=True, disabled_fallback_enabled=False)
        assert cfg.disabled_fallback_enabled is False

    def test_versions_coerced(self) -> None:
        cfg = ResolverConfig(min_version="1", max_version=3.5)

        assert isinstance(cfg.min_version, VersionToken)
        assert cfg.min_version == parse_version("1.0")
        assert cfg.max_version == parse_version("3.5")

    def test_invalid_version_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="min_version"):
            ResolverConfig(min_version="one")

    def test_min_above_max_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="greater than"):
            ResolverConfig(min_version="3.0", max_version="2.0")

    def test_negative_digits_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="decimal_digits"):
            ResolverConfig(decimal_digits=-1)


class TestWithBounds:
    def test_fills_unset_bounds(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="versa.config"):
            cfg = ResolverConfig().with_bounds(parse_version("1.0"), parse_version("3.0"))

        assert cfg.min_version == parse_version("1.0")
        assert cfg.max_version == parse_version("3.0")
        assert "using highest declared version 3.0" in caplog.text
        assert "using lowest declared version 1.0" in caplog.text

    def test_keeps_configured_bounds(self) -> None:
        base = ResolverConfig(min_version="2.0", max_version="2.5")
        cfg = base.with_bounds(parse_version("1.0"), parse_version("2.0"))

        assert cfg.min_version == parse_version("2.0")
        assert cfg.max_version == parse_version("2.5")

    def test_returns_new_config(self) -> None:
        base = ResolverConfig()
        cfg = base.with_bounds(parse_version("1.0"), parse_version("2.0"))

        assert cfg is not base
        assert base.max_version is None

    def test_no_versions_observed(self) -> None:
        cfg = ResolverConfig().with_bounds(None, None)
        assert cfg.min_version is None
        assert cfg.max_version is None

    def test_low_configured_max_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="versa.config"):
            cfg = ResolverConfig(max_version="2.0").with_bounds(
                parse_version("1.0"), parse_version("3.0")
            )

        assert cfg.max_version == parse_version("2.0")
        assert "lower than the highest declared version" in caplog.text

    def test_crossed_bounds_raise(self) -> None:
        with pytest.raises(ConfigurationError, match="above maximum"):
            ResolverConfig(min_version="4.0").with_bounds(
                parse_version("1.0"), parse_version("3.0")
            )


class TestFromProperties:
    def test_empty_uses_defaults(self) -> None:
        assert ResolverConfig.from_properties({}) == ResolverConfig()

    def test_all_keys(self) -> None:
        cfg = ResolverConfig.from_properties(
            _props(
                feature__enabled="true",
                fallback__enabled="true",
                apiContext="api",
                versionContext="v",
                min__version__support="1.0",
                current__version__support="3.0",
                max__decimal__digit__support="2",
                fallback__retryWithBaseLookupPath="true",
                disabledApiVersions__allowed="true",
                disabledApiVersions__fallback__enabled="false",
            )
        )

        assert cfg.api_context == "api"
        assert cfg.version_context == "v"
        assert cfg.prefix == "/api/v"
        assert cfg.min_version == parse_version("1")
        assert cfg.max_version == parse_version("3")
        assert cfg.decimal_digits == 2
        assert cfg.retry_with_base_path is True
        assert cfg.allow_disabled is True
        assert cfg.disabled_fallback_enabled is False

    def test_feature_off_forces_fallback(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="versa.config"):
            cfg = ResolverConfig.from_properties(
                _props(feature__enabled="false", fallback__enabled="true")
            )

        assert cfg.feature_enabled is False
        assert cfg.fallback_enabled is False
        assert "Force disabling API versioning fallback" in caplog.text

    def test_disabled_not_allowed_forces_disabled_fallback(self) -> None:
        cfg = ResolverConfig.from_properties(
            _props(disabledApiVersions__fallback__enabled="true")
        )
        assert cfg.disabled_fallback_enabled is False

    def test_property_reference(self) -> None:
        cfg = ResolverConfig.from_properties(
            {
                PROPERTY_PREFIX + "apiContext": "${app.rest.root}",
                "app.rest.root": "services",
            }
        )
        assert cfg.api_context == "services"

    def test_circular_reference_uses_default(self, caplog: pytest.LogCaptureFixture) -> None:
        key = PROPERTY_PREFIX + "apiContext"
        with caplog.at_level(logging.WARNING, logger="versa.config"):
            cfg = ResolverConfig.from_properties({key: "${other}", "other": "${" + key + "}"})

        assert cfg.api_context == ""
        assert "Circular property reference" in caplog.text

    def test_missing_reference_uses_default(self) -> None:
        cfg = ResolverConfig.from_properties(_props(versionContext="${nowhere}"))
        assert cfg.version_context == ""

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("fallback__enabled", "maybe"),
            ("max__decimal__digit__support", "two"),
            ("max__decimal__digit__support", "-3"),
            ("min__version__support", "v1"),
        ],
    )
    def test_invalid_value_uses_default(
        self, key: str, value: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="versa.config"):
            cfg = ResolverConfig.from_properties(_props(**{key: value}))

        assert cfg.fallback_enabled is True
        assert cfg.decimal_digits == 1
        assert cfg.min_version is None
        assert f"Value [{value}]" in caplog.text
        assert "is invalid. Using default value" in caplog.text

    def test_custom_prefix(self) -> None:
        cfg = ResolverConfig.from_properties({"versioning.apiContext": "api"}, prefix="versioning.")
        assert cfg.api_context == "api"

    def test_whitespace_trimmed(self) -> None:
        cfg = ResolverConfig.from_properties(_props(apiContext="  api  ", fallback__enabled=" off "))
        assert cfg.api_context == "api"
        assert cfg.fallback_enabled is False


class TestVersionCheck:
    def test_defaults(self) -> None:
        check = VersionCheck()

        assert check.scan_packages == ()
        assert check.ignore_packages == ()
        assert check.ignore_classes == ()
        assert check.stop_on_fail is True

    def test_from_properties(self) -> None:
        check = VersionCheck.from_properties(
            _props(
                default__scanPackages="shop.api, shop.admin",
                default__ignorePackages="shop.api.internal",
                default__ignoreClasses="shop.api.Health,",
                default__stopAppOnCheckFail="true",
            )
        )

        assert check.scan_packages == ("shop.api", "shop.admin")
        assert check.ignore_packages == ("shop.api.internal",)
        assert check.ignore_classes == ("shop.api.Health",)
        assert check.stop_on_fail is True

    def test_from_properties_does_not_stop_by_default(self) -> None:
        assert VersionCheck.from_properties({}).stop_on_fail is False


class TestLogConfig:
    def test_logs_every_setting(self, caplog: pytest.LogCaptureFixture) -> None:
        cfg = ResolverConfig(api_context="api", min_version="1.0")
        with caplog.at_level(logging.INFO, logger="versa.config"):
            log_config(cfg, VersionCheck(scan_packages=("shop",)))

        assert "API context is [api]" in caplog.text
        assert "minimum version is [1.0]" in caplog.text
        assert "scan packages ['shop']" in caplog.text
