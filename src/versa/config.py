"""Versioning configuration.

ResolverConfig and VersionCheck are frozen dataclasses — immutable after
creation, IDE-autocompletable, no string-key dict lookups at request time.
``from_properties`` reads the flat ``rest.api.version.management.*``
property keys once at startup.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal

from versa.errors import ConfigurationError, InvalidVersion
from versa.versioning.paths import versioning_prefix
from versa.versioning.token import VersionToken, as_version

logger = logging.getLogger("versa.config")

PROPERTY_PREFIX = "rest.api.version.management."

# ``${some.other.key}`` — value is read from another property.
_PROPERTY_REF = re.compile(r"\$\{([-a-zA-Z0-9._]+)\}")

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Resolver policy. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ResolverConfig(api_context="api", version_context="v", min_version="1.0")

    Two flags are forced off by their parents: ``fallback_enabled`` when
    ``feature_enabled`` is off, and ``disabled_fallback_enabled`` when
    ``allow_disabled`` is off. Left as ``None``, ``disabled_fallback_enabled``
    follows ``allow_disabled``.

    ``min_version`` / ``max_version`` left as ``None`` are filled from the
    versions actually declared, see ``with_bounds``.
    """

    # Master switches
    feature_enabled: bool = True
    fallback_enabled: bool = True

    # Path grammar: /{api_context}/{version_context}{version}/...
    api_context: str = ""
    version_context: str = ""

    # Version window
    min_version: VersionToken | Decimal | str | float | None = None
    max_version: VersionToken | Decimal | str | float | None = None
    decimal_digits: int = 1

    # Last-resort retry against the unversioned path
    retry_with_base_path: bool = False

    # Disabled API versions
    allow_disabled: bool = False
    disabled_fallback_enabled: bool | None = None

    def __post_init__(self) -> None:
        if self.decimal_digits < 0:
            msg = f"decimal_digits must be >= 0, got {self.decimal_digits}"
            raise ConfigurationError(msg)

        if not self.feature_enabled and self.fallback_enabled:
            object.__setattr__(self, "fallback_enabled", False)

        if not self.allow_disabled:
            object.__setattr__(self, "disabled_fallback_enabled", False)
        elif self.disabled_fallback_enabled is None:
            object.__setattr__(self, "disabled_fallback_enabled", True)

        for name in ("min_version", "max_version"):
            value = getattr(self, name)
            if value is None or isinstance(value, VersionToken):
                continue
            try:
                object.__setattr__(self, name, as_version(value))
            except InvalidVersion as exc:
                msg = f"{name} must be a version like '1' or '1.0', got {value!r}"
                raise ConfigurationError(msg) from exc

        if (
            self.min_version is not None
            and self.max_version is not None
            and self.min_version > self.max_version
        ):
            msg = (
                f"min_version {self.min_version} is greater than "
                f"max_version {self.max_version}"
            )
            raise ConfigurationError(msg)

    @property
    def prefix(self) -> str:
        """The literal path prefix that precedes the version token."""
        return versioning_prefix(self.api_context, self.version_context)

    @property
    def fallback_active(self) -> bool:
        """True when the fallback walk may run at all."""
        return self.feature_enabled and self.fallback_enabled

    def with_bounds(
        self,
        observed_min: VersionToken | None,
        observed_max: VersionToken | None,
    ) -> "ResolverConfig":
        """Fill unset min/max from the versions observed at bind time.

        Returns a new config; ``self`` is unchanged. A configured maximum
        lower than the highest declared version is kept but logged.

        Raises ``ConfigurationError`` if a configured bound and an observed
        bound cross, e.g. a configured minimum above every declared version.
        """
        min_version = self.min_version if self.min_version is not None else observed_min
        max_version = self.max_version if self.max_version is not None else observed_max

        if min_version is not None and max_version is not None and min_version > max_version:
            msg = (
                f"Minimum version {min_version} is above maximum version {max_version}; "
                "every versioned request would be rejected"
            )
            raise ConfigurationError(msg)

        if self.max_version is None and observed_max is not None:
            logger.info(
                "No current version configured; using highest declared version %s",
                observed_max,
            )
        elif (
            self.max_version is not None
            and observed_max is not None
            and self.max_version < observed_max
        ):
            logger.warning(
                "Configured current version %s is lower than the highest declared version %s",
                self.max_version,
                observed_max,
            )
        if self.min_version is None and observed_min is not None:
            logger.info(
                "No minimum version configured; using lowest declared version %s",
                observed_min,
            )

        return replace(self, min_version=min_version, max_version=max_version)

    @classmethod
    def from_properties(
        cls,
        properties: Mapping[str, str],
        *,
        prefix: str = PROPERTY_PREFIX,
    ) -> "ResolverConfig":
        """Build a config from flat ``key=value`` properties.

        Missing keys use the field defaults. Invalid values are logged and
        replaced by the default rather than failing startup.
        """
        props = _Properties(properties, prefix)

        feature_enabled = props.boolean("feature.enabled", True)
        if feature_enabled:
            fallback_enabled = props.boolean("fallback.enabled", True)
        else:
            fallback_enabled = False
            logger.warning(
                "API versioning feature is disabled. Force disabling API versioning fallback."
            )

        allow_disabled = props.boolean("disabledApiVersions.allowed", False)
        if allow_disabled:
            disabled_fallback = props.boolean("disabledApiVersions.fallback.enabled", True)
        else:
            disabled_fallback = False
            logger.warning(
                "Disabled API versions are not allowed. Force disabling fallback "
                "for disabled API versions."
            )

        return cls(
            feature_enabled=feature_enabled,
            fallback_enabled=fallback_enabled,
            api_context=props.string("apiContext", ""),
            version_context=props.string("versionContext", ""),
            min_version=props.version("min.version.support"),
            max_version=props.version("current.version.support"),
            decimal_digits=props.integer("max.decimal.digit.support", 1),
            retry_with_base_path=props.boolean("fallback.retryWithBaseLookupPath", False),
            allow_disabled=allow_disabled,
            disabled_fallback_enabled=disabled_fallback,
        )


@dataclass(frozen=True, slots=True)
class VersionCheck:
    """Startup enforcement of versioning across declared endpoints.

    Owners (group names or endpoint ids) are dotted names. An owner is in
    a package when it equals the package or starts with ``package + "."``.
    An empty ``scan_packages`` scans everything.
    """

    scan_packages: tuple[str, ...] = ()
    ignore_packages: tuple[str, ...] = ()
    ignore_classes: tuple[str, ...] = ()
    stop_on_fail: bool = True

    @classmethod
    def from_properties(
        cls,
        properties: Mapping[str, str],
        *,
        prefix: str = PROPERTY_PREFIX,
    ) -> "VersionCheck":
        props = _Properties(properties, prefix)
        return cls(
            scan_packages=props.names("default.scanPackages"),
            ignore_packages=props.names("default.ignorePackages"),
            ignore_classes=props.names("default.ignoreClasses"),
            stop_on_fail=props.boolean("default.stopAppOnCheckFail", False),
        )


def log_config(config: ResolverConfig, check: VersionCheck | None = None) -> None:
    """Log the effective configuration at INFO, one line per setting."""
    if check is not None:
        logger.info("API versioning check: scan packages %s", list(check.scan_packages))
        logger.info("API versioning check: ignore packages %s", list(check.ignore_packages))
        logger.info("API versioning check: ignore classes %s", list(check.ignore_classes))
        logger.info("API versioning check: stop on failure is [%s]", check.stop_on_fail)

    logger.info("API versioning config: feature enabled is [%s]", config.feature_enabled)
    logger.info("API versioning config: fallback enabled is [%s]", config.fallback_enabled)
    logger.info("API versioning config: API context is [%s]", config.api_context)
    logger.info("API versioning config: version context is [%s]", config.version_context)
    logger.info("API versioning config: minimum version is [%s]", config.min_version)
    logger.info("API versioning config: current version is [%s]", config.max_version)
    logger.info("API versioning config: decimal digits is [%s]", config.decimal_digits)
    logger.info(
        "API versioning config: retry with base lookup path is [%s]",
        config.retry_with_base_path,
    )
    logger.info("API versioning config: allow disabled versions is [%s]", config.allow_disabled)
    logger.info(
        "API versioning config: fallback for disabled versions is [%s]",
        config.disabled_fallback_enabled,
    )


class _Properties:
    """Typed reads over a flat property mapping, with ``${key}`` references."""

    __slots__ = ("_prefix", "_props")

    def __init__(self, properties: Mapping[str, str], prefix: str) -> None:
        self._props = properties
        self._prefix = prefix

    def raw(self, key: str) -> str | None:
        full_key = self._prefix + key
        value = self._props.get(full_key)
        seen = {full_key}
        while value is not None:
            ref = _PROPERTY_REF.fullmatch(value.strip())
            if ref is None:
                break
            target = ref.group(1)
            if target in seen:
                logger.warning("Circular property reference for key [%s]", full_key)
                return None
            seen.add(target)
            value = self._props.get(target)
        if value is None or not value.strip():
            return None
        return value.strip()

    def string(self, key: str, default: str) -> str:
        value = self.raw(key)
        return default if value is None else value

    def boolean(self, key: str, default: bool) -> bool:
        value = self.raw(key)
        if value is None:
            return default
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        self._invalid(key, value, default)
        return default

    def integer(self, key: str, default: int) -> int:
        value = self.raw(key)
        if value is None:
            return default
        try:
            number = int(value)
        except ValueError:
            self._invalid(key, value, default)
            return default
        if number < 0:
            self._invalid(key, value, default)
            return default
        return number

    def version(self, key: str) -> VersionToken | None:
        value = self.raw(key)
        if value is None:
            return None
        try:
            return as_version(value)
        except InvalidVersion:
            self._invalid(key, value, None)
            return None

    def names(self, key: str) -> tuple[str, ...]:
        value = self.raw(key)
        if value is None:
            return ()
        return tuple(part.strip() for part in value.split(",") if part.strip())

    def _invalid(self, key: str, value: str, default: object) -> None:
        logger.warning(
            "Value [%s] for key [%s] is invalid. Using default value [%s]",
            value,
            self._prefix + key,
            default,
        )
