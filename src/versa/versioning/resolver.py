"""Endpoint resolution — map a request path to a versioned endpoint.

Two resolvers share one interface, ``lookup(path) -> Resolution | None``:

``VersionedResolver``
    Versioning and fallback are on. Applies the disabled gate, the
    minimum-version floor, exact matching, clamping to the current
    version, the walk down to the closest older version, and finally an
    optional single retry against the unversioned base path.

``DefaultResolver``
    Versioning or fallback is off. Disabled gate (only while the feature
    is on) followed by one exact match.

Neither resolver does I/O or mutates shared state; both read a frozen
``VersionRegistry`` and a frozen ``ResolverConfig`` and can be shared by
every request thread.

Usage::

    resolver = create_resolver(config, registry, router)
    resolution = resolver.lookup("/api/v2.5/users")
    if resolution is None:
        raise NotFound()
    route = resolution.match.for_method("GET").route
"""

import logging
from dataclasses import dataclass
from typing import Protocol, TypeAlias

from versa.config import ResolverConfig
from versa.routing.route import PathMatch
from versa.versioning.paths import VersionedPath, split_versioned_path
from versa.versioning.registry import VersionRegistry
from versa.versioning.token import VersionToken, is_valid_version, parse_version

logger = logging.getLogger("versa.resolver")


class Dispatcher(Protocol):
    """Exact-match lookup supplied by the host (``Router`` implements it)."""

    def lookup(self, path: str) -> PathMatch | None: ...


@dataclass(frozen=True, slots=True)
class Resolution:
    """A successful lookup.

    ``path`` is the path that finally matched. ``hops`` lists every
    rewritten path tried after ``requested_path``, ending with ``path``
    when any rewrite happened.
    """

    match: PathMatch
    requested_path: str
    path: str
    hops: tuple[str, ...] = ()
    used_base_path: bool = False

    @property
    def fell_back(self) -> bool:
        return self.path != self.requested_path


class _BaseResolver:
    __slots__ = ("_config", "_dispatcher", "_registry")

    def __init__(
        self,
        config: ResolverConfig,
        registry: VersionRegistry,
        dispatcher: Dispatcher,
    ) -> None:
        self._config = config
        self._registry = registry
        self._dispatcher = dispatcher

    @property
    def config(self) -> ResolverConfig:
        return self._config

    @property
    def registry(self) -> VersionRegistry:
        return self._registry

    def _blocked_as_disabled(self, path: str) -> bool:
        """Disabled gate. True if *path* must be answered with "not found"."""
        if not self._registry.is_disabled(path):
            return False
        if not self._config.feature_enabled:
            logger.debug(
                "API versioning is disabled; allowing request for disabled API %s", path
            )
            return False
        if self._config.allow_disabled:
            logger.debug("Disabled APIs are allowed; looking up disabled API %s", path)
            return False
        logger.warning(
            "Disabled APIs are not allowed; rejecting request for disabled API %s", path
        )
        return True


class DefaultResolver(_BaseResolver):
    """Exact matching only, with the disabled gate.

    Used when ``feature_enabled`` or ``fallback_enabled`` is off. While the
    feature is off the disabled list is informational and every disabled
    route is served.
    """

    __slots__ = ()

    def lookup(self, path: str) -> Resolution | None:
        logger.debug("Default lookup for %s", path)
        if self._blocked_as_disabled(path):
            return None
        found = self._dispatcher.lookup(path)
        if found is None:
            return None
        return Resolution(match=found, requested_path=path, path=path)


class VersionedResolver(_BaseResolver):
    """Exact matching plus version fallback.

    The walk is an explicit loop over candidate paths. Each rewrite moves
    to a strictly lower version of the same base route, except the first
    rewrite after clamping or normalising, which may land on the
    requested value itself. The single base-path retry turns fallback
    off for the remaining iteration.
    """

    __slots__ = ()

    def lookup(self, path: str) -> Resolution | None:
        config = self._config
        prefix = config.prefix
        digits = config.decimal_digits
        minimum = config.min_version
        maximum = config.max_version

        current = path
        hops: list[str] = []
        fallback = config.fallback_active
        used_base_path = False
        visited: set[str] = set()

        while current not in visited:
            visited.add(current)
            logger.debug("Versioned lookup for %s", current)

            # 1. Disabled gate
            if self._blocked_as_disabled(current):
                return None

            # 2. Minimum version is a hard floor
            split = split_versioned_path(current, prefix)
            requested = _requested_version(split)
            if requested is not None and minimum is not None and requested < minimum:
                logger.warning(
                    "Request for %s asks for version %s, below minimum supported version %s",
                    current,
                    requested,
                    minimum,
                )
                return None

            # 3. Exact match
            found = self._dispatcher.lookup(current)
            if found is not None:
                return Resolution(
                    match=found,
                    requested_path=path,
                    path=current,
                    hops=tuple(hops),
                    used_base_path=used_base_path,
                )

            # 4. Fallback eligibility
            if not fallback or split is None:
                return None

            # 5. Version segment must be valid
            if requested is None:
                logger.debug(
                    "Lookup path %s has no valid version segment (%r)", current, split.segment
                )
                return None

            # 6. Clamp to the current version
            candidate = requested
            inclusive = requested.render(digits) != split.segment
            if maximum is not None and requested > maximum:
                logger.debug(
                    "Requested version %s for %s is above current version %s; "
                    "lookup starts from %s",
                    requested,
                    current,
                    maximum,
                    maximum,
                )
                candidate = maximum
                inclusive = True

            # 7. Walk down to the closest older version
            previous = self._previous_version(candidate, split.base_lookup_path, inclusive)
            if previous is not None and (minimum is None or previous >= minimum):
                current = split.with_version(previous.render(digits))
                hops.append(current)
                continue

            # 8. Fallback exhausted
            if config.retry_with_base_path:
                current = split.base_lookup_path
                hops.append(current)
                fallback = False
                used_base_path = True
                logger.debug("Retrying fallback with base lookup path %s", current)
                continue

            logger.debug("No version of %s at or below %s", split.base_lookup_path, candidate)
            return None

        logger.error("Version fallback for %s revisited %s; giving up", path, current)
        return None

    def _previous_version(
        self,
        candidate: VersionToken,
        base_path: str,
        inclusive: bool,
    ) -> VersionToken | None:
        for version in self._registry.versions_for(base_path):
            if version < candidate or (inclusive and version == candidate):
                return version
        return None


Resolver: TypeAlias = DefaultResolver | VersionedResolver


def create_resolver(
    config: ResolverConfig,
    registry: VersionRegistry,
    dispatcher: Dispatcher,
) -> Resolver:
    """Pick the resolver that matches *config*."""
    if config.fallback_active:
        return VersionedResolver(config, registry, dispatcher)
    return DefaultResolver(config, registry, dispatcher)


def _requested_version(split: VersionedPath | None) -> VersionToken | None:
    if split is None or not is_valid_version(split.segment):
        return None
    return parse_version(split.segment)
