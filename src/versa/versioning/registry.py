"""Version registry — which versions each base route implements.

Populated by the route binder during the single-threaded freeze, then
frozen. After ``freeze()`` the registry is a read-only snapshot shared
by every request thread without locking.
"""

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType

from versa.routing.router import (
    canonical_template,
    compile_pattern,
    is_template,
    normalize_path,
)
from versa.versioning.token import VersionToken

logger = logging.getLogger("versa.registry")


class VersionRegistry:
    """Base route -> descending candidate versions, plus the disabled set.

    Keys are canonical base route templates: normalized, with parameter
    names dropped (``/users/{id}`` and ``/users/{user_id}`` share the key
    ``/users/{:str}``). A concrete lookup path such as ``/users/42`` gets
    the versions of every key that matches it, merged.

    Usage::

        registry = VersionRegistry()
        registry.register("/users/{id}", parse_version("1.0"))
        registry.register("/users/{id}", parse_version("2.0"))
        registry.mark_disabled("/api/v3.0/users/{id}")
        registry.freeze()
        registry.versions_for("/users/42")  # (2.0, 1.0)
    """

    __slots__ = (
        "_disabled",
        "_disabled_patterns",
        "_frozen",
        "_template_patterns",
        "_versions",
    )

    def __init__(self) -> None:
        self._versions: dict[str, list[VersionToken]] = {}
        self._template_patterns: list[tuple[re.Pattern[str], str]] = []
        self._disabled: set[str] = set()
        self._disabled_patterns: list[re.Pattern[str]] = []
        self._frozen = False

    # -- Population (freeze time only) --

    def register(self, base_route: str, version: VersionToken) -> None:
        """Add *version* as a fallback candidate for *base_route*.

        The list stays sorted in descending order. A version numerically
        equal to one already present is ignored.
        """
        self._check_not_frozen()
        key = canonical_template(base_route)
        versions = self._versions.get(key)
        if versions is None:
            versions = []
            self._versions[key] = versions
            if is_template(key):
                self._template_patterns.append((compile_pattern(key), key))

        if version in versions:
            logger.debug(
                "Version %s already registered for %s; keeping the first declaration",
                version,
                key,
            )
            return

        versions.append(version)
        versions.sort(reverse=True)
        logger.debug("Version %s added for base route %s", version, key)

    def mark_disabled(self, versioned_route: str) -> None:
        """Exclude *versioned_route* (a full versioned path or template)."""
        self._check_not_frozen()
        key = normalize_path(versioned_route)
        if key in self._disabled:
            return
        self._disabled.add(key)
        if is_template(key):
            self._disabled_patterns.append(compile_pattern(key))

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    # -- Queries (any time) --

    def versions_for(self, base_path: str) -> tuple[VersionToken, ...]:
        """Candidate versions for *base_path*, highest first. Possibly empty.

        *base_path* is a concrete request path or a canonical key. Versions
        from a literal key and from matching templates are merged.
        """
        key = normalize_path(base_path)
        merged: set[VersionToken] = set(self._versions.get(key, ()))
        for pattern, template in self._template_patterns:
            if pattern.match(key):
                merged.update(self._versions[template])
        return tuple(sorted(merged, reverse=True))

    def is_disabled(self, path: str) -> bool:
        """True if *path* is a disabled versioned route."""
        key = normalize_path(path)
        if key in self._disabled:
            return True
        return any(pattern.match(key) for pattern in self._disabled_patterns)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def base_routes(self) -> Mapping[str, tuple[VersionToken, ...]]:
        """Read-only view of every base route and its versions."""
        return MappingProxyType({key: tuple(v) for key, v in self._versions.items()})

    @property
    def disabled_routes(self) -> frozenset[str]:
        return frozenset(self._disabled)

    def __len__(self) -> int:
        return len(self._versions)

    def __contains__(self, base_path: object) -> bool:
        return isinstance(base_path, str) and bool(self.versions_for(base_path))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the version registry after it has been frozen. "
                "Declare every versioned route before the Api starts resolving."
            )
            raise RuntimeError(msg)
