"""Route binder — turns route declarations into versioned routes.

Runs once, single-threaded, while the Api freezes. For every declaration
it computes the dispatchable path, populates the version registry, and
tracks the lowest and highest declared versions.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Protocol

from versa._internal.types import Handler
from versa.config import ResolverConfig
from versa.routing.route import Route
from versa.routing.router import canonical_template, normalize_path
from versa.versioning.paths import versioned_path
from versa.versioning.registry import VersionRegistry
from versa.versioning.token import VersionToken, is_valid_version, parse_version

logger = logging.getLogger("versa.binder")


@dataclass(frozen=True, slots=True)
class RouteDeclaration:
    """One endpoint as declared by the host, before versioning is applied.

    ``version`` is the declared version string; blank means the endpoint
    is unversioned. ``group`` names the declaring group, if any, and is
    what the versioning check reports on.
    """

    endpoint_id: str
    path: str
    handler: Handler
    version: str = ""
    disabled: bool = False
    methods: frozenset[str] = frozenset({"GET"})
    name: str | None = None
    group: str | None = None
    skip_versioning: bool = False

    @property
    def owner(self) -> str:
        return self.group or self.endpoint_id


class RouteSource(Protocol):
    """Anything that can list its route declarations (e.g. ``Api``)."""

    def enumerate(self) -> Iterable[RouteDeclaration]: ...


@dataclass(frozen=True, slots=True)
class InvalidDeclaration:
    """A declaration whose version could not be applied."""

    declaration: RouteDeclaration
    reason: str


@dataclass(frozen=True, slots=True)
class BindResult:
    """Everything the binder produced.

    ``routes`` go to the router; ``registry`` (already frozen) goes to
    the resolver; ``minimum`` / ``maximum`` feed ``ResolverConfig.with_bounds``.
    """

    routes: tuple[Route, ...]
    registry: VersionRegistry
    minimum: VersionToken | None
    maximum: VersionToken | None
    invalid: tuple[InvalidDeclaration, ...] = ()


def bind_routes(
    declarations: Iterable[RouteDeclaration],
    config: ResolverConfig,
    registry: VersionRegistry | None = None,
) -> BindResult:
    """Apply versioning to *declarations* and freeze the registry.

    Fallback candidates are only registered when ``config.fallback_active``.
    A disabled endpoint always lands in the disabled set, and becomes a
    candidate only when ``config.disabled_fallback_enabled`` is on.
    When two declarations serve the same path and method, the first one
    wins and the later one is logged and dropped.
    """
    registry = registry if registry is not None else VersionRegistry()
    routes: list[Route] = []
    claimed: dict[tuple[str, str], str] = {}
    invalid: list[InvalidDeclaration] = []
    minimum: VersionToken | None = None
    maximum: VersionToken | None = None

    for decl in declarations:
        raw = decl.version.strip()

        if decl.skip_versioning or not raw:
            _append_unique(routes, _unversioned(decl), claimed)
            continue

        reason = declared_version_error(raw, config.decimal_digits)
        if reason is not None:
            logger.warning(
                "Endpoint %s declares %s; using unversioned path %s",
                decl.endpoint_id,
                reason,
                decl.path,
            )
            invalid.append(InvalidDeclaration(decl, reason))
            _append_unique(routes, _unversioned(decl), claimed)
            continue

        token = parse_version(raw)
        rendered = token.render(config.decimal_digits)
        path = versioned_path(config.prefix, rendered, decl.path)
        route = Route(
            path=path,
            handler=decl.handler,
            methods=decl.methods,
            name=decl.name,
            endpoint_id=decl.endpoint_id,
            base_path=normalize_path(decl.path),
            version=rendered,
            disabled=decl.disabled,
        )
        if not _append_unique(routes, route, claimed):
            continue

        if maximum is None or token > maximum:
            maximum = token
        if minimum is None or token < minimum:
            minimum = token

        if decl.disabled:
            registry.mark_disabled(path)

        if not config.fallback_active:
            continue
        if decl.disabled and not config.disabled_fallback_enabled:
            logger.debug(
                "Skipping disabled version %s of %s as a fallback candidate",
                rendered,
                decl.path,
            )
            continue
        registry.register(decl.path, token)

    registry.freeze()

    if registry.disabled_routes:
        logger.warning("API versions disabled: %s", sorted(registry.disabled_routes))
    logger.info(
        "Bound %d routes; %d base routes have fallback candidates",
        len(routes),
        len(registry),
    )

    return BindResult(
        routes=tuple(routes),
        registry=registry,
        minimum=minimum,
        maximum=maximum,
        invalid=tuple(invalid),
    )


def declared_version_error(raw: str, decimal_digits: int) -> str | None:
    """Return why *raw* cannot be used as a declared version, or None.

    A version is rejected when it is malformed or when rendering it with
    *decimal_digits* fractional digits would change its value.
    """
    if not is_valid_version(raw):
        return f"invalid API version {raw!r}"
    token = parse_version(raw)
    if Decimal(token.render(decimal_digits)) != token.value:
        return (
            f"API version {raw!r} with more than {decimal_digits} significant "
            "decimal digit(s)"
        )
    return None


def _unversioned(decl: RouteDeclaration) -> Route:
    return Route(
        path=decl.path,
        handler=decl.handler,
        methods=decl.methods,
        name=decl.name,
        endpoint_id=decl.endpoint_id,
        base_path=normalize_path(decl.path),
        disabled=False,
    )


def _append_unique(
    routes: list[Route],
    route: Route,
    claimed: dict[tuple[str, str], str],
) -> bool:
    """Append *route* minus any methods an earlier route already serves.

    The first declaration of a (path, method) pair wins; later ones are
    dropped with a warning. Returns False if nothing of *route* is left.
    """
    key = canonical_template(route.path)
    taken = sorted(m for m in route.methods if (key, m) in claimed)
    if taken:
        logger.warning(
            "Duplicate route %s %s from %s ignored; already served by %s",
            ", ".join(taken),
            route.path,
            route.endpoint_id,
            claimed[key, taken[0]],
        )
        remaining = route.methods.difference(taken)
        if not remaining:
            return False
        route = replace(route, methods=remaining)

    for method in route.methods:
        claimed[key, method] = route.endpoint_id
    routes.append(route)
    return True
