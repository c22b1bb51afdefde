"""Versa Api — the host-side registry of versioned endpoints.

Mutable during setup (route and group registration).
Frozen on first resolve, or explicitly via ``freeze()``.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from versa._internal.types import Handler
from versa.config import ResolverConfig, VersionCheck, log_config
from versa.errors import ConfigurationError, NotFound
from versa.routing.route import Route, RouteMatch
from versa.routing.router import Router
from versa.versioning.binder import RouteDeclaration, bind_routes
from versa.versioning.check import CheckReport, run_version_check
from versa.versioning.registry import VersionRegistry
from versa.versioning.resolver import Resolution, Resolver, create_resolver

logger = logging.getLogger("versa.app")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be bound."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None
    version: str
    disabled: bool
    skip_versioning: bool
    group: str | None = None


@dataclass(frozen=True, slots=True)
class _Compiled:
    """Runtime state built by ``Api._freeze()``."""

    router: Router
    registry: VersionRegistry
    resolver: Resolver


class RouteGroup:
    """Routes sharing one declared version, like a versioned controller.

    Every route registered through the group inherits its version and
    flags. ``disabled`` on either the group or the route disables it.

    Usage::

        users_v1 = api.group("shop.users.UsersV1", version="1.0")

        @users_v1.route("/users/{id:int}")
        def get_user(id): ...
    """

    __slots__ = ("_api", "disabled", "name", "skip_versioning", "version")

    def __init__(
        self,
        api: "Api",
        name: str,
        *,
        version: str = "",
        disabled: bool = False,
        skip_versioning: bool = False,
    ) -> None:
        self._api = api
        self.name = name
        self.version = version
        self.disabled = disabled
        self.skip_versioning = skip_versioning

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
        disabled: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler in this group via decorator."""
        return self._api._register(
            path,
            methods=methods,
            name=name,
            version=self.version,
            disabled=self.disabled or disabled,
            skip_versioning=self.skip_versioning,
            group=self.name,
        )


class Api:
    """A set of versioned REST endpoints behind one resolver.

    Mutable during setup (route and group registration).
    Frozen on first ``resolve()`` / ``lookup()`` or an explicit ``freeze()``.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread binds routes, even when several request threads hit
        the first lookup concurrently. After freezing, the router,
        registry and resolver are read-only.
    """

    __slots__ = (
        "_compiled",
        "_freeze_lock",
        "_frozen",
        "_pending_routes",
        "check_config",
        "config",
    )

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        check: VersionCheck | None = None,
    ) -> None:
        self.config: ResolverConfig = config or ResolverConfig()
        self.check_config: VersionCheck | None = check
        self._pending_routes: list[_PendingRoute] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state — set during _freeze()
        self._compiled: _Compiled | None = None

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
        version: str = "",
        disabled: bool = False,
        skip_versioning: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: Unversioned URL path. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name.
            version: Declared API version (``"1"``, ``"1.2"``). Blank leaves
                the route unversioned at its literal path.
            disabled: Mark this version disabled. Whether it is still
                reachable is decided by ``ResolverConfig.allow_disabled``.
            skip_versioning: Serve at the literal path even if a version
                is given.
        """
        return self._register(
            path,
            methods=methods,
            name=name,
            version=version,
            disabled=disabled,
            skip_versioning=skip_versioning,
        )

    def group(
        self,
        name: str,
        *,
        version: str = "",
        disabled: bool = False,
        skip_versioning: bool = False,
    ) -> RouteGroup:
        """Create a route group sharing *version* and flags.

        *name* should be a dotted name (``"shop.users.UsersV1"``); the
        versioning check matches it against scanned and ignored packages.
        """
        self._check_not_frozen()
        return RouteGroup(
            self,
            name,
            version=version,
            disabled=disabled,
            skip_versioning=skip_versioning,
        )

    def _register(
        self,
        path: str,
        *,
        methods: list[str] | None,
        name: str | None,
        version: str,
        disabled: bool,
        skip_versioning: bool,
        group: str | None = None,
    ) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(
                _PendingRoute(
                    path,
                    func,
                    methods,
                    name,
                    version,
                    disabled,
                    skip_versioning,
                    group,
                )
            )
            return func

        return decorator

    def enumerate(self) -> tuple[RouteDeclaration, ...]:
        """Every declared route, in registration order."""
        return tuple(
            RouteDeclaration(
                endpoint_id=_endpoint_id(pending.handler),
                path=pending.path,
                handler=pending.handler,
                version=pending.version,
                disabled=pending.disabled,
                methods=frozenset(m.upper() for m in (pending.methods or ["GET"])),
                name=pending.name,
                group=pending.group,
                skip_versioning=pending.skip_versioning,
            )
            for pending in self._pending_routes
        )

    # -- Resolution --

    def lookup(self, path: str) -> Resolution | None:
        """Resolve *path* to the endpoint that serves it, or ``None``."""
        return self._state().resolver.lookup(path)

    def resolve(self, method: str, path: str) -> RouteMatch:
        """Resolve a request to a single route.

        Raises ``NotFound`` if nothing serves *path* (including disabled
        and below-minimum versions). Raises ``MethodNotAllowed`` if the
        resolved path does not accept *method*.
        """
        resolution = self.lookup(path)
        if resolution is None:
            raise NotFound(f"No route matches {method} {path!r}")
        if resolution.fell_back:
            logger.debug("Resolved %s %s via %s", method, path, resolution.path)
        return resolution.match.for_method(method)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """All dispatchable routes after versioning was applied."""
        return self._state().router.routes

    @property
    def registry(self) -> VersionRegistry:
        return self._state().registry

    @property
    def resolver(self) -> Resolver:
        return self._state().resolver

    def check(self) -> CheckReport:
        """Run the versioning check over the declared routes.

        Does not freeze the Api and never raises; ``report.ok`` tells
        whether anything is missing or invalid.
        """
        return run_version_check(
            self.enumerate(),
            self.check_config,
            decimal_digits=self.config.decimal_digits,
        )

    def freeze(self) -> None:
        """Bind all routes now instead of on the first lookup."""
        self._ensure_frozen()

    # -- Internal --

    def _state(self) -> _Compiled:
        self._ensure_frozen()
        if self._compiled is None:
            msg = "Api failed to freeze; see the previous error."
            raise RuntimeError(msg)
        return self._compiled

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Bind, compile and build the resolver.

        MUST only be called while holding _freeze_lock.
        """
        declarations = self.enumerate()

        # 1. Versioning check — may refuse to start
        if self.config.feature_enabled:
            report = run_version_check(
                declarations,
                self.check_config,
                decimal_digits=self.config.decimal_digits,
            )
            if report.failed:
                msg = "API versioning check failed:\n" + report.format()
                raise ConfigurationError(msg)
        else:
            logger.info(
                "API versioning feature is disabled; skipping versioning checks."
            )

        # 2. Bind declarations into versioned routes + registry
        result = bind_routes(declarations, self.config)

        # 3. Fill unset min/max from the declared versions
        config = self.config.with_bounds(result.minimum, result.maximum)
        self.config = config
        log_config(config, self.check_config)

        # 4. Compile route table
        router = Router()
        for route in result.routes:
            router.add(route)
        router.compile()

        self._compiled = _Compiled(
            router=router,
            registry=result.registry,
            resolver=create_resolver(config, result.registry, router),
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the Api after it has started resolving requests. "
                "Register routes and groups before the first lookup."
            )
            raise RuntimeError(msg)


def _endpoint_id(handler: Handler) -> str:
    module = getattr(handler, "__module__", None) or ""
    qualname = getattr(handler, "__qualname__", None) or repr(handler)
    return f"{module}.{qualname}" if module else qualname
