"""Route, PathMatch and RouteMatch frozen dataclasses."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from versa.errors import MethodNotAllowed


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen, dispatchable route.

    ``path`` is the concrete path the router matches on. For versioned
    endpoints that is the full versioned path (``/api/v1.0/users``);
    ``base_path`` keeps the unversioned template it was derived from.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    endpoint_id: str = ""
    base_path: str = ""
    version: str | None = None
    disabled: bool = False


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]


@dataclass(frozen=True, slots=True)
class PathMatch:
    """Every route registered at a matched path, keyed by HTTP method.

    Returned by ``Router.lookup()``. Version resolution works on paths,
    not methods, so the method check is deferred to ``for_method()``.
    """

    path: str
    routes_by_method: Mapping[str, Route]
    path_params: dict[str, str]

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self.routes_by_method)

    def for_method(self, method: str) -> RouteMatch:
        """Select the route for *method*.

        Raises ``MethodNotAllowed`` if the path exists but not for *method*.
        """
        route = self.routes_by_method.get(method.upper())
        if route is None:
            raise MethodNotAllowed(self.methods)
        return RouteMatch(route=route, path_params=self.path_params)
