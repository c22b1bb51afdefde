"""Compiled router with trie-based path matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the Api freezes. ``Router.lookup`` is the exact
match dispatcher the version resolver delegates to.
"""

import re
from dataclasses import dataclass
from typing import NoReturn

from versa.errors import ConfigurationError, NotFound
from versa.routing.params import CONVERTERS, param_pattern
from versa.routing.route import PathMatch, PathSegment, Route, RouteMatch

_ANGLE_PARAM = re.compile(r"<[^<>/]+>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [PathSegment("{path:path}", is_param=True, param_type="path")]

    Raises ``ConfigurationError`` for ``<param>`` placeholders or unknown
    converters.
    """
    if _ANGLE_PARAM.search(path):
        msg = (
            f"Route path {path!r} uses <param> placeholders. "
            "Versa expects {param} placeholders, e.g. '/users/{id}'."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in route {path!r}"
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def is_template(path: str) -> bool:
    """True if *path* contains at least one ``{param}`` segment."""
    return any(seg.is_param for seg in parse_path(path))


def compile_pattern(path: str) -> re.Pattern[str]:
    """Compile a route template into an anchored regex.

    Used where a handful of templates must be matched without building
    a full trie, e.g. ``/api/v1.0/users/{id}`` in the disabled set.
    Trailing slashes are ignored, as in ``Router.match``.
    """
    parts: list[str] = []
    for seg in parse_path(path):
        if seg.is_param:
            parts.append(f"(?:{param_pattern(seg.param_type)})")
        else:
            parts.append(re.escape(seg.value))
    return re.compile("^/" + "/".join(parts) + "/?$")


def normalize_path(path: str) -> str:
    """Collapse empty segments and trailing slashes: ``/a//b/`` -> ``/a/b``."""
    return "/" + "/".join(p for p in path.strip("/").split("/") if p)


def canonical_template(path: str) -> str:
    """Normalize *path* and drop parameter names, keeping converters.

    ``/users/{id}`` and ``/users/{user_id:str}`` both give ``/users/{:str}``;
    ``/users/{id:int}`` gives ``/users/{:int}``. Two templates with the same
    canonical form match exactly the same concrete paths.
    """
    parts = [
        f"{{:{seg.param_type}}}" if seg.is_param else seg.value for seg in parse_path(path)
    ]
    return "/" + "/".join(parts)


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all_route", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all route (path converter)
        self.catch_all_route: _CatchAllEdge | None = None
        # Routes at this node, keyed by HTTP method
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge — consumes remaining path."""

    param_name: str
    route_by_method: dict[str, Route]


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/api/v1.0/users", handler, frozenset({"GET"})))
        router.add(Route("/api/v1.0/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/api/v1.0/users/42")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile().

        Raises ``ConfigurationError`` if *route* claims a method already
        registered at the same path, or declares a parameter that differs
        in name or converter from one already registered at that position.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        node = self._root

        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                param_name = seg.param_name or "path"
                if node.catch_all_route is None:
                    node.catch_all_route = _CatchAllEdge(
                        param_name=param_name,
                        route_by_method={},
                    )
                elif node.catch_all_route.param_name != param_name:
                    _conflicting_param(route, node.catch_all_route.param_name, "path", seg)
                _claim_methods(route, node.catch_all_route.route_by_method)
                return

            if seg.is_param:
                edge = node.param_child
                if edge is None:
                    edge = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{param_pattern(seg.param_type)}$"),
                        node=_TrieNode(),
                    )
                    node.param_child = edge
                elif (edge.param_name, edge.param_type) != (seg.param_name, seg.param_type):
                    _conflicting_param(route, edge.param_name, edge.param_type, seg)
                node = edge.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        _claim_methods(route, node.routes_by_method)

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes.

        Traverses the trie to collect every unique Route object.
        Used by ``versa routes`` and by tests.
        """
        seen: set[int] = set()
        result: list[Route] = []
        self._collect_routes(self._root, seen, result)
        return result

    def _collect_routes(
        self,
        node: _TrieNode,
        seen: set[int],
        result: list[Route],
    ) -> None:
        """Recursively collect routes from the trie."""
        for route in node.routes_by_method.values():
            route_id = id(route)
            if route_id not in seen:
                seen.add(route_id)
                result.append(route)

        for child in node.children.values():
            self._collect_routes(child, seen, result)

        if node.param_child is not None:
            self._collect_routes(node.param_child.node, seen, result)

        if node.catch_all_route is not None:
            for route in node.catch_all_route.route_by_method.values():
                route_id = id(route)
                if route_id not in seen:
                    seen.add(route_id)
                    result.append(route)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def lookup(self, path: str) -> PathMatch | None:
        """Exact path lookup, ignoring the HTTP method.

        Returns ``None`` when nothing is registered at *path*. Never
        attempts any version fallback.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            return None
        routes_by_method, params = result
        return PathMatch(path=path, routes_by_method=routes_by_method, path_params=params)

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        found = self.lookup(path)
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")
        return found.for_method(method)

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        # All parts consumed — return this node's routes
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        # 1. Try static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter child
        if node.param_child is not None:
            edge = node.param_child
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        # 3. Try catch-all
        if node.catch_all_route is not None:
            remaining = "/".join(parts[index:])
            new_params = {**params, node.catch_all_route.param_name: remaining}
            return node.catch_all_route.route_by_method, new_params

        return None


def _claim_methods(route: Route, routes_by_method: dict[str, Route]) -> None:
    taken = sorted(m for m in route.methods if m in routes_by_method)
    if taken:
        existing = routes_by_method[taken[0]]
        msg = (
            f"Duplicate route {', '.join(taken)} {route.path!r}: already served by "
            f"{existing.endpoint_id or existing.handler!r}"
        )
        raise ConfigurationError(msg)
    for method in route.methods:
        routes_by_method[method] = route


def _conflicting_param(
    route: Route, name: str, param_type: str, seg: PathSegment
) -> NoReturn:
    msg = (
        f"Route {route.path!r} declares {seg.value!r} where another route at the "
        f"same position declares {{{name}:{param_type}}}. Use the same parameter "
        "name and converter for every route sharing a path prefix."
    )
    raise ConfigurationError(msg)
