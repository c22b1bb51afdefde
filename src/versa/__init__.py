"""Versa — versioned REST endpoint resolution with version fallback.

Serves several live API versions under one base path. A request for a
version an endpoint does not implement falls back to the closest older
version, is clamped to the current version, or is refused below the
minimum supported version.

Basic usage::

    from versa import Api, ResolverConfig

    api = Api(ResolverConfig(api_context="api", version_context="v"))

    @api.route("/users", version="1.0")
    def list_users_v1(): ...

    @api.route("/users", version="2.0")
    def list_users_v2(): ...

    api.resolve("GET", "/api/v1.5/users").route.handler  # list_users_v1
    api.resolve("GET", "/api/v9.0/users").route.handler  # list_users_v2

Configuration from flat properties::

    config = ResolverConfig.from_properties({
        "rest.api.version.management.apiContext": "api",
        "rest.api.version.management.min.version.support": "1.0",
    })
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "Api",
    "ConfigurationError",
    "HTTPError",
    "InvalidVersion",
    "MethodNotAllowed",
    "NotFound",
    "Resolution",
    "ResolverConfig",
    "RouteDeclaration",
    "VersaError",
    "VersionCheck",
    "VersionRegistry",
    "VersionToken",
    "parse_version",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import versa`` fast while providing a clean top-level API.
    """
    if name == "Api":
        from versa.app import Api

        return Api

    if name in ("ResolverConfig", "VersionCheck"):
        from versa import config as _config

        return getattr(_config, name)

    if name == "Resolution":
        from versa.versioning.resolver import Resolution

        return Resolution

    if name == "RouteDeclaration":
        from versa.versioning.binder import RouteDeclaration

        return RouteDeclaration

    if name == "VersionRegistry":
        from versa.versioning.registry import VersionRegistry

        return VersionRegistry

    if name in ("VersionToken", "parse_version"):
        from versa.versioning import token as _token

        return getattr(_token, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "InvalidVersion",
        "MethodNotAllowed",
        "NotFound",
        "VersaError",
    ):
        from versa import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
