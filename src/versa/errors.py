"""Versa exception hierarchy.

Shared across the router, binder, resolver, and Api so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class VersaError(Exception):
    """Base for all versa-specific errors."""


class ConfigurationError(VersaError):
    """Raised when versioning configuration or route declarations are invalid.

    Typically raised during ``Api._freeze()`` at startup.
    """


class InvalidVersion(VersaError, ValueError):  # noqa: N818
    """Raised when a string that is not a valid version is parsed."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid API version: {raw!r}")
        self.raw = raw


@dataclass(frozen=True, slots=True)
class HTTPError(VersaError):
    """An error that maps directly to an HTTP status code.

    Raised by the router and the Api. The host server catches these
    and turns them into responses.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path.

    Also raised for disabled API versions, so their existence is never
    revealed to the client.
    """

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods and embeds
    the allowed methods in the detail string for developer visibility.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
