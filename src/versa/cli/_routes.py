"""``versa routes`` — list bound routes.

Resolves an import string to a versa Api, freezes it, and prints every
dispatchable route with its version and handler.
"""

import argparse
import sys

from versa.cli._resolve import resolve_api
from versa.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of METHOD, PATH, VERSION and handler name."""
    try:
        api = resolve_api(args.api)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        routes = api.routes
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for route in sorted(routes, key=lambda r: r.path):
        methods_str = ", ".join(sorted(route.methods))
        version = route.version or "-"
        if route.disabled:
            version = f"{version} (disabled)"
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        rows.append((methods_str, route.path, version, handler_name))

    max_methods = max(max(len(r[0]) for r in rows), 6)  # "METHOD" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header
    max_version = max(max(len(r[2]) for r in rows), 7)  # "VERSION" header

    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{:<{max_version}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "VERSION", "HANDLER"))
    sep_len = max_methods + max_path + max_version + 6 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
