"""``versa resolve`` — show which endpoint serves a request path.

Prints the path that finally matched, every fallback hop on the way,
and the handler selected for the requested method. Exits with code 1
when nothing serves the path.
"""

import argparse
import sys

from versa.cli._resolve import resolve_api
from versa.errors import ConfigurationError, HTTPError


def run_lookup(args: argparse.Namespace) -> None:
    """Resolve ``args.path`` against the Api named by ``args.api``."""
    try:
        api = resolve_api(args.api)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        resolution = api.lookup(args.path)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if resolution is None:
        print(f"404  {args.path}: no endpoint serves this path", file=sys.stderr)
        raise SystemExit(1)

    print(f"Requested: {resolution.requested_path}")
    for hop in resolution.hops:
        print(f"  -> {hop}")
    print(f"Matched:   {resolution.path}")
    if resolution.used_base_path:
        print("           (unversioned base path)")

    try:
        match = resolution.match.for_method(args.method)
    except HTTPError as exc:
        print(f"{exc.status}  {exc.detail}", file=sys.stderr)
        raise SystemExit(1) from exc

    route = match.route
    handler_name = getattr(route.handler, "__name__", str(route.handler))
    print(f"Handler:   {handler_name} [{args.method.upper()}]")
    if route.version:
        print(f"Version:   {route.version}")
    if match.path_params:
        params = ", ".join(f"{k}={v}" for k, v in sorted(match.path_params.items()))
        print(f"Params:    {params}")
