"""Versa CLI — inspect an Api's versioned routes, checks and resolutions.

Entry point registered as ``versa`` in ``pyproject.toml``::

    [project.scripts]
    versa = "versa.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``versa`` command."""
    parser = argparse.ArgumentParser(
        prog="versa",
        description="Versa — versioned REST endpoint resolution with version fallback.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- versa routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List bound routes")
    routes_parser.add_argument(
        "api",
        help="Import string (e.g. myapi:api)",
    )

    # -- versa check ------------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Run the API versioning check")
    check_parser.add_argument(
        "api",
        help="Import string (e.g. myapi:api)",
    )

    # -- versa resolve ----------------------------------------------------
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Show which endpoint serves a request path",
    )
    resolve_parser.add_argument(
        "api",
        help="Import string (e.g. myapi:api)",
    )
    resolve_parser.add_argument("path", help="Request path (e.g. /api/v2.5/users)")
    resolve_parser.add_argument(
        "--method",
        default="GET",
        help="HTTP method to select (default: GET)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from versa.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from versa.cli._check import run_check

        run_check(args)
    elif args.command == "resolve":
        from versa.cli._lookup import run_lookup

        run_lookup(args)
