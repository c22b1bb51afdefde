"""``versa check`` — API versioning check command.

Resolves an import string to a versa Api, runs the versioning check
and prints the report. Exits with code 1 if anything is missing or
invalid.
"""

import argparse
import sys

from versa.cli._resolve import resolve_api


def run_check(args: argparse.Namespace) -> None:
    """Run ``Api.check()`` and print the report.

    The check does not freeze the Api, so it also works for an Api that
    would refuse to start.
    """
    try:
        api = resolve_api(args.api)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    report = api.check()
    print(report.format())
    if not report.ok:
        raise SystemExit(1)
