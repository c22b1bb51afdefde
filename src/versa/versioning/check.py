"""Startup versioning check.

Reports, per owner (declaring group, or endpoint id for ungrouped routes),
whether versioning was applied. With a ``VersionCheck`` whose
``stop_on_fail`` is set, owners inside the scanned packages that are not
versioned count as failures, and the Api refuses to start.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from versa.config import VersionCheck
from versa.versioning.binder import RouteDeclaration, declared_version_error

logger = logging.getLogger("versa.check")


@dataclass(frozen=True, slots=True)
class CheckReport:
    """Owners grouped by outcome. Each tuple is sorted and de-duplicated.

    ``versioned`` entries read ``owner-v<version>``; so do ``invalid`` ones.
    """

    enforced: bool
    versioned: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    ignored: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()
    disabled: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing and not self.invalid

    @property
    def failed(self) -> bool:
        """True when the failures must stop the application."""
        return self.enforced and not self.ok

    def format(self) -> str:
        """Human-readable summary, one section per non-empty outcome."""
        lines = [f"API versioning check ({'enforced' if self.enforced else 'not enforced'})"]
        sections = (
            ("Versioned", self.versioned),
            ("Skipped", self.skipped),
            ("Ignored", self.ignored),
            ("Disabled", self.disabled),
            ("Missing version", self.missing),
            ("Invalid version", self.invalid),
        )
        for title, names in sections:
            if not names:
                continue
            lines.append(f"  {title} ({len(names)}):")
            lines.extend(f"    {name}" for name in names)
        lines.append("  OK" if self.ok else "  FAILED")
        return "\n".join(lines)


def run_version_check(
    declarations: Iterable[RouteDeclaration],
    check: VersionCheck | None = None,
    *,
    decimal_digits: int = 1,
) -> CheckReport:
    """Classify every declaration owner and log the outcome.

    *decimal_digits* must match the resolver config so versions the binder
    would reject are reported as invalid here too.
    """
    enforced = check is not None and check.stop_on_fail
    versioned: set[str] = set()
    skipped: set[str] = set()
    ignored: set[str] = set()
    missing: set[str] = set()
    invalid: set[str] = set()
    disabled: set[str] = set()

    for decl in declarations:
        owner = decl.owner
        version = decl.version.strip()

        if decl.skip_versioning:
            skipped.add(owner)
            continue

        if version and declared_version_error(version, decimal_digits) is not None:
            logger.warning("Invalid version %r is specified for %s", version, owner)
            invalid.add(f"{owner}-v{version}")
            continue

        if version:
            versioned.add(f"{owner}-v{version}")
            if decl.disabled:
                disabled.add(f"{owner}-v{version}")
            continue

        if enforced and check is not None and _in_scope(owner, check):
            missing.add(owner)
        else:
            ignored.add(owner)

    report = CheckReport(
        enforced=enforced,
        versioned=tuple(sorted(versioned)),
        skipped=tuple(sorted(skipped)),
        ignored=tuple(sorted(ignored)),
        missing=tuple(sorted(missing)),
        invalid=tuple(sorted(invalid)),
        disabled=tuple(sorted(disabled)),
    )
    _log_report(report)
    return report


def _in_scope(owner: str, check: VersionCheck) -> bool:
    if owner in check.ignore_classes:
        return False
    if any(_in_package(owner, pkg) for pkg in check.ignore_packages):
        return False
    if not check.scan_packages:
        return True
    return any(_in_package(owner, pkg) for pkg in check.scan_packages)


def _in_package(owner: str, package: str) -> bool:
    return owner == package or owner.startswith(package + ".")


def _log_report(report: CheckReport) -> None:
    logger.info(
        "API versioning enforcement is %s", "enabled" if report.enforced else "disabled"
    )
    if report.versioned:
        logger.info("API versioning enabled for %s", list(report.versioned))
    if report.skipped:
        logger.info("API versioning skipped for %s", list(report.skipped))
    if report.ignored:
        logger.info("API versioning check ignored for %s", list(report.ignored))
    if report.missing:
        logger.warning("API version is missing for %s", list(report.missing))
    if report.invalid:
        logger.warning("Invalid API version for %s", list(report.invalid))
