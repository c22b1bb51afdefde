"""Version tokens — validation, parsing and rendering.

A version is ``digits`` or ``digits.digits``. Versions are compared
numerically as ``Decimal`` values, so ``1.1``, ``1.10`` and ``1.100``
are the *same* version and ``1.10 > 1.2`` is false.

Rendering re-encodes a value with a fixed number of fractional digits
(``decimal_digits`` in ``ResolverConfig``). This is the canonical form
used for versioned paths and for every fallback rewrite.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal

from versa.errors import InvalidVersion

# Both digit groups may be empty, but not both at once: "1.", ".5" and
# "12" are versions, "" and "." are not.
_VERSION_RE = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)")


def is_valid_version(raw: str) -> bool:
    """Return True if *raw* is an integer or decimal version string."""
    return _VERSION_RE.fullmatch(raw) is not None


@dataclass(frozen=True, slots=True, order=False)
class VersionToken:
    """A parsed version.

    Equality, hashing and ordering use ``value`` only; ``raw`` keeps the
    text the version was declared or requested with.
    """

    value: Decimal
    raw: str = field(default="", compare=False)

    def render(self, precision: int) -> str:
        return render_version(self.value, precision)

    def __lt__(self, other: "VersionToken") -> bool:
        return self.value < other.value

    def __le__(self, other: "VersionToken") -> bool:
        return self.value <= other.value

    def __gt__(self, other: "VersionToken") -> bool:
        return self.value > other.value

    def __ge__(self, other: "VersionToken") -> bool:
        return self.value >= other.value

    def __str__(self) -> str:
        return self.raw or str(self.value)


def parse_version(raw: str) -> VersionToken:
    """Parse a version string.

    Raises ``InvalidVersion`` if *raw* does not pass ``is_valid_version``.
    """
    if not is_valid_version(raw):
        raise InvalidVersion(raw)
    return VersionToken(value=Decimal(raw), raw=raw)


def as_version(value: "VersionToken | Decimal | str | float | int") -> VersionToken:
    """Coerce a config value into a ``VersionToken``.

    Floats go through ``repr`` so ``1.1`` stays ``1.1`` rather than its
    binary expansion.
    """
    if isinstance(value, VersionToken):
        return value
    if isinstance(value, Decimal):
        return VersionToken(value=value, raw=str(value))
    if isinstance(value, float):
        return parse_version(repr(value))
    return parse_version(str(value))


def render_version(value: Decimal, precision: int) -> str:
    """Format *value* with exactly *precision* fractional digits.

    Lossy when *value* carries more digits than *precision*: rounding
    can make two declared versions render to the same path segment.
    """
    if precision < 0:
        msg = f"precision must be >= 0, got {precision}"
        raise ValueError(msg)
    return f"{value:.{precision}f}"
