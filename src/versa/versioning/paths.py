"""Versioned path construction and decomposition.

Path grammar::

    {head}/{apiContext}/{versionContext}{version}{basePath}

``head`` is whatever precedes the versioning prefix (usually empty).
The prefix is built once from config; the version token follows it
directly, so ``apiContext="api"`` and ``versionContext="v"`` give
``/api/v1.0/users``.
"""

from dataclasses import dataclass

from versa.routing.router import normalize_path


def versioning_prefix(api_context: str, version_context: str) -> str:
    """Build the literal prefix that precedes every version token.

    Surrounding slashes on either context are ignored::

        versioning_prefix("api", "v")    -> "/api/v"
        versioning_prefix("/api/", "")   -> "/api/"
        versioning_prefix("", "v")       -> "/v"
        versioning_prefix("", "")        -> "/"
    """
    api = api_context.strip("/")
    version = version_context.strip("/")
    prefix = "/"
    if api:
        prefix += f"{api}/"
    return prefix + version


def versioned_path(prefix: str, rendered_version: str, base_path: str) -> str:
    """Join prefix, version and base route: ``/api/v`` + ``1.0`` + ``/users``."""
    base = normalize_path(base_path) if base_path else "/"
    if base == "/":
        return prefix + rendered_version
    return prefix + rendered_version + base


@dataclass(frozen=True, slots=True)
class VersionedPath:
    """A lookup path split around its version segment.

    ``/api/v2.5/users/42`` with prefix ``/api/v`` gives head ``""``,
    segment ``"2.5"`` and base path ``"/users/42"``.
    """

    prefix: str
    head: str
    segment: str
    base_path: str

    @property
    def base_lookup_path(self) -> str:
        """The unversioned path, never empty."""
        return self.base_path or "/"

    def with_version(self, rendered_version: str) -> str:
        return self.head + self.prefix + rendered_version + self.base_path


def split_versioned_path(path: str, prefix: str) -> VersionedPath | None:
    """Split *path* at the first occurrence of *prefix*.

    Returns ``None`` if *path* does not contain the prefix. The version
    segment runs up to the next ``/`` and is *not* validated here.
    """
    index = path.find(prefix)
    if index < 0:
        return None
    after = path[index + len(prefix):]
    segment, sep, rest = after.partition("/")
    return VersionedPath(
        prefix=prefix,
        head=path[:index],
        segment=segment,
        base_path=sep + rest,
    )
