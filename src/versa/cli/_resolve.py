"""Api import resolution — resolves ``"module:attribute"`` strings to Api instances.

Shared utility used by every ``versa`` subcommand to locate an Api from
a user-supplied import string.
"""

import importlib

from versa.app import Api


def resolve_api(import_string: str) -> Api:
    """Resolve an import string to a versa Api instance.

    Accepts ``"module:attribute"`` format. When the attribute portion
    is omitted, defaults to ``"api"`` (e.g. ``"myapi"`` resolves to
    ``myapi.api``).

    Supports factory functions: if the resolved object is callable and
    not an Api instance, it will be called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a versa ``Api`` or the
            factory fails.

    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "api"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, Api):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Api):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a versa.Api instance"
        raise TypeError(msg)

    return obj
