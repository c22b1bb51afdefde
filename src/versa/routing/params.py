"""Path parameter patterns.

Built-in converters for route path segments like ``{id:int}``. The
router uses them to match concrete segments; the version registry uses
them to map a concrete base lookup path back to its template.
"""


# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def param_pattern(param_type: str) -> str:
    """Return the regex fragment for *param_type*.

    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    pattern, _ = CONVERTERS[param_type]
    return pattern
