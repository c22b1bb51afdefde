"""Shared type aliases used across versa modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Endpoint handler — user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]
