"""Routing — compiled route table with O(path-depth) matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the Api freezes. The router only ever answers
exact (literal or parameterised) matches; version fallback lives in
``versa.versioning``.
"""
