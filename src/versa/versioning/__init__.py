"""API versioning — version tokens, registry, route binding and resolution.

Submodules are imported directly (``versa.versioning.resolver``); this
package re-exports nothing so ``versa.config`` can depend on the leaf
modules without an import cycle.
"""
