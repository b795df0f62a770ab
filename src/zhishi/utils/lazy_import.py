"""Deferred imports for optional backends."""

from collections.abc import Callable
from importlib import import_module

__all__ = [
    "lazy_import",
]


def lazy_import(
    module_name: str,
    name: str | None = None,
) -> Callable[[], object]:
    """Return a loader that imports module_name (or one attribute of it) on first call.

    The loaded object is memoised, so repeated calls are cheap.
    """
    loaded: list[object] = []

    def _load() -> object:
        if not loaded:
            mod = import_module(module_name)
            loaded.append(getattr(mod, name) if name else mod)
        return loaded[0]

    return _load
