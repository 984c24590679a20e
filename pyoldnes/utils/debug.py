"""Category-gated debug output.

Set ``PYOLDNES_DEBUG`` to a comma separated list of categories (``cpu``,
``bus``, ``trace`` ...) or to ``all``. Messages go to stdout prefixed with
``[PYOLDNES][category]``.
"""

from __future__ import annotations

import os
from typing import FrozenSet

ENV_VAR = "PYOLDNES_DEBUG"
ALL = "all"

_enabled: FrozenSet[str] | None = None


def parse_categories(value: str) -> FrozenSet[str]:
    return frozenset(filter(None, (part.strip().lower() for part in value.split(","))))


def _categories() -> FrozenSet[str]:
    global _enabled
    if _enabled is None:
        _enabled = parse_categories(os.environ.get(ENV_VAR, ""))
    return _enabled


def reload_categories() -> set[str]:
    """Forget the cached categories and read the environment again."""

    global _enabled
    _enabled = None
    return set(_categories())


def debug_enabled(category: str | None = None) -> bool:
    enabled = _categories()
    if not enabled:
        return False
    return category is None or ALL in enabled or category.lower() in enabled


def debug_log(category: str, message: str, *args) -> None:
    if not debug_enabled(category):
        return
    if args:
        try:
            message = message % args
        except (TypeError, ValueError):
            # Keep the raw template so a bad call site is still visible.
            message = f"{message} {args!r}"
    print(f"[PYOLDNES][{category}] {message}")
