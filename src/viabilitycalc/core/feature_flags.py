"""Environment-driven switches for optional calculator capabilities.

The calculator page composes one score engine with optional extras (the
"fill example answers" button and image export).  Each extra is a flag that
deployments can turn off without a code change, and tests can flip through
the :func:`override` context manager.

Usage::

    from viabilitycalc.core import feature_flags

    if feature_flags.is_enabled(feature_flags.EXPORT, default=True):
        ...

The environment variable ``VIABILITYCALC_FEATURES`` accepts a comma-separated
list of flag names.  A leading ``-`` disables a flag that is on by default,
e.g. ``VIABILITYCALC_FEATURES=-calculator.export``.  Names are
case-insensitive.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from contextlib import contextmanager
from typing import Final

__all__ = [
    "EXAMPLE_FILL",
    "EXPORT",
    "is_enabled",
    "override",
    "set_env_flags",
]

_ENV_VAR: Final = "VIABILITYCALC_FEATURES"

EXAMPLE_FILL: Final = "calculator.example_fill"
EXPORT: Final = "calculator.export"


def _normalise(flag: str) -> str:
    return flag.strip().lower()


def _parse_env(raw: str | None) -> tuple[set[str], set[str]]:
    enabled: set[str] = set()
    disabled: set[str] = set()
    if not raw:
        return enabled, disabled
    for entry in raw.split(","):
        name = _normalise(entry)
        if not name:
            continue
        if name.startswith("-"):
            stripped = _normalise(name[1:])
            if stripped:
                disabled.add(stripped)
        else:
            enabled.add(name)
    return enabled, disabled


_OVERRIDE_STACK: list[tuple[set[str], set[str]]] = []


def _current_overrides() -> tuple[set[str], set[str]]:
    enabled: set[str] = set()
    disabled: set[str] = set()
    for en, dis in _OVERRIDE_STACK:
        enabled.update(en)
        enabled.difference_update(dis)
        disabled.update(dis)
        disabled.difference_update(en)
    return enabled, disabled


def is_enabled(flag: str, *, default: bool = False) -> bool:
    """Return the state of *flag*: overrides first, then env, then *default*."""

    key = _normalise(flag)
    enabled, disabled = _current_overrides()
    if key in disabled:
        return False
    if key in enabled:
        return True
    env_enabled, env_disabled = _parse_env(os.getenv(_ENV_VAR))
    if key in env_disabled:
        return False
    if key in env_enabled:
        return True
    return default


@contextmanager
def override(*, enable: Iterable[str] | None = None, disable: Iterable[str] | None = None):
    """Temporarily override flag state within the context.

    Overrides are stacked; the innermost context wins for a given flag.
    """

    enabled = {_normalise(flag) for flag in (enable or ())}
    disabled = {_normalise(flag) for flag in (disable or ())}
    _OVERRIDE_STACK.append((enabled, disabled))
    try:
        yield
    finally:
        _OVERRIDE_STACK.pop()


def set_env_flags(flags: Iterable[str]) -> None:
    """Convenience helper used in scripts/tests to set the env list."""

    os.environ[_ENV_VAR] = ",".join(sorted({_normalise(flag) for flag in flags}))
