"""Startup viability calculator: question catalog, scoring engine and web UI."""

from __future__ import annotations

__all__: list[str] = []

__version__ = "0.1.0"
