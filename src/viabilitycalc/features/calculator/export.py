"""Render the calculator view as a shareable image."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .schemas import CalculatorResponse

__all__ = ["ExportedImage", "SvgExporter", "ViewExporter"]

_SVG_TEMPLATE = "export/view.svg"

# Tailwind palette values for the verdict background tokens.
_FILL = {
    "green-400": "#4ade80",
    "green-200": "#bbf7d0",
    "stone-200": "#e7e5e4",
    "red-400": "#f87171",
}


@dataclass(frozen=True)
class ExportedImage:
    content: bytes
    media_type: str
    filename: str


class ViewExporter(Protocol):
    def __call__(self, view: CalculatorResponse) -> ExportedImage: ...


def _slug(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.strip().lower()).strip("-")
    return slug or "startup"


class SvgExporter:
    """Draws the score card and the chosen answers into a standalone SVG."""

    def __init__(self, template_dir: str | Path, *, width: int = 480, row_height: int = 34) -> None:
        # Own environment: the page environment leaves .svg templates unescaped.
        self._environment = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "svg", "xml"]),
        )
        self._width = width
        self._row_height = row_height

    def __call__(self, view: CalculatorResponse) -> ExportedImage:
        template = self._environment.get_template(_SVG_TEMPLATE)
        rows = []
        for question in view.questions:
            selected = next((opt for opt in question.options if opt.id == question.selected), None)
            rows.append({"label": question.label, "answer": selected.label if selected else "—"})
        header = 140
        height = header + self._row_height * len(rows) + 24
        svg = template.render(
            view=view,
            rows=rows,
            width=self._width,
            height=height,
            header=header,
            row_height=self._row_height,
            fill=_FILL.get(view.score.color, "#ffffff"),
        )
        return ExportedImage(
            content=svg.encode("utf-8"),
            media_type="image/svg+xml",
            filename=f"{_slug(view.startup_name)}-viability.svg",
        )
