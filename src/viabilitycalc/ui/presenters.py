from __future__ import annotations

from collections.abc import Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.catalog import QuestionCatalog
from ..core.models import UNANSWERED, Answer, ColorToken
from ..core.scoring import ScoreState, format_score

_VERDICT_STYLE = {
    ColorToken.GREEN_400: "bold green",
    ColorToken.GREEN_200: "green",
    ColorToken.STONE_200: "dim",
    ColorToken.RED_400: "bold red",
}


class RichPresenter:
    def __init__(self, *, no_color: bool = False):
        # Default: color ON (forced), unless explicitly disabled via --no-color.
        if no_color:
            self.console = Console(force_terminal=False, color_system=None, highlight=False)
        else:
            self.console = Console(force_terminal=True, color_system="auto")

    def show_questions(self, catalog: QuestionCatalog) -> None:
        for question in catalog:
            table = Table(title=f"{question.label} ({question.id})", caption=question.helper_text, show_header=True)
            table.add_column("Option id")
            table.add_column("Value", justify="right")
            table.add_column("Label")
            for option in question.options:
                table.add_row(option.id, f"{option.value:g}", option.label)
            self.console.print(table)

    def show_score(self, catalog: QuestionCatalog, selections: Mapping[str, Answer], state: ScoreState) -> None:
        table = Table(show_header=True, header_style="bold blue")
        table.add_column("Question")
        table.add_column("Answer")
        for question in catalog:
            answer = selections[question.id]
            table.add_row(question.label, "-" if answer is UNANSWERED else answer.label)
        self.console.print(table)
        style = _VERDICT_STYLE.get(state.display_color, "")
        self.console.print(f"Score: {format_score(state.normalized_score)}")
        self.console.print(f"Verdict: {state.verdict_label}", style=style)
        self.console.print(f"Color: {state.display_color.value}")

    def error(self, message: str) -> None:
        self.console.print(Panel.fit(message, title="Error", style="red"))
