from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from .core.catalog import DEFAULT_CATALOG, EXAMPLE_ANSWERS
from .core.errors import InvalidSelectionError
from .core.scoring import evaluate
from .core.selection import SelectionStore
from .ui.presenters import RichPresenter

EXIT_INVALID_ANSWER = 2


def _parse_answer(raw: str) -> tuple[str, str]:
    question_id, sep, option_id = raw.partition("=")
    if not sep or not question_id.strip() or not option_id.strip():
        raise argparse.ArgumentTypeError(f"expected QUESTION=OPTION, got '{raw}'")
    return question_id.strip(), option_id.strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="viabilitycalc", description="Is My Startup Viable? calculator")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output (default is colored)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("questions", help="List questions and their option ids")

    score = sub.add_parser("score", help="Score a set of answers")
    score.add_argument("--example", action="store_true", help="Start from the WP Engine example answers")
    score.add_argument(
        "--answer",
        "-a",
        action="append",
        type=_parse_answer,
        default=[],
        metavar="QUESTION=OPTION",
        help="Answer one question by option id (repeatable; later values win)",
    )

    serve = sub.add_parser("serve", help="Run the web app")
    serve.add_argument("--host", default=None, help="Bind address (default: $BIND or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 8000)")
    return parser


def _score(presenter: RichPresenter, *, example: bool, answers: Sequence[tuple[str, str]]) -> int:
    store = SelectionStore(DEFAULT_CATALOG)
    try:
        if example:
            store.apply_batch(EXAMPLE_ANSWERS)
        store.apply_batch(dict(answers))
    except InvalidSelectionError as exc:
        presenter.error(str(exc))
        return EXIT_INVALID_ANSWER
    selections = store.get_all_selections()
    presenter.show_score(DEFAULT_CATALOG, selections, evaluate(selections))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    presenter = RichPresenter(no_color=args.no_color)

    if args.command == "questions":
        presenter.show_questions(DEFAULT_CATALOG)
        return 0
    if args.command == "score":
        return _score(presenter, example=args.example, answers=args.answer)

    from .web.app import main as serve

    serve(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
