from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.openapi.utils import get_openapi
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..features.calculator import CalculatorManager, SvgExporter, create_calculator_router

CALCULATOR_PATH = "/calculator-is-my-startup-viable"

app = FastAPI(title="Is My Startup Viable?")
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
_manager = CalculatorManager()
_exporter = SvgExporter(TEMPLATES_DIR)

app.include_router(create_calculator_router(_manager, templates, exporter=_exporter))

_NAV = (
    ("Home", "/"),
    ("Calculator: Is My Startup Viable?", CALCULATOR_PATH),
)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
def home(request: Request) -> Response:
    return templates.TemplateResponse(
        request,
        "home.html",
        {"nav": _NAV, "calculator_path": CALCULATOR_PATH},
    )


@app.get(CALCULATOR_PATH, response_class=HTMLResponse)
def calculator(request: Request) -> Response:
    # Entering the view starts a fresh, all-unanswered selection.
    session_id = _manager.create_session()
    view = _manager.get_view(session_id)
    return templates.TemplateResponse(
        request,
        "calculator.html",
        {"nav": _NAV, "view": view},
    )


def _custom_openapi() -> dict[str, object]:  # pragma: no cover - exercised via docs
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=__version__,
        description=app.description,
        routes=app.routes,
    )
    app.openapi_schema = schema
    return schema


app.openapi = _custom_openapi  # type: ignore[assignment]
app.openapi_schema = None


def main(host: str | None = None, port: int | None = None) -> None:  # pragma: no cover - runner
    import uvicorn

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    bind = host or os.environ.get("BIND", "0.0.0.0")
    bind_port = port if port is not None else int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host=bind, port=bind_port, factory=False)


if __name__ == "__main__":  # pragma: no cover
    main()
