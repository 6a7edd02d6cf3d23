from __future__ import annotations

import json

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, model_validator

from ...core.errors import CapabilityDisabledError, InvalidSelectionError
from .export import ViewExporter
from .schemas import CalculatorResponse, ExportFailurePayload, OptionPayload, QuestionPayload
from .service import CalculatorManager

__all__ = ["DetailsRequest", "SelectRequest", "create_calculator_router"]

_HX_HEADER = "HX-Request"
_PANEL_TEMPLATE = "calculator/panel.html"


class SelectRequest(BaseModel):
    question: str
    option: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: dict[str, object]) -> dict[str, object]:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, object] = dict(data)
        # The dropdown placeholder posts an empty string; treat it as "clear".
        value = cleaned.get("option")
        if isinstance(value, str):
            value = value.strip()
            cleaned["option"] = value or None
        question = cleaned.get("question")
        if isinstance(question, str):
            cleaned["question"] = question.strip()
        return cleaned


class DetailsRequest(BaseModel):
    startup_name: str = ""
    pitch: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: dict[str, object]) -> dict[str, object]:
        if not isinstance(data, dict):
            return data
        return {key: ("" if value is None else value) for key, value in data.items()}


class _CalculatorController:
    def __init__(
        self,
        manager: CalculatorManager,
        templates: Jinja2Templates,
        exporter: ViewExporter | None,
    ) -> None:
        self.manager = manager
        self.templates = templates
        self.exporter = exporter

    # ------------------------------------------------------------------ helpers
    def _is_hx(self, request: Request) -> bool:
        return request.headers.get(_HX_HEADER, "").lower() == "true"

    def _json_response(self, data: dict[str, object], *, status_code: int = 200) -> JSONResponse:
        response = JSONResponse(data, status_code=status_code)
        response.headers.setdefault("Vary", _HX_HEADER)
        return response

    def _template_response(
        self,
        request: Request,
        template: str,
        context: dict[str, object],
        *,
        trigger: dict[str, str] | None = None,
    ) -> Response:
        headers: dict[str, str] = {"Vary": _HX_HEADER}
        if trigger:
            headers["HX-Trigger"] = json.dumps(trigger)
        return self.templates.TemplateResponse(
            request,
            template,
            {**context, "request": request},
            headers=headers,
        )

    def _render(self, request: Request, view: CalculatorResponse, *, trigger: dict[str, str] | None = None) -> Response:
        if self._is_hx(request):
            return self._template_response(request, _PANEL_TEMPLATE, {"view": view}, trigger=trigger)
        return self._json_response(view.to_dict())

    def _not_found(self, request: Request, exc: KeyError) -> HTTPException:
        # htmx does not swap a 404; ask it to reload the page, which starts a new view.
        headers = {"HX-Refresh": "true", "Vary": _HX_HEADER} if self._is_hx(request) else None
        return HTTPException(404, str(exc), headers=headers)

    def _view_or_404(self, request: Request, sid: str) -> CalculatorResponse:
        try:
            return self.manager.get_view(sid)
        except KeyError as exc:
            raise self._not_found(request, exc) from exc

    # ------------------------------------------------------------------ actions
    def questions(self) -> Response:
        payload = [
            QuestionPayload(
                id=question.id,
                label=question.label,
                helper_text=question.helper_text,
                options=[OptionPayload(id=opt.id, label=opt.label, value=opt.value) for opt in question.options],
            ).to_dict()
            for question in self.manager.catalog
        ]
        return self._json_response({"questions": payload})

    def create(self, request: Request) -> Response:
        session_id = self.manager.create_session()
        if self._is_hx(request):
            view = self.manager.get_view(session_id)
            return self._render(request, view, trigger={"calculatorCreated": session_id})
        return self._json_response({"session": session_id})

    def view(self, request: Request, sid: str) -> Response:
        return self._render(request, self._view_or_404(request, sid))

    def select(self, request: Request, sid: str, body: SelectRequest) -> Response:
        try:
            view = self.manager.select(sid, body.question, body.option)
        except KeyError as exc:
            raise self._not_found(request, exc) from exc
        except InvalidSelectionError as exc:
            raise HTTPException(400, str(exc)) from exc
        return self._render(request, view, trigger={"calculatorUpdated": sid})

    def example(self, request: Request, sid: str) -> Response:
        try:
            view = self.manager.populate_example(sid)
        except KeyError as exc:
            raise self._not_found(request, exc) from exc
        except CapabilityDisabledError as exc:
            raise HTTPException(403, str(exc)) from exc
        return self._render(request, view, trigger={"calculatorUpdated": sid})

    def reset(self, request: Request, sid: str) -> Response:
        try:
            view = self.manager.reset(sid)
        except KeyError as exc:
            raise self._not_found(request, exc) from exc
        return self._render(request, view, trigger={"calculatorUpdated": sid})

    def details(self, request: Request, sid: str, body: DetailsRequest) -> Response:
        try:
            view = self.manager.update_details(sid, startup_name=body.startup_name, pitch=body.pitch)
        except KeyError as exc:
            raise self._not_found(request, exc) from exc
        return self._render(request, view)

    async def export(self, sid: str) -> Response:
        if self.exporter is None:
            raise HTTPException(403, "image export is not configured")
        try:
            outcome = await self.manager.export_async(sid, self.exporter)
        except KeyError as exc:
            raise HTTPException(404, str(exc)) from exc
        except CapabilityDisabledError as exc:
            raise HTTPException(403, str(exc)) from exc
        if outcome.image is None:
            failure = ExportFailurePayload(error=str(outcome.error or "export failed"))
            return self._json_response(failure.to_dict(), status_code=503)
        image = outcome.image
        return Response(
            content=image.content,
            media_type=image.media_type,
            headers={"Content-Disposition": f'inline; filename="{image.filename}"'},
        )

    def discard(self, sid: str) -> Response:
        if not self.manager.discard(sid):
            raise HTTPException(404, f"session '{sid}' not found")
        return Response(status_code=204)


def create_calculator_router(
    manager: CalculatorManager,
    templates: Jinja2Templates,
    *,
    exporter: ViewExporter | None = None,
) -> APIRouter:
    controller = _CalculatorController(manager, templates, exporter)

    router = APIRouter(prefix="/api/v1/calculator", tags=["calculator"])

    @router.get("/questions")
    def list_questions() -> Response:
        return controller.questions()

    @router.post("")
    def create_calculator(request: Request) -> Response:
        return controller.create(request)

    @router.get("/{sid}")
    def get_calculator(request: Request, sid: str) -> Response:
        return controller.view(request, sid)

    @router.post("/{sid}/select")
    def post_selection(request: Request, sid: str, body: SelectRequest) -> Response:
        return controller.select(request, sid, body)

    @router.post("/{sid}/example")
    def post_example(request: Request, sid: str) -> Response:
        return controller.example(request, sid)

    @router.post("/{sid}/reset")
    def post_reset(request: Request, sid: str) -> Response:
        return controller.reset(request, sid)

    @router.post("/{sid}/details")
    def post_details(request: Request, sid: str, body: DetailsRequest) -> Response:
        return controller.details(request, sid, body)

    @router.post("/{sid}/export")
    async def post_export(sid: str) -> Response:
        return await controller.export(sid)

    @router.delete("/{sid}")
    def delete_calculator(sid: str) -> Response:
        return controller.discard(sid)

    return router
