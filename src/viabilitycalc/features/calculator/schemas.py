from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

__all__ = [
    "CalculatorResponse",
    "CapabilitiesPayload",
    "ExportFailurePayload",
    "OptionPayload",
    "QuestionPayload",
    "ScorePayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class OptionPayload(_APIModel):
    id: str
    label: str
    value: float


class QuestionPayload(_APIModel):
    id: str
    label: str
    helper_text: str
    options: list[OptionPayload]
    selected: str | None = None


class ScorePayload(_APIModel):
    raw_product: float
    score: float
    display: str
    verdict: str
    color: str
    color_class: str
    answered: int
    total: int


class CapabilitiesPayload(_APIModel):
    example_fill: bool
    export: bool


class CalculatorResponse(_APIModel):
    session: str
    questions: list[QuestionPayload]
    score: ScorePayload
    capabilities: CapabilitiesPayload
    startup_name: str = ""
    pitch: str = ""


class ExportFailurePayload(_APIModel):
    exported: bool = False
    error: str
