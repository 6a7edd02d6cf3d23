"""Calculator feature: service layer, schemas, exporter and API router."""

from .export import ExportedImage, SvgExporter, ViewExporter
from .router import create_calculator_router
from .schemas import (
    CalculatorResponse,
    CapabilitiesPayload,
    ExportFailurePayload,
    OptionPayload,
    QuestionPayload,
    ScorePayload,
)
from .service import CalculatorConfig, CalculatorManager, CalculatorSession, ExportOutcome

__all__ = [
    "CalculatorConfig",
    "CalculatorManager",
    "CalculatorResponse",
    "CalculatorSession",
    "CapabilitiesPayload",
    "ExportFailurePayload",
    "ExportOutcome",
    "ExportedImage",
    "OptionPayload",
    "QuestionPayload",
    "ScorePayload",
    "SvgExporter",
    "ViewExporter",
    "create_calculator_router",
]
