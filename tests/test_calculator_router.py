from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from fastapi.testclient import TestClient

from viabilitycalc.core import feature_flags
from viabilitycalc.features.calculator import (
    CalculatorManager,
    CalculatorResponse,
    ExportedImage,
    SvgExporter,
    create_calculator_router,
)

BASE = "/api/v1/calculator"
TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "src" / "viabilitycalc" / "web" / "templates"


def _client(exporter=None) -> tuple[TestClient, CalculatorManager]:
    manager = CalculatorManager()
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    if exporter is None:
        exporter = SvgExporter(TEMPLATES_DIR)
    app = FastAPI()
    app.include_router(create_calculator_router(manager, templates, exporter=exporter))
    return TestClient(app), manager


def _broken_exporter(view: CalculatorResponse) -> ExportedImage:
    raise RuntimeError("renderer crashed")


def test_questions_endpoint_lists_catalog() -> None:
    client, _ = _client()
    data = client.get(f"{BASE}/questions").json()
    assert [q["id"] for q in data["questions"]][0] == "plausible"
    assert len(data["questions"]) == 7
    assert data["questions"][1]["options"][0] == {"id": "few-care", "label": "0.01: Few agree or care", "value": 0.01}


def test_json_flow_select_example_reset() -> None:
    client, manager = _client()
    sid = client.post(BASE).json()["session"]
    assert len(manager) == 1

    view = client.get(f"{BASE}/{sid}").json()
    assert view["score"]["verdict"] == "TBD"

    resp = client.post(f"{BASE}/{sid}/select", json={"question": "plausible", "option": "1b"})
    assert resp.status_code == 200
    assert resp.headers["vary"] == "HX-Request"
    body = resp.json()
    assert body["questions"][0]["selected"] == "1b"
    assert body["score"]["verdict"] == "TBD"

    body = client.post(f"{BASE}/{sid}/example").json()
    assert body["score"]["raw_product"] == pytest.approx(50_000.0)
    assert body["score"]["score"] == pytest.approx(0.08)
    assert body["score"]["verdict"] == "Not viable"
    assert body["score"]["color_class"] == "bg-red-400"

    body = client.post(f"{BASE}/{sid}/reset").json()
    assert body["score"]["answered"] == 0


def test_empty_option_clears_selection() -> None:
    client, _ = _client()
    sid = client.post(BASE).json()["session"]
    client.post(f"{BASE}/{sid}/example")

    body = client.post(f"{BASE}/{sid}/select", json={"question": "liquid", "option": ""}).json()
    liquid = next(q for q in body["questions"] if q["id"] == "liquid")
    assert "selected" not in liquid
    assert body["score"]["verdict"] == "TBD"


def test_invalid_selection_is_400_and_unknown_session_is_404() -> None:
    client, _ = _client()
    sid = client.post(BASE).json()["session"]

    resp = client.post(f"{BASE}/{sid}/select", json={"question": "liquid", "option": "1b"})
    assert resp.status_code == 400
    assert "liquid" in resp.json()["detail"]
    resp = client.post(f"{BASE}/{sid}/select", json={"question": "budget", "option": "usd-1"})
    assert resp.status_code == 400

    assert client.get(f"{BASE}/missing").status_code == 404
    assert client.post(f"{BASE}/missing/select", json={"question": "liquid", "option": "annual"}).status_code == 404
    assert client.post(f"{BASE}/missing/example").status_code == 404


def test_hx_requests_receive_panel_fragment() -> None:
    client, _ = _client()
    headers = {"HX-Request": "true"}

    resp = client.post(BASE, headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    trigger = json.loads(resp.headers["hx-trigger"])
    sid = trigger["calculatorCreated"]
    assert 'id="calculator-panel"' in resp.text
    assert "bg-stone-200" in resp.text
    assert "Result: TBD" in resp.text

    resp = client.post(f"{BASE}/{sid}/example", headers=headers)
    assert resp.status_code == 200
    assert json.loads(resp.headers["hx-trigger"]) == {"calculatorUpdated": sid}
    assert "Result: Not viable" in resp.text
    assert "bg-red-400" in resp.text
    assert '<option value="10m" selected>' in resp.text


def test_details_are_echoed_but_not_scored() -> None:
    client, _ = _client()
    sid = client.post(BASE).json()["session"]
    body = client.post(f"{BASE}/{sid}/details", json={"startup_name": "Acme", "pitch": None}).json()
    assert body["startup_name"] == "Acme"
    assert body["pitch"] == ""
    assert body["score"]["verdict"] == "TBD"


def test_export_renders_svg() -> None:
    client, _ = _client()
    sid = client.post(BASE).json()["session"]
    client.post(f"{BASE}/{sid}/example")
    client.post(f"{BASE}/{sid}/details", json={"startup_name": "WP Engine <beta>", "pitch": ""})

    resp = client.post(f"{BASE}/{sid}/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("image/svg+xml")
    assert 'filename="wp-engine-beta-viability.svg"' in resp.headers["content-disposition"]
    assert "<svg" in resp.text
    assert "Result: Not viable" in resp.text
    assert "WP Engine &lt;beta&gt;" in resp.text
    assert "#f87171" in resp.text


def test_export_escapes_markup_and_includes_pitch() -> None:
    client, _ = _client()
    sid = client.post(BASE).json()["session"]
    client.post(
        f"{BASE}/{sid}/details",
        json={"startup_name": "AT&T <script>alert(1)</script>", "pitch": "Hosting for WordPress & more"},
    )

    resp = client.post(f"{BASE}/{sid}/export")
    assert resp.status_code == 200
    assert "AT&amp;T &lt;script&gt;" in resp.text
    assert "<script>" not in resp.text

    root = ET.fromstring(resp.text)
    texts = [node.text for node in root.iter("{http://www.w3.org/2000/svg}text")]
    assert "AT&T <script>alert(1)</script>" in texts
    assert "Hosting for WordPress & more" in texts
    assert "Score: 0" in texts


def test_export_failure_returns_503_and_keeps_state() -> None:
    client, _ = _client(exporter=_broken_exporter)
    sid = client.post(BASE).json()["session"]
    before = client.post(f"{BASE}/{sid}/example").json()

    resp = client.post(f"{BASE}/{sid}/export")
    assert resp.status_code == 503
    assert resp.json() == {"exported": False, "error": "export failed: renderer crashed"}
    assert client.get(f"{BASE}/{sid}").json() == before


def test_disabled_capabilities_are_forbidden_and_hidden() -> None:
    client, _ = _client()
    with feature_flags.override(disable={feature_flags.EXPORT, feature_flags.EXAMPLE_FILL}):
        resp = client.post(BASE, headers={"HX-Request": "true"})
    sid = json.loads(resp.headers["hx-trigger"])["calculatorCreated"]
    assert "WP Engine" not in resp.text
    assert "Save as image" not in resp.text

    assert client.post(f"{BASE}/{sid}/example").status_code == 403
    assert client.post(f"{BASE}/{sid}/export").status_code == 403


def test_delete_discards_session() -> None:
    client, manager = _client()
    sid = client.post(BASE).json()["session"]
    assert client.delete(f"{BASE}/{sid}").status_code == 204
    assert len(manager) == 0
    assert client.delete(f"{BASE}/{sid}").status_code == 404


def test_missing_session_asks_htmx_to_refresh() -> None:
    client, _ = _client()
    headers = {"HX-Request": "true"}

    resp = client.post(f"{BASE}/gone/select", json={"question": "liquid", "option": "annual"}, headers=headers)
    assert resp.status_code == 404
    assert resp.headers["hx-refresh"] == "true"
    assert client.get(f"{BASE}/gone", headers=headers).headers["hx-refresh"] == "true"
    assert client.post(f"{BASE}/gone/reset", headers=headers).headers["hx-refresh"] == "true"

    resp = client.post(f"{BASE}/gone/select", json={"question": "liquid", "option": "annual"})
    assert resp.status_code == 404
    assert "hx-refresh" not in resp.headers


def test_hx_panel_prints_whole_scores_without_fraction() -> None:
    client, manager = _client()
    headers = {"HX-Request": "true"}
    sid = client.post(BASE).json()["session"]

    for question in manager.catalog:
        best = max(question.options, key=lambda opt: opt.value)
        resp = client.post(f"{BASE}/{sid}/select", json={"question": question.id, "option": best.id}, headers=headers)
    assert "Result: Scale Up" in resp.text
    assert "Score: 1600000000</div>" in resp.text
    assert "1600000000.0" not in resp.text
