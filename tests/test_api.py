"""API tests."""

from __future__ import annotations

from fastapi.testclient import TestClient

from ledgerlab.api.server import app

client = TestClient(app)

PAGE = (
    '<ul class="t h di"><li><div aria-label="Will Richard, 3+ MADE THREES, +360"><span>Will Richard</span> '
    '<span aria-label="Odds +360">+360</span></div></li>'
    "<li><div><span>TOTAL WAGER</span> <span>$1.00</span></div> "
    "<div><span>WON ON FANDUEL</span> <span>$4.60</span></div> "
    "<div><span>BET ID: O/0242888/0027982</span> <span>PLACED: 11/18/2025 11:09PM ET</span></div></li></ul>"
)


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_parse_returns_wire_bets() -> None:
    response = client.post("/parse/fanduel", json={"html": PAGE})
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    bet = body["bets"][0]
    assert bet["betId"] == "O/0242888/0027982"
    assert bet["betType"] == "single"
    assert bet["result"] == "win"
    assert bet["legs"][0]["market"] == "3pt"


def test_parse_blank_page() -> None:
    response = client.post("/parse/fanduel", json={"html": ""})
    assert response.status_code == 200
    assert response.json() == {"count": 0, "bets": []}


def test_parse_rejects_non_markup() -> None:
    response = client.post("/parse/fanduel", json={"html": "not html at all"})
    assert response.status_code == 422
    assert "no HTML elements" in response.json()["detail"]


def test_main_runs_uvicorn_with_cli_overrides(monkeypatch) -> None:
    from ledgerlab.api import main as entrypoint

    calls: list[tuple[str, dict]] = []
    monkeypatch.setattr(entrypoint.uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    entrypoint.main(["--port", "9001", "--reload"])

    target, kwargs = calls[0]
    assert target == "ledgerlab.api.server:app"
    assert kwargs["port"] == 9001
    assert kwargs["reload"] is True
