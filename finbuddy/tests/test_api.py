"""
End-to-end API tests over httpx ASGITransport. No live server or Redis needed.

The lifespan does not run under ASGITransport, so the client fixture puts a
memory-slot SessionStore and a seeded RecordAggregator on app.state itself.
Delays run on a VirtualClock; auth delay is 0 so requests never block.
"""
from __future__ import annotations

import io
import random

import pytest
import pytest_asyncio
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient

from finbuddy.auth.session_store import SessionStore
from finbuddy.cache import MemorySessionSlot
from finbuddy.clock import VirtualClock
from finbuddy.main import _error_code, app
from finbuddy.records import routes as record_routes
from finbuddy.records.aggregator import RecordAggregator


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(clock: VirtualClock, slot: MemorySessionSlot):
    store = SessionStore(slot, clock=clock, delay_seconds=0)
    await store.restore()
    records = RecordAggregator(clock=clock, rng=random.Random(7))
    records.seed_demo_data()

    app.state.session_store = store
    app.state.records = records
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    records.processor.cancel_all()


# ---------------------------------------------------------------------------
# System + auth
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_login_logout_flow(client: AsyncClient, slot: MemorySessionSlot) -> None:
    state = (await client.get("/api/auth/session")).json()
    assert state == {"session": None, "is_loading": False}

    response = await client.post(
        "/api/auth/login", json={"email": "demo@finbuddy.com", "password": "demo123"}
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Demo User"
    assert slot.value is not None

    state = (await client.get("/api/auth/session")).json()
    assert state["session"]["id"] == "1"

    response = await client.post("/api/auth/logout")
    assert response.status_code == 204
    assert slot.value is None


@pytest.mark.asyncio
async def test_login_failure_is_401_envelope(client: AsyncClient) -> None:
    response = await client.post(
        "/api/auth/login", json={"email": "demo@finbuddy.com", "password": "nope"}
    )
    assert response.status_code == 401
    error = response.json()["error"]
    assert error["code"] == "UNAUTHORIZED"
    assert error["details"] == []


@pytest.mark.asyncio
async def test_signup(client: AsyncClient) -> None:
    response = await client.post(
        "/api/auth/signup",
        json={"name": "Ravi", "email": "ravi@example.com", "password": "pw"},
    )
    assert response.status_code == 200
    assert response.json()["avatar_url"].endswith("seed=Ravi")


@pytest.mark.asyncio
async def test_request_validation_envelope(client: AsyncClient) -> None:
    response = await client.post("/api/auth/login", json={"email": "x"})
    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(d["field"] == "password" for d in error["details"])


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_tax_calculate(client: AsyncClient) -> None:
    response = await client.post(
        "/api/tax/calculate", json={"annual_income": "10,00,000", "regime": "new"}
    )
    assert response.status_code == 200
    result = response.json()
    assert result["income_tax"] == pytest.approx(60_000, abs=1)
    assert result["cess"] == pytest.approx(2_400, abs=1)
    assert result["total_tax"] == pytest.approx(62_400, abs=1)


@pytest.mark.asyncio
async def test_tax_calculate_never_rejects_numbers(client: AsyncClient) -> None:
    response = await client.post(
        "/api/tax/calculate", json={"annual_income": "lots", "section_80c": ""}
    )
    assert response.status_code == 200
    assert response.json()["total_tax"] == 0


@pytest.mark.asyncio
async def test_tax_compare_and_tips(client: AsyncClient) -> None:
    response = await client.post(
        "/api/tax/compare",
        json={"annual_income": 800_000, "section_80c": 150_000, "section_80d": 25_000},
    )
    assert response.status_code == 200
    assert response.json()["recommended_regime"] == "new"

    tips = (await client.get("/api/tax/tips")).json()
    assert len(tips) == 4


@pytest.mark.asyncio
async def test_sip_endpoint(client: AsyncClient) -> None:
    response = await client.post(
        "/api/investments/sip",
        json={
            "name": "Emergency Fund",
            "target_amount": 300_000,
            "current_amount": 150_000,
            "timeframe": 12,
            "risk_profile": "low",
        },
    )
    assert response.status_code == 200
    assert response.json()["required_sip"] == 12_160


@pytest.mark.asyncio
async def test_sip_endpoint_accepts_free_text(client: AsyncClient) -> None:
    response = await client.post(
        "/api/investments/sip",
        json={
            "name": "Emergency Fund",
            "target_amount": "3,00,000",
            "current_amount": "",
            "timeframe": "12",
            "risk_profile": "",
        },
    )
    assert response.status_code == 200
    plan = response.json()
    assert plan["remaining_amount"] == 300_000
    assert plan["goal"]["risk_profile"] == "medium"
    assert plan["required_sip"] > 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"name": "Trip", "target_amount": "50000"},
        {"name": None, "target_amount": "50000", "timeframe": "6"},
        {"name": "Trip", "target_amount": "", "timeframe": "6"},
    ],
    ids=["no_timeframe", "null_name", "empty_target"],
)
async def test_sip_endpoint_incomplete_goal_is_204(client: AsyncClient, body: dict) -> None:
    response = await client.post("/api/investments/sip", json=body)
    assert response.status_code == 204
    assert response.content == b""


@pytest.mark.asyncio
async def test_investment_options(client: AsyncClient) -> None:
    response = await client.get("/api/investments/options/medium")
    assert [o["name"] for o in response.json()] == ["Hybrid Funds", "Large Cap Funds", "Index Funds"]

    response = await client.get("/api/investments/options/extreme")
    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_expenses_crud(client: AsyncClient) -> None:
    response = await client.post(
        "/api/expenses",
        json={"amount": "499", "category": "Shopping", "description": "Shoes", "date": "2024-02-02"},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["id"] == "exp-6"

    listed = (await client.get("/api/expenses")).json()
    assert listed[0]["id"] == "exp-6"

    summary = (await client.get("/api/expenses/summary")).json()
    assert summary["total_expenses"] == 8_249

    assert (await client.delete("/api/expenses/exp-6")).status_code == 204
    assert (await client.delete("/api/expenses/exp-6")).status_code == 404


@pytest.mark.asyncio
async def test_invalid_form_is_204_noop(client: AsyncClient) -> None:
    response = await client.post("/api/expenses", json={"amount": "", "category": "Food"})
    assert response.status_code == 204
    assert response.content == b""
    assert len((await client.get("/api/expenses")).json()) == 5

    response = await client.post("/api/budgets", json={"category": "Food"})
    assert response.status_code == 204

    response = await client.post("/api/goals", json={"name": "Trip", "target_amount": "50000"})
    assert response.status_code == 204


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, body",
    [
        ("/api/expenses", {"amount": "500", "category": None, "description": "x"}),
        ("/api/expenses", {"amount": "500", "category": "Food", "description": None}),
        ("/api/budgets", {"category": None, "budgeted": "1000"}),
        ("/api/goals", {"name": None, "target_amount": "50000", "timeframe": "6"}),
    ],
    ids=["expense_null_category", "expense_null_description", "budget_null_category", "goal_null_name"],
)
async def test_null_form_fields_are_204_noop(client: AsyncClient, path: str, body: dict) -> None:
    before = len((await client.get(path)).json())
    response = await client.post(path, json=body)
    assert response.status_code == 204
    assert len((await client.get(path)).json()) == before


@pytest.mark.asyncio
async def test_goal_form_blank_risk_defaults_to_medium(client: AsyncClient) -> None:
    response = await client.post(
        "/api/goals",
        json={"name": "Bike", "target_amount": "90000", "timeframe": "9", "risk_profile": ""},
    )
    assert response.status_code == 201
    assert response.json()["risk_profile"] == "medium"


@pytest.mark.asyncio
async def test_wrong_method_uses_envelope(client: AsyncClient) -> None:
    response = await client.put("/api/health")
    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


@pytest.mark.asyncio
async def test_expense_breakdown(client: AsyncClient) -> None:
    points = (await client.get("/api/expenses/breakdown")).json()
    assert [p["label"] for p in points] == ["Food", "Transport", "Entertainment", "Bills"]
    assert sum(p["value"] for p in points) == 7_750


@pytest.mark.asyncio
async def test_budgets(client: AsyncClient) -> None:
    response = await client.post("/api/budgets", json={"category": "Salary", "budgeted": "2000"})
    assert response.status_code == 201

    lines = (await client.get("/api/budgets")).json()
    assert len(lines) == 6
    assert lines[0]["status"] == "warning"

    summary = (await client.get("/api/budgets/summary")).json()
    assert summary["total_budgeted"] == 42_000

    alerts = (await client.get("/api/budgets/alerts")).json()
    assert len(alerts) == 4


@pytest.mark.asyncio
async def test_goals(client: AsyncClient) -> None:
    response = await client.post(
        "/api/goals",
        json={"name": "Trip", "target_amount": "60000", "timeframe": "6", "risk_profile": "low"},
    )
    assert response.status_code == 201
    goal_id = response.json()["id"]

    plans = (await client.get("/api/goals/plans")).json()
    assert plans[0]["required_sip"] == 12_160
    assert plans[-1]["goal"]["id"] == goal_id

    assert (await client.delete(f"/api/goals/{goal_id}")).status_code == 204


@pytest.mark.asyncio
async def test_document_upload_lifecycle(client: AsyncClient, clock: VirtualClock) -> None:
    response = await client.post(
        "/api/documents",
        files={"file": ("bank_statement_feb.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert response.status_code == 202
    doc = response.json()
    assert doc["status"] == "processing"
    assert doc["media_kind"] == "pdf"
    assert doc["size_bytes"] == len(b"%PDF-1.4 test")

    clock.advance(3)

    done = (await client.get(f"/api/documents/{doc['id']}")).json()
    assert done["status"] == "completed"
    assert 20 <= done["extracted_data"]["transactions"] <= 69

    listed = (await client.get("/api/documents")).json()
    assert listed[0]["id"] == doc["id"]


@pytest.mark.asyncio
async def test_document_delete_and_missing(client: AsyncClient) -> None:
    response = await client.post(
        "/api/documents", files={"file": ("scan.png", b"\x89PNG", "image/png")}
    )
    doc_id = response.json()["id"]

    assert (await client.delete(f"/api/documents/{doc_id}")).status_code == 204
    response = await client.get(f"/api/documents/{doc_id}")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# Route helpers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_measure_upload_stops_past_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(record_routes, "UPLOAD_CHUNK_BYTES", 50)
    buffer = io.BytesIO(b"x" * 300)

    size = await record_routes._measure_upload(UploadFile(file=buffer, filename="a.pdf"), 100)

    assert size == 150
    assert buffer.tell() == 150


@pytest.mark.asyncio
async def test_measure_upload_counts_small_file() -> None:
    upload = UploadFile(file=io.BytesIO(b"%PDF-1.4"), filename="a.pdf")
    assert await record_routes._measure_upload(upload, 1_000) == len(b"%PDF-1.4")


@pytest.mark.parametrize(
    "status_code, code",
    [
        (401, "UNAUTHORIZED"),
        (404, "NOT_FOUND"),
        (405, "METHOD_NOT_ALLOWED"),
        (422, "VALIDATION_ERROR"),
        (599, "HTTP_599"),
    ],
)
def test_error_code_from_status(status_code: int, code: str) -> None:
    assert _error_code(status_code) == code
