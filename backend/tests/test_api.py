import jwt
import pytest
from fastapi.testclient import TestClient

from main import app
from wedding_app.agents.plan_orchestrator import PlanOrchestrator
from wedding_app.core.config_loader import settings
from wedding_app.core.errors import DataStoreUnavailableError
from wedding_app.core.security import ALGORITHM, create_access_token


def _payload(**overrides) -> dict:
    payload = {
        "area": "chiba",
        "guestCount": 30,
        "totalBudget": 1_000_000,
        "excludedCategories": ["ケーキ"],
        "priorityCategories": ["写真"],
        "plannerType": "self",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr("wedding_app.api.routes_genie.db", store)
    monkeypatch.setattr("wedding_app.api.routes_genie.orchestrator", PlanOrchestrator(store))
    monkeypatch.setattr("wedding_app.api.routes_categories.db", store)
    return TestClient(app)


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {create_access_token('couple-1')}"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_generate_returns_plan_and_snapshot(client, auth, add_listing):
    add_listing("会場", max_guests=60, price_min=420_000, price_max=420_000)
    add_listing("写真", price_min=80_000, price_max=80_000)

    response = client.post("/wedding-genie/generate", json=_payload(), headers=auth)

    assert response.status_code == 200
    body = response.json()
    assert body["plans"] == [body["plan"]]
    assert body["plan"]["planType"] == "balanced"
    assert body["plan"]["venue"]["estimatedPrice"]["mid"] == 420_000
    assert "ケーキ" not in {a["categoryName"] for a in body["plan"]["categoryAllocations"]}
    assert body["inputSnapshot"]["guestCount"] == 30
    assert body["inputSnapshot"]["excludedCategories"] == ["ケーキ"]


def test_generate_accepts_snake_case(client, auth, add_listing):
    add_listing("会場", max_guests=60, price_min=420_000, price_max=420_000)

    response = client.post(
        "/wedding-genie/generate",
        json={"area": "chiba", "guest_count": 30, "total_budget": 1_000_000, "planner_type": "planner"},
        headers=auth,
    )
    assert response.status_code == 200
    assert response.json()["plan"]["plannerCost"]["mid"] == 70_000


def test_generate_requires_token(client):
    response = client.post("/wedding-genie/generate", json=_payload())
    assert response.status_code == 401


def test_vendor_token_rejected(client):
    token = create_access_token("vendor-9", account_type="vendor")
    response = client.post("/wedding-genie/generate", json=_payload(),
                           headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.parametrize("overrides", [
    {"priorityCategories": ["写真", "ドレス", "MC"]},
    {"guestCount": 0},
    {"totalBudget": -5},
    {"plannerType": "robot"},
    {"area": ""},
])
def test_generate_validates_input(client, auth, overrides):
    response = client.post("/wedding-genie/generate", json=_payload(**overrides), headers=auth)
    assert response.status_code == 422


def test_generate_without_venue_is_404(client, auth):
    response = client.post("/wedding-genie/generate", json=_payload(area="okinawa"), headers=auth)

    assert response.status_code == 404
    assert "okinawa" in response.json()["detail"]


def test_generate_store_failure_is_503(client, auth, monkeypatch):
    class BrokenOrchestrator:
        def generate_plans(self, genie_input):
            raise DataStoreUnavailableError("connection lost")

    monkeypatch.setattr("wedding_app.api.routes_genie.orchestrator", BrokenOrchestrator())

    response = client.post("/wedding-genie/generate", json=_payload(), headers=auth)
    assert response.status_code == 503


def test_saved_plan_lifecycle(client, auth):
    created = client.post(
        "/wedding-genie/plans",
        json={"planName": "June", "inputSnapshot": _payload(), "planData": {"planType": "balanced"}},
        headers=auth,
    )
    assert created.status_code == 200
    plan = created.json()["plan"]
    assert plan["planName"] == "June"
    assert plan["coupleId"] == "couple-1"
    plan_id = plan["id"]

    listed = client.get("/wedding-genie/plans", headers=auth).json()["plans"]
    assert [p["id"] for p in listed] == [plan_id]

    patched = client.patch(f"/wedding-genie/plans/{plan_id}", json={"planName": "July"}, headers=auth)
    assert patched.json()["plan"]["planName"] == "July"
    assert patched.json()["plan"]["planData"] == {"planType": "balanced"}

    other = {"Authorization": f"Bearer {create_access_token('couple-2')}"}
    assert client.get(f"/wedding-genie/plans/{plan_id}", headers=other).status_code == 404

    assert client.delete(f"/wedding-genie/plans/{plan_id}", headers=auth).json() == {"success": True}
    assert client.get(f"/wedding-genie/plans/{plan_id}", headers=auth).status_code == 404
    assert client.delete(f"/wedding-genie/plans/{plan_id}", headers=auth).status_code == 404


def test_categories_endpoint(client):
    response = client.get("/categories/")

    assert response.status_code == 200
    categories = response.json()["categories"]
    assert categories[0]["name"] == "会場"
    assert categories[0]["role"] == "venue"
    assert [c["display_order"] for c in categories] == sorted(c["display_order"] for c in categories)


@pytest.mark.parametrize("method, path, body", [
    ("get", "/wedding-genie/plans", None),
    ("post", "/wedding-genie/plans", {"planName": "June", "inputSnapshot": {}, "planData": {}}),
    ("get", "/wedding-genie/plans/abc", None),
    ("patch", "/wedding-genie/plans/abc", {"planName": "July"}),
    ("delete", "/wedding-genie/plans/abc", None),
])
def test_saved_plan_routes_store_failure_is_503(client, auth, store, method, path, body):
    store.close()

    kwargs = {"headers": auth}
    if body is not None:
        kwargs["json"] = body
    response = client.request(method.upper(), path, **kwargs)

    assert response.status_code == 503


def test_token_without_subject_rejected(client):
    token = jwt.encode({"type": "couple"}, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)

    response = client.get("/wedding-genie/plans", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
