# backend/wedding_app/api/routes_genie.py

from contextlib import contextmanager
from fastapi import APIRouter, HTTPException, Header
from typing import Optional

from wedding_app.agents.plan_orchestrator import PlanOrchestrator
from wedding_app.core.errors import DataStoreUnavailableError, NoVenueFoundError
from wedding_app.core.logger import logger
from wedding_app.core.security import decode_token
from wedding_app.db.sqlite_store import SQLiteStore
from wedding_app.models.genie_models import GenieInput
from wedding_app.models.saved_plan_models import GeniePlanOut, SaveGeniePlanIn, UpdateGeniePlanIn

router = APIRouter(prefix="/wedding-genie", tags=["wedding-genie"])

db = SQLiteStore()
orchestrator = PlanOrchestrator(db)


# --------------------------
# Extract couple ID
# --------------------------
def get_couple_id(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(401, "Missing or invalid token")
    payload = decode_token(authorization.split(" ", 1)[1])
    if not payload or payload.get("type", "couple") != "couple":
        raise HTTPException(401, "Invalid token")
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(401, "Invalid token")
    return str(subject)


@contextmanager
def store_errors(action: str):
    """Listing store failures surface as 503."""
    try:
        yield
    except DataStoreUnavailableError as e:
        logger.error(f"Wedding Genie {action} failed: {e}")
        raise HTTPException(status_code=503, detail="Listing store unavailable, please retry") from e


def _plan_out(plan: dict) -> dict:
    return GeniePlanOut(**plan).model_dump(by_alias=True)


# --------------------------
# Generate
# --------------------------
@router.post("/generate")
def generate(data: GenieInput, authorization: Optional[str] = Header(None)):
    get_couple_id(authorization)

    try:
        with store_errors("generate"):
            plans = orchestrator.generate_plans(data)
    except NoVenueFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    dumped = [p.model_dump(mode="json", by_alias=True) for p in plans]
    return {
        "plan": dumped[0],
        "plans": dumped,
        "inputSnapshot": data.model_dump(mode="json", by_alias=True),
    }


# --------------------------
# Saved plans
# --------------------------
@router.get("/plans")
def list_plans(authorization: Optional[str] = Header(None)):
    couple_id = get_couple_id(authorization)
    with store_errors("list plans"):
        plans = db.list_genie_plans(couple_id)
    return {"plans": [_plan_out(p) for p in plans]}


@router.post("/plans")
def save_plan(data: SaveGeniePlanIn, authorization: Optional[str] = Header(None)):
    couple_id = get_couple_id(authorization)
    with store_errors("save plan"):
        plan_id = db.save_genie_plan(couple_id, data.plan_name, data.input_snapshot, data.plan_data)
        plan = db.get_genie_plan(plan_id, couple_id)
    if not plan:
        raise HTTPException(500, "Failed to save plan")
    return {"plan": _plan_out(plan)}


@router.get("/plans/{plan_id}")
def get_plan(plan_id: str, authorization: Optional[str] = Header(None)):
    couple_id = get_couple_id(authorization)
    with store_errors("get plan"):
        plan = db.get_genie_plan(plan_id, couple_id)
    if not plan:
        raise HTTPException(404, "Plan not found")
    return {"plan": _plan_out(plan)}


@router.patch("/plans/{plan_id}")
def update_plan(plan_id: str, data: UpdateGeniePlanIn, authorization: Optional[str] = Header(None)):
    couple_id = get_couple_id(authorization)
    with store_errors("update plan"):
        updated = db.update_genie_plan(plan_id, couple_id, data.plan_name, data.plan_data)
        plan = db.get_genie_plan(plan_id, couple_id) if updated else None
    if not plan:
        raise HTTPException(404, "Plan not found")
    return {"plan": _plan_out(plan)}


@router.delete("/plans/{plan_id}")
def delete_plan(plan_id: str, authorization: Optional[str] = Header(None)):
    couple_id = get_couple_id(authorization)
    with store_errors("delete plan"):
        deleted = db.delete_genie_plan(plan_id, couple_id)
    if not deleted:
        raise HTTPException(404, "Plan not found")
    return {"success": True}
