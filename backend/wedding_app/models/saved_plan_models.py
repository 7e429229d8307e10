# backend/wedding_app/models/saved_plan_models.py

from typing import Any, Dict, Optional

from wedding_app.models.genie_models import CamelModel


class SaveGeniePlanIn(CamelModel):
    plan_name: Optional[str] = None
    input_snapshot: Dict[str, Any]
    plan_data: Dict[str, Any]


class UpdateGeniePlanIn(CamelModel):
    plan_name: Optional[str] = None
    plan_data: Optional[Dict[str, Any]] = None


class GeniePlanOut(CamelModel):
    id: str
    couple_id: str
    plan_name: Optional[str]
    input_snapshot: Dict[str, Any]
    plan_data: Dict[str, Any]
    created_at: str
    updated_at: str
