# backend/wedding_app/api/routes_categories.py

from fastapi import APIRouter, HTTPException

from wedding_app.core.errors import DataStoreUnavailableError
from wedding_app.db.sqlite_store import SQLiteStore

router = APIRouter(prefix="/categories", tags=["categories"])
db = SQLiteStore()


@router.get("/")
def list_categories():
    try:
        categories = db.list_categories()
    except DataStoreUnavailableError as e:
        raise HTTPException(503, "Listing store unavailable") from e
    return {"categories": [c.model_dump(mode="json") for c in categories]}
