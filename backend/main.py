import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wedding_app.api.routes_genie import router as genie_router
from wedding_app.api.routes_categories import router as categories_router

from wedding_app.core.config_loader import settings


app = FastAPI(
    title="Wedding Genie",
    description="Wedding vendor marketplace backend: starter plans from budget, guest count and area",
    version="1.0.0"
)

# -------------------------------------------------------------
# CORS
# -------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------------------------------------------
# ROUTES
# -------------------------------------------------------------
app.include_router(genie_router)
app.include_router(categories_router)


# -------------------------------------------------------------
# ROOT ENDPOINT
# -------------------------------------------------------------
@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Wedding Genie backend is running",
        "env": settings.environment
    }


# -------------------------------------------------------------
# RUN LOCAL
# -------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
