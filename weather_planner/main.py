"""FastAPI application setup for the weather-aware planner."""

from fastapi import FastAPI

from .api import router as api_router

app = FastAPI(title="Weather-Aware Planner")


@app.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}


# API routes
app.include_router(api_router, prefix="/v1")
