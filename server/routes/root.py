"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Game Recommendation Engine API",
        "version": "1.0.0",
        "status": "ready",
        "embeddings": state.embedding_source,
        "endpoints": {
            "recommendations": ["/api/recommendations", "/api/recommendations/stream"],
            "config": ["/api/config", "/api/config/status", "/api/config/reload"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    valid, errors = state.config.validate()
    return {
        "status": "healthy" if valid else "degraded",
        "errors": errors,
        "embeddings": state.embedding_source,
        "requests": {"served": state.requests_served, "failed": state.requests_failed},
    }
