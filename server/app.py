"""
Game Recommendation Engine — FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .routes import register_routes
from .state import get_state, reset_state

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = get_state()
    valid, errors = state.config.validate()
    for error in errors:
        logger.warning("[startup] %s", error)
    logger.info(
        "[startup] Engine ready: embeddings=%s config_valid=%s", state.embedding_source, valid
    )
    yield
    reset_state()
    logger.info("[shutdown] Worker stopped")


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup."""
    configure_logging(get_config().log_level)
    app = FastAPI(
        title="Game Recommendation Engine API",
        description="Taste profiling, multi-signal scoring, and shelf assembly for game libraries",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)
    return app


app = create_app()
