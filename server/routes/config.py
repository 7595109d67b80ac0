"""Configuration endpoints: active engine config, server status, reload."""

import json
import logging

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from reco.worker import RecoWorker

from ..models import ReloadConfigRequest
from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def get_engine_config():
    """Active engine weights, thresholds and caps."""
    state = get_state()
    reco_config = state.reco_config
    return {
        "config": reco_config.model_dump(),
        "active_weights": {
            "with_embeddings": reco_config.layer_weights(True),
            "without_embeddings": reco_config.layer_weights(False),
        },
        "total_weight": reco_config.total_weight(True),
    }


@router.get("/status")
def get_status():
    """Server settings (no secrets) and their validation result."""
    state = get_state()
    config = state.config
    valid, errors = config.validate()
    return {
        "valid": valid,
        "errors": errors,
        "reco_config_path": str(config.reco_config_path) if config.reco_config_path else None,
        "embeddings_json_path": str(config.embeddings_json_path) if config.embeddings_json_path else None,
        "embeddings_api_url": config.embeddings_api_url,
        "embedding_source": state.embedding_source,
    }


@router.post("/reload")
def reload_engine_config(request: ReloadConfigRequest):
    """Replace the engine config, from an inline dict or by re-reading RECO_CONFIG_PATH."""
    state = get_state()
    try:
        if request.config is not None:
            new_config = type(state.reco_config).from_dict(request.config)
        else:
            new_config = state.config.load_reco_config()
    except (OSError, json.JSONDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Failed to read engine config: {e}")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid engine config: {e.errors()}")

    old_worker = state.worker
    state.reco_config = new_config
    state.worker = RecoWorker(new_config)
    old_worker.shutdown(wait=False)
    logger.info("[config] Engine config reloaded")
    return {"reloaded": True, "config": new_config.model_dump()}
