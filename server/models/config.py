"""Config endpoint Pydantic models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ReloadConfigRequest(BaseModel):
    """Request body for engine config reload; no config means re-read RECO_CONFIG_PATH."""
    config: Optional[Dict[str, Any]] = None
