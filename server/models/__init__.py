"""Pydantic request/response models for the API (engine messages live in reco.models)."""

from .config import ReloadConfigRequest

__all__ = [
    "ReloadConfigRequest",
]
