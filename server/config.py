"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from reco.models.config import DEFAULT_CONFIG, RecoConfig

logger = logging.getLogger(__name__)

# Single .env at the project root
_root_env = Path(__file__).resolve().parent.parent / ".env"
if _root_env.exists():
    load_dotenv(_root_env)


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # JSON file with RecoConfig overrides (see RecoConfig.from_dict)
    reco_config_path: Optional[Path] = None

    # Embedding providers: a JSON file of {id: vector}, or an HTTP service
    embeddings_json_path: Optional[Path] = None
    embeddings_api_url: Optional[str] = None
    embeddings_api_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent

        def _path_env(key: str) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return None
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            reco_config_path=_path_env("RECO_CONFIG_PATH"),
            embeddings_json_path=_path_env("EMBEDDINGS_JSON_PATH"),
            embeddings_api_url=os.getenv("EMBEDDINGS_API_URL") or None,
            embeddings_api_timeout=float(os.getenv("EMBEDDINGS_API_TIMEOUT", "10")),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        if self.reco_config_path and not self.reco_config_path.is_file():
            errors.append(f"Engine config file not found: {self.reco_config_path}")
        if self.embeddings_json_path and not self.embeddings_json_path.is_file():
            errors.append(f"Embeddings file not found: {self.embeddings_json_path}")
        if self.embeddings_api_timeout <= 0:
            errors.append("EMBEDDINGS_API_TIMEOUT must be positive")
        return len(errors) == 0, errors

    def load_reco_config(self) -> RecoConfig:
        """Engine config from reco_config_path, or the defaults when unset."""
        if not self.reco_config_path:
            return DEFAULT_CONFIG
        with open(self.reco_config_path) as f:
            data = json.load(f)
        logger.info("[config] Loaded engine config from %s", self.reco_config_path)
        return RecoConfig.from_dict(data)


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
