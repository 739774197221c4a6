"""
Server config file (SERVER_CONFIG_FILE): per-deployment settings stored as JSON.

Only the identity block is read here; other keys (schema, template, ...) belong
to collaborators and are kept as extra fields.
"""

import functools
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from app.core.config import settings

_log = logging.getLogger(__name__)


class IdentityConfig(BaseModel):
    # Transform script source defining build(data).
    factory: str


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    identity: IdentityConfig | None = None


def load_server_config(path: str | Path) -> ServerConfig:
    """Parse the config file. Raises FileNotFoundError or pydantic.ValidationError."""
    p = Path(path)
    raw = p.read_text(encoding="utf-8")
    cfg = ServerConfig.model_validate_json(raw)
    _log.info("Loaded server config %s (identity=%s)", p, cfg.identity is not None)
    return cfg


@functools.lru_cache(maxsize=1)
def get_server_config() -> ServerConfig:
    return load_server_config(settings.SERVER_CONFIG_FILE)
