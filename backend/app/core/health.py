"""
Health-check helpers for liveness and readiness probes.

Liveness  - is the process alive and not deadlocked?  (cheap, no engine work)
Readiness - can it serve traffic?  (script engine creates contexts, server config loads)
"""

import logging

from app.core.server_config import get_server_config
from app.engines.transform.lifecycle import ContextLifecycleManager
from app.engines.transform.providers import get_engine_provider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Individual dependency checks
# ---------------------------------------------------------------------------

def check_engine() -> bool:
    """Create and dispose one execution context. Returns True if ok."""
    try:
        lifecycle = ContextLifecycleManager(get_engine_provider())
        with lifecycle.scoped():
            pass
        return True
    except Exception:
        logger.warning("Script engine check failed, treating as unhealthy", exc_info=True)
        return False


def check_server_config() -> bool:
    """Server config file is present and parses."""
    try:
        get_server_config()
        return True
    except Exception:
        logger.warning("Server config check failed, treating as unhealthy", exc_info=True)
        return False


# ---------------------------------------------------------------------------
# Composite probes
# ---------------------------------------------------------------------------

def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe, just confirms the Python process is responsive.
    Return format matches readiness_check for consistency.
    """
    return (True, [])


def readiness_check() -> tuple[bool, list[str]]:
    """
    Run engine + server config checks.
    Returns (ok, list of failure messages). ok is False if any check fails.
    """
    failures: list[str] = []
    if not check_engine():
        failures.append("engine")
    if not check_server_config():
        failures.append("server_config")
    return (not failures, failures)
