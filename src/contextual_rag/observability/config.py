"""
Tracing settings, read once per process from PHOENIX_* variables.
"""

import os
from dataclasses import dataclass

from contextual_rag.config import _env_bool

DEFAULT_PROJECT = "contextual-rag"


@dataclass
class PhoenixConfig:
    """
    Where rag.* spans go, and whether query text goes with them.

    PHOENIX_ENABLED           export spans at all (off unless set)
    PHOENIX_PROJECT_NAME      Phoenix project, also the tracer scope
    PHOENIX_COLLECTOR_ENDPOINT  OTLP endpoint; empty means the local collector
    PHOENIX_CAPTURE_CONTENT   put raw query text on rag.retrieve spans
    """

    enabled: bool = False
    project_name: str = DEFAULT_PROJECT
    collector_endpoint: str | None = None
    capture_content: bool = False

    @classmethod
    def from_env(cls) -> "PhoenixConfig":
        return cls(
            enabled=_env_bool("PHOENIX_ENABLED", "false"),
            project_name=os.environ.get("PHOENIX_PROJECT_NAME", DEFAULT_PROJECT),
            collector_endpoint=os.environ.get("PHOENIX_COLLECTOR_ENDPOINT") or None,
            capture_content=_env_bool("PHOENIX_CAPTURE_CONTENT", "false"),
        )


_config: PhoenixConfig | None = None


def get_config() -> PhoenixConfig:
    """Process-wide tracing settings, loaded on first use."""
    global _config
    if _config is None:
        _config = PhoenixConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop cached settings so the next get_config() rereads the environment."""
    global _config
    _config = None
