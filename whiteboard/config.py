"""
Whiteboard Configuration
========================

Engine and service settings, read from environment variables.
"""

import os
from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field

PositioningMode = Literal["content_type", "explicit"]

POSITIONING_MODES = ("content_type", "explicit")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    """Configuration for the layout engine and the session service."""
    sessions_dir: Path = Path("sessions")
    positioning_mode: PositioningMode = "content_type"
    # Fixed reference viewport keeps coordinates identical across zoom/resize
    use_reference_viewport: bool = True
    reference_width: float = Field(default=1461, gt=0)
    reference_height: float = Field(default=793, gt=0)
    auto_camera: bool = False
    log_level: str = "INFO"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_config() -> EngineConfig:
    """Build an EngineConfig from WHITEBOARD_* environment variables."""
    defaults = EngineConfig()
    return EngineConfig(
        sessions_dir=Path(os.getenv("WHITEBOARD_SESSIONS_DIR", str(defaults.sessions_dir))),
        positioning_mode=os.getenv("WHITEBOARD_POSITIONING_MODE", defaults.positioning_mode),
        use_reference_viewport=_env_flag("WHITEBOARD_REFERENCE_VIEWPORT", defaults.use_reference_viewport),
        reference_width=float(os.getenv("WHITEBOARD_REFERENCE_WIDTH", defaults.reference_width)),
        reference_height=float(os.getenv("WHITEBOARD_REFERENCE_HEIGHT", defaults.reference_height)),
        auto_camera=_env_flag("WHITEBOARD_AUTO_CAMERA", defaults.auto_camera),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
