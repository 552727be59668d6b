"""
Whiteboard Routes
=================

API routes for whiteboard sessions: event batches, grid state and reset,
and content classification.

Requests for one session are serialized: events must be applied in order
against the grid state left by the previous request.
"""

import asyncio
import logging
import re
import weakref
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field

from ..canvas.session import WhiteboardSession
from ..canvas.state_manager import StateManager
from ..config import EngineConfig, POSITIONING_MODES
from ..models.canvas_models import Viewport
from ..services.content_classifier import ContentTypeClassifier, DetectionContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/whiteboard", tags=["whiteboard"])

# Injected by server
state_manager: Optional[StateManager] = None
engine_config: Optional[EngineConfig] = None

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,64}$")
# Entries vanish once no request holds the lock
_session_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def get_state_manager() -> StateManager:
    """Dependency to get state manager."""
    if state_manager is None:
        raise HTTPException(500, "State manager not initialized")
    return state_manager


def get_engine_config() -> EngineConfig:
    """Dependency to get engine config."""
    if engine_config is None:
        raise HTTPException(500, "Engine config not initialized")
    return engine_config


def _session_lock(session_id: str) -> asyncio.Lock:
    lock = _session_locks.get(session_id)
    if lock is None:
        lock = _session_locks[session_id] = asyncio.Lock()
    return lock


def _check_session_id(session_id: str) -> None:
    if not _SESSION_ID_PATTERN.match(session_id):
        raise HTTPException(status_code=400, detail="Invalid session id")


def _load_session(session_id: str, manager: StateManager, config: EngineConfig) -> WhiteboardSession:
    _check_session_id(session_id)
    record = manager.get_session(session_id)
    if not record:
        raise HTTPException(status_code=404, detail="Session not found")
    return WhiteboardSession.from_record(record, config)


class CreateSessionRequest(BaseModel):
    """Request to create a whiteboard session."""
    session_id: Optional[str] = None
    positioning_mode: Optional[str] = None


class EventBatchRequest(BaseModel):
    """A batch of semantic events for one session."""
    events: List[Dict[str, Any]] = Field(default_factory=list)
    viewport: Optional[Viewport] = None
    camera_y: Optional[float] = None


class ClassifyRequest(BaseModel):
    """Request to classify a piece of text."""
    text: str
    instruction: Optional[str] = None
    session_id: Optional[str] = None


@router.post("/session")
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    manager: StateManager = Depends(get_state_manager),
    config: EngineConfig = Depends(get_engine_config)
):
    """Create a new whiteboard session."""
    request = request or CreateSessionRequest()
    mode = request.positioning_mode or config.positioning_mode
    if mode not in POSITIONING_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown positioning mode: {mode}")
    if request.session_id is not None:
        _check_session_id(request.session_id)

    session_id = manager.create_session(request.session_id, positioning_mode=mode)
    record = manager.get_session(session_id)
    return {
        "session_id": session_id,
        "positioning_mode": record.get("positioning_mode", mode),
        "message": "Session created",
    }


@router.get("/{session_id}/grid")
async def get_grid(
    session_id: str,
    manager: StateManager = Depends(get_state_manager),
    config: EngineConfig = Depends(get_engine_config)
):
    """Get the grid context and snapshot of a session."""
    session = _load_session(session_id, manager, config)
    return {
        "session_id": session_id,
        "positioning_mode": session.positioning_mode,
        "context": session.grid_manager.get_current_grid_state().model_dump(mode="json"),
        "snapshot": session.grid_manager.to_snapshot(),
        "shape_ids": sorted(session.shape_ids),
    }


@router.delete("/{session_id}/grid")
async def reset_grid(
    session_id: str,
    manager: StateManager = Depends(get_state_manager)
):
    """Reset the grid of a session to its empty state."""
    _check_session_id(session_id)
    async with _session_lock(session_id):
        if not manager.reset_grid(session_id):
            raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Grid reset", "session_id": session_id}


@router.post("/{session_id}/events")
async def apply_events(
    session_id: str,
    request: EventBatchRequest,
    manager: StateManager = Depends(get_state_manager),
    config: EngineConfig = Depends(get_engine_config)
):
    """Apply a batch of events and persist the resulting grid."""
    _check_session_id(session_id)
    async with _session_lock(session_id):
        session = _load_session(session_id, manager, config)
        result = session.apply_events(request.events, viewport=request.viewport, camera_y=request.camera_y)
        manager.save_session_state(session_id, session.to_record())

    return {
        "session_id": session_id,
        "current_row": session.grid_manager.current_row,
        "results": [r.model_dump(by_alias=True, exclude_none=True) for r in result.results],
        "commands": [c.model_dump(by_alias=True, exclude_none=True) for c in result.commands],
    }


@router.post("/classify")
async def classify_text(
    request: ClassifyRequest,
    manager: StateManager = Depends(get_state_manager),
    config: EngineConfig = Depends(get_engine_config)
):
    """Classify text against an optional session's recent content."""
    context = DetectionContext(is_first_content=True)
    if request.session_id:
        session = _load_session(request.session_id, manager, config)
        grid_state = session.grid_manager.get_current_grid_state()
        context = DetectionContext(
            recent_content=grid_state.recent_content,
            is_first_content=session.grid_manager.is_empty,
        )

    analysis = ContentTypeClassifier().analyze(request.text, request.instruction, context)
    return analysis.model_dump(mode="json")
