"""
Whiteboard Session
==================

Wires one session's engine together from its stored record: the grid
manager, the positioning strategy chosen for the session, and the set of
shape ids known to exist on the canvas.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from ..config import EngineConfig
from ..models.canvas_models import CanvasDimensions, Viewport
from ..models.event_models import BatchResult
from ..services.canvas_calculator import CanvasCalculator
from ..services.content_classifier import ContentTypeClassifier
from ..services.event_transformer import EventTransformer, RawEvent
from ..services.positioning import get_positioning_strategy
from .grid_manager import GridManager

logger = logging.getLogger(__name__)


class WhiteboardSession:
    """Session-scoped layout engine state."""

    def __init__(
        self,
        session_id: str,
        config: EngineConfig,
        positioning_mode: Optional[str] = None,
        grid_manager: Optional[GridManager] = None,
        shape_ids: Optional[Iterable[str]] = None,
        classifier: Optional[ContentTypeClassifier] = None
    ):
        self.session_id = session_id
        self.config = config
        self.positioning_mode = positioning_mode or config.positioning_mode
        self.grid_manager = grid_manager or GridManager()
        self.shape_ids: Set[str] = set(shape_ids or [])
        self.strategy = get_positioning_strategy(self.positioning_mode, self.grid_manager, classifier)

        reference = (config.reference_width, config.reference_height) if config.use_reference_viewport else None
        self.calculator = CanvasCalculator(reference_viewport=reference)

    @classmethod
    def from_record(cls, record: Dict[str, Any], config: EngineConfig) -> "WhiteboardSession":
        """Build a session from a StateManager record."""
        return cls(
            session_id=record["id"],
            config=config,
            positioning_mode=record.get("positioning_mode"),
            grid_manager=GridManager.from_snapshot(record.get("grid")),
            shape_ids=record.get("shape_ids", []),
        )

    def canvas_dimensions(self, viewport: Optional[Viewport]) -> Optional[CanvasDimensions]:
        if viewport is None:
            return None
        return self.calculator.calculate_canvas_dimensions(viewport.width, viewport.height)

    def build_transformer(
        self,
        viewport: Optional[Viewport] = None,
        camera_y: Optional[float] = None
    ) -> EventTransformer:
        return EventTransformer(
            grid_manager=self.grid_manager,
            strategy=self.strategy,
            canvas_dimensions=self.canvas_dimensions(viewport),
            shape_ids=self.shape_ids,
            auto_camera=self.config.auto_camera,
            camera_y=camera_y,
        )

    def apply_events(
        self,
        events: List[RawEvent],
        viewport: Optional[Viewport] = None,
        camera_y: Optional[float] = None
    ) -> BatchResult:
        """Apply a batch of events in order."""
        transformer = self.build_transformer(viewport, camera_y)
        result = transformer.process_batch(events)
        logger.info(
            f"[SESSION] {self.session_id}: applied {len(result.results)} event(s), "
            f"{len(result.failed)} failed, current row {self.grid_manager.current_row}"
        )
        return result

    def reset(self) -> None:
        """Clear the grid and forget every known shape."""
        self.grid_manager.reset()
        self.shape_ids.clear()

    def to_record(self) -> Dict[str, Any]:
        """Fields persisted by the StateManager."""
        return {
            "positioning_mode": self.positioning_mode,
            "grid": self.grid_manager.to_snapshot(),
            "shape_ids": sorted(self.shape_ids),
        }
