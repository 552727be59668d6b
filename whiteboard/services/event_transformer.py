"""
Event Transformer
=================

Applies semantic events to a session, one at a time and in order, and
produces rendering commands.

apply() is the step function: (grid state, event) -> (grid state', commands).
Every event is validated and fully resolved before any state changes, so a
failing event leaves the session untouched. process_batch() and stream()
drive apply() and report each event's failure individually.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Union
from pydantic import ValidationError

from ..canvas.grid_manager import GridManager
from ..errors import CanvasStateError, EventSchemaError, ShapeReferenceError, WhiteboardError
from ..models.canvas_models import CanvasDimensions
from ..models.event_models import (
    EVENT_TYPES,
    BatchResult,
    CameraCommand,
    CameraEvent,
    Command,
    CreateEvent,
    DeleteEvent,
    DeleteShapeCommand,
    EventResult,
    MoveEvent,
    ShapeCommand,
    TextShapeProps,
    ThinkEvent,
    UpdateEvent,
    semantic_event_adapter,
)
from .camera_manager import calculate_optimal_camera_position, should_move_camera_for_new_content
from .canvas_calculator import calculate_text_box_position
from .positioning import PositioningStrategy

logger = logging.getLogger(__name__)

RawEvent = Union[Dict[str, Any], ThinkEvent, CameraEvent, CreateEvent, UpdateEvent, DeleteEvent, MoveEvent]


def parse_event(raw: RawEvent):
    """Validate a raw event dict into its typed variant."""
    if not isinstance(raw, dict):
        return raw

    event_type = raw.get("type")
    if event_type not in EVENT_TYPES:
        raise EventSchemaError(f"Unknown event type {event_type!r}; expected one of {', '.join(EVENT_TYPES)}")

    try:
        return semantic_event_adapter.validate_python(raw)
    except ValidationError as e:
        raise EventSchemaError(f"Invalid {event_type} event: {e.error_count()} validation error(s): {e.errors()[0]['msg']}") from e


class EventTransformer:
    """Order-preserving reducer over one session's event stream."""

    def __init__(
        self,
        grid_manager: GridManager,
        strategy: PositioningStrategy,
        canvas_dimensions: Optional[CanvasDimensions] = None,
        shape_ids: Optional[Set[str]] = None,
        auto_camera: bool = False,
        camera_y: Optional[float] = None
    ):
        self.grid_manager = grid_manager
        self.strategy = strategy
        self.canvas_dimensions = canvas_dimensions
        self.shape_ids = shape_ids if shape_ids is not None else set()
        self.auto_camera = auto_camera
        self.camera_y = camera_y

    def _require_dimensions(self, event_type: str) -> CanvasDimensions:
        if self.canvas_dimensions is None:
            raise CanvasStateError(f"Canvas dimensions are required to process a {event_type} event")
        return self.canvas_dimensions

    def _require_known(self, shape_id: str) -> None:
        if shape_id not in self.shape_ids:
            raise ShapeReferenceError(shape_id, f"Unknown shape '{shape_id}'")

    def apply(self, event: RawEvent) -> List[Command]:
        """Apply one event and return the commands it produces."""
        event = parse_event(event)

        if isinstance(event, ThinkEvent):
            logger.debug(f"[TRANSFORMER] think: {(event.text or event.reasoning)[:80]}")
            return []
        if isinstance(event, CameraEvent):
            return self._apply_camera(event)
        if isinstance(event, CreateEvent):
            return self._apply_shape_event(event, is_update=False)
        if isinstance(event, UpdateEvent):
            return self._apply_shape_event(event, is_update=True)
        if isinstance(event, DeleteEvent):
            return self._apply_delete(event)
        if isinstance(event, MoveEvent):
            return self._apply_move(event)

        raise EventSchemaError(f"Unsupported event object {type(event).__name__}")

    def _apply_camera(self, event: CameraEvent) -> List[Command]:
        dims = self._require_dimensions("camera")
        result = calculate_optimal_camera_position(event.target_row, dims)
        self.camera_y = result.position.y
        return [CameraCommand(
            x=result.position.x,
            y=result.position.y,
            z=result.position.z,
            reasoning=event.reasoning or result.reasoning,
            description=f"Move camera to show row {event.target_row} with proper context",
        )]

    def _apply_shape_event(self, event: Union[CreateEvent, UpdateEvent], is_update: bool) -> List[Command]:
        shape = event.shape

        if is_update:
            self._require_known(shape.shape_id)
        elif shape.shape_id in self.shape_ids:
            raise ShapeReferenceError(shape.shape_id, f"Shape '{shape.shape_id}' already exists")

        dims = self._require_dimensions(event.type)
        placement = self.strategy.resolve(shape, event.intent or shape.note, is_update)
        box = calculate_text_box_position(placement.position_spec, dims)

        command = ShapeCommand(
            type="updateShape" if is_update else "createShape",
            id=shape.shape_id,
            x=box.x,
            y=box.y,
            props=TextShapeProps(
                text=placement.text,
                color=placement.color,
                text_align=placement.text_align,
                size=placement.size,
                font=placement.font,
                width=box.width,
            ),
            meta=placement.meta,
            description=shape.note or event.intent,
        )
        commands: List[Command] = [command]

        self.strategy.commit(shape.shape_id, placement, is_update)
        if not is_update:
            self.shape_ids.add(shape.shape_id)
            commands.extend(self._follow_camera(placement.position_spec.row, dims))

        logger.info(
            f"[TRANSFORMER] {command.type} '{shape.shape_id}' at row {placement.position_spec.row} "
            f"-> ({box.x:.1f}, {box.y:.1f}), width {box.width:.1f}"
        )
        return commands

    def _follow_camera(self, row: int, dims: CanvasDimensions) -> List[Command]:
        if not self.auto_camera:
            return []

        if self.camera_y is None:
            self.camera_y = calculate_optimal_camera_position(1, dims).position.y

        if not should_move_camera_for_new_content(row, self.camera_y, dims):
            return []

        result = calculate_optimal_camera_position(row, dims)
        if result.position.y == self.camera_y:
            return []

        self.camera_y = result.position.y
        return [CameraCommand(
            x=result.position.x,
            y=result.position.y,
            z=result.position.z,
            reasoning=result.reasoning,
            description=f"Follow new content at row {row}",
        )]

    def _apply_delete(self, event: DeleteEvent) -> List[Command]:
        self._require_known(event.shape_id)
        self.shape_ids.discard(event.shape_id)
        self.grid_manager.release_content(event.shape_id)
        return [DeleteShapeCommand(id=event.shape_id, description=event.intent)]

    def _apply_move(self, event: MoveEvent) -> List[Command]:
        self._require_known(event.shape_id)
        return [ShapeCommand(
            type="updateShape",
            id=event.shape_id,
            x=event.x,
            y=event.y,
            description=event.intent,
        )]

    def process_event(self, index: int, event: RawEvent) -> EventResult:
        """Apply one event, capturing any failure in the result."""
        event_type = event.get("type") if isinstance(event, dict) else getattr(event, "type", None)
        if not isinstance(event_type, str):
            event_type = None

        try:
            commands = self.apply(event)
        except WhiteboardError as e:
            logger.warning(f"[TRANSFORMER] Event {index} ({event_type}) rejected: {e}")
            return EventResult(
                index=index,
                event_type=event_type,
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )
        except Exception as e:
            logger.exception(f"[TRANSFORMER] Event {index} ({event_type}) failed unexpectedly")
            return EventResult(
                index=index,
                event_type=event_type,
                success=False,
                error=f"{type(e).__name__}: {e}",
                error_type=type(e).__name__,
            )

        return EventResult(index=index, event_type=event_type, success=True, commands=commands)

    def stream(self, events: Iterable[RawEvent]) -> Iterator[EventResult]:
        """Lazily apply events as they arrive. Stop consuming at any point."""
        for index, event in enumerate(events):
            yield self.process_event(index, event)

    def process_batch(self, events: Iterable[RawEvent]) -> BatchResult:
        """Apply a batch; failed events are skipped and the rest continue."""
        result = BatchResult(results=list(self.stream(events)))
        if result.failed:
            logger.warning(f"[TRANSFORMER] {len(result.failed)}/{len(result.results)} event(s) failed in batch")
        return result
