"""
Event Models for the Whiteboard
===============================

Semantic events emitted by the content generator, and the rendering
commands the engine produces from them.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union
from pydantic import Field, TypeAdapter, field_validator

from .canvas_models import CamelModel
from .content_type_models import ContentType
from .grid_models import TOTAL_COLUMNS


# ===== Input events =====

class TextShape(CamelModel):
    """
    Text shape payload of a create/update event.

    Carries either content-type fields (content_type, target_row,
    column_span) or explicit position fields (row, horizontal_position,
    width). Which set is used depends on the session's positioning mode.
    """
    type: Literal["text"] = "text"
    shape_id: str = Field(min_length=1)
    note: str = ""
    text: str = ""
    # Content-type driven positioning
    content_type: Optional[ContentType] = None
    target_row: Optional[int] = Field(default=None, ge=1)
    column_span: Optional[Tuple[int, int]] = None   # [start, end], inclusive
    # Explicit positioning
    row: Optional[int] = Field(default=None, ge=1)
    horizontal_position: Optional[Union[float, str]] = None
    width: Optional[Union[float, str]] = None
    # Style overrides
    color: Optional[str] = None
    text_align: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    bullet: bool = False

    @field_validator("column_span")
    @classmethod
    def _check_column_span(cls, value):
        if value is None:
            return value
        start, end = value
        if not (1 <= start <= end <= TOTAL_COLUMNS):
            raise ValueError(f"column span {list(value)} must satisfy 1 <= start <= end <= {TOTAL_COLUMNS}")
        return value


class ThinkEvent(CamelModel):
    """Model reasoning. No effect on the canvas."""
    type: Literal["think"]
    text: str = ""
    reasoning: str = ""
    intent: str = ""


class CameraEvent(CamelModel):
    """Request to bring a row into view."""
    type: Literal["camera"]
    target_row: int = Field(ge=1)
    reasoning: str = ""


class CreateEvent(CamelModel):
    type: Literal["create"]
    shape: TextShape
    intent: str = ""


class UpdateEvent(CamelModel):
    type: Literal["update"]
    shape: TextShape
    intent: str = ""


class DeleteEvent(CamelModel):
    type: Literal["delete"]
    shape_id: str
    intent: str = ""


class MoveEvent(CamelModel):
    """Absolute-coordinate move. Bypasses the layout engine."""
    type: Literal["move"]
    shape_id: str
    x: float
    y: float
    intent: str = ""


SemanticEvent = Annotated[
    Union[ThinkEvent, CameraEvent, CreateEvent, UpdateEvent, DeleteEvent, MoveEvent],
    Field(discriminator="type"),
]

EVENT_TYPES = ("think", "camera", "create", "update", "delete", "move")

semantic_event_adapter: TypeAdapter = TypeAdapter(SemanticEvent)


# ===== Output commands =====

class TextShapeProps(CamelModel):
    """Rendering-surface props of a text shape."""
    text: str
    color: str = "black"
    text_align: str = "start"       # start | middle | end
    size: str = "m"                 # s | m | l | xl
    font: str = "draw"              # draw | mono
    width: float
    auto_size: bool = False
    scale: float = 1


class ShapeCommand(CamelModel):
    """createShape / updateShape. Moves carry only id, x and y."""
    type: Literal["createShape", "updateShape"]
    id: str
    x: float
    y: float
    props: Optional[TextShapeProps] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    description: str = ""


class DeleteShapeCommand(CamelModel):
    type: Literal["deleteShape"] = "deleteShape"
    id: str
    description: str = ""


class CameraCommand(CamelModel):
    """Out-of-band camera move the rendering surface may apply or ignore."""
    type: Literal["camera"] = "camera"
    x: float
    y: float
    z: float = 1
    reasoning: str = ""
    description: str = ""


Command = Union[ShapeCommand, DeleteShapeCommand, CameraCommand]


class EventResult(CamelModel):
    """Outcome of applying one event."""
    index: int
    event_type: Optional[str] = None
    success: bool
    commands: List[Command] = Field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None


class BatchResult(CamelModel):
    """Per-event outcomes of a batch, in input order."""
    results: List[EventResult] = Field(default_factory=list)

    @property
    def commands(self) -> List[Command]:
        return [command for result in self.results for command in result.commands]

    @property
    def failed(self) -> List[EventResult]:
        return [result for result in self.results if not result.success]
