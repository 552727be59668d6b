"""
Positioning Strategies
======================

Turn a text shape payload into a Placement: the grid position (if any), the
PositionSpec handed to the canvas calculator, the rendered text and its style.

Two strategies exist and one is chosen per session:
- ContentTypePositioning: classify the text, take the next free grid row
  and the content type's column template, record the result in the grid.
- ExplicitPositioning: use the caller's row / horizontal position / width
  as given, without classification or grid bookkeeping.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from ..canvas.grid_manager import GridManager
from ..errors import EventSchemaError
from ..models.canvas_models import PositionSpec
from ..models.content_type_models import (
    BULLET_GLYPH,
    ContentType,
    ContentTypeLayout,
    get_content_type_layout,
)
from ..models.event_models import TextShape
from ..models.grid_models import GridContent, GridPosition
from .canvas_calculator import map_color, map_font_family, map_font_size, map_text_alignment
from .content_classifier import (
    ContentTypeClassifier,
    DetectionContext,
    DetectionResult,
    detect_spacing_from_instruction,
)

logger = logging.getLogger(__name__)

_NUMBER_PREFIX = re.compile(r"^\d+\.")


class Placement(BaseModel):
    """Resolved placement of one create/update event."""
    text: str
    position_spec: PositionSpec
    grid_position: Optional[GridPosition] = None
    content_type: Optional[ContentType] = None
    text_align: str = "start"
    size: str = "m"
    color: str = "black"
    font: str = "draw"
    meta: Dict[str, Any] = Field(default_factory=dict)


def add_bullet_prefix(text: str) -> str:
    if text.startswith(BULLET_GLYPH):
        return text
    return f"{BULLET_GLYPH} {text}"


class PositioningStrategy(ABC):
    """Resolves where and how a text shape is placed."""

    mode: str = ""

    @abstractmethod
    def resolve(self, shape: TextShape, instruction: str, is_update: bool) -> Placement:
        """Compute a placement without mutating any state."""

    def commit(self, shape_id: str, placement: Placement, is_update: bool = False) -> None:
        """Record a created or updated shape's placement. No-op by default."""


class ContentTypePositioning(PositioningStrategy):
    """Grid-driven placement from the text's content type."""

    mode = "content_type"

    def __init__(self, grid_manager: GridManager, classifier: Optional[ContentTypeClassifier] = None):
        self.grid_manager = grid_manager
        self.classifier = classifier or ContentTypeClassifier()

    def _detect(self, shape: TextShape, instruction: str, existing: Optional[GridContent]) -> DetectionResult:
        extra_spacing = detect_spacing_from_instruction(instruction)

        if shape.content_type is not None:
            return DetectionResult(
                content_type=shape.content_type,
                confidence=1.0,
                reasoning="Content type supplied by generator",
                extra_spacing_rows=extra_spacing,
            )

        if existing is not None:
            return DetectionResult(
                content_type=ContentType(existing.content_type),
                confidence=1.0,
                reasoning="Keeping content type of the existing shape",
            )

        grid_state = self.grid_manager.get_current_grid_state()
        context = DetectionContext(
            recent_content=grid_state.recent_content,
            is_first_content=self.grid_manager.is_empty,
        )
        return self.classifier.classify(shape.text, instruction, context)

    def _next_row(self, layout: ContentTypeLayout, extra_spacing_rows: int) -> int:
        """Current row plus spacing; no spacing above the first placed element."""
        grid = self.grid_manager
        row = grid.current_row + extra_spacing_rows
        placed = grid.get_placed_content()
        if not placed:
            return row

        row += layout.spacing.top
        previous = placed[-1]
        try:
            row += get_content_type_layout(ContentType(previous.content_type)).spacing.bottom
        except ValueError:
            pass
        return row

    def _sequence_number(self, existing: Optional[GridContent]) -> int:
        placed = self.grid_manager.get_placed_content()
        if existing is not None:
            placed = placed[:next((i for i, content in enumerate(placed) if content is existing), len(placed))]

        count = 0
        for content in reversed(placed):
            if content.content_type != ContentType.NUMBERED.value:
                break
            count += 1
        return count + 1

    def _format_text(self, shape: TextShape, content_type: ContentType, existing: Optional[GridContent]) -> str:
        text = shape.text
        if content_type == ContentType.BULLET or shape.bullet:
            return add_bullet_prefix(text)
        if content_type == ContentType.NUMBERED and not _NUMBER_PREFIX.match(text):
            return f"{self._sequence_number(existing)}. {text}"
        return text

    def resolve(self, shape: TextShape, instruction: str, is_update: bool) -> Placement:
        grid = self.grid_manager
        existing = grid.find_content(shape.shape_id) if is_update else None

        detection = self._detect(shape, instruction, existing)
        content_type = detection.content_type
        layout = get_content_type_layout(content_type)

        if shape.column_span is not None:
            column_start, column_end = shape.column_span
        else:
            column_start, column_end = layout.column_start, layout.column_end
        column_span = column_end - column_start + 1

        if existing is not None and shape.target_row is None and shape.column_span is None:
            grid_position = GridPosition(
                row=existing.row,
                column_start=existing.column_start,
                column_end=existing.column_end,
            )
        else:
            # A relocated element may reuse its own cells
            exclude_id = shape.shape_id if existing is not None else None
            if shape.target_row is not None:
                row = shape.target_row
            elif existing is not None:
                row = existing.row
            else:
                row = self._next_row(layout, detection.extra_spacing_rows)

            if grid.is_position_available(row, column_start, column_end, exclude_id):
                grid_position = GridPosition(row=row, column_start=column_start, column_end=column_end)
            else:
                grid_position = grid.find_available_position(row, column_span, column_start, exclude_id)

        total_columns = grid.state.total_columns
        position_spec = PositionSpec(
            row=grid_position.row,
            horizontal_position=(grid_position.column_start - 1) / total_columns,
            width=f"{grid_position.column_span}/{total_columns}",
        )

        return Placement(
            text=self._format_text(shape, content_type, existing),
            position_spec=position_spec,
            grid_position=grid_position,
            content_type=content_type,
            text_align=map_text_alignment(shape.text_align or layout.alignment),
            size=map_font_size(shape.font_size or layout.font_size),
            color=map_color(shape.color or layout.color),
            font=map_font_family(layout.font_family),
            meta={
                "contentType": content_type.value,
                "confidence": detection.confidence,
                "reasoning": detection.reasoning,
                "gridPosition": grid_position.model_dump(),
                "description": shape.note,
            },
        )

    def commit(self, shape_id: str, placement: Placement, is_update: bool = False) -> None:
        position = placement.grid_position
        record = self.grid_manager.update_content if is_update else self.grid_manager.update_grid_state
        record(
            content_id=shape_id,
            row=position.row,
            column_start=position.column_start,
            column_end=position.column_end,
            content_type=placement.content_type.value,
            text=placement.text,
        )


class ExplicitPositioning(PositioningStrategy):
    """Caller-supplied row, horizontal position and width."""

    mode = "explicit"

    def resolve(self, shape: TextShape, instruction: str, is_update: bool) -> Placement:
        missing = [
            name for name, value in (
                ("row", shape.row),
                ("horizontalPosition", shape.horizontal_position),
                ("width", shape.width),
            )
            if value is None
        ]
        if missing:
            raise EventSchemaError(
                f"Shape '{shape.shape_id}' is missing {', '.join(missing)} required for explicit positioning"
            )

        position_spec = PositionSpec(
            row=shape.row,
            horizontal_position=shape.horizontal_position,
            width=shape.width,
            text_align=shape.text_align,
            font_size=shape.font_size,
            font_weight=shape.font_weight,
            color=shape.color,
            bullet=shape.bullet,
        )
        text = add_bullet_prefix(shape.text) if shape.bullet else shape.text

        return Placement(
            text=text,
            position_spec=position_spec,
            text_align=map_text_alignment(shape.text_align),
            size=map_font_size(shape.font_size),
            color=map_color(shape.color),
            meta={
                "positionSpec": position_spec.model_dump(by_alias=True, exclude_none=True),
                "description": shape.note,
            },
        )


def get_positioning_strategy(
    mode: str,
    grid_manager: GridManager,
    classifier: Optional[ContentTypeClassifier] = None
) -> PositioningStrategy:
    """Build the strategy for a session's positioning mode."""
    if mode == ContentTypePositioning.mode:
        return ContentTypePositioning(grid_manager, classifier)
    if mode == ExplicitPositioning.mode:
        return ExplicitPositioning()
    raise ValueError(f"Unknown positioning mode: {mode}")
