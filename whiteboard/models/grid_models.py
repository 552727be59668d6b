"""
Grid Models for the Whiteboard
==============================

Models for the 12-column layout grid: positions, placed content, and the
per-session grid state.
"""

from typing import List, Set, Tuple
from pydantic import BaseModel, Field, model_validator
from datetime import datetime

TOTAL_COLUMNS = 12


class GridPosition(BaseModel):
    """Row and inclusive column range on the grid."""
    row: int = Field(ge=1)
    column_start: int = Field(ge=1, le=TOTAL_COLUMNS)
    column_end: int = Field(ge=1, le=TOTAL_COLUMNS)

    @model_validator(mode="after")
    def _check_range(self) -> "GridPosition":
        if self.column_end < self.column_start:
            raise ValueError(
                f"column_end ({self.column_end}) is before column_start ({self.column_start})"
            )
        return self

    @property
    def column_span(self) -> int:
        return self.column_end - self.column_start + 1


class GridContent(GridPosition):
    """A text element recorded on the grid. Never mutated once created."""
    id: str
    content_type: str
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


class GridMetadata(BaseModel):
    """Static grid geometry plus the tracked canvas height."""
    total_columns: int = TOTAL_COLUMNS
    row_height: int = 60
    column_width: int = 100
    canvas_width: int = 1200
    canvas_height: int = 0


class GridState(BaseModel):
    """Mutable layout state of one whiteboard session."""
    current_row: int = Field(default=1, ge=1)
    total_columns: int = TOTAL_COLUMNS
    row_height: int = 60
    content_history: List[GridContent] = Field(default_factory=list)
    occupied_cells: Set[Tuple[int, int]] = Field(default_factory=set)
    # Ids whose latest entry was deleted; their history is kept
    released_ids: Set[str] = Field(default_factory=set)


class GridContext(BaseModel):
    """Minimal grid context used for classification and model prompts."""
    current_row: int
    recent_content: List[GridContent]
    total_columns: int
    row_height: int
    metadata: GridMetadata
