"""
Grid Manager
============

Tracks the layout state of one whiteboard session: the next free row,
which (row, column) cells are occupied, and the history of placed content.

One GridManager exists per session. It is built from a stored snapshot at
the start of a request and saved back afterwards; it is never shared
between sessions.
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from ..models.grid_models import (
    GridContent,
    GridContext,
    GridMetadata,
    GridPosition,
    GridState,
)

logger = logging.getLogger(__name__)

RECENT_CONTENT_LIMIT = 3


class GridManager:
    """Session-scoped grid occupancy and placement history."""

    def __init__(
        self,
        state: Optional[GridState] = None,
        metadata: Optional[GridMetadata] = None
    ):
        self.metadata = metadata or GridMetadata()
        self.state = state or self._initial_state()

    def _initial_state(self) -> GridState:
        return GridState(
            current_row=1,
            total_columns=self.metadata.total_columns,
            row_height=self.metadata.row_height,
        )

    @property
    def current_row(self) -> int:
        return self.state.current_row

    @property
    def is_empty(self) -> bool:
        return not self.state.content_history

    def get_current_grid_state(self) -> GridContext:
        """Current row, the 3 most recent items (newest first) and grid metadata."""
        recent_content = list(reversed(self.state.content_history[-RECENT_CONTENT_LIMIT:]))
        return GridContext(
            current_row=self.state.current_row,
            recent_content=recent_content,
            total_columns=self.state.total_columns,
            row_height=self.state.row_height,
            metadata=self.metadata.model_copy(),
        )

    def update_grid_state(
        self,
        content_id: str,
        row: int,
        column_start: int,
        column_end: int,
        content_type: str,
        text: str
    ) -> GridPosition:
        """
        Record newly placed content.

        Marks its cells as occupied, moves current_row below it when it sits
        on or after the current row, and grows the tracked canvas height.
        """
        content = GridContent(
            id=content_id,
            row=row,
            column_start=column_start,
            column_end=column_end,
            content_type=content_type,
            text=text,
        )
        self.state.content_history.append(content)
        self.state.released_ids.discard(content_id)

        for col in range(column_start, column_end + 1):
            self.state.occupied_cells.add((row, col))

        if row >= self.state.current_row:
            self.state.current_row = row + 1

        self.metadata.canvas_height = max(
            self.metadata.canvas_height,
            row * self.metadata.row_height + self.metadata.row_height,
        )

        logger.info(
            f"[GRID] Placed {content_type} '{content_id}' at row {row}, cols {column_start}-{column_end}; "
            f"next row {self.state.current_row}"
        )
        return GridPosition(row=row, column_start=column_start, column_end=column_end)

    def get_next_available_row(self) -> int:
        return self.state.current_row

    def _cells_of(self, content_id: Optional[str]) -> Set[Tuple[int, int]]:
        """Cells currently held by a placed element, empty if none."""
        if content_id is None or content_id in self.state.released_ids:
            return set()
        content = self.find_content(content_id)
        if content is None:
            return set()
        return {(content.row, col) for col in range(content.column_start, content.column_end + 1)}

    def is_position_available(
        self,
        row: int,
        column_start: int,
        column_end: int,
        exclude_id: Optional[str] = None
    ) -> bool:
        """
        True if no cell in [column_start, column_end] on row is occupied.

        Cells held by exclude_id count as free, so an element can be
        checked against everything except itself.
        """
        own_cells = self._cells_of(exclude_id)
        return all(
            (row, col) not in self.state.occupied_cells or (row, col) in own_cells
            for col in range(column_start, column_end + 1)
        )

    def _check_span(self, column_span: int) -> None:
        if not 1 <= column_span <= self.state.total_columns:
            raise ValueError(f"column span must be between 1 and {self.state.total_columns}, got {column_span}")

    def _first_fit_in_row(self, row: int, column_span: int, exclude_id: Optional[str] = None) -> Optional[GridPosition]:
        for start_col in range(1, self.state.total_columns - column_span + 2):
            end_col = start_col + column_span - 1
            if self.is_position_available(row, start_col, end_col, exclude_id):
                return GridPosition(row=row, column_start=start_col, column_end=end_col)
        return None

    def find_next_available_position(self, column_span: int, exclude_id: Optional[str] = None) -> GridPosition:
        """
        Leftmost free window of column_span on the current row, otherwise
        columns [1, column_span] on the row after it.

        Rows at or after current_row never hold content placed through
        update_grid_state or update_content, so the fallback row is always
        free.
        """
        self._check_span(column_span)
        row = self.state.current_row

        position = self._first_fit_in_row(row, column_span, exclude_id)
        if position is not None:
            return position

        return GridPosition(row=row + 1, column_start=1, column_end=column_span)

    def find_available_position(
        self,
        row: int,
        column_span: int,
        preferred_start: Optional[int] = None,
        exclude_id: Optional[str] = None
    ) -> GridPosition:
        """
        Free position on a given row, preferring a starting column.

        Falls back to the leftmost free window on that row, then to
        find_next_available_position. Cells held by exclude_id count as free.
        """
        self._check_span(column_span)

        if preferred_start is not None:
            preferred_end = preferred_start + column_span - 1
            if preferred_end <= self.state.total_columns and self.is_position_available(row, preferred_start, preferred_end, exclude_id):
                return GridPosition(row=row, column_start=preferred_start, column_end=preferred_end)

        position = self._first_fit_in_row(row, column_span, exclude_id)
        if position is not None:
            return position

        logger.info(f"[GRID] Row {row} has no room for {column_span} columns, using next available position")
        return self.find_next_available_position(column_span, exclude_id)

    def find_content(self, content_id: str) -> Optional[GridContent]:
        """Most recent history entry for a content id."""
        for content in reversed(self.state.content_history):
            if content.id == content_id:
                return content
        return None

    def release_content(self, content_id: str) -> bool:
        """
        Free the cells of a deleted element.

        History is kept and current_row does not move back.
        """
        content = self.find_content(content_id)
        if content is None or content_id in self.state.released_ids:
            return False

        for col in range(content.column_start, content.column_end + 1):
            self.state.occupied_cells.discard((content.row, col))
        self.state.released_ids.add(content_id)

        logger.info(f"[GRID] Released row {content.row}, cols {content.column_start}-{content.column_end} of '{content_id}'")
        return True

    def update_content(
        self,
        content_id: str,
        row: int,
        column_start: int,
        column_end: int,
        content_type: str,
        text: str
    ) -> GridPosition:
        """
        Re-record an updated element in place.

        Its old cells are freed and the new ones marked, and its history
        entry is replaced rather than appended. current_row only moves when
        the element lands on or after it, so rows from current_row down stay
        free. Unknown or deleted ids are recorded as new content.
        """
        history = self.state.content_history
        index = next(
            (i for i in range(len(history) - 1, -1, -1) if history[i].id == content_id),
            None,
        )
        if index is None or content_id in self.state.released_ids:
            return self.update_grid_state(content_id, row, column_start, column_end, content_type, text)

        self.state.occupied_cells -= self._cells_of(content_id)
        history[index] = history[index].model_copy(update={
            "row": row,
            "column_start": column_start,
            "column_end": column_end,
            "content_type": content_type,
            "text": text,
        })
        for col in range(column_start, column_end + 1):
            self.state.occupied_cells.add((row, col))

        if row >= self.state.current_row:
            self.state.current_row = row + 1
        self.metadata.canvas_height = max(
            self.metadata.canvas_height,
            row * self.metadata.row_height + self.metadata.row_height,
        )

        logger.info(f"[GRID] Updated '{content_id}' at row {row}, cols {column_start}-{column_end}")
        return GridPosition(row=row, column_start=column_start, column_end=column_end)

    def get_content_history(self) -> List[GridContent]:
        return list(self.state.content_history)

    def get_placed_content(self) -> List[GridContent]:
        """History entries still on the canvas, oldest first."""
        latest = {content.id: content for content in self.state.content_history}
        return [
            content for content in self.state.content_history
            if latest[content.id] is content and content.id not in self.state.released_ids
        ]

    def get_metadata(self) -> GridMetadata:
        return self.metadata.model_copy()

    def get_canvas_dimensions(self) -> Dict[str, int]:
        return {"width": self.metadata.canvas_width, "height": self.metadata.canvas_height}

    def reset(self) -> None:
        """Clear the grid back to its initial empty state."""
        self.state = self._initial_state()
        self.metadata.canvas_height = 0
        logger.info("[GRID] Grid reset")

    def to_snapshot(self) -> Dict[str, Any]:
        """JSON-safe snapshot: {"state": ..., "metadata": ...}."""
        state = self.state.model_dump(mode="json")
        state["occupied_cells"] = sorted(state["occupied_cells"])
        state["released_ids"] = sorted(state["released_ids"])
        return {
            "state": state,
            "metadata": self.metadata.model_dump(mode="json"),
        }

    @classmethod
    def from_snapshot(cls, snapshot: Optional[Dict[str, Any]]) -> "GridManager":
        """Restore a GridManager saved with to_snapshot (empty grid for None)."""
        if not snapshot:
            return cls()
        return cls(
            state=GridState.model_validate(snapshot["state"]),
            metadata=GridMetadata.model_validate(snapshot.get("metadata", {})),
        )
