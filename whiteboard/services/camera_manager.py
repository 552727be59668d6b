"""
Camera Manager
==============

Computes camera moves that keep newly placed rows in view.

Camera coordinates are the negation of the content coordinate shown at the
viewport's top-left corner: camera.y = -Y shows content from Y downwards.
"""

import logging
import math

from ..models.canvas_models import (
    CameraCalculationResult,
    CameraPosition,
    CanvasDimensions,
    VisibleRows,
)

logger = logging.getLogger(__name__)

MIN_EMPTY_ROWS_BELOW = 5
# Targets before this row are shown from the top of the document
EARLY_ROW_LIMIT = 12


def calculate_optimal_camera_position(
    target_row: int,
    canvas_dimensions: CanvasDimensions
) -> CameraCalculationResult:
    """
    Calculate a camera position that shows target_row with empty rows below.

    Args:
        target_row: Row that must be visible
        canvas_dimensions: Canvas frame of the session

    Returns:
        CameraCalculationResult with position (zoom fixed at 1), reasoning
        and the inclusive visible row window
    """
    dims = canvas_dimensions
    rows_per_screen = math.floor((dims.window_height - dims.top_margin) / dims.row_height)

    if target_row < EARLY_ROW_LIMIT:
        top_row = 1
        reasoning = f"Target row {target_row} is early in the document, showing from row 1 for full context"
    else:
        desired_bottom_row = target_row + MIN_EMPTY_ROWS_BELOW
        top_row = max(1, desired_bottom_row - rows_per_screen + 1)
        reasoning = (
            f"Target row {target_row} positioned with {MIN_EMPTY_ROWS_BELOW} empty rows below, "
            f"showing rows {top_row}-{top_row + rows_per_screen - 1}"
        )

    top_row_y = dims.top_margin + (top_row - 1) * dims.row_height
    camera_y = -top_row_y

    # Center the content area horizontally in the viewport
    viewport_center_offset = (dims.window_width - dims.canvas_width) / 2
    camera_x = -(dims.horizontal_padding - viewport_center_offset)

    bottom_row = top_row + rows_per_screen - 1
    visible_rows = VisibleRows(
        top=top_row,
        bottom=bottom_row,
        target=target_row,
        empty_rows_below=max(0, bottom_row - target_row),
    )

    logger.info(
        f"[CAMERA] Target row {target_row}: rows {top_row}-{bottom_row} visible "
        f"({rows_per_screen} per screen), camera=({camera_x:.1f}, {camera_y:.1f})"
    )

    return CameraCalculationResult(
        position=CameraPosition(x=camera_x, y=camera_y, z=1),
        reasoning=reasoning,
        visible_rows=visible_rows,
    )


def should_move_camera_for_new_content(
    target_row: int,
    current_camera_y: float,
    canvas_dimensions: CanvasDimensions
) -> bool:
    """
    Decide whether the camera must move to show target_row.

    True when the row is outside the current viewport or fewer than
    MIN_EMPTY_ROWS_BELOW rows remain visible below it.
    """
    dims = canvas_dimensions
    viewport_top_y = -current_camera_y

    current_top_row = max(1, math.floor((viewport_top_y - dims.top_margin) / dims.row_height) + 1)
    current_bottom_row = current_top_row + math.floor(dims.window_height / dims.row_height) - 1

    is_target_visible = current_top_row <= target_row <= current_bottom_row
    has_enough_space_below = (current_bottom_row - target_row) >= MIN_EMPTY_ROWS_BELOW

    should_move = not is_target_visible or not has_enough_space_below
    logger.debug(
        f"[CAMERA] Move check for row {target_row}: visible rows {current_top_row}-{current_bottom_row}, "
        f"move={should_move}"
    )
    return should_move
