"""
Tests for camera positioning and move decisions
"""

import pytest

from whiteboard.services.camera_manager import (
    MIN_EMPTY_ROWS_BELOW,
    calculate_optimal_camera_position,
    should_move_camera_for_new_content,
)
from whiteboard.services.canvas_calculator import calculate_canvas_dimensions


def test_late_row_keeps_empty_rows_below(camera_dims):
    result = calculate_optimal_camera_position(20, camera_dims)

    assert result.visible_rows.top == 15
    assert result.visible_rows.bottom == 25
    assert result.visible_rows.target == 20
    assert result.visible_rows.empty_rows_below == MIN_EMPTY_ROWS_BELOW
    assert result.position.y == pytest.approx(-(40 + 14 * 80))
    assert result.position.x == pytest.approx(0)
    assert result.position.z == 1


@pytest.mark.parametrize("size", [(1461, 793), (800, 600), (1920, 1080), (320, 480)])
@pytest.mark.parametrize("target_row", [1, 5, 11])
def test_early_rows_show_from_top(size, target_row):
    dims = calculate_canvas_dimensions(*size)

    result = calculate_optimal_camera_position(target_row, dims)

    assert result.visible_rows.top == 1
    assert result.position.y == pytest.approx(-dims.top_margin)
    assert "early in the document" in result.reasoning


def test_row_twelve_scrolls(camera_dims):
    result = calculate_optimal_camera_position(12, camera_dims)

    assert result.visible_rows.top == 7
    assert result.visible_rows.bottom == 17


def test_camera_x_centers_canvas(reference_dims):
    result = calculate_optimal_camera_position(3, reference_dims)

    assert result.position.x == pytest.approx(0)


class TestShouldMoveCamera:
    def test_row_with_room_below_stays(self, camera_dims):
        assert should_move_camera_for_new_content(3, -40, camera_dims) is False

    def test_row_near_bottom_moves(self, camera_dims):
        assert should_move_camera_for_new_content(8, -40, camera_dims) is True

    def test_row_outside_viewport_moves(self, camera_dims):
        assert should_move_camera_for_new_content(30, -40, camera_dims) is True

    def test_consistent_with_optimal_position(self, camera_dims):
        camera_y = calculate_optimal_camera_position(20, camera_dims).position.y

        assert should_move_camera_for_new_content(20, camera_y, camera_dims) is False
        assert should_move_camera_for_new_content(10, camera_y, camera_dims) is True
