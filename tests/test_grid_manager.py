"""
Tests for grid occupancy, placement search and snapshots
"""

import json

import pytest

from whiteboard.canvas.grid_manager import GridManager
from whiteboard.models.grid_models import GridState


def place(grid, content_id, row, start, end, content_type="definition"):
    return grid.update_grid_state(content_id, row, start, end, content_type, f"text of {content_id}")


def test_new_grid_is_empty(grid_manager):
    assert grid_manager.current_row == 1
    assert grid_manager.is_empty
    assert grid_manager.get_content_history() == []
    assert grid_manager.get_canvas_dimensions() == {"width": 1200, "height": 0}


def test_update_marks_cells_and_advances_row(grid_manager):
    position = place(grid_manager, "title-1", 1, 3, 10, "title")

    assert position.column_span == 8
    assert grid_manager.current_row == 2
    assert not grid_manager.is_empty
    assert not grid_manager.is_position_available(1, 3, 10)
    assert not grid_manager.is_position_available(1, 10, 12)
    assert grid_manager.is_position_available(1, 1, 2)
    assert grid_manager.is_position_available(1, 11, 12)
    assert grid_manager.get_canvas_dimensions()["height"] == 120


def test_placing_on_earlier_row_keeps_current_row(grid_manager):
    place(grid_manager, "a", 5, 1, 12)
    place(grid_manager, "b", 2, 1, 6)

    assert grid_manager.current_row == 6


@pytest.mark.parametrize("span", [1, 4, 8, 12])
def test_find_next_on_empty_grid(grid_manager, span):
    position = grid_manager.find_next_available_position(span)

    assert position.row == 1
    assert position.column_start == 1
    assert position.column_end == span


def test_find_next_uses_current_row_after_content(grid_manager):
    place(grid_manager, "title-1", 1, 3, 10, "title")

    position = grid_manager.find_next_available_position(4)

    assert (position.row, position.column_start, position.column_end) == (2, 1, 4)


def test_find_next_fills_partially_occupied_row():
    state = GridState(current_row=1, occupied_cells={(1, col) for col in range(1, 6)})
    grid = GridManager(state=state)

    position = grid.find_next_available_position(4)

    assert (position.row, position.column_start, position.column_end) == (1, 6, 9)


def test_find_next_skips_full_row():
    state = GridState(current_row=1, occupied_cells={(1, col) for col in range(1, 13)})
    grid = GridManager(state=state)

    position = grid.find_next_available_position(4)

    assert (position.row, position.column_start, position.column_end) == (2, 1, 4)


@pytest.mark.parametrize("span", [0, 13, -1])
def test_invalid_span_raises(grid_manager, span):
    with pytest.raises(ValueError):
        grid_manager.find_next_available_position(span)


def test_find_available_position_prefers_start(grid_manager):
    position = grid_manager.find_available_position(4, 3, preferred_start=5)

    assert (position.row, position.column_start, position.column_end) == (4, 5, 7)


def test_find_available_position_falls_back_in_row(grid_manager):
    place(grid_manager, "title-1", 1, 3, 10, "title")

    position = grid_manager.find_available_position(1, 2, preferred_start=3)

    assert (position.row, position.column_start, position.column_end) == (1, 1, 2)


def test_find_available_position_falls_back_to_next_row(grid_manager):
    place(grid_manager, "title-1", 1, 3, 10, "title")

    position = grid_manager.find_available_position(1, 3, preferred_start=3)

    assert (position.row, position.column_start, position.column_end) == (2, 1, 3)


def test_placements_never_overlap(grid_manager):
    for index, span in enumerate([8, 12, 3, 3, 6, 1, 12]):
        position = grid_manager.find_next_available_position(span)
        assert grid_manager.is_position_available(position.row, position.column_start, position.column_end)
        place(grid_manager, f"c{index}", position.row, position.column_start, position.column_end)

    cells = [
        (content.row, col)
        for content in grid_manager.get_content_history()
        for col in range(content.column_start, content.column_end + 1)
    ]
    assert len(cells) == len(set(cells))


def test_recent_content_is_newest_first(grid_manager):
    for index in range(1, 5):
        place(grid_manager, f"c{index}", index, 1, 12)

    context = grid_manager.get_current_grid_state()

    assert [content.id for content in context.recent_content] == ["c4", "c3", "c2"]
    assert context.current_row == 5
    assert context.total_columns == 12


def test_release_frees_cells_but_keeps_history(grid_manager):
    place(grid_manager, "a", 1, 1, 12)

    assert grid_manager.release_content("a") is True
    assert grid_manager.is_position_available(1, 1, 12)
    assert grid_manager.find_content("a") is not None
    assert grid_manager.current_row == 2
    assert grid_manager.release_content("missing") is False


def test_reset(grid_manager):
    place(grid_manager, "a", 1, 1, 12)
    place(grid_manager, "b", 3, 2, 11)

    grid_manager.reset()

    assert grid_manager.current_row == 1
    assert grid_manager.is_empty
    assert grid_manager.state.occupied_cells == set()
    assert grid_manager.get_canvas_dimensions()["height"] == 0


def test_snapshot_round_trip(grid_manager):
    place(grid_manager, "title-1", 1, 3, 10, "title")
    place(grid_manager, "heading-1", 5, 2, 11, "heading")

    snapshot = json.loads(json.dumps(grid_manager.to_snapshot()))
    restored = GridManager.from_snapshot(snapshot)

    assert restored.current_row == grid_manager.current_row
    assert restored.state.occupied_cells == grid_manager.state.occupied_cells
    assert [c.id for c in restored.get_content_history()] == ["title-1", "heading-1"]
    assert restored.get_metadata() == grid_manager.get_metadata()


def test_from_empty_snapshot():
    grid = GridManager.from_snapshot(None)

    assert grid.current_row == 1
    assert grid.is_empty


def test_update_content_moves_cells_in_place(grid_manager):
    place(grid_manager, "a", 1, 3, 10, "title")
    place(grid_manager, "b", 2, 1, 12)

    position = grid_manager.update_content("a", 1, 1, 4, "title", "Renamed")

    assert (position.row, position.column_start, position.column_end) == (1, 1, 4)
    assert grid_manager.is_position_available(1, 5, 12)
    assert not grid_manager.is_position_available(1, 1, 4)
    assert [c.id for c in grid_manager.get_content_history()] == ["a", "b"]
    assert grid_manager.find_content("a").text == "Renamed"
    assert grid_manager.current_row == 3


def test_update_content_past_current_row_advances_it(grid_manager):
    place(grid_manager, "a", 1, 1, 12)

    grid_manager.update_content("a", 7, 1, 12, "definition", "moved")

    assert grid_manager.current_row == 8
    assert grid_manager.is_position_available(1, 1, 12)


def test_own_cells_count_as_free(grid_manager):
    place(grid_manager, "a", 1, 3, 10, "title")

    assert not grid_manager.is_position_available(1, 1, 4)
    assert grid_manager.is_position_available(1, 1, 4, exclude_id="a")
    position = grid_manager.find_available_position(1, 8, preferred_start=4, exclude_id="a")
    assert (position.row, position.column_start, position.column_end) == (1, 4, 11)


def test_placed_content_skips_deleted_and_replaced(grid_manager):
    place(grid_manager, "a", 1, 1, 12)
    place(grid_manager, "b", 2, 1, 12)
    place(grid_manager, "c", 3, 1, 12)
    grid_manager.release_content("b")
    grid_manager.release_content("c")
    place(grid_manager, "c", 4, 1, 12)

    assert [(c.id, c.row) for c in grid_manager.get_placed_content()] == [("a", 1), ("c", 4)]
    assert grid_manager.release_content("b") is False


def test_snapshot_keeps_released_ids(grid_manager):
    place(grid_manager, "a", 1, 1, 12)
    grid_manager.release_content("a")

    restored = GridManager.from_snapshot(json.loads(json.dumps(grid_manager.to_snapshot())))

    assert restored.get_placed_content() == []
    assert restored.state.released_ids == {"a"}
