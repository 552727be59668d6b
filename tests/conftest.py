"""
Pytest configuration for whiteboard layout tests

Provides canvas frames, grid managers and transformers shared across tests
"""

import pytest

from whiteboard.canvas.grid_manager import GridManager
from whiteboard.models.canvas_models import CanvasDimensions
from whiteboard.services.canvas_calculator import calculate_canvas_dimensions
from whiteboard.services.event_transformer import EventTransformer
from whiteboard.services.positioning import ContentTypePositioning, ExplicitPositioning


@pytest.fixture
def reference_dims():
    """Canvas frame of the 1461x793 reference viewport"""
    return calculate_canvas_dimensions(1461, 793)


@pytest.fixture
def camera_dims():
    """Hand-built frame: 80px rows, 40px top margin, 969px tall window"""
    return CanvasDimensions(
        window_width=1600,
        window_height=969,
        canvas_width=1400,
        canvas_height=929,
        horizontal_padding=100,
        top_margin=40,
        row_height=80,
    )


@pytest.fixture
def grid_manager():
    return GridManager()


@pytest.fixture
def transformer(grid_manager, reference_dims):
    """Content-type driven transformer on an empty grid"""
    return EventTransformer(grid_manager, ContentTypePositioning(grid_manager), reference_dims)


@pytest.fixture
def explicit_transformer(grid_manager, reference_dims):
    """Explicit-position transformer on an empty grid"""
    return EventTransformer(grid_manager, ExplicitPositioning(), reference_dims)


def text_event(event_type, shape_id, text="", intent="", **shape_fields):
    """Build a raw create/update event dict the way the generator sends it"""
    shape = {"type": "text", "shapeId": shape_id, "note": "", "text": text}
    shape.update(shape_fields)
    return {"type": event_type, "shape": shape, "intent": intent}
