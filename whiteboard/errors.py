"""
Whiteboard Errors
=================

Per-event failures raised by the layout engine. The batch drivers catch
these and report them individually; they never abort a batch.

Malformed width/position strings are not errors: the canvas calculator
logs them and falls back to a documented default.
"""


class WhiteboardError(Exception):
    """Base class for engine errors reported per event."""


class EventSchemaError(WhiteboardError):
    """Event does not match any known variant, or lacks fields its mode needs."""


class ShapeReferenceError(WhiteboardError):
    """update/delete/move targets an unknown shape, or create reuses a known id."""

    def __init__(self, shape_id: str, message: str):
        super().__init__(message)
        self.shape_id = shape_id


class CanvasStateError(WhiteboardError):
    """Pixel conversion requested without canvas dimensions."""
