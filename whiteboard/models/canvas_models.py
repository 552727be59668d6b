"""
Canvas Models for the Whiteboard
================================

Models for canvas dimensions, explicit position specs, pixel boxes and camera
positions.
"""

from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire-facing models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CanvasDimensions(CamelModel):
    """Responsive canvas frame derived from a window size."""
    window_width: float
    window_height: float
    canvas_width: float
    canvas_height: float
    horizontal_padding: float
    top_margin: float
    row_height: float = Field(gt=0)


class Viewport(CamelModel):
    """Size of the client viewport as reported by the caller."""
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class PositionSpec(CamelModel):
    """
    Explicit, non-semantic placement of a text box.

    horizontal_position is "left" | "center" | "middle" | "right", a 0-1
    number, or a fraction/decimal string. width is a number of pixels or a
    string ("1/3", "0.5", "50%", "200px", "full").
    """
    row: int = Field(ge=1)
    horizontal_position: Union[float, str] = "left"
    width: Union[float, str] = "full"
    text_align: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    color: Optional[str] = None
    bullet: bool = False


class TextBoxPosition(BaseModel):
    """Absolute pixel box, measured from the canvas origin."""
    x: float
    y: float
    width: float
    height: float


class CameraPosition(BaseModel):
    """Camera offset and zoom."""
    x: float
    y: float
    z: float = 1


class VisibleRows(CamelModel):
    """Inclusive row window shown by a camera position."""
    top: int
    bottom: int
    target: int
    empty_rows_below: int


class CameraCalculationResult(CamelModel):
    """Camera position together with the reasoning and visible row window."""
    position: CameraPosition
    reasoning: str
    visible_rows: VisibleRows
