"""
Canvas Calculator
=================

Pure geometry for the whiteboard: responsive canvas frames, width and
horizontal-position parsing, and absolute text box coordinates.

All coordinates are absolute from the canvas origin (0, 0). They do not
depend on the camera offset or zoom, so text placed while the viewport is
in one position still renders correctly after the camera moves.
"""

import logging
import re
from typing import Optional, Tuple, Union

from ..models.canvas_models import CanvasDimensions, PositionSpec, TextBoxPosition

logger = logging.getLogger(__name__)

# Space kept between adjacent fractional-width boxes
TEXT_BOX_GUTTER = 8
DEFAULT_WIDTH_PX = 200

_DECIMAL_PATTERN = re.compile(r"^0?\.\d+$")
_FULL_WIDTH_SPECS = {"full", "1", "1/1"}

COLOR_MAP = {
    "black": "black",
    "grey": "grey",
    "gray": "grey",
    "red": "red",
    "light-red": "light-red",
    "blue": "blue",
    "light-blue": "light-blue",
    "green": "green",
    "light-green": "light-green",
    "yellow": "yellow",
    "orange": "orange",
    "purple": "violet",
    "violet": "violet",
    "light-violet": "light-violet",
    "white": "white",
}

FONT_SIZE_MAP = {
    "small": "s",
    "normal": "m",
    "medium": "m",
    "large": "l",
    "xlarge": "xl",
    "extra-large": "xl",
}

ALIGNMENT_MAP = {
    "left": "start",
    "start": "start",
    "center": "middle",
    "middle": "middle",
    "right": "end",
    "end": "end",
}


def calculate_canvas_dimensions(window_width: float, window_height: float) -> CanvasDimensions:
    """
    Derive the responsive canvas frame for a window size.

    Args:
        window_width: Viewport width in pixels
        window_height: Viewport height in pixels

    Returns:
        CanvasDimensions with padding, margins and row height
    """
    horizontal_padding = window_width / 16
    canvas_width = window_width - horizontal_padding * 2
    top_margin = max(window_height / 24, 30)
    canvas_height = window_height - top_margin
    row_height = max(window_height / 12, 60)

    return CanvasDimensions(
        window_width=window_width,
        window_height=window_height,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        horizontal_padding=horizontal_padding,
        top_margin=top_margin,
        row_height=row_height,
    )


def _parse_fraction(spec: str) -> Optional[float]:
    """Parse "a/b" or "0.xx" into a float, or None."""
    if "/" in spec:
        numerator, _, denominator = spec.partition("/")
        try:
            num = float(numerator.strip())
            den = float(denominator.strip())
        except ValueError:
            return None
        if num and den:
            return num / den
        return None

    if _DECIMAL_PATTERN.match(spec):
        return float(spec)

    return None


def parse_width(width_spec: Union[float, str], canvas_width: float) -> float:
    """
    Convert a width spec into pixels. Never raises.

    Numbers are pixels (1 means one pixel). Strings may be fractions
    ("1/3"), decimals ("0.25"), percentages ("50%"), pixels ("200px") or
    "full" / "1" / "1/1" for the whole canvas width. Anything else falls
    back to 200px with a warning.
    """
    if isinstance(width_spec, (int, float)):
        return float(width_spec)

    spec = str(width_spec).lower().strip()

    if spec in _FULL_WIDTH_SPECS:
        return canvas_width

    fraction = _parse_fraction(spec)
    if fraction is not None:
        return fraction * canvas_width

    try:
        if spec.endswith("%"):
            return float(spec[:-1]) / 100 * canvas_width
        if spec.endswith("px"):
            return float(spec[:-2])
    except ValueError:
        pass

    logger.warning(f"[CANVAS] Unable to parse width spec {width_spec!r}, using {DEFAULT_WIDTH_PX}px default")
    return float(DEFAULT_WIDTH_PX)


def parse_horizontal_position(
    position_spec: Union[float, str],
    canvas_width: float,
    text_box_width: float
) -> float:
    """
    Convert a horizontal position into an x offset inside the canvas.

    Fractions are taken directly as a share of the canvas width and are not
    adjusted by the box width, so boxes at 0, 1/3 and 2/3 on one row do not
    overlap. Unparseable input falls back to the left edge with a warning.
    """
    if isinstance(position_spec, (int, float)):
        return position_spec * canvas_width

    spec = str(position_spec).lower().strip()

    if spec == "left":
        return 0.0
    if spec in ("center", "middle"):
        return (canvas_width - text_box_width) / 2
    if spec == "right":
        return canvas_width - text_box_width

    fraction = _parse_fraction(spec)
    if fraction is not None:
        return fraction * canvas_width

    logger.warning(f"[CANVAS] Unable to parse position spec {position_spec!r}, using left default")
    return 0.0


def _horizontal_fraction(position_spec: Union[float, str]) -> Optional[float]:
    if isinstance(position_spec, (int, float)):
        return float(position_spec)
    return _parse_fraction(str(position_spec).lower().strip())


def calculate_text_box_position(
    position_spec: PositionSpec,
    canvas_dimensions: CanvasDimensions
) -> TextBoxPosition:
    """
    Calculate the absolute pixel box for a position spec.

    Args:
        position_spec: Row, horizontal position and width
        canvas_dimensions: Canvas frame of the session

    Returns:
        TextBoxPosition measured from the canvas origin
    """
    dims = canvas_dimensions

    width = parse_width(position_spec.width, dims.canvas_width)
    if isinstance(position_spec.width, str) and "/" in position_spec.width:
        width -= TEXT_BOX_GUTTER

    y = dims.top_margin + (position_spec.row - 1) * dims.row_height

    relative_x = parse_horizontal_position(position_spec.horizontal_position, dims.canvas_width, width)
    fraction = _horizontal_fraction(position_spec.horizontal_position)
    x_offset = TEXT_BOX_GUTTER / 2 if fraction is not None and fraction > 0 else 0

    x = dims.horizontal_padding + relative_x + x_offset

    logger.debug(
        f"[CANVAS] Row {position_spec.row} -> x={x:.1f}, y={y:.1f}, "
        f"width={width:.1f} (spec width={position_spec.width!r}, position={position_spec.horizontal_position!r})"
    )
    return TextBoxPosition(x=x, y=y, width=width, height=dims.row_height)


def map_text_alignment(align: Optional[str]) -> str:
    """Map an alignment token to start | middle | end (default start)."""
    return ALIGNMENT_MAP.get((align or "").lower(), "start")


def map_font_size(size: Optional[str]) -> str:
    """Map a font size token to s | m | l | xl (default m)."""
    return FONT_SIZE_MAP.get((size or "").lower(), "m")


def map_color(color: Optional[str]) -> str:
    """Map a color name onto the rendering palette (default black)."""
    return COLOR_MAP.get((color or "black").lower(), "black")


def map_font_family(family: Optional[str]) -> str:
    return "mono" if family == "monospace" else "draw"


class CanvasCalculator:
    """
    Canvas frame policy for a session.

    With a reference viewport every session uses the same coordinate system
    whatever the live window size or zoom; without one the live viewport
    size is used.
    """

    def __init__(self, reference_viewport: Optional[Tuple[float, float]] = None):
        self.reference_viewport = reference_viewport

    def calculate_canvas_dimensions(self, window_width: float, window_height: float) -> CanvasDimensions:
        if self.reference_viewport is not None:
            ref_width, ref_height = self.reference_viewport
            if (window_width, window_height) != (ref_width, ref_height):
                logger.debug(
                    f"[CANVAS] Viewport {window_width}x{window_height} normalized to reference {ref_width}x{ref_height}"
                )
            return calculate_canvas_dimensions(ref_width, ref_height)
        return calculate_canvas_dimensions(window_width, window_height)

    def calculate_text_box_position(
        self,
        position_spec: PositionSpec,
        canvas_dimensions: CanvasDimensions
    ) -> TextBoxPosition:
        return calculate_text_box_position(position_spec, canvas_dimensions)
