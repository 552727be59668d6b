"""
Content Type Models
===================

Semantic content categories and their fixed layout templates.

Every piece of text placed on the whiteboard belongs to one of ten content
types. The type decides which grid columns the text spans, how it is styled
and how much vertical space surrounds it.
"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ContentType(str, Enum):
    """Semantic category of a text element."""
    TITLE = "title"
    HEADING = "heading"
    SUBHEADING = "subheading"
    DEFINITION = "definition"
    BULLET = "bullet"
    NUMBERED = "numbered"
    FORMULA = "formula"
    NOTE = "note"
    EXAMPLE = "example"
    SUMMARY = "summary"


class ContentTypeSpacing(BaseModel):
    """Empty rows kept above and below a content type."""
    top: int = Field(default=0, ge=0)
    bottom: int = Field(default=0, ge=0)


class ContentTypeLayout(BaseModel):
    """Layout template for a content type."""
    column_start: int = Field(ge=1, le=12)
    column_end: int = Field(ge=1, le=12)
    alignment: str = "start"            # start | middle | end
    font_size: str = "normal"           # small | normal | medium | large | xlarge
    font_weight: str = "normal"         # normal | medium | semibold | bold
    font_style: str = "normal"          # normal | italic
    font_family: str = "default"        # default | monospace
    color: str = "black"
    background_color: Optional[str] = None
    border: str = "none"                # none | top | bottom | full
    spacing: ContentTypeSpacing = Field(default_factory=ContentTypeSpacing)
    prefix: Optional[str] = None        # bullet glyph
    auto_number: bool = False           # numbered lists

    @property
    def column_span(self) -> int:
        return self.column_end - self.column_start + 1


BULLET_GLYPH = "•"

CONTENT_TYPE_LAYOUTS: Dict[ContentType, ContentTypeLayout] = {
    ContentType.TITLE: ContentTypeLayout(
        column_start=3,
        column_end=10,
        alignment="middle",
        font_size="xlarge",
        font_weight="bold",
        spacing=ContentTypeSpacing(top=1, bottom=2),
    ),
    ContentType.HEADING: ContentTypeLayout(
        column_start=2,
        column_end=11,
        font_size="large",
        font_weight="bold",
        spacing=ContentTypeSpacing(top=1, bottom=1),
    ),
    ContentType.SUBHEADING: ContentTypeLayout(
        column_start=3,
        column_end=11,
        font_size="medium",
        font_weight="semibold",
    ),
    ContentType.DEFINITION: ContentTypeLayout(
        column_start=1,
        column_end=12,
        spacing=ContentTypeSpacing(top=0, bottom=1),
    ),
    ContentType.BULLET: ContentTypeLayout(
        column_start=2,
        column_end=12,
        prefix=BULLET_GLYPH,
    ),
    ContentType.NUMBERED: ContentTypeLayout(
        column_start=2,
        column_end=12,
        auto_number=True,
    ),
    ContentType.FORMULA: ContentTypeLayout(
        column_start=4,
        column_end=9,
        alignment="middle",
        font_family="monospace",
        spacing=ContentTypeSpacing(top=1, bottom=1),
    ),
    ContentType.NOTE: ContentTypeLayout(
        column_start=8,
        column_end=12,
        font_size="small",
        font_style="italic",
        color="grey",
    ),
    ContentType.EXAMPLE: ContentTypeLayout(
        column_start=2,
        column_end=11,
        background_color="light-grey",
        spacing=ContentTypeSpacing(top=1, bottom=1),
    ),
    ContentType.SUMMARY: ContentTypeLayout(
        column_start=1,
        column_end=12,
        font_weight="medium",
        border="top",
        spacing=ContentTypeSpacing(top=2, bottom=1),
    ),
}

CONTENT_TYPE_DESCRIPTIONS: Dict[ContentType, str] = {
    ContentType.TITLE: "Main lesson title, centered and prominent",
    ContentType.HEADING: "Major section header, left-aligned and bold",
    ContentType.SUBHEADING: "Subsection header, indented and medium weight",
    ContentType.DEFINITION: "Key definition or explanation, full width",
    ContentType.BULLET: "Bullet point item, indented with bullet prefix",
    ContentType.NUMBERED: "Numbered list item, indented with auto-numbering",
    ContentType.FORMULA: "Mathematical formula, centered and monospace",
    ContentType.NOTE: "Side note or clarification, right-aligned and italic",
    ContentType.EXAMPLE: "Example or demonstration, highlighted background",
    ContentType.SUMMARY: "Summary or conclusion, full width with top border",
}


def get_content_type_layout(content_type: ContentType) -> ContentTypeLayout:
    """Get the layout template for a content type."""
    return CONTENT_TYPE_LAYOUTS[ContentType(content_type)]


def get_content_type_column_span(content_type: ContentType) -> int:
    """Number of grid columns a content type spans by default."""
    return get_content_type_layout(content_type).column_span


def get_all_content_types() -> List[dict]:
    """
    Describe every content type with its layout.

    Returns:
        List of dicts with type, description and layout, in enum order
    """
    return [
        {
            "type": content_type.value,
            "description": CONTENT_TYPE_DESCRIPTIONS[content_type],
            "layout": CONTENT_TYPE_LAYOUTS[content_type].model_dump(),
        }
        for content_type in ContentType
    ]
