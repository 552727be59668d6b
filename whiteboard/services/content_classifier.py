"""
Content Type Classifier
=======================

Maps a piece of text (plus the generator's instruction and recent grid
content) to a content type with a confidence score.

Decision order, first match wins:
1. Explicit keyword in the instruction
2. First content on an empty canvas -> title
3. Text patterns (formula, bullet, numbered, definition, heading)
4. Educational flow after the most recent content
5. Default: definition
"""

import logging
import re
from typing import Callable, List, Optional, Tuple
from pydantic import BaseModel, Field

from ..models.content_type_models import ContentType
from ..models.grid_models import GridContent

logger = logging.getLogger(__name__)


class DetectionContext(BaseModel):
    """What the classifier knows about the canvas."""
    recent_content: List[GridContent] = Field(default_factory=list)  # newest first
    is_first_content: bool = False


class DetectionResult(BaseModel):
    """Classification outcome."""
    content_type: ContentType
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    extra_spacing_rows: int = 0


class ContentAnalysis(BaseModel):
    """Validated detection plus alternatives, for diagnostics."""
    detection: DetectionResult
    alternatives: List[DetectionResult] = Field(default_factory=list)
    recommendation: str = ""


SPACING_KEYWORDS = [
    "next paragraph",
    "new paragraph",
    "new section",
    "next section",
    "skip a line",
    "leave space",
    "add space",
    "blank line",
    "new topic",
    "next topic",
    "start fresh",
    "separate section",
    "break here",
    "space before",
    "gap before",
]

# Subheading is checked before heading and title so that "subheading" and
# "subsection" are not claimed by the shorter keywords.
EXPLICIT_KEYWORDS: List[Tuple[List[str], ContentType, float]] = [
    (["subheading", "subheader", "subsection"], ContentType.SUBHEADING, 0.9),
    (["title", "main title", "lesson title"], ContentType.TITLE, 0.95),
    (["heading", "header", "section"], ContentType.HEADING, 0.9),
    (["definition", "define", "explanation", "explain"], ContentType.DEFINITION, 0.85),
    (["bullet", "bullet point", "list item"], ContentType.BULLET, 0.9),
    (["number", "numbered", "step", "steps"], ContentType.NUMBERED, 0.9),
    (["formula", "equation", "math"], ContentType.FORMULA, 0.95),
    (["note", "side note", "aside", "comment"], ContentType.NOTE, 0.85),
    (["example", "demo", "demonstration"], ContentType.EXAMPLE, 0.85),
    (["summary", "conclusion", "recap"], ContentType.SUMMARY, 0.9),
]

_ARITHMETIC = re.compile(r"\b\d+\s*[+\-*/]\s*\d+")
_BULLET_START = re.compile(r"^[•\-*]")
_NUMBERED_START = re.compile(r"^\d+\.")


def _is_formula(text: str) -> bool:
    return any(symbol in text for symbol in ("=", "+", "∑", "∫")) or bool(_ARITHMETIC.search(text))


def _is_definition(text: str) -> bool:
    return ":" in text and len(text.split(":", 1)[0]) < 30


def _is_heading(text: str) -> bool:
    return len(text) < 50 and "." not in text and "," not in text


PATTERNS: List[Tuple[Callable[[str], bool], ContentType, float, str]] = [
    (_is_formula, ContentType.FORMULA, 0.85, "Text contains mathematical symbols or expressions"),
    (lambda t: bool(_BULLET_START.match(t)), ContentType.BULLET, 0.8, "Text starts with bullet point marker"),
    (lambda t: bool(_NUMBERED_START.match(t)), ContentType.NUMBERED, 0.8, "Text starts with number and period"),
    (_is_definition, ContentType.DEFINITION, 0.7, "Text contains colon with short prefix, likely a definition"),
    (_is_heading, ContentType.HEADING, 0.6, "Short text without punctuation, likely a heading"),
]

EDUCATIONAL_FLOW = {
    ContentType.TITLE: (ContentType.HEADING, 0.7, "Following title with heading maintains educational flow"),
    ContentType.HEADING: (ContentType.DEFINITION, 0.6, "Following heading with definition is common educational pattern"),
    ContentType.DEFINITION: (ContentType.BULLET, 0.6, "Following definition with bullet points for elaboration"),
}

FLOW_ALTERNATIVES = {
    ContentType.TITLE: [ContentType.HEADING, ContentType.DEFINITION],
    ContentType.HEADING: [ContentType.SUBHEADING, ContentType.DEFINITION, ContentType.BULLET],
    ContentType.SUBHEADING: [ContentType.DEFINITION, ContentType.BULLET, ContentType.EXAMPLE],
    ContentType.DEFINITION: [ContentType.BULLET, ContentType.NUMBERED, ContentType.EXAMPLE],
    ContentType.BULLET: [ContentType.BULLET, ContentType.EXAMPLE, ContentType.DEFINITION],
    ContentType.NUMBERED: [ContentType.NUMBERED, ContentType.EXAMPLE, ContentType.SUMMARY],
    ContentType.FORMULA: [ContentType.DEFINITION, ContentType.EXAMPLE, ContentType.NOTE],
    ContentType.NOTE: [ContentType.DEFINITION, ContentType.EXAMPLE],
    ContentType.EXAMPLE: [ContentType.BULLET, ContentType.SUMMARY, ContentType.HEADING],
    ContentType.SUMMARY: [ContentType.HEADING, ContentType.TITLE],
}

LOW_CONFIDENCE_THRESHOLD = 0.5
MAX_ALTERNATIVES = 3


def detect_spacing_from_instruction(instruction: Optional[str]) -> int:
    """1 extra row when the instruction asks for separation, else 0."""
    lower_instruction = (instruction or "").lower()
    return 1 if any(keyword in lower_instruction for keyword in SPACING_KEYWORDS) else 0


def detect_basic_content_type(text: str) -> ContentType:
    """Pattern heuristic alone, without instruction or context."""
    if _is_heading(text):
        return ContentType.HEADING
    if _is_formula(text):
        return ContentType.FORMULA
    if _BULLET_START.match(text):
        return ContentType.BULLET
    if _NUMBERED_START.match(text):
        return ContentType.NUMBERED
    return ContentType.DEFINITION


def _last_content_type(context: DetectionContext) -> Optional[ContentType]:
    if not context.recent_content:
        return None
    try:
        return ContentType(context.recent_content[0].content_type)
    except ValueError:
        return None


class ContentTypeClassifier:
    """Heuristic content type detection with validation."""

    def detect(
        self,
        text: str,
        instruction: Optional[str],
        context: DetectionContext
    ) -> DetectionResult:
        """Raw detection, before validation."""
        lower_instruction = (instruction or "").lower()
        extra_spacing = detect_spacing_from_instruction(instruction)

        for keywords, content_type, confidence in EXPLICIT_KEYWORDS:
            for keyword in keywords:
                if keyword in lower_instruction:
                    return DetectionResult(
                        content_type=content_type,
                        confidence=confidence,
                        reasoning=f'Explicit instruction contains "{keyword}" indicating {content_type.value} content type',
                        extra_spacing_rows=extra_spacing,
                    )

        if context.is_first_content and len(text) < 100:
            return DetectionResult(
                content_type=ContentType.TITLE,
                confidence=0.8,
                reasoning="First content on empty canvas, likely a title",
                extra_spacing_rows=extra_spacing,
            )

        for matches, content_type, confidence, reasoning in PATTERNS:
            if matches(text):
                return DetectionResult(
                    content_type=content_type,
                    confidence=confidence,
                    reasoning=reasoning,
                    extra_spacing_rows=extra_spacing,
                )

        last_type = _last_content_type(context)
        if last_type in EDUCATIONAL_FLOW:
            content_type, confidence, reasoning = EDUCATIONAL_FLOW[last_type]
            return DetectionResult(
                content_type=content_type,
                confidence=confidence,
                reasoning=reasoning,
                extra_spacing_rows=extra_spacing,
            )

        return DetectionResult(
            content_type=ContentType.DEFINITION,
            confidence=0.4,
            reasoning="Default to definition for general explanatory text",
            extra_spacing_rows=extra_spacing,
        )

    def validate(
        self,
        detection: DetectionResult,
        text: str,
        context: DetectionContext
    ) -> DetectionResult:
        """Replace low-confidence results and demote repeated titles."""
        if detection.confidence < LOW_CONFIDENCE_THRESHOLD:
            fallback = detect_basic_content_type(text)
            return DetectionResult(
                content_type=fallback,
                confidence=LOW_CONFIDENCE_THRESHOLD,
                reasoning=f"Low confidence detection, using fallback: {fallback.value}",
                extra_spacing_rows=detection.extra_spacing_rows,
            )

        if (
            detection.content_type == ContentType.TITLE
            and not context.is_first_content
            and context.recent_content
        ):
            return DetectionResult(
                content_type=ContentType.HEADING,
                confidence=max(0.6, detection.confidence - 0.2),
                reasoning="Adjusted from title to heading - multiple titles uncommon",
                extra_spacing_rows=detection.extra_spacing_rows,
            )

        return detection

    def classify(
        self,
        text: str,
        instruction: Optional[str] = None,
        context: Optional[DetectionContext] = None
    ) -> DetectionResult:
        """
        Classify text into a content type.

        Args:
            text: Text to be placed
            instruction: Free-form instruction from the generator
            context: Recent content (newest first) and whether the canvas is empty

        Returns:
            Validated DetectionResult
        """
        context = context or DetectionContext()
        detection = self.validate(self.detect(text, instruction, context), text, context)
        logger.info(
            f"[CLASSIFIER] '{text[:40]}' -> {detection.content_type.value} "
            f"({detection.confidence:.2f}): {detection.reasoning}"
        )
        return detection

    def analyze(
        self,
        text: str,
        instruction: Optional[str] = None,
        context: Optional[DetectionContext] = None
    ) -> ContentAnalysis:
        """Classification with up to three alternatives and a recommendation."""
        context = context or DetectionContext()
        detection = self.classify(text, instruction, context)

        alternatives: List[DetectionResult] = []
        basic = detect_basic_content_type(text)
        if basic != detection.content_type:
            alternatives.append(DetectionResult(
                content_type=basic,
                confidence=0.5,
                reasoning="Alternative from basic pattern detection",
            ))

        last_type = _last_content_type(context)
        if last_type is not None:
            for alternative in FLOW_ALTERNATIVES.get(last_type, [ContentType.DEFINITION]):
                if alternative != detection.content_type:
                    alternatives.append(DetectionResult(
                        content_type=alternative,
                        confidence=0.4,
                        reasoning=f"Educational flow alternative after {last_type.value}",
                    ))

        alternatives = alternatives[:MAX_ALTERNATIVES]

        recommendation = (
            f"Detected as {detection.content_type.value} "
            f"({round(detection.confidence * 100)}% confidence). {detection.reasoning}."
        )
        if alternatives:
            top = alternatives[0]
            recommendation += f" Alternative: {top.content_type.value} if this is {top.reasoning.lower()}."
        if last_type is not None:
            recommendation += f" Following {last_type.value} content."

        return ContentAnalysis(detection=detection, alternatives=alternatives, recommendation=recommendation)
