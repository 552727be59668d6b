"""
Tests for content type classification
"""

import pytest

from whiteboard.canvas.grid_manager import GridManager
from whiteboard.models.content_type_models import ContentType
from whiteboard.services.content_classifier import (
    ContentTypeClassifier,
    DetectionContext,
    DetectionResult,
    detect_basic_content_type,
    detect_spacing_from_instruction,
)


@pytest.fixture
def classifier():
    return ContentTypeClassifier()


def context_after(*placed):
    """Detection context for a grid holding (id, content_type) items in order"""
    grid = GridManager()
    for row, (content_id, content_type) in enumerate(placed, start=1):
        grid.update_grid_state(content_id, row, 1, 12, content_type, content_id)
    return DetectionContext(
        recent_content=grid.get_current_grid_state().recent_content,
        is_first_content=grid.is_empty,
    )


def test_first_short_text_is_title(classifier):
    result = classifier.classify("Newton's Laws of Motion", None, DetectionContext(is_first_content=True))

    assert result.content_type == ContentType.TITLE
    assert result.confidence >= 0.8


@pytest.mark.parametrize("instruction,expected", [
    ("Add a bullet point about inertia", ContentType.BULLET),
    ("Write the subheading", ContentType.SUBHEADING),
    ("New section on forces", ContentType.HEADING),
    ("Show the equation", ContentType.FORMULA),
    ("A quick side note", ContentType.NOTE),
    ("Give an example", ContentType.EXAMPLE),
    ("Wrap up with a recap", ContentType.SUMMARY),
    ("List the steps", ContentType.NUMBERED),
    ("Define the term", ContentType.DEFINITION),
])
def test_instruction_keywords(classifier, instruction, expected):
    result = classifier.classify("Some text here, with a comma.", instruction, context_after(("t", "title")))

    assert result.content_type == expected
    assert result.confidence >= 0.85


def test_subheading_keyword_wins_over_heading(classifier):
    result = classifier.detect("Forces", "add a subheading", DetectionContext())

    assert result.content_type == ContentType.SUBHEADING


def test_explicit_title_is_demoted_after_content(classifier):
    result = classifier.classify("Second Topic", "main title", context_after(("t", "title")))

    assert result.content_type == ContentType.HEADING
    assert result.confidence == pytest.approx(0.75)
    assert "multiple titles" in result.reasoning


def test_explicit_title_kept_on_empty_canvas(classifier):
    result = classifier.classify("Second Topic", "main title", DetectionContext(is_first_content=True))

    assert result.content_type == ContentType.TITLE
    assert result.confidence == pytest.approx(0.95)


@pytest.mark.parametrize("text,expected,confidence", [
    ("F = ma", ContentType.FORMULA, 0.85),
    ("2 * 3 is six", ContentType.FORMULA, 0.85),
    ("- mass times acceleration", ContentType.BULLET, 0.8),
    ("• objects resist change", ContentType.BULLET, 0.8),
    ("1. Gather the materials", ContentType.NUMBERED, 0.8),
    ("Inertia: an object stays at rest unless acted upon.", ContentType.DEFINITION, 0.7),
    ("First Law", ContentType.HEADING, 0.6),
])
def test_text_patterns(classifier, text, expected, confidence):
    result = classifier.classify(text, None, context_after(("t", "title")))

    assert result.content_type == expected
    assert result.confidence == pytest.approx(confidence)


@pytest.mark.parametrize("last_type,expected", [
    ("title", ContentType.HEADING),
    ("heading", ContentType.DEFINITION),
    ("definition", ContentType.BULLET),
])
def test_educational_flow(classifier, last_type, expected):
    text = "An object in motion stays in motion, unless a force acts on it."

    result = classifier.classify(text, None, context_after(("previous", last_type)))

    assert result.content_type == expected
    assert result.confidence >= 0.6


def test_low_confidence_uses_basic_fallback(classifier):
    text = "An object in motion stays in motion, unless a force acts on it."

    result = classifier.classify(text, None, context_after(("previous", "formula")))

    assert result.content_type == ContentType.DEFINITION
    assert result.confidence == pytest.approx(0.5)
    assert "fallback" in result.reasoning


def test_validate_replaces_low_confidence(classifier):
    raw = DetectionResult(content_type=ContentType.NOTE, confidence=0.3, reasoning="guess")

    result = classifier.validate(raw, "Short label", DetectionContext())

    assert result.content_type == ContentType.HEADING
    assert result.confidence == pytest.approx(0.5)


def test_basic_content_type():
    assert detect_basic_content_type("Short label") == ContentType.HEADING
    assert detect_basic_content_type("The total is 2 + 2, which makes four.") == ContentType.FORMULA
    assert detect_basic_content_type("- a list item, with detail.") == ContentType.BULLET
    assert detect_basic_content_type("3. Third step, in order.") == ContentType.NUMBERED
    assert detect_basic_content_type("A long sentence, explaining things.") == ContentType.DEFINITION


def test_spacing_keywords(classifier):
    assert detect_spacing_from_instruction("Start a new paragraph") == 1
    assert detect_spacing_from_instruction("leave space, then continue") == 1
    assert detect_spacing_from_instruction("write the next line") == 0
    assert detect_spacing_from_instruction(None) == 0

    result = classifier.classify("First Law", "skip a line", context_after(("t", "title")))

    assert result.extra_spacing_rows == 1
    assert result.content_type == ContentType.HEADING


def test_analyze_lists_alternatives(classifier):
    analysis = classifier.analyze("First Law", None, context_after(("t", "title")))

    assert analysis.detection.content_type == ContentType.HEADING
    assert 0 < len(analysis.alternatives) <= 3
    assert all(alt.content_type != ContentType.HEADING for alt in analysis.alternatives)
    assert analysis.recommendation.startswith("Detected as heading (60% confidence)")
    assert "Following title content." in analysis.recommendation


def test_analyze_without_context(classifier):
    analysis = classifier.analyze("F = ma")

    assert analysis.detection.content_type == ContentType.FORMULA
    assert [alt.content_type for alt in analysis.alternatives] == [ContentType.HEADING]
