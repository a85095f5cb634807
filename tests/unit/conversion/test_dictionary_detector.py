"""Tests for context-free dictionary spelling changes."""
import pytest

from m2e.conversion.common import ChangeKind, Span, SpanKind
from m2e.conversion.constants import load_pattern_table
from m2e.conversion.detectors.dictionary_detector import DictionaryDetector
from m2e.conversion.utils import match_case


def detect(text):
    detector = DictionaryDetector(load_pattern_table())
    return detector.detect(text, [Span(0, len(text), SpanKind.PROSE)])


class TestWordSubstitution:
    """Whole words are replaced from the dictionary."""

    @pytest.mark.parametrize(
        "input_text,expected",
        [
            ("color", "colour"),
            ("colors", "colours"),
            ("colorful", "colourful"),
            ("favorite", "favourite"),
            ("organize", "organise"),
            ("analyze", "analyse"),
            ("theater", "theatre"),
            ("defense", "defence"),
            ("catalog", "catalogue"),
            ("aluminum", "aluminium"),
            ("jewelry", "jewellery"),
            ("traveled", "travelled"),
            ("neighbor", "neighbour"),
        ],
    )
    def test_single_words(self, convert_text, input_text, expected):
        convert_text(input_text, expected)

    def test_longest_word_wins(self):
        changes = detect("watercolors")
        assert [(c.original, c.converted) for c in changes] == [("watercolors", "watercolours")]

    def test_word_boundaries(self, convert_text):
        convert_text("Colorado is colorful", "Colorado is colourful")

    def test_sentence_punctuation_is_not_code(self, convert_text):
        convert_text("I like the color. Gray, too!", "I like the colour. Grey, too!")

    def test_hyphenated_words(self, convert_text):
        convert_text("a gray-blue catalog", "a grey-blue catalogue")


class TestCasePreservation:
    """The replacement copies the casing of the original."""

    def test_upper_lower_capitalised(self, convert_text):
        convert_text("COLOR color Color", "COLOUR colour Colour")

    def test_mixed_case_takes_dictionary_spelling(self, convert_text):
        convert_text("CoLoR", "colour")

    @pytest.mark.parametrize(
        "original,replacement,expected",
        [
            ("GRAY", "grey", "GREY"),
            ("Gray", "grey", "Grey"),
            ("gray", "grey", "grey"),
            ("gRAY", "grey", "grey"),
            ("", "grey", "grey"),
        ],
    )
    def test_match_case(self, original, replacement, expected):
        assert match_case(original, replacement) == expected


class TestSkippedTokens:
    """Identifiers, URLs and emails are left alone."""

    @pytest.mark.parametrize(
        "text",
        [
            "$color",
            "#color",
            ".color",
            "@color",
            "call color() now",
            "use color.red here",
            "path/to/color",
        ],
    )
    def test_code_shaped_tokens(self, convert_text, text):
        convert_text(text, text)

    def test_urls(self, convert_text):
        convert_text(
            "See https://example.com/color/gray for the color",
            "See https://example.com/color/gray for the colour",
        )

    def test_bare_www_host(self, convert_text):
        convert_text("www.color.com", "www.color.com")

    def test_email(self, convert_text):
        convert_text("Mail gray@example.com today", "Mail gray@example.com today")


class TestChangeRecords:
    """Records carry absolute offsets and the spelling kind."""

    def test_offsets_include_span_start(self):
        text = "xx color"
        detector = DictionaryDetector(load_pattern_table())
        changes = detector.detect(text, [Span(3, len(text), SpanKind.PROSE)])
        assert len(changes) == 1
        change = changes[0]
        assert change.position == 3
        assert change.original == "color"
        assert change.converted == "colour"
        assert change.kind is ChangeKind.SPELLING
        assert not change.is_contextual

    def test_only_given_spans_are_scanned(self):
        text = "color gray"
        detector = DictionaryDetector(load_pattern_table())
        changes = detector.detect(text, [Span(6, len(text), SpanKind.COMMENT)])
        assert [c.original for c in changes] == ["gray"]


class TestDictionaryContents:
    """The built-in dictionary and user overlay."""

    def test_ambiguous_words_are_not_in_the_dictionary(self):
        table = load_pattern_table()
        for word in ("license", "licenses", "practice", "advice", "principal", "principle"):
            assert word not in table.dictionary

    def test_user_overlay_adds_words(self, convert_text, write_user_file):
        write_user_file("american_spellings.json", {"widgetize": "widgetise"})
        convert_text("Widgetize it", "Widgetise it")

    def test_user_overlay_overrides_builtin(self, convert_text, write_user_file):
        write_user_file("american_spellings.json", {"color": "kolour"})
        convert_text("color", "kolour")
