"""
Tests for contextual disambiguation of words whose spelling depends on use.

license/licence, practice/practise and advice/advise switch on noun versus verb
use; principal/principle switch on the surrounding domain vocabulary.
"""
import pytest

from m2e.conversion.common import Span, SpanKind
from m2e.conversion.constants import load_pattern_table
from m2e.conversion.detectors.contextual_detector import ContextualDetector


def detect(text, min_confidence=0.9):
    detector = ContextualDetector(load_pattern_table(), min_confidence)
    return detector.detect(text, [Span(0, len(text), SpanKind.PROSE)])


class TestNounVerbPairs:
    """Grammatical context picks the noun or verb spelling."""

    @pytest.mark.parametrize(
        "input_text,expected",
        [
            ("Renew your driving license", "Renew your driving licence"),
            ("Renew your driving licenses", "Renew your driving licences"),
            ("Show the license holder", "Show the licence holder"),
            ("License holders must apply", "Licence holders must apply"),
            ("You should practice daily", "You should practise daily"),
            ("I need to practice", "I need to practise"),
            ("You should advice him", "You should advise him"),
        ],
    )
    def test_resolved_spellings(self, convert_text, input_text, expected):
        convert_text(input_text, expected)

    def test_verb_license_is_unchanged(self, convert_text):
        convert_text("We license software", "We license software")

    def test_noun_practice_is_unchanged(self, convert_text):
        convert_text("Take my advice and practice.", "Take my advice and practice.")

    def test_inflected_forms_use_the_dictionary(self, convert_text):
        convert_text("They practiced daily", "They practised daily")


class TestSemanticPairs:
    """principal and principle follow the domain around them."""

    def test_least_privilege(self, convert_text):
        convert_text("Follow the principal of least privilege", "Follow the principle of least privilege")

    def test_identity_principal(self, convert_text):
        convert_text("Grant the AWS IAM principle access", "Grant the AWS IAM principal access")

    def test_principal_attribute(self, convert_text):
        convert_text("Set the principle ID", "Set the principal ID")

    def test_design_principle(self, convert_text):
        convert_text("A core principal of the design", "A core principle of the design")

    def test_unrelated_use_is_unchanged(self, convert_text):
        convert_text("The principal met the staff", "The principal met the staff")


class TestExclusions:
    """Licence names, plates and code never change."""

    @pytest.mark.parametrize(
        "text",
        [
            "This project uses the MIT license.",
            "Check the license plate",
            "Read the software license agreement",
            "See the LICENSE.md file",
            "Open `license` in the editor",
        ],
    )
    def test_excluded_contexts(self, convert_text, text):
        convert_text(text, text)


class TestConfidence:
    """Weak context stays below the threshold."""

    def test_determiner_alone_is_too_weak(self, convert_text):
        convert_text("I have a license.", "I have a license.")

    def test_lower_threshold_from_config(self, convert_text, write_user_file):
        write_user_file("contextual_word_config.json", {"minConfidence": 0.5})
        convert_text("I have a license.", "I have a licence.")

    def test_option_lowers_the_threshold(self, convert_text):
        convert_text("I need a license to drive", "I need a licence to drive", min_confidence=0.7)

    def test_option_overrides_config_threshold(self, convert_text, write_user_file):
        write_user_file("contextual_word_config.json", {"minConfidence": 0.5})
        convert_text("I have a license.", "I have a license.", min_confidence=0.9)

    def test_detector_defaults_to_config_threshold(self, write_user_file):
        write_user_file("contextual_word_config.json", {"minConfidence": 0.6})
        assert ContextualDetector(load_pattern_table()).min_confidence == 0.6

    def test_infinitive_confidence_is_capped(self):
        changes = detect("I need to practice")
        assert len(changes) == 1
        assert changes[0].confidence == 1.0
        assert changes[0].is_contextual

    def test_compound_noun_confidence(self):
        changes = detect("License holders must apply")
        assert [(c.original, c.converted) for c in changes] == [("License", "Licence")]
        assert changes[0].confidence == pytest.approx(0.95)


class TestConfiguration:
    """Words can be switched off from the contextual word config."""

    def test_disabled_entirely(self, convert_text, write_user_file):
        write_user_file("contextual_word_config.json", {"enabled": False})
        convert_text("Renew your driving license", "Renew your driving license")

    def test_single_word_disabled(self, convert_text, write_user_file):
        write_user_file(
            "contextual_word_config.json",
            {"wordConfigs": {"advice": {"noun": "advice", "verb": "advise", "enabled": False}}},
        )
        convert_text("You should advice him", "You should advice him")
        convert_text("You should practice daily", "You should practise daily")

    def test_user_exclude_pattern(self, convert_text, write_user_file):
        write_user_file("contextual_word_config.json", {"excludePatterns": [r"driving\s+license"]})
        convert_text("Renew your driving license", "Renew your driving license")

    def test_no_patterns_means_no_changes(self, write_user_file):
        write_user_file("contextual_word_config.json", {"enabled": False})
        assert detect("You should practice daily") == []
