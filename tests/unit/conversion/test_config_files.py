"""Tests for the unit and contextual word configuration documents."""
import json

import pytest

from m2e.conversion.common import UnitType
from m2e.conversion.contextual_config import (
    DEFAULT_WORD_CONFIGS,
    ContextualWordConfig,
    WordConfig,
    load_contextual_config,
)
from m2e.conversion.unit_config import UnitConfig, load_unit_config
from m2e.core.config import ConfigurationError


class TestUnitConfigDefaults:
    """Every setting has a default."""

    def test_defaults(self):
        config = UnitConfig.default()
        assert config.enabled
        assert config.enabled_unit_types == list(UnitType)
        assert config.precision_for(UnitType.LENGTH) == 1
        assert config.precision_for(UnitType.TEMPERATURE) == 0
        assert config.preferences.prefer_whole_numbers
        assert config.preferences.temperature_format == "°C"
        assert config.detection.min_confidence == 0.5
        assert config.detection.max_number_distance == 3
        config.validate()

    def test_partial_document(self):
        config = UnitConfig.from_dict({"precision": {"length": 2}, "preferences": {"maxDecimalPlaces": 3}})
        assert config.precision["length"] == 2
        assert config.precision["mass"] == 1
        assert config.preferences.max_decimal_places == 3
        assert config.preferences.use_localized_units

    def test_precision_keys_are_case_insensitive(self):
        config = UnitConfig.from_dict({"precision": {"Length": 2, "MASS": 0}})
        assert config.precision_for(UnitType.LENGTH) == 2
        assert config.precision_for(UnitType.MASS) == 0
        assert "Length" not in config.precision

    def test_round_trip_through_dict(self):
        config = UnitConfig.from_dict({"enabledUnitTypes": ["length", "MASS"], "customMappings": {"metres": "m"}})
        assert config.enabled_unit_types == [UnitType.LENGTH, UnitType.MASS]
        assert UnitConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()


class TestUnitConfigErrors:
    """Wrong types and out of range values are configuration errors."""

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"enabled": "yes"},
            {"enabledUnitTypes": ["length", "speed"]},
            {"precision": {"length": "two"}},
            {"precision": {"furlongs": 1}},
            {"detection": {"minConfidence": True}},
            {"preferences": "fast"},
        ],
    )
    def test_from_dict_rejects(self, data):
        with pytest.raises(ConfigurationError):
            UnitConfig.from_dict(data)

    @pytest.mark.parametrize(
        "data",
        [
            {"detection": {"minConfidence": 1.5}},
            {"detection": {"maxNumberDistance": 0}},
            {"precision": {"length": 11}},
            {"preferences": {"maxDecimalPlaces": -1}},
            {"preferences": {"roundingThreshold": 2}},
            {"preferences": {"temperatureFormat": "kelvin"}},
            {"excludePatterns": ["(unclosed"]},
        ],
    )
    def test_validate_rejects(self, data):
        config = UnitConfig.from_dict(data)
        with pytest.raises(ConfigurationError):
            config.validate()


class TestUnitConfigMerge:
    """Layering one configuration over another."""

    def test_merge(self):
        base = UnitConfig.from_dict({"precision": {"length": 2}, "customMappings": {"metres": "m"}})
        other = UnitConfig.from_dict(
            {"enabledUnitTypes": ["mass"], "precision": {"mass": 3}, "customMappings": {"litres": "L"}}
        )
        merged = base.merge(other)
        assert merged.enabled_unit_types == [UnitType.MASS]
        assert merged.precision["mass"] == 3
        assert merged.custom_mappings == {"metres": "m", "litres": "L"}
        assert base.enabled_unit_types == list(UnitType)

    def test_clone_is_independent(self):
        config = UnitConfig()
        clone = config.clone()
        clone.preferences.use_localized_units = False
        clone.precision["length"] = 4
        assert config.preferences.use_localized_units
        assert config.precision["length"] == 1

    def test_type_enabled(self):
        config = UnitConfig(enabled_unit_types=[UnitType.LENGTH])
        assert config.is_unit_type_enabled(UnitType.LENGTH)
        assert not config.is_unit_type_enabled(UnitType.MASS)
        config.enabled = False
        assert not config.is_unit_type_enabled(UnitType.LENGTH)


class TestUnitConfigFiles:
    """Saving and loading unit_config.json."""

    def test_save_and_load(self, tmp_path):
        config = UnitConfig.from_dict({"precision": {"volume": 2}})
        path = tmp_path / "nested" / "unit_config.json"
        config.save(path)
        assert load_unit_config(path).precision["volume"] == 2

    def test_load_accepts_comments(self, tmp_path):
        path = tmp_path / "unit_config.json"
        path.write_text('{\n  // only metric lengths\n  "enabledUnitTypes": ["length"]\n}\n', encoding="utf-8")
        assert load_unit_config(path).enabled_unit_types == [UnitType.LENGTH]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_unit_config(tmp_path / "missing.json")

    def test_load_malformed_file(self, tmp_path):
        path = tmp_path / "unit_config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_unit_config(path)

    def test_load_out_of_range(self, tmp_path):
        path = tmp_path / "unit_config.json"
        path.write_text(json.dumps({"detection": {"minConfidence": 3}}), encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_unit_config(path)


class TestContextualWordConfig:
    """The contextual word document."""

    def test_defaults(self):
        config = ContextualWordConfig.default()
        assert config.enabled
        assert config.min_confidence == 0.9
        assert set(config.active_words()) == {"license", "practice", "advice"}
        assert config.word_configs["license"] == WordConfig(noun="licence", verb="license")

    def test_word_configs_layer_over_defaults(self):
        config = ContextualWordConfig.from_dict(
            {"wordConfigs": {"Advice": {"noun": "advice", "verb": "advise", "enabled": False}}}
        )
        assert set(config.word_configs) == set(DEFAULT_WORD_CONFIGS)
        assert set(config.active_words()) == {"license", "practice"}

    def test_disabled_has_no_active_words(self):
        assert ContextualWordConfig.from_dict({"enabled": False}).active_words() == {}

    @pytest.mark.parametrize(
        "data",
        [
            "nope",
            {"enabled": 1},
            {"minConfidence": "high"},
            {"wordConfigs": []},
            {"wordConfigs": {"license": {"noun": "licence"}}},
            {"wordConfigs": {"license": {"noun": "licence", "verb": "license", "enabled": "no"}}},
            {"excludePatterns": "x"},
        ],
    )
    def test_from_dict_rejects(self, data):
        with pytest.raises(ConfigurationError):
            ContextualWordConfig.from_dict(data)

    @pytest.mark.parametrize(
        "data",
        [
            {"minConfidence": 1.2},
            {"wordConfigs": {"two words": {"noun": "a", "verb": "b"}}},
            {"excludePatterns": ["[unclosed"]},
        ],
    )
    def test_validate_rejects(self, data):
        with pytest.raises(ConfigurationError):
            ContextualWordConfig.from_dict(data).validate()

    def test_save_and_load(self, tmp_path):
        config = ContextualWordConfig.from_dict({"minConfidence": 0.75, "excludePatterns": [r"\bfoo\b"]})
        path = tmp_path / "contextual_word_config.json"
        config.save(path)
        loaded = load_contextual_config(path)
        assert loaded.min_confidence == 0.75
        assert loaded.exclude_patterns == [r"\bfoo\b"]
        assert loaded.to_dict() == config.to_dict()
