"""
Tests for questionnaire settings loading.
"""

import pytest

from qflow.config import (
    QuestionnaireSettings,
    load_settings,
    settings_from_dict,
    settings_from_yaml,
    settings_to_yaml,
)
from qflow.errors import ConstructionError


def test_defaults():
    settings = QuestionnaireSettings()
    assert settings.name is None
    assert settings.reset_items_on_back is False


def test_from_yaml():
    settings = settings_from_yaml("name: PHQ-2\nversion: 1.0\nreset_items_on_back: true\n")
    assert settings.name == "PHQ-2"
    assert settings.version == "1.0"
    assert settings.reset_items_on_back is True


def test_empty_yaml():
    assert settings_from_yaml("") == QuestionnaireSettings()


def test_unknown_key_rejected():
    with pytest.raises(ConstructionError):
        settings_from_dict({"name": "x", "colour": "blue"})


def test_bad_flag_rejected():
    with pytest.raises(ConstructionError):
        QuestionnaireSettings(reset_items_on_back="yes")


def test_non_mapping_rejected():
    with pytest.raises(ConstructionError):
        settings_from_yaml("- a\n- b\n")


def test_load_settings_and_dump(tmp_path):
    path = tmp_path / "settings.yaml"
    original = QuestionnaireSettings(name="Demo", citation="Someone 2020", reset_items_on_back=True)
    path.write_text(settings_to_yaml(original), encoding="utf-8")
    assert load_settings(path) == original
