"""
Questionnaire settings.

Optional metadata and behaviour switches for a Questionnaire, validated
on construction. Settings can be written inline, read from a mapping, or
loaded from YAML:

    name: PHQ-2
    version: "1.0"
    introduction: Over the last two weeks...
    reset_items_on_back: true
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from qflow.errors import ConstructionError


@dataclass(frozen=True)
class QuestionnaireSettings:
    """
    Settings for a Questionnaire (immutable).

    Attributes:
        name: questionnaire title
        introduction: text shown before the first item
        citation: source reference for published instruments
        version: definition version string
        reset_items_on_back: reset the current item's answers when
            navigating backwards
    """

    name: Optional[str] = None
    introduction: Optional[str] = None
    citation: Optional[str] = None
    version: Optional[str] = None
    reset_items_on_back: bool = False

    def __post_init__(self):
        for key in ("name", "introduction", "citation", "version"):
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                raise ConstructionError(f"Setting {key} must be a string, got {value!r}")
        if not isinstance(self.reset_items_on_back, bool):
            raise ConstructionError(
                f"Setting reset_items_on_back must be a bool, got {self.reset_items_on_back!r}"
            )

    def as_kwargs(self) -> Dict[str, Any]:
        return asdict(self)


def settings_from_dict(d: Optional[Mapping[str, Any]]) -> QuestionnaireSettings:
    if d is None:
        return QuestionnaireSettings()
    if not isinstance(d, Mapping):
        raise ConstructionError(f"Settings must be a mapping, got {type(d).__name__}")
    allowed = {f.name for f in fields(QuestionnaireSettings)}
    unknown = set(d) - allowed
    if unknown:
        raise ConstructionError(f"Unknown settings: {', '.join(sorted(unknown))}")
    values = dict(d)
    # YAML reads 1.0 as a float; versions are strings
    if isinstance(values.get("version"), (int, float)) and not isinstance(values.get("version"), bool):
        values["version"] = str(values["version"])
    return QuestionnaireSettings(**values)


def settings_from_yaml(s: str) -> QuestionnaireSettings:
    return settings_from_dict(yaml.safe_load(s))


def load_settings(path: Union[str, Path]) -> QuestionnaireSettings:
    return settings_from_yaml(Path(path).read_text(encoding="utf-8"))


def settings_to_yaml(settings: QuestionnaireSettings) -> str:
    return yaml.safe_dump(settings.as_kwargs(), sort_keys=False)
