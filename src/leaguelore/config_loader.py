"""Persist and load CLI settings profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from leaguelore.config import EngineSettings


@dataclass
class SettingsProfile:
    overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "SettingsProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(overrides=dict(data.get("overrides", {})))

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "SettingsProfile":
        defaults = EngineSettings().as_dict()
        current = settings.as_dict()
        return cls(overrides={key: value for key, value in current.items() if defaults.get(key) != value})

    def apply(self, settings: EngineSettings) -> EngineSettings:
        return settings.with_overrides(self.overrides)

    def save(self, path: Path) -> None:
        payload = {"overrides": self.overrides}
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
