"""Helpers to persist intermediate representations for debugging."""
from __future__ import annotations

import enum
import json
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Sequence

from banner_layout.model.draw_commands import DrawCommand
from banner_layout.model.layout_model import LayoutBox


class DebugDumper:
    """Writes intermediate artifacts onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, layout: LayoutBox, commands: Sequence[DrawCommand]) -> None:
        """Persist the layout tree and draw commands as JSON for offline analysis."""
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / "layout.json").write_text(json.dumps(self.serialize(layout), indent=2))
        payload = [{"command": command.command_name, **self.serialize(command)} for command in commands]
        (self.directory / "draw_commands.json").write_text(json.dumps(payload, indent=2))

    def serialize(self, value: Any) -> Any:
        if is_dataclass(value) and not isinstance(value, type):
            return {spec.name: self.serialize(getattr(value, spec.name)) for spec in fields(value)}
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, dict):
            return {k: self.serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.serialize(v) for v in value]
        return value
