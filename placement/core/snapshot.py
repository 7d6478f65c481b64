"""Read-only input snapshot: students, drives, and applications."""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict

from placement.core.schemas import Application, Candidate, Opportunity


class Snapshot(BaseModel):
    """A closed-world view of the placement data handed to the engine.

    References between collections are not validated. Applications that
    point at missing students or drives simply drop out of branch-scoped
    aggregates.
    """

    model_config = ConfigDict(frozen=True)

    students: tuple[Candidate, ...] = ()
    drives: tuple[Opportunity, ...] = ()
    applications: tuple[Application, ...] = ()

    @classmethod
    def from_file(cls, path: str | Path) -> "Snapshot":
        """Load a snapshot from a YAML or JSON file."""
        path = Path(path)
        if not path.exists():
            msg = f"Snapshot file not found: {path}"
            raise FileNotFoundError(msg)
        text = path.read_text()
        if path.suffix.lower() == ".json":
            raw: dict[str, Any] = json.loads(text) if text.strip() else {}
        else:
            raw = yaml.safe_load(text) or {}
        return cls.model_validate(raw)

    def student(self, student_id: str) -> Candidate:
        for s in self.students:
            if s.id == student_id:
                return s
        msg = f"Unknown student id: {student_id}"
        raise ValueError(msg)

    def drive(self, drive_id: str) -> Opportunity:
        for d in self.drives:
            if d.id == drive_id:
                return d
        msg = f"Unknown drive id: {drive_id}"
        raise ValueError(msg)
