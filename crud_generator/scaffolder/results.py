"""Per-artifact outcomes and the run report."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from ..fields import FieldSpec
from ..naming import ResourceNames


class ArtifactKind(str, Enum):
    MODEL = "model"
    MIGRATION = "migration"
    CONTROLLER = "controller"
    VIEWS = "views"
    LAYOUT = "layout"
    ROUTE = "route"


class StepStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    DISABLED = "disabled"
    FAILED = "failed"


NoticeLevel = Literal["success", "info", "warning", "error", "silent"]


class StepResult(BaseModel):
    """What one generator did to one artifact.

    ``level`` decides how the message is shown on the console; ``silent``
    results are recorded in the report but never printed.
    """

    artifact: ArtifactKind
    status: StepStatus
    path: Path | None = None
    message: str = ""
    level: NoticeLevel = "success"
    notes: list[str] = Field(default_factory=list)


class GenerationReport(BaseModel):
    """Everything a ``CrudGenerator.generate`` call produced."""

    names: ResourceNames
    fields: list[FieldSpec] = Field(default_factory=list)
    field_errors: list[str] = Field(default_factory=list)
    steps: list[StepResult] = Field(default_factory=list)
    browse_url: str = ""

    def step(self, kind: ArtifactKind) -> StepResult | None:
        for result in self.steps:
            if result.artifact == kind:
                return result
        return None

    def status_for(self, kind: ArtifactKind) -> StepStatus | None:
        result = self.step(kind)
        return result.status if result else None

    @property
    def failed(self) -> list[StepResult]:
        return [s for s in self.steps if s.status == StepStatus.FAILED]

    @property
    def succeeded(self) -> bool:
        return not self.failed

    def as_rows(self) -> list[tuple[str, str, str]]:
        """``(artifact, status, path)`` rows for the summary table."""
        return [
            (s.artifact.value, s.status.value, str(s.path) if s.path else "-")
            for s in self.steps
        ]
