"""Blade view generation.

Writes the four per-resource views (list, create form, edit form, detail)
plus the shared ``layouts/app`` layout they all extend.  The layout is only
written when it does not exist yet; per-resource views that already exist
are kept unless ``force`` is set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..fields import FieldSpec
from ..naming import ResourceNames
from .results import ArtifactKind, StepResult, StepStatus
from .templates import TemplateRenderer


VIEW_NAMES: tuple[str, ...] = ("index", "create", "edit", "show")

# Attributes the detail view never renders as rows.
HIDDEN_ATTRIBUTES: tuple[str, ...] = ("id", "created_at", "updated_at")

LAYOUT_RELATIVE_PATH = Path("layouts") / "app.blade.php"


class ViewGenerator:
    """Renders the resource's Blade views and the shared layout."""

    def __init__(
        self,
        renderer: TemplateRenderer,
        views_root: Path,
        app_name: str = "Laravel",
        force: bool = False,
    ) -> None:
        self.renderer = renderer
        self.views_root = views_root
        self.app_name = app_name
        self.force = force

    def view_dir(self, names: ResourceNames) -> Path:
        return self.views_root / names.view_dir

    def view_path(self, names: ResourceNames, view: str) -> Path:
        return self.view_dir(names) / f"{view}.blade.php"

    @property
    def layout_path(self) -> Path:
        return self.views_root / LAYOUT_RELATIVE_PATH

    async def generate(self, names: ResourceNames, fields: list[FieldSpec]) -> StepResult:
        """Write the four resource views; returns one result for the set."""
        context = self._context(names, fields)
        written: list[str] = []
        kept: list[str] = []
        replaced = False

        for view in VIEW_NAMES:
            path = self.view_path(names, view)
            if path.exists():
                if not self.force:
                    kept.append(view)
                    continue
                replaced = True
            await self.renderer.render_to_file(f"views/{view}.blade.php.j2", path, context)
            written.append(view)

        directory = self.view_dir(names)
        if not written:
            return StepResult(
                artifact=ArtifactKind.VIEWS,
                status=StepStatus.SKIPPED,
                path=directory,
                message=f"Blade views for {names.studly} already exist (use --force to overwrite).",
                level="warning",
            )

        result = StepResult(
            artifact=ArtifactKind.VIEWS,
            status=StepStatus.UPDATED if kept or replaced else StepStatus.CREATED,
            path=directory,
            message=f"Blade views for {names.studly} created successfully.",
        )
        if kept:
            result.notes.append(f"Kept existing views: {', '.join(kept)}")
        return result

    async def generate_layout(self) -> StepResult:
        """Write ``layouts/app.blade.php`` unless it already exists."""
        path = self.layout_path
        if path.exists():
            return StepResult(
                artifact=ArtifactKind.LAYOUT,
                status=StepStatus.SKIPPED,
                path=path,
                message="Layout already exists.",
                level="silent",
            )

        await self.renderer.render_to_file(
            "views/layout.blade.php.j2", path, {"app_name": self.app_name}
        )
        return StepResult(
            artifact=ArtifactKind.LAYOUT,
            status=StepStatus.CREATED,
            path=path,
            message="Layout layouts/app.blade.php created.",
            level="info",
        )

    def render_view(self, view: str, names: ResourceNames, fields: list[FieldSpec]) -> str:
        """Render one view to a string without writing it."""
        return self.renderer.render(f"views/{view}.blade.php.j2", self._context(names, fields))

    def _context(self, names: ResourceNames, fields: list[FieldSpec]) -> dict[str, Any]:
        return {
            **names.as_context(),
            "fields": fields,
            "hidden_attributes": list(HIDDEN_ATTRIBUTES),
            "app_name": self.app_name,
        }
