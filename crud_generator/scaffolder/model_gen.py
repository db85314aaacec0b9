"""Eloquent model generation.

Asks the bridge for the base model (plus its migration) and then patches a
``protected $fillable`` declaration listing the resource's fields into the
class body.  An existing ``$fillable`` property is never touched.
"""

from __future__ import annotations

from pathlib import Path

from ..fields import FieldSpec
from ..naming import ResourceNames
from ..utils import read_text, write_text
from .bridge import FrameworkBridge
from .php_outline import ClassOutline, outline_class
from .results import ArtifactKind, StepResult, StepStatus


class ModelGenerator:
    """Creates the model file and declares its mass-assignable fields."""

    def __init__(self, bridge: FrameworkBridge) -> None:
        self.bridge = bridge
        self.migration_path: Path | None = None

    async def generate(
        self,
        names: ResourceNames,
        fields: list[FieldSpec],
        with_migration: bool = True,
    ) -> StepResult:
        """Create (if needed) and patch the model.

        When *with_migration* is set and no migration exists yet for the
        table, the bridge creates one alongside the model; its path is kept
        on ``self.migration_path`` for the migration stage.
        """
        model_path = self.bridge.model_path(names)
        created = False
        if not model_path.exists():
            wants_migration = with_migration and self.bridge.find_migration(names) is None
            model_path, self.migration_path = await self.bridge.make_model(names, wants_migration)
            created = True

        if not model_path.exists():
            return StepResult(
                artifact=ArtifactKind.MODEL,
                status=StepStatus.SKIPPED,
                path=model_path,
                message=f"Model file not found: {model_path}",
                level="silent",
            )

        content = await read_text(model_path)
        outline = outline_class(content, names.model_class)
        if outline is None:
            return StepResult(
                artifact=ArtifactKind.MODEL,
                status=StepStatus.SKIPPED,
                path=model_path,
                message=f"Class {names.model_class} not found in {model_path.name}.",
                level="warning",
            )
        if outline.has_property("fillable"):
            return StepResult(
                artifact=ArtifactKind.MODEL,
                status=StepStatus.SKIPPED,
                path=model_path,
                message=f"Fillable fields for {names.model_class} already declared.",
                level="warning",
            )

        await write_text(model_path, insert_fillable(content, outline, [f.name for f in fields]))
        return StepResult(
            artifact=ArtifactKind.MODEL,
            status=StepStatus.CREATED if created else StepStatus.UPDATED,
            path=model_path,
            message=f"Model {names.model_class} is ready with fillable fields.",
        )


def fillable_declaration(field_names: list[str]) -> str:
    """``protected $fillable = ['title', 'body'];``"""
    quoted = ", ".join(f"'{name}'" for name in field_names)
    return f"protected $fillable = [{quoted}];"


def add_fillable(content: str, class_name: str, field_names: list[str]) -> str | None:
    """Return *content* with a ``$fillable`` declaration added to *class_name*.

    Returns ``None`` when the class is missing or already declares
    ``$fillable``.
    """
    outline = outline_class(content, class_name)
    if outline is None or outline.has_property("fillable"):
        return None
    return insert_fillable(content, outline, field_names)


def insert_fillable(content: str, outline: ClassOutline, field_names: list[str]) -> str:
    """Insert the declaration after the trait ``use`` lines, or after the opening brace."""
    declaration = f"    {fillable_declaration(field_names)}"
    if outline.trait_use_end is not None:
        anchor = outline.trait_use_end
        return content[:anchor] + "\n\n" + declaration + content[anchor:]

    anchor = outline.open_brace + 1
    if not outline.body(content).strip():
        return content[:anchor] + "\n" + declaration + "\n" + content[outline.close_brace:]
    return content[:anchor] + "\n" + declaration + "\n" + content[anchor:]
