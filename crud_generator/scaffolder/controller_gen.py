"""Resource controller generation.

Starts from the framework's empty controller stub and fills in the seven
conventional resource methods.  Methods the controller already declares
are left exactly as they are; only the missing ones are rendered and
inserted, together, right before the class's closing brace.
"""

from __future__ import annotations

import re
from typing import Any

from ..fields import FieldSpec
from ..naming import ResourceNames
from ..utils import read_text, write_text
from .bridge import FrameworkBridge
from .php_outline import mask_php, outline_class
from .results import ArtifactKind, StepResult, StepStatus
from .templates import TemplateRenderer


CRUD_METHODS: tuple[str, ...] = (
    "index",
    "create",
    "store",
    "show",
    "edit",
    "update",
    "destroy",
)

_COMMENT_LINE_RE = re.compile(r"^[ \t]*//.*$", re.MULTILINE)
_TRAILING_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n)+\Z")


class ControllerGenerator:
    """Adds missing CRUD methods to the resource controller."""

    def __init__(self, bridge: FrameworkBridge, renderer: TemplateRenderer) -> None:
        self.bridge = bridge
        self.renderer = renderer

    async def generate(self, names: ResourceNames, fields: list[FieldSpec]) -> StepResult:
        path = self.bridge.controller_path(names)
        created = False
        if not path.exists():
            path = await self.bridge.make_controller(names)
            created = True

        if not path.exists():
            return StepResult(
                artifact=ArtifactKind.CONTROLLER,
                status=StepStatus.SKIPPED,
                path=path,
                message=f"Controller file not found: {path}",
                level="silent",
            )

        content = await read_text(path)
        patched, added = self.add_methods(content, names, fields)
        if patched is None:
            return StepResult(
                artifact=ArtifactKind.CONTROLLER,
                status=StepStatus.SKIPPED,
                path=path,
                message=f"Class {names.controller_class} not found in {path.name}.",
                level="warning",
            )
        if not added:
            return StepResult(
                artifact=ArtifactKind.CONTROLLER,
                status=StepStatus.SKIPPED,
                path=path,
                message=f"CRUD methods for {names.studly} already exist in the controller.",
                level="warning",
            )

        await write_text(path, patched)
        return StepResult(
            artifact=ArtifactKind.CONTROLLER,
            status=StepStatus.CREATED if created else StepStatus.UPDATED,
            path=path,
            message=f"CRUD methods for {names.studly} added to the controller.",
            notes=[f"Added: {', '.join(added)}"],
        )

    def add_methods(
        self,
        content: str,
        names: ResourceNames,
        fields: list[FieldSpec],
    ) -> tuple[str | None, list[str]]:
        """Return ``(patched_source, added_method_names)``.

        ``patched_source`` is ``None`` when the controller class cannot be
        found; when nothing is missing the original *content* is returned
        with an empty list.
        """
        outline = outline_class(content, names.controller_class)
        if outline is None:
            return None, []

        missing = [m for m in CRUD_METHODS if not outline.has_method(m)]
        if not missing:
            return content, []

        normalized = normalize_controller(content, names.controller_class)
        outline = outline_class(normalized, names.controller_class)
        if outline is None:
            return None, []

        context = self._context(names, fields)
        block = "\n\n".join(
            self.renderer.render(f"controller/{method}.php.j2", context).rstrip()
            for method in missing
        )

        head = normalized[:outline.close_brace].rstrip()
        tail = normalized[outline.close_brace:]
        separator = "\n" if head.endswith("{") else "\n\n"
        return f"{head}{separator}{block}\n{tail}", missing

    @staticmethod
    def _context(names: ResourceNames, fields: list[FieldSpec]) -> dict[str, Any]:
        return {**names.as_context(), "fields": fields}


def normalize_controller(content: str, class_name: str | None = None) -> str:
    """Drop class-level ``//`` comment lines and blank lines before the first CRUD method.

    Comments inside method bodies are kept.
    """
    outline = outline_class(content, class_name)
    if outline is None:
        return content

    masked = mask_php(content)

    def strip_class_level(match: re.Match[str]) -> str:
        start = match.start()
        if not outline.open_brace < start < outline.close_brace:
            return match.group(0)
        preceding = masked[outline.open_brace:start]
        depth = preceding.count("{") - preceding.count("}")
        return "" if depth == 1 else match.group(0)

    content = _COMMENT_LINE_RE.sub(strip_class_level, content)

    outline = outline_class(content, class_name)
    first = outline.first_method_offset(list(CRUD_METHODS)) if outline else None
    if first is None:
        return content

    before = _TRAILING_BLANK_LINES_RE.sub("\n", content[:first])
    return before + content[first:]
