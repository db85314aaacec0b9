"""Resource route registration."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ..naming import ResourceNames
from ..utils import append_file, read_text
from .results import ArtifactKind, StepResult, StepStatus


def resource_route_line(names: ResourceNames) -> str:
    """``Route::resource('posts', \\App\\Http\\Controllers\\PostController::class);``"""
    return f"Route::resource('{names.route_segment}', {names.controller_fqcn}::class);"


class RouteGenerator:
    """Appends the resource route to the routes file at most once."""

    def __init__(self, routes_file: Path) -> None:
        self.routes_file = routes_file

    async def generate(self, names: ResourceNames) -> StepResult:
        path = self.routes_file
        relative = f"{path.parent.name}/{path.name}"
        if not path.exists():
            return StepResult(
                artifact=ArtifactKind.ROUTE,
                status=StepStatus.SKIPPED,
                path=path,
                message=f"Routes file not found: {path}",
                level="silent",
            )

        line = resource_route_line(names)
        if line in await read_text(path):
            return StepResult(
                artifact=ArtifactKind.ROUTE,
                status=StepStatus.SKIPPED,
                path=path,
                message=f"Resource route for {names.studly} already exists in {relative}.",
                level="warning",
            )

        await asyncio.to_thread(append_file, path, f"\n{line}\n")
        return StepResult(
            artifact=ArtifactKind.ROUTE,
            status=StepStatus.UPDATED,
            path=path,
            message=f"Resource route for {names.studly} added to {relative}.",
        )
