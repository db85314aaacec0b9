"""Shared pytest fixtures for the crud-generator test suite.

Provides reusable fixtures for:
- A temporary Laravel project skeleton
- Configuration pointing at that skeleton
- Stub and recording framework bridges
- A recording Rich console for asserting on printed notices
"""

from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from crud_generator.config import CrudConfig
from crud_generator.naming import ResourceNames, derive_names
from crud_generator.scaffolder.bridge import BridgeError, StubBridge
from crud_generator.scaffolder.generator import CrudGenerator
from crud_generator.scaffolder.templates import TemplateRenderer


FIXED_NOW = datetime(2026, 1, 15, 10, 30, 0)

WEB_ROUTES = """<?php

use Illuminate\\Support\\Facades\\Route;

Route::get('/', function () {
    return view('welcome');
});
"""

BASE_CONTROLLER = """<?php

namespace App\\Http\\Controllers;

abstract class Controller
{
    //
}
"""


# ---------------------------------------------------------------------------
# Project skeleton
# ---------------------------------------------------------------------------

@pytest.fixture
def laravel_project(tmp_path: Path) -> Path:
    """Minimal Laravel directory layout (no ``artisan`` script)."""
    root = tmp_path / "blog"
    for directory in (
        "app/Models",
        "app/Http/Controllers",
        "database/migrations",
        "resources/views",
        "routes",
    ):
        (root / directory).mkdir(parents=True)
    (root / "routes" / "web.php").write_text(WEB_ROUTES, encoding="utf-8")
    (root / "app" / "Http" / "Controllers" / "Controller.php").write_text(
        BASE_CONTROLLER, encoding="utf-8"
    )
    yield root


@pytest.fixture
def config(laravel_project: Path) -> CrudConfig:
    return CrudConfig(project_root=laravel_project, bridge="stub")


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def post_names() -> ResourceNames:
    return derive_names("Post")


# ---------------------------------------------------------------------------
# Bridges
# ---------------------------------------------------------------------------

class RecordingBridge(StubBridge):
    """Stub bridge that pretends it can run migrations.

    ``tables`` lists the tables ``has_table`` reports as existing;
    ``migrate_error`` makes ``migrate`` fail with that message.
    """

    can_migrate = True

    def __init__(self, config, renderer=None, tables=(), migrate_error=None) -> None:
        super().__init__(config, renderer, clock=lambda: FIXED_NOW)
        self.tables = set(tables)
        self.migrate_error = migrate_error
        self.migrated: list[Path] = []

    async def has_table(self, table, exclude=None):
        return table in self.tables

    async def migrate(self, migration_path):
        if self.migrate_error:
            raise BridgeError(self.migrate_error)
        self.migrated.append(migration_path)
        return "Migrated"


@pytest.fixture
def stub_bridge(config: CrudConfig, renderer: TemplateRenderer) -> StubBridge:
    return StubBridge(config, renderer, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_recording_bridge(config: CrudConfig, renderer: TemplateRenderer):
    """Factory for ``RecordingBridge`` instances bound to the test project."""

    def _make(tables=(), migrate_error=None) -> RecordingBridge:
        return RecordingBridge(config, renderer, tables=tables, migrate_error=migrate_error)

    return _make


# ---------------------------------------------------------------------------
# Console & generator
# ---------------------------------------------------------------------------

@pytest.fixture
def recording_console() -> Console:
    """Console that records output instead of printing to the terminal."""
    return Console(file=io.StringIO(), record=True, width=200, color_system=None)


@pytest.fixture
def generator(
    config: CrudConfig,
    stub_bridge: StubBridge,
    renderer: TemplateRenderer,
    recording_console: Console,
) -> CrudGenerator:
    return CrudGenerator(config, bridge=stub_bridge, renderer=renderer, console=recording_console)


@pytest.fixture
def console_output(recording_console: Console):
    """Callable returning the plain text printed to the recording console."""
    return lambda: recording_console.export_text(clear=False)
