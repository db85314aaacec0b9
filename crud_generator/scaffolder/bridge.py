"""Adapters to the host framework's own tooling.

The generators never create the base model, migration or controller files
from scratch on their own authority, nor do they touch the database.  They
ask a *bridge* to do so:

- ``ArtisanBridge`` shells out to ``php artisan`` in the target project,
  exactly as a developer would.
- ``StubBridge`` writes equivalent stub files from bundled templates and
  answers schema questions by reading the project's migrations.  It is used
  when no PHP runtime / ``artisan`` script is available, and by the tests.
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime
from pathlib import Path

from ..config import CrudConfig
from ..naming import ResourceNames
from ..utils import newest_file, run_command
from .templates import TemplateRenderer


class BridgeError(Exception):
    """Raised when a framework command fails."""


class FrameworkBridge:
    """Interface shared by all bridges."""

    name = "base"
    can_migrate = False

    def __init__(self, config: CrudConfig) -> None:
        self.config = config

    async def make_model(
        self, names: ResourceNames, with_migration: bool
    ) -> tuple[Path, Path | None]:
        """Create the model (and optionally its migration); return their paths."""
        raise NotImplementedError

    async def make_migration(self, names: ResourceNames) -> Path:
        """Create a standalone ``create_<table>_table`` migration."""
        raise NotImplementedError

    async def make_controller(self, names: ResourceNames) -> Path:
        raise NotImplementedError

    async def has_table(self, table: str, exclude: Path | None = None) -> bool:
        """Return ``True`` if *table* already exists.

        *exclude* is the migration written during this run, which must not
        count as evidence that the table exists.
        """
        raise NotImplementedError

    async def migrate(self, migration_path: Path) -> str:
        """Run one migration file; returns the command output."""
        raise NotImplementedError

    # -- Shared helpers ----------------------------------------------------

    def model_path(self, names: ResourceNames) -> Path:
        return self.config.models_path / f"{names.model_class}.php"

    def controller_path(self, names: ResourceNames) -> Path:
        return self.config.controllers_path / f"{names.controller_class}.php"

    def find_migration(self, names: ResourceNames) -> Path | None:
        return newest_file(self.config.migrations_path, f"*_{names.migration_name}.php")


# ---------------------------------------------------------------------------
# Artisan
# ---------------------------------------------------------------------------


class ArtisanBridge(FrameworkBridge):
    """Runs ``php artisan`` commands inside the project root."""

    name = "artisan"
    can_migrate = True

    async def _artisan(self, *args: str) -> str:
        cmd = [self.config.php_binary, "artisan", *args]
        returncode, stdout, stderr = await run_command(
            cmd, cwd=self.config.project_root, timeout=self.config.command_timeout
        )
        if returncode != 0:
            detail = stderr or stdout or f"exit code {returncode}"
            raise BridgeError(f"php artisan {' '.join(args)} failed: {detail}")
        return stdout

    async def make_model(
        self, names: ResourceNames, with_migration: bool
    ) -> tuple[Path, Path | None]:
        before = self.find_migration(names)
        args = ["make:model", names.model_class]
        if with_migration:
            args.append("--migration")
        await self._artisan(*args)

        migration = None
        if with_migration:
            created = self.find_migration(names)
            migration = created if created != before else None
        return self.model_path(names), migration

    async def make_migration(self, names: ResourceNames) -> Path:
        await self._artisan("make:migration", names.migration_name, f"--create={names.table}")
        path = self.find_migration(names)
        if path is None:
            raise BridgeError(f"artisan did not create a migration for '{names.table}'")
        return path

    async def make_controller(self, names: ResourceNames) -> Path:
        await self._artisan("make:controller", names.controller_class)
        return self.controller_path(names)

    async def has_table(self, table: str, exclude: Path | None = None) -> bool:
        code = (
            "echo \\Illuminate\\Support\\Facades\\Schema::hasTable("
            f"'{table}') ? 'yes' : 'no';"
        )
        output = await self._artisan("tinker", f"--execute={code}")
        return output.strip().splitlines()[-1:] == ["yes"]

    async def migrate(self, migration_path: Path) -> str:
        relative = migration_path.relative_to(self.config.project_root)
        return await self._artisan("migrate", f"--path={relative.as_posix()}", "--force")


# ---------------------------------------------------------------------------
# Stub
# ---------------------------------------------------------------------------


class StubBridge(FrameworkBridge):
    """Writes framework-equivalent stubs without a PHP runtime."""

    name = "stub"

    def __init__(
        self,
        config: CrudConfig,
        renderer: TemplateRenderer | None = None,
        clock=datetime.now,
    ) -> None:
        super().__init__(config)
        self.renderer = renderer or TemplateRenderer()
        self.clock = clock

    async def make_model(
        self, names: ResourceNames, with_migration: bool
    ) -> tuple[Path, Path | None]:
        path = self.model_path(names)
        if not path.exists():
            await self.renderer.render_to_file("stubs/model.php.j2", path, names.as_context())
        migration = await self.make_migration(names) if with_migration else None
        return path, migration

    async def make_migration(self, names: ResourceNames) -> Path:
        path = self._next_migration_path(names)
        await self.renderer.render_to_file("stubs/migration.php.j2", path, names.as_context())
        return path

    async def make_controller(self, names: ResourceNames) -> Path:
        path = self.controller_path(names)
        if not path.exists():
            await self.renderer.render_to_file(
                "stubs/controller.php.j2", path, names.as_context()
            )
        return path

    async def has_table(self, table: str, exclude: Path | None = None) -> bool:
        return await asyncio.to_thread(self._scan_migrations, table, exclude)

    async def migrate(self, migration_path: Path) -> str:
        raise BridgeError(
            "Migrations are not executed without artisan; "
            f"run 'php artisan migrate' to apply {migration_path.name}."
        )

    def _next_migration_path(self, names: ResourceNames) -> Path:
        stamp = self.clock().strftime("%Y_%m_%d_%H%M%S")
        path = self.config.migrations_path / f"{stamp}_{names.migration_name}.php"
        # Two stubs in the same second must not overwrite each other.
        latest = self.find_migration(names)
        if latest is not None and latest.name >= path.name:
            prefix = latest.name[: len(stamp)]
            bumped = datetime.strptime(prefix, "%Y_%m_%d_%H%M%S").timestamp() + 1
            stamp = datetime.fromtimestamp(bumped).strftime("%Y_%m_%d_%H%M%S")
            path = self.config.migrations_path / f"{stamp}_{names.migration_name}.php"
        return path

    def _scan_migrations(self, table: str, exclude: Path | None) -> bool:
        directory = self.config.migrations_path
        if not directory.is_dir():
            return False
        pattern = re.compile(r"Schema::create\(\s*['\"]" + re.escape(table) + r"['\"]")
        for path in sorted(directory.glob("*.php")):
            if exclude is not None and path.resolve() == exclude.resolve():
                continue
            if pattern.search(path.read_text(encoding="utf-8")):
                return True
        return False


def select_bridge(config: CrudConfig) -> FrameworkBridge:
    """Return the bridge named by ``config.bridge``.

    ``auto`` picks ``ArtisanBridge`` when the project has an ``artisan``
    script, otherwise ``StubBridge``.
    """
    if config.bridge == "artisan":
        return ArtisanBridge(config)
    if config.bridge == "stub":
        return StubBridge(config)
    if config.artisan_path.is_file():
        return ArtisanBridge(config)
    return StubBridge(config)


__all__ = [
    "ArtisanBridge",
    "BridgeError",
    "FrameworkBridge",
    "StubBridge",
    "select_bridge",
]
