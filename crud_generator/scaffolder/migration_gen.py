"""Schema migration generation.

Turns each field into one schema-builder statement and splices the block
into the ``create_<table>_table`` migration right before the
``$table->timestamps();`` line.  The migration is then executed through the
bridge unless its table already exists.
"""

from __future__ import annotations

import re
from pathlib import Path

from ..fields import FieldSpec
from ..naming import ResourceNames
from ..utils import read_text, write_text
from .bridge import BridgeError, FrameworkBridge
from .results import ArtifactKind, StepResult, StepStatus


TIMESTAMPS_SENTINEL = "$table->timestamps();"
STATEMENT_INDENT = " " * 12

_COLUMN_RE = re.compile(r"\$table->\w+\(\s*'([^']+)'")


def build_schema_statements(fields: list[FieldSpec]) -> list[str]:
    """One ``$table-><type>('<name>');`` statement per field, in order."""
    return [f"$table->{f.type.value}('{f.name}');" for f in fields]


def statement_column(statement: str) -> str | None:
    """The column a ``$table-><type>('<name>')`` statement defines."""
    match = _COLUMN_RE.search(statement)
    return match.group(1) if match else None


def migration_columns(content: str) -> set[str]:
    """Names of every column a migration already declares."""
    return set(_COLUMN_RE.findall(content))


def conflicting_statements(content: str, statements: list[str]) -> list[str]:
    """Statements whose column is already declared with a different definition."""
    columns = migration_columns(content)
    return [
        s for s in statements
        if s not in content and statement_column(s) in columns
    ]


def patch_migration(content: str, statements: list[str]) -> str:
    """Insert *statements* immediately before the timestamps sentinel.

    A statement is skipped when its column is already declared, whatever
    the declared type.  If the sentinel is missing the content is returned
    unchanged.
    """
    if TIMESTAMPS_SENTINEL not in content:
        return content
    columns = migration_columns(content)
    missing = [
        s for s in statements
        if s not in content and statement_column(s) not in columns
    ]
    if not missing:
        return content

    block = f"\n{STATEMENT_INDENT}".join(missing)
    return content.replace(
        TIMESTAMPS_SENTINEL,
        f"{block}\n{STATEMENT_INDENT}{TIMESTAMPS_SENTINEL}",
        1,
    )


class MigrationGenerator:
    """Patches the resource's create-table migration and runs it."""

    def __init__(self, bridge: FrameworkBridge, run_migrations: bool = True) -> None:
        self.bridge = bridge
        self.run_migrations = run_migrations

    async def generate(
        self,
        names: ResourceNames,
        statements: list[str],
        migration_path: Path | None = None,
    ) -> StepResult:
        """Patch and (optionally) run the migration.

        Args:
            names: Derived resource names.
            statements: Output of :func:`build_schema_statements`.
            migration_path: The migration created by the model stage in this
                run, if any.  Otherwise the newest existing
                ``create_<table>_table`` migration is reused, and a new one
                is created only when none exists.
        """
        path = migration_path or self.bridge.find_migration(names)
        if path is None:
            path = await self.bridge.make_migration(names)
            created = True
        else:
            created = migration_path is not None

        if not path.exists():
            return StepResult(
                artifact=ArtifactKind.MIGRATION,
                status=StepStatus.SKIPPED,
                path=path,
                message=f"Migration file not found: {path}",
                level="silent",
            )

        content = await read_text(path)
        conflicts = conflicting_statements(content, statements)
        patched = patch_migration(content, statements)
        changed = patched != content
        if changed:
            await write_text(path, patched)

        status = StepStatus.CREATED if created else (
            StepStatus.UPDATED if changed else StepStatus.SKIPPED
        )
        result = StepResult(
            artifact=ArtifactKind.MIGRATION,
            status=status,
            path=path,
            message=f"Migration {path.name} is ready.",
        )
        if conflicts:
            result.level = "warning"
            for statement in conflicts:
                result.notes.append(
                    f"Column '{statement_column(statement)}' already exists in "
                    f"{path.name}; kept its current definition."
                )

        if await self.bridge.has_table(names.table, exclude=path):
            result.notes.append(f"Table '{names.table}' already exists. Migration will not run.")
            return result

        if not self.run_migrations:
            result.notes.append("Migration execution disabled; run 'php artisan migrate' to apply it.")
            return result

        if not self.bridge.can_migrate:
            result.notes.append(
                f"Migration not executed; run 'php artisan migrate' to apply {path.name}."
            )
            return result

        result.notes.append("Running migration...")
        try:
            await self.bridge.migrate(path)
        except BridgeError as exc:
            result.status = StepStatus.FAILED
            result.level = "error"
            result.message = str(exc)
            return result

        result.notes.append("Migration ran successfully.")
        return result
