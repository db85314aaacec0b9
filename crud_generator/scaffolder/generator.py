"""Main scaffolding orchestrator.

Takes a resource name and a field list and runs every artifact stage in a
fixed order against a Laravel project:

1. schema transform (fields -> schema-builder statements)
2. model (+ migration stub) and its ``$fillable`` declaration
3. migration patch, then execution unless the table already exists
4. controller CRUD methods
5. Blade views and the shared layout
6. resource route

Each stage is gated by its configuration toggle and fails on its own: an
error in one stage is recorded in the report and the remaining stages still
run.  Nothing already written is rolled back.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from jinja2 import TemplateError
from rich.console import Console

from .. import utils
from ..config import CrudConfig
from ..fields import FieldParseResult, FieldSpec, parse_fields
from ..naming import ResourceNames, derive_names
from ..utils import print_error, print_info, print_success, print_summary_table, print_warning, resource_lock
from .bridge import BridgeError, FrameworkBridge, select_bridge
from .controller_gen import ControllerGenerator
from .migration_gen import MigrationGenerator, build_schema_statements
from .model_gen import ModelGenerator
from .results import ArtifactKind, GenerationReport, StepResult, StepStatus
from .route_gen import RouteGenerator
from .templates import TemplateRenderer
from .view_gen import ViewGenerator


# Errors a single stage may raise without aborting the run.
STAGE_ERRORS: tuple[type[BaseException], ...] = (
    BridgeError,
    OSError,
    TemplateError,
    UnicodeDecodeError,
)


class CrudGenerator:
    """Generates the full CRUD artifact set for one resource.

    Usage::

        config = CrudConfig.for_project("/path/to/laravel-app")
        report = await CrudGenerator(config).generate("Post", "title:string,body:text")
    """

    def __init__(
        self,
        config: CrudConfig,
        bridge: FrameworkBridge | None = None,
        renderer: TemplateRenderer | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.bridge = bridge or select_bridge(config)
        self.console = console or utils.console
        self.model_gen = ModelGenerator(self.bridge)
        self.migration_gen = MigrationGenerator(self.bridge, config.run_migrations)
        self.controller_gen = ControllerGenerator(self.bridge, self.renderer)
        self.view_gen = ViewGenerator(
            self.renderer,
            config.views_path,
            app_name=config.app_name,
            force=config.force_views,
        )
        self.route_gen = RouteGenerator(config.routes_path)

    # -- Public API --------------------------------------------------------

    def names_for(self, name: str) -> ResourceNames:
        return derive_names(
            name,
            model_namespace=self.config.layout.model_namespace,
            controller_namespace=self.config.layout.controller_namespace,
        )

    async def generate(
        self,
        name: str,
        fields: str | FieldParseResult | list[FieldSpec] | None = None,
    ) -> GenerationReport:
        """Generate (or complete) every enabled artifact for *name*.

        Args:
            name: Resource name, e.g. ``"Post"`` or ``"blog_post"``.
            fields: A raw ``name:type,...`` string, an already parsed
                ``FieldParseResult`` or a list of ``FieldSpec``.

        Returns:
            The ``GenerationReport`` describing every stage.

        Raises:
            ValueError: If *name* is not a valid resource name.
            ResourceLockedError: If another run holds this resource's lock.
        """
        names = self.names_for(name)
        parsed = _coerce_fields(fields)
        report = GenerationReport(
            names=names,
            fields=parsed.fields,
            field_errors=parsed.errors,
            browse_url=self.config.resource_url(names.route_segment),
        )
        for error in parsed.errors:
            print_error(error, self.console)

        with resource_lock(self.config.lock_path, names.snake):
            await self._run(report)

        if report.succeeded:
            print_success(
                f"CRUD operations for {names.studly} created successfully. "
                f"now you can view {report.browse_url}",
                self.console,
            )
        else:
            failed = ", ".join(s.artifact.value for s in report.failed)
            print_warning(
                f"CRUD operations for {names.studly} finished with errors ({failed}).",
                self.console,
            )
        return report

    def print_report(self, report: GenerationReport) -> None:
        """Print the per-artifact summary table."""
        print_summary_table(
            report.as_rows(),
            columns=("Artifact", "Status", "Path"),
            title=f"{report.names.studly} scaffolding",
            out=self.console,
        )

    # -- Stages ------------------------------------------------------------

    async def _run(self, report: GenerationReport) -> None:
        config = self.config
        names = report.names
        fields = report.fields

        statements = build_schema_statements(fields) if config.generate_migration else []
        self.model_gen.migration_path = None

        await self._stage(
            report,
            ArtifactKind.MODEL,
            config.generate_model,
            lambda: self.model_gen.generate(names, fields, with_migration=config.generate_migration),
        )
        await self._stage(
            report,
            ArtifactKind.MIGRATION,
            config.generate_migration,
            lambda: self.migration_gen.generate(names, statements, self.model_gen.migration_path),
        )
        await self._stage(
            report,
            ArtifactKind.CONTROLLER,
            config.generate_controller,
            lambda: self.controller_gen.generate(names, fields),
        )
        await self._stage(
            report,
            ArtifactKind.VIEWS,
            config.generate_blade,
            lambda: self.view_gen.generate(names, fields),
        )
        await self._stage(
            report,
            ArtifactKind.LAYOUT,
            config.generate_blade,
            self.view_gen.generate_layout,
        )
        await self._stage(
            report,
            ArtifactKind.ROUTE,
            config.generate_route,
            lambda: self.route_gen.generate(names),
        )

    async def _stage(
        self,
        report: GenerationReport,
        kind: ArtifactKind,
        enabled: bool,
        run: Callable[[], Awaitable[StepResult]],
    ) -> StepResult:
        if not enabled:
            result = StepResult(
                artifact=kind,
                status=StepStatus.DISABLED,
                message=f"{kind.value} generation disabled.",
                level="silent",
            )
        else:
            try:
                result = await run()
            except STAGE_ERRORS as exc:
                result = StepResult(
                    artifact=kind,
                    status=StepStatus.FAILED,
                    message=f"{kind.value.capitalize()} generation failed: {exc}",
                    level="error",
                )

        report.steps.append(result)
        self._announce(result)
        return result

    def _announce(self, result: StepResult) -> None:
        if result.level == "silent":
            return
        printer = {
            "success": print_success,
            "info": print_info,
            "warning": print_warning,
            "error": print_error,
        }[result.level]
        for note in result.notes:
            print_info(note, self.console)
        printer(result.message, self.console)


def _coerce_fields(fields: str | FieldParseResult | list[FieldSpec] | None) -> FieldParseResult:
    if isinstance(fields, FieldParseResult):
        return fields
    if fields is None or isinstance(fields, str):
        return parse_fields(fields)
    return FieldParseResult(fields=list(fields))
