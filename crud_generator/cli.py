"""Command-line entry point: ``make-crud [name] [--fields ...]``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import DEFAULT_CONFIG_FILENAME, PROJECT_ENV_FIELDS, CrudConfig
from .fields import parse_fields, prompt_for_fields, prompt_for_resource_name
from .scaffolder.generator import CrudGenerator
from .utils import (
    ResourceLockedError,
    console,
    print_error,
    print_success,
    print_warning,
    probe_url,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="make-crud",
        description=(
            "Create a model, migration, controller, and Blade views with "
            "specified fields for CRUD operations"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  make-crud Post --fields=title:string,body:text,published:boolean\n"
            "  make-crud Category --path ../shop --no-migrate\n"
            "  make-crud --publish-config --path ../shop\n"
        ),
    )

    parser.add_argument("name", nargs="?", help="Model name (prompted for when omitted)")
    parser.add_argument(
        "--fields",
        default=None,
        help="Comma-separated name:type list, e.g. title:string,views:integer",
    )
    parser.add_argument(
        "--path", "-p",
        default=".",
        help="Root of the Laravel project (default: current directory)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"JSON config file (default: <path>/{DEFAULT_CONFIG_FILENAME} if present)",
    )
    parser.add_argument("--no-model", action="store_true", help="Skip the model")
    parser.add_argument("--no-migration", action="store_true", help="Skip the migration")
    parser.add_argument("--no-controller", action="store_true", help="Skip the controller")
    parser.add_argument("--no-views", action="store_true", help="Skip the Blade views")
    parser.add_argument("--no-route", action="store_true", help="Skip the resource route")
    parser.add_argument(
        "--no-migrate",
        action="store_true",
        help="Write the migration without running it",
    )
    parser.add_argument(
        "--bridge",
        choices=("auto", "artisan", "stub"),
        default=None,
        help="How framework stubs are created (default: auto)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing views (and an existing config with --publish-config)",
    )
    parser.add_argument(
        "--check-url",
        action="store_true",
        help="Request the resource URL after generation and report the response",
    )
    parser.add_argument(
        "--publish-config",
        action="store_true",
        help=f"Write the default {DEFAULT_CONFIG_FILENAME} into the project and exit",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.no_model:
        overrides["generate_model"] = False
    if args.no_migration:
        overrides["generate_migration"] = False
    if args.no_controller:
        overrides["generate_controller"] = False
    if args.no_views:
        overrides["generate_blade"] = False
    if args.no_route:
        overrides["generate_route"] = False
    if args.no_migrate:
        overrides["run_migrations"] = False
    if args.bridge:
        overrides["bridge"] = args.bridge
    if args.force:
        overrides["force_views"] = True
    return overrides


def _publish_config(config: CrudConfig, force: bool) -> int:
    target = config.project_root / DEFAULT_CONFIG_FILENAME
    if target.exists() and not force:
        print_warning(f"{target} already exists (use --force to overwrite).")
        return 1
    # Publish the defaults, not the values merged from .env or flags.
    CrudConfig(project_root=config.project_root).save(target, exclude=set(PROJECT_ENV_FIELDS))
    print_success(f"Configuration published to {target}")
    return 0


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the generator and return the process exit code."""
    args = build_parser().parse_args(argv)

    project_root = Path(args.path)
    if not project_root.is_dir():
        print_error(f"Project directory not found: {project_root}")
        return 1

    config_path = Path(args.config) if args.config else None
    if config_path is not None and not config_path.is_file():
        print_error(f"Config file not found: {config_path}")
        return 1

    try:
        config = CrudConfig.for_project(project_root, config_path, **_overrides(args))
    except ValidationError as exc:
        print_error(f"Invalid configuration: {exc}")
        return 1

    if args.publish_config:
        return _publish_config(config, args.force)

    try:
        name = args.name or prompt_for_resource_name(on_error=print_error)
    except ValueError as exc:
        print_error(str(exc))
        return 1

    if args.fields:
        parsed = parse_fields(args.fields)
    else:
        # Errors were already shown while prompting.
        parsed = prompt_for_fields(on_error=print_error).model_copy(update={"errors": []})

    generator = CrudGenerator(config)
    try:
        report = asyncio.run(generator.generate(name, parsed))
    except (ValueError, ResourceLockedError) as exc:
        print_error(str(exc))
        return 1

    generator.print_report(report)

    if args.check_url:
        status = asyncio.run(probe_url(report.browse_url))
        if status is None:
            print_warning(f"{report.browse_url} is not reachable (is the app server running?)")
        elif status < 400:
            print_success(f"{report.browse_url} responded with HTTP {status}")
        else:
            print_warning(f"{report.browse_url} responded with HTTP {status}")

    return 0 if report.succeeded else 1


def main() -> None:
    """CLI entry point for ``make-crud`` / ``python -m crud_generator``."""
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        console.print()
        print_warning("Aborted.")
        sys.exit(130)
