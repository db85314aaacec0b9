"""crud-generator configuration.

Centralised, typed configuration for a scaffolding run.  All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.

Application values (``APP_URL``, ``APP_NAME``) are read from the target
project's ``.env`` file so the reported browse URL and the layout title
match the application being scaffolded.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import dotenv_values
from pydantic import BaseModel, Field


DEFAULT_CONFIG_FILENAME = "crud_generator.json"

_TOGGLES = (
    "generate_migration",
    "generate_model",
    "generate_controller",
    "generate_blade",
    "generate_route",
    "run_migrations",
    "force_views",
)

# Read from the project's .env unless a config file sets them explicitly.
PROJECT_ENV_FIELDS = frozenset({"app_url", "app_name"})


class LayoutConfig(BaseModel):
    """Where each artifact kind lives inside the project (Laravel defaults)."""

    models_dir: str = Field(default="app/Models")
    controllers_dir: str = Field(default="app/Http/Controllers")
    migrations_dir: str = Field(default="database/migrations")
    views_dir: str = Field(default="resources/views")
    routes_file: str = Field(default="routes/web.php")
    lock_dir: str = Field(default="storage/framework/crud-generator")
    model_namespace: str = Field(default="App\\Models")
    controller_namespace: str = Field(default="App\\Http\\Controllers")


class CrudConfig(BaseModel):
    """Global crud-generator configuration.

    Holds the per-artifact toggles, the target project location and the
    derived paths every generator writes to.  Instances are created once by
    the CLI (or by tests) and passed to ``CrudGenerator``.
    """

    # Artifact toggles -- each one disables its stage independently.
    generate_migration: bool = Field(default=True)
    generate_model: bool = Field(default=True)
    generate_controller: bool = Field(default=True)
    generate_blade: bool = Field(default=True)
    generate_route: bool = Field(default=True)

    run_migrations: bool = Field(
        default=True, description="Execute the new migration when its table is missing"
    )
    force_views: bool = Field(
        default=False, description="Overwrite per-resource views that already exist"
    )

    project_root: Path = Field(default=Path("."))
    bridge: Literal["auto", "artisan", "stub"] = Field(default="auto")
    php_binary: str = Field(default="php")
    command_timeout: int = Field(default=120, ge=10, description="Artisan command timeout in seconds")

    app_url: str = Field(default="http://localhost")
    app_name: str = Field(default="Laravel")

    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def models_path(self) -> Path:
        return self.project_root / self.layout.models_dir

    @property
    def controllers_path(self) -> Path:
        return self.project_root / self.layout.controllers_dir

    @property
    def migrations_path(self) -> Path:
        return self.project_root / self.layout.migrations_dir

    @property
    def views_path(self) -> Path:
        return self.project_root / self.layout.views_dir

    @property
    def routes_path(self) -> Path:
        return self.project_root / self.layout.routes_file

    @property
    def lock_path(self) -> Path:
        """Directory holding per-resource lock files."""
        return self.project_root / self.layout.lock_dir

    @property
    def artisan_path(self) -> Path:
        return self.project_root / "artisan"

    def resource_url(self, segment: str) -> str:
        """Browse URL for a resource route segment."""
        return f"{self.app_url.rstrip('/')}/{segment.strip('/')}"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None, exclude: set[str] | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to
                ``<project_root>/crud_generator.json``.
            exclude: Extra field names to leave out of the file.

        Returns:
            The path where the file was written.
        """
        target = path or (self.project_root / DEFAULT_CONFIG_FILENAME)
        target.parent.mkdir(parents=True, exist_ok=True)
        # project_root is machine-specific; it is always supplied at load time.
        payload = self.model_dump_json(indent=2, exclude={"project_root", *(exclude or ())})
        target.write_text(payload + "\n", encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path, **overrides: Any) -> "CrudConfig":
        """Load a previously-saved configuration from JSON.

        Keyword *overrides* replace values from the file.
        """
        raw = Path(path).read_text(encoding="utf-8")
        config = cls.model_validate_json(raw)
        if overrides:
            config = config.model_copy(update=overrides)
        return config

    @classmethod
    def from_env(cls, **overrides: Any) -> "CrudConfig":
        """Build a ``CrudConfig`` from environment variables.

        Recognised variables (all optional):
            CRUD_PROJECT_ROOT, CRUD_BRIDGE, CRUD_PHP_BINARY,
            CRUD_COMMAND_TIMEOUT, CRUD_APP_URL, CRUD_APP_NAME and one
            ``CRUD_<TOGGLE>`` per toggle (e.g. ``CRUD_GENERATE_ROUTE=false``).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CRUD_PROJECT_ROOT"):
            kwargs["project_root"] = Path(os.environ["CRUD_PROJECT_ROOT"])
        if os.environ.get("CRUD_BRIDGE"):
            kwargs["bridge"] = os.environ["CRUD_BRIDGE"]
        if os.environ.get("CRUD_PHP_BINARY"):
            kwargs["php_binary"] = os.environ["CRUD_PHP_BINARY"]
        if os.environ.get("CRUD_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["CRUD_COMMAND_TIMEOUT"])
        if os.environ.get("CRUD_APP_URL"):
            kwargs["app_url"] = os.environ["CRUD_APP_URL"]
        if os.environ.get("CRUD_APP_NAME"):
            kwargs["app_name"] = os.environ["CRUD_APP_NAME"]

        for toggle in _TOGGLES:
            value = os.environ.get(f"CRUD_{toggle.upper()}")
            if value is not None and value.strip():
                kwargs[toggle] = _parse_bool(value)

        kwargs.update(overrides)
        return cls(**kwargs)

    @classmethod
    def for_project(
        cls,
        project_root: str | Path,
        config_path: Path | None = None,
        **overrides: Any,
    ) -> "CrudConfig":
        """Build the configuration for a Laravel project directory.

        Resolution order (later wins): defaults, the project's ``.env``
        (``APP_URL`` / ``APP_NAME``), the JSON config file
        (*config_path* or ``<root>/crud_generator.json`` when present), then
        *overrides*.
        """
        root = Path(project_root)
        values: dict[str, Any] = {}

        env = read_project_env(root)
        if env.get("APP_URL"):
            values["app_url"] = env["APP_URL"]
        if env.get("APP_NAME"):
            values["app_name"] = env["APP_NAME"]

        path = config_path or (root / DEFAULT_CONFIG_FILENAME)
        if path.is_file():
            file_config = cls.load(path)
            values.update(file_config.model_dump(exclude_unset=True, exclude={"project_root"}))

        values.update(overrides)
        values["project_root"] = root
        return cls(**values)


def read_project_env(project_root: Path) -> dict[str, str]:
    """Return the key/value pairs of ``<project_root>/.env`` (empty if absent)."""
    env_file = Path(project_root) / ".env"
    if not env_file.is_file():
        return {}
    return {k: v for k, v in dotenv_values(env_file).items() if v is not None}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
