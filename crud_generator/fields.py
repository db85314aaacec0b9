"""Field list parsing, validation and interactive prompting.

A field list is a comma-separated string of ``name:type`` tokens, e.g.
``"title:string,body:text,published:boolean"``.  The type defaults to
``string`` when omitted.  Invalid tokens are reported and dropped; the rest
of the list is still processed so a single typo never aborts a run.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ColumnType(str, Enum):
    """Column types accepted by the schema builder."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    BIG_INTEGER = "bigInteger"
    SMALL_INTEGER = "smallInteger"
    TINY_INTEGER = "tinyInteger"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "dateTime"
    TIMESTAMP = "timestamp"
    DECIMAL = "decimal"
    FLOAT = "float"
    DOUBLE = "double"
    JSON = "json"
    JSONB = "jsonb"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def lookup(cls, value: str) -> "ColumnType | None":
        """Case-insensitive lookup returning the canonical member or ``None``."""
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


# Columns the migration stub already declares via id() / timestamps().
RESERVED_FIELD_NAMES: frozenset[str] = frozenset({"id", "created_at", "updated_at"})

_FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class FieldSpec(BaseModel):
    """A validated ``name:type`` pair."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ColumnType = ColumnType.STRING

    @property
    def label(self) -> str:
        """Form label, e.g. ``published_at`` -> ``Published_at``."""
        return self.name[:1].upper() + self.name[1:]

    def __str__(self) -> str:
        return f"{self.name}:{self.type.value}"


class FieldParseResult(BaseModel):
    """Outcome of parsing a field list: accepted fields plus one error per rejected token."""

    fields: list[FieldSpec] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def ok(self) -> bool:
        return not self.errors


def invalid_type_message(field_type: str) -> str:
    return (
        f"Invalid field type '{field_type}'. "
        f"Valid types are: {', '.join(ColumnType.values())}"
    )


def validate_field(
    name: str,
    field_type: str,
    seen: set[str] | None = None,
) -> tuple[FieldSpec | None, str | None]:
    """Validate one name/type pair.

    Returns:
        ``(FieldSpec, None)`` on success or ``(None, error_message)``.
    """
    name = name.strip()
    field_type = field_type.strip() or ColumnType.STRING.value

    if not _FIELD_NAME_RE.match(name):
        return None, f"Invalid field name '{name}'. Field names must be identifiers."
    if name.lower() in RESERVED_FIELD_NAMES:
        return None, (
            f"Field name '{name}' is reserved; the migration already defines it."
        )
    if seen is not None and name in seen:
        return None, f"Duplicate field '{name}' ignored."

    column_type = ColumnType.lookup(field_type)
    if column_type is None:
        return None, invalid_type_message(field_type)

    return FieldSpec(name=name, type=column_type), None


def parse_fields(raw: str | None) -> FieldParseResult:
    """Parse a comma-separated ``name:type`` list.

    Order is preserved.  Blank tokens (from stray commas) are ignored
    without an error.
    """
    result = FieldParseResult()
    if not raw:
        return result

    seen: set[str] = set()
    for token in raw.split(","):
        if not token.strip():
            continue
        name, _, field_type = token.partition(":")
        spec, error = validate_field(name, field_type, seen)
        if error:
            result.errors.append(error)
            continue
        seen.add(spec.name)
        result.fields.append(spec)

    return result


def format_fields(fields: list[FieldSpec]) -> str:
    """Render fields back to the ``name:type,...`` form."""
    return ",".join(str(f) for f in fields)


# ---------------------------------------------------------------------------
# Interactive prompting
# ---------------------------------------------------------------------------


def prompt_for_fields(
    ask_name: Callable[[], str] | None = None,
    ask_type: Callable[[list[str]], str] | None = None,
    on_error: Callable[[str], None] | None = None,
) -> FieldParseResult:
    """Ask for fields one at a time until a blank name is entered.

    Args:
        ask_name: Returns the next field name; blank ends the loop.
        ask_type: Given the allowed type names, returns the chosen one.
        on_error: Called with each validation message.

    The defaults prompt on the terminal with ``rich.prompt.Prompt``.
    """
    ask_name = ask_name or _ask_field_name
    ask_type = ask_type or _ask_field_type

    result = FieldParseResult()
    seen: set[str] = set()
    while True:
        name = (ask_name() or "").strip()
        if not name:
            break
        field_type = ask_type(ColumnType.values())
        spec, error = validate_field(name, field_type, seen)
        if error:
            result.errors.append(error)
            if on_error:
                on_error(error)
            continue
        seen.add(spec.name)
        result.fields.append(spec)

    return result


def prompt_for_resource_name(
    ask: Callable[[], str] | None = None,
    on_error: Callable[[str], None] | None = None,
    max_attempts: int = 5,
) -> str:
    """Ask for the model name until a valid one is given.

    Raises:
        ValueError: If no valid name is entered within *max_attempts*.
    """
    from .naming import is_valid_resource_name

    ask = ask or _ask_model_name
    for _ in range(max_attempts):
        name = (ask() or "").strip()
        if is_valid_resource_name(name):
            return name
        message = (
            "The model name is required." if not name
            else f"Invalid model name '{name}'."
        )
        if on_error:
            on_error(message)
    raise ValueError("No valid model name entered.")


def _ask_model_name() -> str:
    from rich.prompt import Prompt

    return Prompt.ask("Enter the model name")


def _ask_field_name() -> str:
    from rich.prompt import Prompt

    return Prompt.ask("Enter a field name or leave blank to finish", default="")


def _ask_field_type(choices: list[str]) -> str:
    from rich.prompt import Prompt

    return Prompt.ask("Select field type", choices=choices, default=ColumnType.STRING.value)
