"""Resource name derivation.

Every generated artifact refers to the resource through one of a handful of
derived forms (``Post``, ``post``, ``Posts``, ``posts``).  They are computed
exactly once by :func:`derive_names` and passed around as an immutable
``ResourceNames`` record so the model, migration, controller, views and
route always agree on the same spelling.

The inflection rules follow the ones Laravel applies through
``Str::snake`` / ``Str::studly`` / ``Str::pluralStudly``.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Inflection tables
# ---------------------------------------------------------------------------

_UNCOUNTABLE: frozenset[str] = frozenset({
    "audio", "bison", "chassis", "compensation", "coreopsis", "data",
    "deer", "education", "emoji", "equipment", "evidence", "feedback",
    "firmware", "fish", "furniture", "gold", "hardware", "information",
    "jedi", "kin", "knowledge", "love", "metadata", "money", "moose",
    "news", "nutrition", "offspring", "plankton", "pokemon", "police",
    "rain", "recommended", "related", "rice", "series", "sheep",
    "software", "species", "swine", "traffic", "wheat",
})

_IRREGULAR: dict[str, str] = {
    "atlas": "atlases",
    "child": "children",
    "criterion": "criteria",
    "foot": "feet",
    "goose": "geese",
    "man": "men",
    "mouse": "mice",
    "move": "moves",
    "ox": "oxen",
    "person": "people",
    "sex": "sexes",
    "tooth": "teeth",
    "woman": "women",
}

_PLURAL_RULES: tuple[tuple[str, str], ...] = (
    (r"(quiz)$", r"\1zes"),
    (r"^(ox)$", r"\1en"),
    (r"([m|l])ouse$", r"\1ice"),
    (r"(matr|vert|ind)(ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive|gulf)$", r"\1s"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat|potat|her|ech)o$", r"\1oes"),
    (r"(bu|campu|statu|viru|alia)s$", r"\1ses"),
    (r"(octop)us$", r"\1uses"),
    (r"(ax|cris|test)is$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
)


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


class ResourceNames(BaseModel):
    """Every spelling of a resource name used across the generated files."""

    model_config = ConfigDict(frozen=True)

    raw: str
    studly: str
    snake: str
    plural_studly: str
    plural_snake: str
    model_namespace: str
    controller_namespace: str

    @property
    def table(self) -> str:
        """Database table name (``posts``)."""
        return self.plural_snake

    @property
    def route_segment(self) -> str:
        """Resource route name / URL segment (``posts``)."""
        return self.plural_snake

    @property
    def view_dir(self) -> str:
        """Directory and dotted prefix for the Blade views (``post``)."""
        return self.snake

    @property
    def model_class(self) -> str:
        return self.studly

    @property
    def controller_class(self) -> str:
        return f"{self.studly}Controller"

    @property
    def model_fqcn(self) -> str:
        """Fully-qualified model class with a leading backslash."""
        return f"\\{self.model_namespace}\\{self.model_class}"

    @property
    def controller_fqcn(self) -> str:
        """Fully-qualified controller class with a leading backslash."""
        return f"\\{self.controller_namespace}\\{self.controller_class}"

    @property
    def migration_name(self) -> str:
        """Migration base name (``create_posts_table``)."""
        return f"create_{self.table}_table"

    @property
    def label(self) -> str:
        """Human label used in headings (``Blog post``)."""
        return self.snake.replace("_", " ").capitalize()

    def as_context(self) -> dict[str, str]:
        """Return the names as a flat template context."""
        return {
            "name_raw": self.raw,
            "studly": self.studly,
            "snake": self.snake,
            "plural_studly": self.plural_studly,
            "plural_snake": self.plural_snake,
            "table": self.table,
            "route_segment": self.route_segment,
            "view_dir": self.view_dir,
            "model_class": self.model_class,
            "controller_class": self.controller_class,
            "model_fqcn": self.model_fqcn,
            "controller_fqcn": self.controller_fqcn,
            "model_namespace": self.model_namespace,
            "controller_namespace": self.controller_namespace,
            "label": self.label,
        }


_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_\- ]*$")
# A run of capitals is one word: "HTTPLog" -> "HTTP", "Log"; "URL" -> "URL".
_WORD_RE = re.compile(r"[A-Z]{2,}(?=[A-Z][a-z])|[A-Z]{2,}[^A-Za-z]*$|[A-Z][^A-Z]*|^[^A-Z]+")


def is_valid_resource_name(name: str) -> bool:
    """Return ``True`` if *name* can be turned into a PHP class name."""
    return bool(name) and len(name) <= 255 and bool(_NAME_RE.match(name))


def derive_names(
    name: str,
    *,
    model_namespace: str = "App\\Models",
    controller_namespace: str = "App\\Http\\Controllers",
) -> ResourceNames:
    """Derive every name form for a resource.

    Examples::

        derive_names("Post").plural_snake      -> "posts"
        derive_names("blog_post").studly      -> "BlogPost"
        derive_names("Category").table         -> "categories"

    Raises:
        ValueError: If *name* is empty or not usable as a class name.
    """
    cleaned = name.strip()
    if not is_valid_resource_name(cleaned):
        raise ValueError(
            f"Invalid resource name '{name}'. Start with a letter and use only "
            "letters, digits, underscores, hyphens or spaces."
        )

    studly = studly_case(cleaned)
    plural_studly = plural_studly_case(studly)
    return ResourceNames(
        raw=cleaned,
        studly=studly,
        snake=snake_case(studly),
        plural_studly=plural_studly,
        plural_snake=snake_case(plural_studly),
        model_namespace=model_namespace.strip("\\"),
        controller_namespace=controller_namespace.strip("\\"),
    )


# ---------------------------------------------------------------------------
# Case helpers
# ---------------------------------------------------------------------------


def studly_case(value: str) -> str:
    """Convert ``blog_post`` / ``blog-post`` / ``blogPost`` to ``BlogPost``.

    Inner capitals are kept, so ``BlogPost`` stays ``BlogPost``.
    """
    parts = re.split(r"[-_\s]+", value)
    return "".join(part[0].upper() + part[1:] for part in parts if part)


def snake_case(value: str) -> str:
    """Convert ``BlogPost`` to ``blog_post``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s_]+", "_", s2).lower()


def plural_studly_case(value: str) -> str:
    """Pluralise the last word of a StudlyCase name (``BlogPost`` -> ``BlogPosts``)."""
    parts = _WORD_RE.findall(value)
    if not parts:
        return pluralize(value)
    return "".join(parts[:-1]) + pluralize(parts[-1])


def pluralize(word: str) -> str:
    """Return the English plural of a single word, matching its case."""
    if not word:
        return word

    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word

    if lower in _IRREGULAR:
        plural = _IRREGULAR[lower]
    else:
        plural = lower
        for pattern, replacement in _PLURAL_RULES:
            if re.search(pattern, lower):
                plural = re.sub(pattern, replacement, lower, count=1)
                break

    return _match_case(plural, word)


def _match_case(value: str, reference: str) -> str:
    if reference.isupper() and len(reference) > 1:
        return value.upper()
    if reference[0].isupper():
        return value[0].upper() + value[1:]
    return value
