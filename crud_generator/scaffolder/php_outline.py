"""Structural outline of a PHP class.

Patching generated PHP files needs three facts about a class: where its
body opens and closes, which methods it already declares and which
properties it already declares.  ``outline_class`` finds them by scanning
the source with strings and comments masked out and brace depth tracked,
so a method name mentioned in a comment or a string, or a brace inside a
string literal, never confuses the patchers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field


_CLASS_RE = re.compile(r"\bclass\s+([A-Za-z_]\w*)")
_METHOD_RE = re.compile(r"\bfunction\s+&?\s*([A-Za-z_]\w*)\s*\(")
_PROPERTY_RE = re.compile(
    r"\b(?:public|protected|private|var)\b(?:\s+(?:static|readonly|\??[\w\\|]+))*\s+\$([A-Za-z_]\w*)"
)
_TRAIT_USE_RE = re.compile(r"\buse\s+[\w\\]+(?:\s*,\s*[\w\\]+)*\s*;")

# Words that can follow ``class`` without naming one (``new class extends X``).
_NOT_A_NAME = frozenset({"extends", "implements"})


@dataclass
class ClassOutline:
    """Offsets and member names of one class declaration."""

    name: str
    open_brace: int
    close_brace: int
    methods: dict[str, int] = field(default_factory=dict)
    properties: set[str] = field(default_factory=set)
    trait_use_end: int | None = None

    def has_method(self, name: str) -> bool:
        return name in self.methods

    def has_property(self, name: str) -> bool:
        return name.lstrip("$") in self.properties

    def body(self, source: str) -> str:
        return source[self.open_brace + 1:self.close_brace]

    def first_method_offset(self, names: list[str]) -> int | None:
        """Offset of the earliest declared method among *names*."""
        offsets = [self.methods[n] for n in names if n in self.methods]
        return min(offsets) if offsets else None


def outline_class(source: str, class_name: str | None = None) -> ClassOutline | None:
    """Return the outline of *class_name* (or the first named class).

    Returns ``None`` when no matching class, or no balanced body, is found.
    """
    masked = mask_php(source)

    for match in _CLASS_RE.finditer(masked):
        name = match.group(1)
        if name in _NOT_A_NAME:
            continue
        if class_name is not None and name != class_name:
            continue

        open_brace = masked.find("{", match.end())
        if open_brace == -1:
            return None
        close_brace = _matching_brace(masked, open_brace)
        if close_brace is None:
            return None

        top_level = _top_level_text(masked, open_brace, close_brace)
        outline = ClassOutline(name=name, open_brace=open_brace, close_brace=close_brace)
        for method in _METHOD_RE.finditer(top_level):
            outline.methods.setdefault(method.group(1), open_brace + 1 + _line_start(top_level, method.start()))
        for prop in _PROPERTY_RE.finditer(top_level):
            outline.properties.add(prop.group(1))
        trait_uses = list(_TRAIT_USE_RE.finditer(top_level))
        if trait_uses:
            outline.trait_use_end = open_brace + 1 + trait_uses[-1].end()
        return outline

    return None


def mask_php(source: str) -> str:
    """Replace string and comment contents with spaces, keeping offsets.

    Newlines are preserved so line positions stay meaningful.  ``#[``
    attributes are treated as code.
    """
    out = list(source)
    i = 0
    n = len(source)

    def blank(start: int, end: int) -> None:
        for k in range(start, min(end, n)):
            if out[k] != "\n":
                out[k] = " "

    while i < n:
        ch = source[i]
        nxt = source[i + 1] if i + 1 < n else ""

        if ch == "/" and nxt == "/" or ch == "#" and nxt != "[":
            end = source.find("\n", i)
            end = n if end == -1 else end
            blank(i, end)
            i = end
        elif ch == "/" and nxt == "*":
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            blank(i, end)
            i = end
        elif ch in ("'", '"'):
            j = i + 1
            while j < n and source[j] != ch:
                j += 2 if source[j] == "\\" else 1
            blank(i + 1, j)
            i = j + 1
        else:
            i += 1

    return "".join(out)


def _matching_brace(masked: str, open_brace: int) -> int | None:
    depth = 0
    for i in range(open_brace, len(masked)):
        if masked[i] == "{":
            depth += 1
        elif masked[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _top_level_text(masked: str, open_brace: int, close_brace: int) -> str:
    """Class body with everything nested deeper than the body blanked out."""
    chars: list[str] = []
    depth = 0
    for ch in masked[open_brace + 1:close_brace]:
        if ch == "{":
            depth += 1
            chars.append(" ")
        elif ch == "}":
            depth -= 1
            chars.append(" ")
        elif depth > 0 and ch != "\n":
            chars.append(" ")
        else:
            chars.append(ch)
    return "".join(chars)


def _line_start(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1
