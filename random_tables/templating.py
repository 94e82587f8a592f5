"""Reference syntax for composing tables.

A reference embeds a roll on another table inside entry content or a saved
template:

    {{title::table_id::table_name}}
    {{title::table_id::table_name::roll_count::separator}}

`table_id` is tried first, `table_name` is the fallback used when the id
cannot be found. `roll_count` (default 1) rolls the target table that many
times and joins the results with `separator` (default ", ").

References with default count/separator serialize to the short 3-field form;
anything else forces the full 5-field form. replace_reference() relies on
that asymmetry to find the reference text again.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .errors import InvalidArgumentError

# Body may be empty ("{{}}") but cannot contain a closing brace.
REFERENCE_PATTERN = re.compile(r"\{\{([^}]*)\}\}")

# Hard ceiling on nested resolution; not configurable.
MAX_RESOLUTION_DEPTH = 5

DEFAULT_ROLL_COUNT = 1
DEFAULT_SEPARATOR = ", "


def _parse_roll_count(text: str) -> int:
    try:
        count = int(text)
    except ValueError:
        return DEFAULT_ROLL_COUNT
    return count if count >= 1 else DEFAULT_ROLL_COUNT


@dataclass(frozen=True)
class TemplateReference:
    title: str
    table_id: str
    table_name: str
    roll_count: int = DEFAULT_ROLL_COUNT
    separator: str = DEFAULT_SEPARATOR
    # Text between the braces when parsed from a template, None otherwise.
    raw: str | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.roll_count < 1:
            raise InvalidArgumentError("Roll count must be at least 1")

    @classmethod
    def from_string(cls, body: str) -> TemplateReference:
        """Parse the text between `{{` and `}}`.

        Missing or invalid trailing fields fall back to their defaults.
        """
        parts = body.split("::")

        def part(index: int) -> str:
            return parts[index] if index < len(parts) else ""

        return cls(
            title=part(0),
            table_id=part(1),
            table_name=part(2),
            roll_count=_parse_roll_count(part(3)) if part(3) else DEFAULT_ROLL_COUNT,
            separator=part(4) or DEFAULT_SEPARATOR,
            raw=body,
        )

    @property
    def is_resolvable(self) -> bool:
        return bool(self.table_id or self.table_name)

    @property
    def has_defaults(self) -> bool:
        return self.roll_count == DEFAULT_ROLL_COUNT and self.separator == DEFAULT_SEPARATOR

    def to_full_string(self) -> str:
        return (
            f"{{{{{self.title}::{self.table_id}::{self.table_name}"
            f"::{self.roll_count}::{self.separator}}}}}"
        )

    def __str__(self) -> str:
        if not self.has_defaults:
            return self.to_full_string()
        return f"{{{{{self.title}::{self.table_id}::{self.table_name}}}}}"


class RollTemplate:
    """A string that may contain zero or more references.

    Instances are immutable; replace_reference() returns a new template.
    """

    def __init__(self, template: str) -> None:
        self._template = template

    @property
    def template(self) -> str:
        return self._template

    @staticmethod
    def is_template(text: str) -> bool:
        """True if `text` contains at least one reference."""
        return REFERENCE_PATTERN.search(text) is not None

    def extract_references(self) -> list[TemplateReference]:
        """All references, left to right, non-overlapping."""
        return [
            TemplateReference.from_string(match.group(1))
            for match in REFERENCE_PATTERN.finditer(self._template)
        ]

    def replace_reference(self, reference: TemplateReference, value: str) -> RollTemplate:
        """Replace the first occurrence of `reference` with `value`.

        A parsed reference is looked up by its own text first, then by its
        canonical form. Returns this template unchanged when neither is found.
        """
        candidates = [str(reference)]
        if reference.raw is not None:
            candidates.insert(0, f"{{{{{reference.raw}}}}}")
        for ref_text in candidates:
            index = self._template.find(ref_text)
            if index != -1:
                return RollTemplate(
                    self._template[:index] + value + self._template[index + len(ref_text):]
                )
        return self

    def has_unresolved_references(self) -> bool:
        return self.is_template(self._template)

    def __str__(self) -> str:
        return self._template

    def __repr__(self) -> str:
        return f"RollTemplate({self._template!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RollTemplate):
            return NotImplemented
        return self._template == other._template

    def __hash__(self) -> int:
        return hash(self._template)
