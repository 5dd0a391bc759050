"""Identifiers and wire-text primitives for the gateway.

The row store has no typed columns: a cell may come back as a string, an int,
a float or a bool depending on who wrote it. Every comparison the gateway makes
(id lookup, equality filters, join keys) is therefore done on the *string form*
of a value, rendered the way the browser client renders it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

ID_COLUMN = "id"
CREATED_AT_COLUMN = "createdAt"
UPDATED_AT_COLUMN = "updatedAt"

_REF_PATTERN = re.compile(r"^__REF\((\d+)\)\.([A-Za-z_][A-Za-z0-9_]*)__$")


def as_text(value: Any) -> str:
    """Render a cell value in its wire string form.

    Args:
        value: Native cell value.

    Returns:
        ``""`` for None, ``true``/``false`` for booleans, integer text for
        integral floats, ``str(value)`` otherwise.

    Example:
        >>> as_text(3.0)
        '3'
        >>> as_text(True)
        'true'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def numeric_id(value: Any) -> int | None:
    """Interpret an id cell as an integer, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = as_text(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() else None


@dataclass(frozen=True, slots=True)
class Ref:
    """Reference to a field of an earlier batch operation's result.

    Attributes:
        operation_index: Index of the operation whose result is referenced.
        field: Name of the result field to substitute.

    Example:
        >>> Ref.parse("__REF(0).id__")
        Ref(0.id)
    """

    operation_index: int
    field: str

    def __post_init__(self) -> None:
        if self.operation_index < 0:
            raise ValueError(
                f"operation_index must be non-negative, got {self.operation_index}"
            )
        if not self.field:
            raise ValueError("field must not be empty")

    def __repr__(self) -> str:
        return f"Ref({self.operation_index}.{self.field})"

    def __str__(self) -> str:
        return f"__REF({self.operation_index}).{self.field}__"

    @classmethod
    def parse(cls, value: Any) -> Ref | None:
        """Parse a ``__REF(k).field__`` placeholder.

        Args:
            value: Any payload value.

        Returns:
            A Ref when the whole value is a placeholder, otherwise None.
        """
        if not isinstance(value, str):
            return None
        match = _REF_PATTERN.match(value.strip())
        if match is None:
            return None
        return cls(operation_index=int(match.group(1)), field=match.group(2))
