"""
=============================================================================
HEADER TABLE
=============================================================================

An immutable, ordered, case-insensitive collection of HTTP headers.

=============================================================================
STORAGE LAYOUT
=============================================================================

Header names are case-insensitive ("Content-Type" = "content-type"), but
the name a caller first used is kept for output. Two dictionaries work
together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        HEADER TABLE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   _names (lookup index)          _values (ordered storage)          │
    │   ─────────────────────          ──────────────────────────         │
    │   "host"         → "Host"        "Host"         → ("a.b",)          │
    │   "content-type" → "Content-Type" "Content-Type" → ("text/html",)   │
    │   "x-tag"        → "X-TAG"       "X-TAG"        → ("a", "b")        │
    │                                                                      │
    │   Every key of _names points at exactly one key of _values.         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Values are stored trimmed of surrounding spaces and tabs. A table is never
modified in place: with_value / with_added / without return a new table,
or the same table when nothing would change.

=============================================================================
"""

from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from ..errors import ValidationError


HeaderValue = Union[str, Iterable[str]]


def normalize_header_value(value: HeaderValue) -> Tuple[str, ...]:
    """
    Turn a header value (one string or a sequence of strings) into a tuple
    of values trimmed of spaces and tabs.

    Raises:
        ValidationError: If the sequence is empty or holds a non-string.
    """
    if isinstance(value, str):
        values = [value]
    elif isinstance(value, (bytes, bytearray)) or not isinstance(value, Iterable):
        raise ValidationError("Header value must be a string or a sequence of strings.")
    else:
        values = list(value)
        if not values:
            raise ValidationError("Header value can not be an empty sequence.")

    normalized = []
    for item in values:
        if not isinstance(item, str):
            raise ValidationError("Header value must be a sequence of strings.")
        normalized.append(item.strip(" \t"))
    return tuple(normalized)


def _validate_name(name: str) -> str:
    if not isinstance(name, str) or not name:
        raise ValidationError("Header name must be a non-empty string.")
    return name


class HeaderTable:
    """
    Ordered, case-insensitive header storage.

    Example:
        table = HeaderTable.from_mapping({"Content-Type": "text/html"})
        table = table.with_added("x-tag", ["a", "b"])
        table.get("CONTENT-TYPE")       # ("text/html",)
        table.get_line("X-Tag")         # "a, b"
    """

    __slots__ = ("_values", "_names")

    def __init__(self):
        self._values: Dict[str, Tuple[str, ...]] = {}
        self._names: Dict[str, str] = {}

    @classmethod
    def from_mapping(cls, headers: Optional[Mapping[str, HeaderValue]]) -> "HeaderTable":
        """
        Build a table from an initial name → value(s) mapping.

        Names that collide case-insensitively are merged under the first
        spelling, in mapping order.
        """
        table = cls()
        for name, value in (headers or {}).items():
            table._append(_validate_name(name), normalize_header_value(value))
        return table

    # =========================================================================
    # READING
    # =========================================================================

    def has(self, name: str) -> bool:
        return name.lower() in self._names

    def get(self, name: str) -> Tuple[str, ...]:
        """Values of the header, in order; an empty tuple when absent."""
        canonical = self._names.get(name.lower())
        return self._values[canonical] if canonical is not None else ()

    def get_line(self, name: str) -> str:
        """Values of the header joined with ", "."""
        return ", ".join(self.get(name))

    def canonical_name(self, name: str) -> Optional[str]:
        """The stored spelling of a header name, or None when absent."""
        return self._names.get(name.lower())

    def names(self) -> Tuple[str, ...]:
        return tuple(self._values)

    def items(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        return iter(self._values.items())

    def as_dict(self) -> Dict[str, list]:
        """Copy of the table as canonical name → list of values."""
        return {name: list(values) for name, values in self._values.items()}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderTable):
            return NotImplemented
        return list(self._values.items()) == list(other._values.items())

    def __repr__(self) -> str:
        return f"HeaderTable({self.as_dict()!r})"

    # =========================================================================
    # COPY-ON-WRITE MUTATORS
    # =========================================================================

    def with_value(self, name: str, value: HeaderValue) -> "HeaderTable":
        """
        Return a table where `name` holds exactly `value`.

        An existing header with another casing is replaced, and the new
        spelling becomes canonical. Position in the ordering is kept.
        """
        _validate_name(name)
        values = normalize_header_value(value)

        current = self._names.get(name.lower())
        if current == name and self._values[name] == values:
            return self

        new = self._copy()
        if current is None:
            new._values[name] = values
        else:
            # Rebuild to keep the header at its original position
            new._values = {
                (name if key == current else key): (values if key == current else stored)
                for key, stored in self._values.items()
            }
        new._names[name.lower()] = name
        return new

    def with_added(self, name: str, value: HeaderValue) -> "HeaderTable":
        """
        Return a table with `value` appended to the existing header, or a new
        header when none matches case-insensitively.
        """
        _validate_name(name)
        values = normalize_header_value(value)

        new = self._copy()
        new._append(name, values)
        return new

    def without(self, name: str) -> "HeaderTable":
        """Return a table without `name`; the same table when it is absent."""
        lowered = name.lower()
        current = self._names.get(lowered)
        if current is None:
            return self

        new = self._copy()
        del new._values[current]
        del new._names[lowered]
        return new

    def with_first(self, name: str, value: HeaderValue) -> "HeaderTable":
        """
        Return a table where the header holds `value` and comes first.

        An existing spelling of the name is reused.
        """
        _validate_name(name)
        values = normalize_header_value(value)
        canonical = self._names.get(name.lower(), name)

        if next(iter(self._values), None) == canonical and self._values[canonical] == values:
            return self

        new = HeaderTable()
        new._values = {canonical: values}
        new._values.update(
            (key, stored) for key, stored in self._values.items() if key != canonical
        )
        new._names = dict(self._names)
        new._names[canonical.lower()] = canonical
        return new

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _copy(self) -> "HeaderTable":
        new = HeaderTable()
        new._values = dict(self._values)
        new._names = dict(self._names)
        return new

    def _append(self, name: str, values: Tuple[str, ...]) -> None:
        lowered = name.lower()
        canonical = self._names.get(lowered)
        if canonical is None:
            self._names[lowered] = name
            self._values[name] = values
        else:
            self._values[canonical] = self._values[canonical] + values
