# -*- coding: utf-8 -*-
"""
Exceptions and load results.

Attribute conflicts are business-rule violations and always propagate.
Malformed input is reported through LoadResult: the ``load_*`` entry points
collapse it to None, the ``parse_*`` entry points hand the result back so a
caller can tell malformed input from a document of the wrong type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .document import SwidTag


class SwidTagError(Exception):
    """Base class for SWID tag errors."""


class AttributeConflictError(SwidTagError):
    """An attribute that already holds a value was given a different one."""

    def __init__(self, attribute: str, element: str, current: str, value: str) -> None:
        super().__init__(
            f"Attempt to change attribute '{attribute}' present in element '{element}' "
            f"(current: {current!r}, new: {value!r})"
        )
        self.attribute = attribute
        self.element = element
        self.current = current
        self.value = value


class MediaQueryError(SwidTagError, ValueError):
    """Malformed media-applicability expression."""


class LoadErrorKind(str, Enum):
    PARSE_FAILURE = "parse-failure"
    SCHEMA_MISMATCH = "schema-mismatch"
    FETCH_FAILURE = "fetch-failure"
    UNRESOLVABLE_LINK = "unresolvable-link"
    UNRESOLVABLE_ATTRIBUTE = "unresolvable-attribute"


@dataclass
class Diagnostic:
    kind: LoadErrorKind
    message: str
    source: Optional[str] = None

    def __str__(self) -> str:
        where = f" [{self.source}]" if self.source else ""
        return f"{self.kind.value}{where}: {self.message}"


@dataclass
class LoadResult:
    document: Optional["SwidTag"] = None
    error: Optional[Diagnostic] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None

    @classmethod
    def failure(cls, kind: LoadErrorKind, message: str, source: Optional[str] = None,
                diagnostics: Optional[List[Diagnostic]] = None) -> "LoadResult":
        return cls(
            document=None,
            error=Diagnostic(kind, message, source),
            diagnostics=list(diagnostics or []),
        )
