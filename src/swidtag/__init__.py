# -*- coding: utf-8 -*-
"""SWID tag (ISO/IEC 19770-2) document model with XML, JSON-LD and HTML converters."""

from .document import SwidTag
from .element import Element
from .elements import Directory, Entity, Evidence, File, Link, Meta, Payload, Process, Resource
from .errors import (
    AttributeConflictError,
    Diagnostic,
    LoadErrorKind,
    LoadResult,
    MediaQueryError,
    SwidTagError,
)
from .media_query import is_applicable
from .vocabulary import (
    DISCOVERY_NS,
    SWID_NS,
    Attributes,
    Discovery,
    Elements,
    MediaType,
    Ownership,
    QName,
    Relationship,
    Role,
    Use,
    VersionScheme,
)

__version__ = "0.1.0"

__all__ = [
    "SwidTag",
    "Element",
    "Meta",
    "Link",
    "Entity",
    "Payload",
    "Evidence",
    "Directory",
    "File",
    "Process",
    "Resource",
    "SwidTagError",
    "AttributeConflictError",
    "MediaQueryError",
    "LoadErrorKind",
    "Diagnostic",
    "LoadResult",
    "is_applicable",
    "QName",
    "SWID_NS",
    "DISCOVERY_NS",
    "Attributes",
    "Discovery",
    "Elements",
    "MediaType",
    "Ownership",
    "Relationship",
    "Role",
    "Use",
    "VersionScheme",
]
