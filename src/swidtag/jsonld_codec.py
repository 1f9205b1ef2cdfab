# -*- coding: utf-8 -*-
"""
JSON-LD surface of a SWID tag.

Writing: document attributes, a ``Link`` index map (href -> link attributes)
and a ``Meta`` index map (all Meta attributes merged into one object) are
compacted against the canonical context, then the leftover compact-IRI
prefixes are stripped from the text.

Reading: the input is compacted and then expanded against the canonical
context, and the expanded form is walked member by member.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from pyld import jsonld
from pyld.jsonld import JsonLdError

from .context_loader import ContextLoader, canonical_context
from .document import SwidTag
from .elements import Link, parse_uri
from .errors import Diagnostic, LoadErrorKind, LoadResult, SwidTagError
from .vocabulary import (
    COMPACT_PREFIXES,
    LINK_TERM,
    META_TERM,
    SWIDTAG_CONTEXT_URL,
    Attributes,
    JsonMembers,
    from_index_key,
    from_json_id,
    to_index_key,
    to_json_id,
)


class JsonLdProcessor:
    """The two pyld operations the codec needs, bound to the canonical context."""

    def __init__(self, loader: Optional[ContextLoader] = None) -> None:
        self.loader = loader or ContextLoader()
        self.context = canonical_context()

    @property
    def options(self) -> Dict[str, Any]:
        return {"documentLoader": self.loader}

    def compact(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return jsonld.compact(document, self.context, self.options)

    def expand(self, document: Dict[str, Any]) -> List[Dict[str, Any]]:
        return jsonld.expand(document, self.options)

    def normalize(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Compact then expand; returns the first expanded node (or {})."""
        expanded = self.expand(self.compact(document))
        return expanded[0] if expanded else {}


def _standard_context(obj: Dict[str, Any]) -> Dict[str, Any]:
    body = {k: v for k, v in obj.items() if k != "@context"}
    return {"@context": SWIDTAG_CONTEXT_URL, **body}


# ------------------ Writing ------------------
def to_document(tag: SwidTag) -> Dict[str, Any]:
    """Uncompacted JSON-LD object for `tag` (IRI keys, Link/Meta index maps)."""
    default_ns = tag.element_name.namespace
    result: Dict[str, Any] = {}
    for name, value in tag.attributes.items():
        result[to_json_id(name, default_ns)] = value

    links: Dict[str, Dict[str, str]] = {}
    for link in tag.links:
        # a link without href has no index key
        if not link.href:
            continue
        links[link.href] = {
            to_json_id(name, default_ns): value
            for name, value in link.attributes.items()
            if name != Attributes.HRef
        }
    if links:
        result[LINK_TERM] = links

    meta: Dict[str, str] = {}
    for element in tag.meta:
        for name, value in element.attributes.items():
            meta.setdefault(to_index_key(name), value)
    if meta:
        result[META_TERM] = meta

    return _standard_context(result)


def dumps(tag: SwidTag, loader: Optional[ContextLoader] = None) -> str:
    processor = JsonLdProcessor(loader)
    compacted = _standard_context(processor.compact(to_document(tag)))
    text = json.dumps(compacted, ensure_ascii=False, separators=(",", ":"))
    # assumes no value starts with one of these prefixes
    for prefix in COMPACT_PREFIXES:
        text = text.replace('"' + prefix, '"')
    return text


# ------------------ Reading ------------------
def _scalar(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _value(element: Dict[str, Any]) -> Optional[str]:
    return _scalar(element.get("@value"))


def _property_value(element: Dict[str, Any], name: str) -> Optional[str]:
    values = element.get(name)
    if isinstance(values, list):
        for item in values:
            if isinstance(item, dict) and "@value" in item:
                return _value(item)
        return None
    return _scalar(values)


def _build_link(index: str, element: Dict[str, Any]) -> Link:
    link = Link(parse_uri(index), _property_value(element, JsonMembers.Relationship))
    for prop in element:
        if prop.startswith("@") or prop == JsonMembers.Relationship:
            continue
        link.add_attribute(from_json_id(prop), _property_value(element, prop))
    return link


def walk(expanded: Dict[str, Any], diagnostics: List[Diagnostic]) -> SwidTag:
    tag = SwidTag()
    meta = None
    for member_name, member in expanded.items():
        # scalar members (@id, @context) are not SWID attributes after expansion
        if not isinstance(member, list):
            continue
        for element in member:
            if not isinstance(element, dict):
                continue
            index = element.get("@index")
            value = _value(element)
            if index is None:
                tag.add_attribute(from_json_id(member_name), value)
            elif value is not None:
                if member_name == JsonMembers.Meta:
                    meta = meta or tag.add_meta()
                    meta.add_attribute(from_index_key(index), value)
            elif member_name == JsonMembers.Link:
                try:
                    tag.add_element(_build_link(index, element))
                except (ValueError, SwidTagError) as e:
                    diagnostics.append(Diagnostic(LoadErrorKind.UNRESOLVABLE_LINK, str(e), index))
    return tag


def load(text: Union[str, bytes], loader: Optional[ContextLoader] = None) -> LoadResult:
    diagnostics: List[Diagnostic] = []
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        expanded = JsonLdProcessor(loader).normalize(data)
    except (ValueError, JsonLdError) as e:
        return LoadResult.failure(LoadErrorKind.PARSE_FAILURE, f"{type(e).__name__}: {e}", "json")
    return LoadResult(document=walk(expanded, diagnostics), diagnostics=diagnostics)
