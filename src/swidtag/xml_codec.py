# -*- coding: utf-8 -*-
"""
XML surface of a SWID tag.

Reading goes through lxml and copies the element tree into a NodeArena.
Writing builds an lxml tree (which owns prefix/namespace scoping) and prints
it in the canonical layout: XML declaration, two-space indent, one attribute
per line, no namespace declaration repeated where it is already in scope.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Union
from xml.sax.saxutils import escape

from lxml import etree

from .document import SwidTag
from .element import NodeArena
from .errors import LoadErrorKind, LoadResult
from .vocabulary import SWID_NS, XML_NS, XMLNS_NS, QName, xmlns

INDENT = "  "
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
ATTR_ENTITIES = {'"': "&quot;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}

_DECL_RE = re.compile(r"^\s*<\?xml[^>]*\?>")

# ------------------ Reading ------------------
def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True, remove_pis=True)


def parse_tree(text: Union[str, bytes]) -> NodeArena:
    """Parse XML text into a NodeArena. Raises etree.XMLSyntaxError/ValueError."""
    if isinstance(text, str):
        # lxml refuses str input that carries an encoding declaration
        text = _DECL_RE.sub("", text, count=1)
    root = etree.fromstring(text, _parser())
    arena = NodeArena(QName.parse(root.tag))
    _copy_element(arena, root, NodeArena.ROOT, {})
    return arena


def _copy_element(arena: NodeArena, el: etree._Element, node_id: int, parent_nsmap: Dict) -> None:
    node = arena.nodes[node_id]
    for prefix, uri in el.nsmap.items():
        # default namespace follows the element names; only prefixed ones are kept
        if prefix and parent_nsmap.get(prefix) != uri:
            node.attributes[xmlns(prefix)] = uri
    for key, value in el.attrib.items():
        name = QName.parse(key)
        if name.namespace and name.namespace == node.name.namespace:
            name = QName("", name.local)
        node.attributes[name] = value
    for child in el:
        if not isinstance(child.tag, str):
            continue
        child_id = arena.add(QName.parse(child.tag), node_id)
        _copy_element(arena, child, child_id, el.nsmap)


def load(text: Union[str, bytes]) -> LoadResult:
    try:
        arena = parse_tree(text)
    except (etree.XMLSyntaxError, ValueError) as e:
        return LoadResult.failure(LoadErrorKind.PARSE_FAILURE, f"{type(e).__name__}: {e}", "xml")
    root_name = arena.root.name
    if not SwidTag.is_swidtag(root_name):
        return LoadResult.failure(
            LoadErrorKind.SCHEMA_MISMATCH,
            f"root element is '{root_name}', expected '{SwidTag.ELEMENT_NAME}'",
            "xml",
        )
    return LoadResult(document=SwidTag(arena))


# ------------------ Writing ------------------
def to_etree(tag: SwidTag) -> etree._Element:
    arena = tag.arena
    root = arena.root
    nsmap: Dict[Optional[str], str] = {None: root.name.namespace or SWID_NS}
    nsmap.update(root.declarations())
    el = etree.Element(str(root.name), nsmap=nsmap)
    _fill(arena, NodeArena.ROOT, el)
    return el


def _fill(arena: NodeArena, node_id: int, el: etree._Element) -> None:
    node = arena.nodes[node_id]
    for name, value in node.attributes.items():
        if name.namespace == XMLNS_NS:
            continue
        el.set(str(name), value)
    for child_id in node.children:
        child = arena.nodes[child_id]
        decls = {p: u for p, u in child.declarations().items() if el.nsmap.get(p) != u}
        sub = etree.SubElement(el, str(child.name), nsmap=decls or None)
        _fill(arena, child_id, sub)


def _prefixed(name: str, nsmap: Dict[Optional[str], str]) -> str:
    qname = etree.QName(name)
    if qname.namespace is None:
        return qname.localname
    if qname.namespace == XML_NS:
        return f"xml:{qname.localname}"
    for prefix, uri in nsmap.items():
        if prefix and uri == qname.namespace:
            return f"{prefix}:{qname.localname}"
    return qname.localname


def _write(el: etree._Element, depth: int, parent_nsmap: Dict, out: List[str]) -> None:
    pad = INDENT * depth
    local = etree.QName(el).localname
    tag = f"{el.prefix}:{local}" if el.prefix else local

    items: List[str] = []
    for prefix, uri in el.nsmap.items():
        if parent_nsmap.get(prefix) == uri:
            continue
        items.append(f'{"xmlns:" + prefix if prefix else "xmlns"}="{escape(uri, ATTR_ENTITIES)}"')
    for key, value in el.attrib.items():
        items.append(f'{_prefixed(key, el.nsmap)}="{escape(value, ATTR_ENTITIES)}"')

    head = pad + "<" + tag + "".join("\n" + pad + INDENT + item for item in items)
    children = [c for c in el if isinstance(c.tag, str)]
    if not children:
        out.append(head + " />")
        return
    out.append(head + ">")
    for child in children:
        _write(child, depth + 1, el.nsmap, out)
    out.append(f"{pad}</{tag}>")


def dumps(tag: SwidTag) -> str:
    out = [XML_DECLARATION]
    _write(to_etree(tag), 0, {}, out)
    return "\n".join(out)
