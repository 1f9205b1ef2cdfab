# -*- coding: utf-8 -*-
"""
Node arena and the generic element wrapper.

Every document owns one NodeArena. Nodes live in a flat list and point at
their parent by index, so walking up to the root (namespace hoisting) never
needs a back-reference to a Python object. An Element is a thin view of
(arena, node id); typed views (Link, Meta, ...) add named accessors.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar, Union

from .errors import AttributeConflictError
from .vocabulary import DIRECT_NAMESPACES, WELL_KNOWN_PREFIXES, XMLNS_NS, QName, xmlns

NameLike = Union[QName, str]
E = TypeVar("E", bound="Element")


class Node:
    __slots__ = ("name", "attributes", "children", "parent")

    def __init__(self, name: QName, parent: Optional[int] = None) -> None:
        self.name = name
        self.attributes: Dict[QName, str] = {}
        self.children: List[int] = []
        self.parent = parent

    def declarations(self) -> Dict[str, str]:
        """prefix -> namespace for the xmlns:* attributes on this node."""
        return {k.local: v for k, v in self.attributes.items() if k.namespace == XMLNS_NS}


class NodeArena:
    ROOT = 0

    def __init__(self, root_name: QName) -> None:
        self.nodes: List[Node] = [Node(root_name)]
        self._prefix_counter = 0

    @property
    def root(self) -> Node:
        return self.nodes[self.ROOT]

    def add(self, name: QName, parent: Optional[int]) -> int:
        node_id = len(self.nodes)
        self.nodes.append(Node(name, parent))
        if parent is not None:
            self.nodes[parent].children.append(node_id)
        return node_id

    def attach(self, node_id: int, parent: int) -> None:
        self.nodes[node_id].parent = parent
        self.nodes[parent].children.append(node_id)

    def detach(self, node_id: int) -> None:
        """Unlink a subtree. Its nodes stay in the arena so existing views remain usable."""
        node = self.nodes[node_id]
        if node.parent is not None:
            self.nodes[node.parent].children.remove(node_id)
            node.parent = None

    def ancestors(self, node_id: int) -> Iterator[int]:
        """node_id itself, then each parent up to the top of its tree."""
        current: Optional[int] = node_id
        while current is not None:
            yield current
            current = self.nodes[current].parent

    def subtree(self, node_id: int) -> Iterator[int]:
        yield node_id
        for child_id in self.nodes[node_id].children:
            yield from self.subtree(child_id)

    def next_prefix(self) -> str:
        self._prefix_counter += 1
        return f"pp{self._prefix_counter}"


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _normalize(element_name: QName, name: QName) -> QName:
    # attributes in the element's own namespace are stored unqualified
    if name.namespace and name.namespace == element_name.namespace:
        return QName("", name.local)
    return name


class Element:
    ELEMENT_NAME: QName = QName("", "Element")

    def __init__(self, name: Optional[QName] = None) -> None:
        self._arena = NodeArena(name or self.ELEMENT_NAME)
        self._node_id = NodeArena.ROOT

    @classmethod
    def bind(cls: Type[E], arena: NodeArena, node_id: int) -> E:
        element = cls.__new__(cls)
        element._arena = arena
        element._node_id = node_id
        return element

    # ------------------ Node access ------------------
    @property
    def arena(self) -> NodeArena:
        return self._arena

    @property
    def node(self) -> Node:
        return self._arena.nodes[self._node_id]

    @property
    def element_name(self) -> QName:
        return self.node.name

    @property
    def parent(self) -> Optional["Element"]:
        parent_id = self.node.parent
        if parent_id is None:
            return None
        return Element.bind(self._arena, parent_id)

    @property
    def attributes(self) -> Dict[QName, str]:
        """Attributes without the namespace declarations."""
        return {k: v for k, v in self.node.attributes.items() if k.namespace != XMLNS_NS}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self._arena is other._arena and self._node_id == other._node_id

    def __hash__(self) -> int:
        return hash((id(self._arena), self._node_id))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.element_name.local} {len(self.attributes)} attrs>"

    # ------------------ Attributes ------------------
    def get_attribute(self, name: Optional[NameLike]) -> Optional[str]:
        qname = QName.parse(name)
        if qname is None or not qname.local.strip():
            return None
        return self.node.attributes.get(_normalize(self.element_name, qname))

    def add_attribute(self, name: Optional[NameLike], value: Any) -> "Element":
        """Set an attribute once. Empty values are ignored; changing a value raises."""
        text = _text(value)
        qname = QName.parse(name)
        # quietly ignore empty data or names
        if text is None or not text.strip() or qname is None or not qname.local.strip():
            return self

        node = self.node
        qname = _normalize(node.name, qname)
        current = node.attributes.get(qname)
        if current is not None and current.strip():
            if current != text:
                raise AttributeConflictError(str(qname), node.name.local, current, text)
            return self

        if qname.namespace not in DIRECT_NAMESPACES:
            self._ensure_namespace(qname.namespace)
        node.attributes[qname] = text
        return self

    def _ensure_namespace(self, namespace: str) -> None:
        """Declare `namespace` on the root unless a node up the chain already does."""
        arena = self._arena
        root_id = self._node_id
        for node_id in arena.ancestors(self._node_id):
            if namespace in arena.nodes[node_id].declarations().values():
                return
            root_id = node_id

        root = arena.nodes[root_id]
        taken = set(root.declarations())
        prefix = WELL_KNOWN_PREFIXES.get(namespace)
        if not prefix or prefix in taken:
            prefix = arena.next_prefix()
            while prefix in taken:
                prefix = arena.next_prefix()
        root.attributes[xmlns(prefix)] = namespace

    # ------------------ Elements ------------------
    def add_element(self, child: E) -> E:
        """Append `child` and return it, now bound to this tree.

        `child` is either built detached (on its own arena) or a node of this
        document that was removed earlier; the latter is re-attached in place.
        """
        if child._arena is self._arena:
            arena = self._arena
            if child.node.parent is not None or child._node_id in arena.ancestors(self._node_id):
                raise ValueError(f"{child!r} already belongs to this document")
            arena.attach(child._node_id, self._node_id)
            # declarations made while detached move up to the root
            for node_id in arena.subtree(child._node_id):
                for prefix, namespace in arena.nodes[node_id].declarations().items():
                    del arena.nodes[node_id].attributes[xmlns(prefix)]
                    Element.bind(arena, node_id)._ensure_namespace(namespace)
            return child
        new_id = self._graft(child._arena, child._node_id, self._node_id)
        child._arena = self._arena
        child._node_id = new_id
        return child

    def _graft(self, source: NodeArena, source_id: int, parent_id: int) -> int:
        src = source.nodes[source_id]
        new_id = self._arena.add(src.name, parent_id)
        target = Element.bind(self._arena, new_id)
        for name, value in src.attributes.items():
            # declarations are re-hoisted by add_attribute
            if name.namespace == XMLNS_NS:
                continue
            target.add_attribute(name, value)
        for child_id in src.children:
            self._graft(source, child_id, new_id)
        return new_id

    def remove(self) -> None:
        """Detach from the parent. The view stays valid and add_element can put it back."""
        self._arena.detach(self._node_id)

    def child_ids(self, name: Optional[QName] = None) -> List[int]:
        nodes = self._arena.nodes
        return [cid for cid in self.node.children if name is None or nodes[cid].name == name]

    def children_of(self, cls: Type[E]) -> List[E]:
        return [cls.bind(self._arena, cid) for cid in self.child_ids(cls.ELEMENT_NAME)]

    def first_of(self, cls: Type[E]) -> Optional[E]:
        ids = self.child_ids(cls.ELEMENT_NAME)
        return cls.bind(self._arena, ids[0]) if ids else None


# ------------------ Accessor helpers ------------------
def attribute_property(name: QName, doc: Optional[str] = None) -> property:
    """Read/write property over get_attribute/add_attribute (so set-once)."""

    def getter(self: Element) -> Optional[str]:
        return self.get_attribute(name)

    def setter(self: Element, value: Any) -> None:
        self.add_attribute(name, value)

    return property(getter, setter, doc=doc or f"'{name}' attribute")


def flag_property(name: QName, doc: Optional[str] = None) -> property:
    """Tri-state boolean: True/False for 'true'/'false', None when missing."""

    def getter(self: Element) -> Optional[bool]:
        value = self.get_attribute(name)
        if value is None:
            return None
        return value == "true"

    def setter(self: Element, value: Optional[bool]) -> None:
        if value is not None:
            self.add_attribute(name, "true" if value else "false")

    return property(getter, setter, doc=doc or f"'{name}' flag")
