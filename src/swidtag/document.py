# -*- coding: utf-8 -*-
"""
SwidTag: the SoftwareIdentity document.

The tag owns the node arena. Collection properties (meta, links, entities)
build fresh lists of typed views on every access, so anything added through
add_meta/add_link/add_entity shows up immediately.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

from . import media_query
from .element import Element, NodeArena, attribute_property, flag_property
from .elements import Entity, Evidence, Link, Meta, Payload, parse_uri
from .errors import LoadResult
from .vocabulary import Attributes, Elements, QName


class SwidTag(Element):
    ELEMENT_NAME = Elements.SoftwareIdentity

    def __init__(self, arena: Optional[NodeArena] = None) -> None:
        if arena is None:
            super().__init__()
            return
        # adopt an existing tree as-is; the core namespace is the root's default namespace
        self._arena = arena
        self._node_id = NodeArena.ROOT

    @staticmethod
    def is_swidtag(element: Union[Element, QName, None]) -> bool:
        if element is None:
            return False
        name = element.element_name if isinstance(element, Element) else element
        return name == Elements.SoftwareIdentity

    # ------------------ Document attributes ------------------
    name = attribute_property(Attributes.Name)
    version = attribute_property(Attributes.Version)
    version_scheme = attribute_property(Attributes.VersionScheme)
    tag_id = attribute_property(Attributes.TagId)
    tag_version = attribute_property(Attributes.TagVersion)
    media = attribute_property(Attributes.Media, "applicable-media expression")
    is_corpus = flag_property(Attributes.Corpus)
    is_patch = flag_property(Attributes.Patch)
    is_supplemental = flag_property(Attributes.Supplemental)

    def is_applicable(self, environment: Optional[Mapping[str, Any]] = None) -> bool:
        return media_query.is_applicable(self.media, environment or {})

    # ------------------ Child elements ------------------
    @property
    def meta(self) -> List[Meta]:
        return self.children_of(Meta)

    def add_meta(self) -> Meta:
        return self.add_element(Meta())

    @property
    def links(self) -> List[Link]:
        return self.children_of(Link)

    def add_link(self, href: str, relationship: Optional[str]) -> Link:
        return self.add_element(Link(href, relationship))

    def remove_link(self, href: str) -> int:
        """Detach every Link pointing at `href`; returns how many went.

        Removed links stay usable and can be put back with add_element.
        """
        target = parse_uri(href)
        removed = 0
        for link in self.links:
            if link.href == target:
                link.remove()
                removed += 1
        return removed

    @property
    def entities(self) -> List[Entity]:
        return self.children_of(Entity)

    def add_entity(self, name: Optional[str], reg_id: Optional[str] = None,
                   role: Union[str, Iterable[str], None] = None) -> Entity:
        return self.add_element(Entity(name, reg_id, role))

    @property
    def payload(self) -> Optional[Payload]:
        return self.first_of(Payload)

    def add_payload(self) -> Payload:
        """Return the Payload, creating it on first call."""
        return self.payload or self.add_element(Payload())

    @property
    def evidence(self) -> Optional[Evidence]:
        return self.first_of(Evidence)

    def add_evidence(self) -> Evidence:
        """Return the Evidence element, creating it on first call."""
        return self.evidence or self.add_element(Evidence())

    # ------------------ Serialization ------------------
    def to_xml(self) -> str:
        from .xml_codec import dumps
        return dumps(self)

    def to_json(self, loader=None) -> str:
        from .jsonld_codec import dumps
        return dumps(self, loader=loader)

    # ------------------ Loaders ------------------
    @classmethod
    def parse_xml(cls, text: Union[str, bytes]) -> LoadResult:
        from .xml_codec import load
        return load(text)

    @classmethod
    def parse_json(cls, text: Union[str, bytes], loader=None) -> LoadResult:
        from .jsonld_codec import load
        return load(text, loader=loader)

    @classmethod
    def parse_html(cls, text: Union[str, bytes]) -> LoadResult:
        from .html_scraper import load
        return load(text)

    @classmethod
    def load_xml(cls, text: Union[str, bytes]) -> Optional["SwidTag"]:
        return cls.parse_xml(text).document

    @classmethod
    def load_json(cls, text: Union[str, bytes], loader=None) -> Optional["SwidTag"]:
        return cls.parse_json(text, loader=loader).document

    @classmethod
    def load_html(cls, text: Union[str, bytes]) -> Optional["SwidTag"]:
        return cls.parse_html(text).document

    @classmethod
    def parse_html_url(cls, url: str, timeout: int = 30, session=None) -> LoadResult:
        from .html_scraper import load_url
        return load_url(url, timeout=timeout, session=session)

    @classmethod
    def load_html_url(cls, url: str, timeout: int = 30, session=None) -> Optional["SwidTag"]:
        return cls.parse_html_url(url, timeout=timeout, session=session).document
