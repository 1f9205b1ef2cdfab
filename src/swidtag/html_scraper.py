# -*- coding: utf-8 -*-
"""
Build a minimal SWID tag from the <link> elements of an HTML page.

The page is read with BeautifulSoup on top of the lxml HTML parser, which
copes with whatever markup a web server hands back. Each <link> directly
under <head> that carries both href and rel becomes a Link; all of its other
attributes are copied onto that Link as they are.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from .document import SwidTag
from .elements import Link
from .errors import Diagnostic, LoadErrorKind, LoadResult, SwidTagError
from .vocabulary import WELL_KNOWN_PREFIXES, XML_NS, QName, VersionScheme

ANONYMOUS_NAME = "Anonymous"
ANONYMOUS_VERSION = "1.0"

PREFIX_NAMESPACES = {prefix: ns for ns, prefix in WELL_KNOWN_PREFIXES.items()}


def read_html(text: Union[str, bytes]) -> BeautifulSoup:
    # rel/class stay plain strings instead of token lists
    return BeautifulSoup(text, "lxml", multi_valued_attributes=None)


def _root_element(soup: BeautifulSoup) -> Optional[Tag]:
    for child in soup.contents:
        if isinstance(child, Tag):
            return child
    return None


def _namespace_scope(el: Tag) -> Dict[str, str]:
    """prefix -> namespace from xmlns:* attributes on `el` and its ancestors."""
    chain = [el] + [p for p in el.parents if isinstance(p, Tag)]
    scope: Dict[str, str] = {}
    for node in reversed(chain):
        for key, value in (node.attrs or {}).items():
            if key.startswith("xmlns:") and isinstance(value, str):
                scope[key[len("xmlns:"):]] = value
    return scope


def _is_declaration(attr: str) -> bool:
    return attr == "xmlns" or attr.startswith("xmlns:")


def _qualify(attr: str, scope: Dict[str, str]) -> Optional[QName]:
    prefix, sep, local = attr.partition(":")
    if not sep:
        return QName("", attr)
    if prefix == "xml":
        return QName(XML_NS, local)
    namespace = scope.get(prefix) or PREFIX_NAMESPACES.get(prefix)
    if not namespace or not local:
        return None
    return QName(namespace, local)


def _build_link(el: Tag, href: str, rel: str, base_url: Optional[str],
                diagnostics: List[Diagnostic]) -> Link:
    link = Link(urljoin(base_url, href) if base_url else href, rel)
    scope = _namespace_scope(el)
    for attr, value in el.attrs.items():
        if attr in ("href", "rel") or _is_declaration(attr):
            continue
        name = _qualify(attr, scope)
        if name is None:
            diagnostics.append(Diagnostic(
                LoadErrorKind.UNRESOLVABLE_ATTRIBUTE,
                f"no namespace declared for attribute '{attr}'",
                href,
            ))
            continue
        link.add_attribute(name, value)
    return link


def scrape(soup: BeautifulSoup, base_url: Optional[str] = None) -> LoadResult:
    root = _root_element(soup)
    if root is None or root.name != "html":
        found = root.name if root is not None else "nothing"
        return LoadResult.failure(LoadErrorKind.SCHEMA_MISMATCH, f"root element is '{found}', expected 'html'", "html")

    diagnostics: List[Diagnostic] = []
    tag = SwidTag()
    tag.name = ANONYMOUS_NAME
    tag.version = ANONYMOUS_VERSION
    tag.version_scheme = VersionScheme.MultipartNumeric

    head = root.find("head", recursive=False)
    if head is None:
        return LoadResult(document=tag, diagnostics=diagnostics)

    for el in head.find_all("link", recursive=False):
        href = el.get("href")
        rel = el.get("rel")
        if href is None or rel is None:
            continue
        try:
            link = _build_link(el, href, rel, base_url, diagnostics)
        except (ValueError, SwidTagError) as e:
            diagnostics.append(Diagnostic(LoadErrorKind.UNRESOLVABLE_LINK, str(e), href))
            continue
        tag.add_element(link)
    return LoadResult(document=tag, diagnostics=diagnostics)


def load(text: Union[str, bytes], base_url: Optional[str] = None) -> LoadResult:
    try:
        soup = read_html(text)
    except (ParserRejectedMarkup, ValueError) as e:
        return LoadResult.failure(LoadErrorKind.PARSE_FAILURE, f"{type(e).__name__}: {e}", "html")
    return scrape(soup, base_url=base_url)


def load_url(url: str, timeout: int = 30, session: Optional[requests.Session] = None) -> LoadResult:
    """Fetch `url` and scrape it; relative hrefs resolve against the final URL."""
    http = session or requests
    try:
        r = http.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        return LoadResult.failure(LoadErrorKind.FETCH_FAILURE, str(e), url)
    return load(r.text, base_url=r.url or url)
