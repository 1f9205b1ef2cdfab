# -*- coding: utf-8 -*-
"""
JSON-LD document loader for the SWID tag contexts.

The canonical context URL and the Meta context URL resolve to the copies
packaged under ``swidtag/contexts``. Anything else is a loading error unless
the loader was built with ``allow_remote=True``, in which case the document
is fetched over HTTP.
"""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Optional

import requests
from pyld.jsonld import JsonLdError

from .vocabulary import META_CONTEXT_URL, SWIDTAG_CONTEXT_URL

CONTEXT_FILES = {
    SWIDTAG_CONTEXT_URL: "Swidtag.context.jsonld",
    META_CONTEXT_URL: "Meta.context.jsonld",
}

ACCEPT = "application/ld+json, application/json;q=0.9"


@lru_cache(maxsize=None)
def _read_context(filename: str) -> Dict[str, Any]:
    text = (resources.files(__package__) / "contexts" / filename).read_text(encoding="utf-8")
    return json.loads(text)


def read_context(filename: str) -> Dict[str, Any]:
    # callers get their own copy; the processor is free to mutate it
    return copy.deepcopy(_read_context(filename))


def canonical_context() -> Dict[str, Any]:
    return read_context(CONTEXT_FILES[SWIDTAG_CONTEXT_URL])


class ContextLoader:
    """Callable matching pyld's documentLoader contract: (url, options) -> RemoteDocument."""

    def __init__(self, allow_remote: bool = False, timeout: int = 30,
                 session: Optional[requests.Session] = None) -> None:
        self.allow_remote = allow_remote
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, url: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        key = url.rstrip("/")
        if key in CONTEXT_FILES:
            return self._remote_document(url, read_context(CONTEXT_FILES[key]))
        if not self.allow_remote:
            raise JsonLdError(
                f"Unknown JSON-LD context URL: {url}",
                "jsonld.LoadDocumentError",
                {"url": url},
                code="loading remote context failed",
            )
        return self._remote_document(url, self._fetch(url))

    def _fetch(self, url: str) -> Dict[str, Any]:
        try:
            r = self.session.get(url, headers={"Accept": ACCEPT}, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            raise JsonLdError(
                f"Could not retrieve JSON-LD context: {url}",
                "jsonld.LoadDocumentError",
                {"url": url},
                code="loading remote context failed",
                cause=e,
            )

    @staticmethod
    def _remote_document(url: str, document: Dict[str, Any]) -> Dict[str, Any]:
        return {"contentType": "application/ld+json", "contextUrl": None, "documentUrl": url, "document": document}
