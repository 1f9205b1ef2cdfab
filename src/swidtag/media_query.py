# -*- coding: utf-8 -*-
"""
Evaluate a SWID ``media`` expression against an environment mapping.

Expressions borrow the shape of CSS media queries::

    (OS:windows) and (min-OSVersion:6.1), (OS:linux) and not (Arch:arm)

``,`` and ``or`` separate alternatives, ``and`` joins conditions, ``not``
negates, ``only`` is accepted and ignored, ``all`` is always true. A feature
``(name)`` tests that the environment has a non-empty value for name;
``(name:value)`` compares case-insensitively; ``min-``/``max-`` names
compare dotted versions numerically where both sides allow it.

is_applicable never raises: a missing expression applies everywhere, a
malformed one applies nowhere.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Tuple

from .errors import MediaQueryError

TOKEN_RE = re.compile(r"\s*(?:\(([^()]*)\)|(,)|([A-Za-z]+))")
VERSION_RE = re.compile(r"^\d+(?:\.\d+)*$")

Token = Tuple[str, str]  # (kind, text): kind in feature | comma | word


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    text = expression.strip()
    while pos < len(text):
        m = TOKEN_RE.match(text, pos)
        if not m or m.end() == pos:
            raise MediaQueryError(f"Unexpected input at {pos}: {text[pos:pos + 20]!r}")
        feature, comma, word = m.groups()
        if feature is not None:
            tokens.append(("feature", feature.strip()))
        elif comma is not None:
            tokens.append(("comma", ","))
        else:
            tokens.append(("word", word.lower()))
        pos = m.end()
    if not tokens:
        raise MediaQueryError("Empty media expression")
    return tokens


def _lookup(environment: Mapping[str, Any], key: str) -> Optional[str]:
    want = key.strip().lower()
    for k, v in environment.items():
        if str(k).strip().lower() == want:
            return None if v is None else str(v).strip()
    return None


def _version_key(value: str) -> Optional[Tuple[int, ...]]:
    if VERSION_RE.match(value):
        return tuple(int(p) for p in value.split("."))
    return None


def _compare(actual: str, wanted: str) -> int:
    a, w = _version_key(actual), _version_key(wanted)
    if a is not None and w is not None:
        # pad so 6.1 == 6.1.0
        width = max(len(a), len(w))
        a, w = a + (0,) * (width - len(a)), w + (0,) * (width - len(w))
    else:
        a, w = actual.lower(), wanted.lower()
    return (a > w) - (a < w)


def evaluate_feature(feature: str, environment: Mapping[str, Any]) -> bool:
    name, sep, wanted = feature.partition(":")
    name, wanted = name.strip(), wanted.strip()
    if not name:
        raise MediaQueryError(f"Feature without a name: ({feature})")
    if sep and not wanted:
        raise MediaQueryError(f"Feature without a value: ({feature})")

    low = name.lower()
    if low.startswith(("min-", "max-")) and sep:
        actual = _lookup(environment, name[4:])
        if not actual:
            return False
        cmp = _compare(actual, wanted)
        return cmp >= 0 if low.startswith("min-") else cmp <= 0

    actual = _lookup(environment, name)
    if not sep:
        return bool(actual)
    return actual is not None and actual.lower() == wanted.lower()


class _Parser:
    def __init__(self, tokens: List[Token], environment: Mapping[str, Any]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.env = environment

    def peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> Token:
        token = self.peek()
        if token is None:
            raise MediaQueryError("Unexpected end of media expression")
        self.pos += 1
        return token

    def parse(self) -> bool:
        result = self.or_expr()
        if self.peek() is not None:
            raise MediaQueryError(f"Unexpected token {self.peek()[1]!r}")
        return result

    def or_expr(self) -> bool:
        # evaluate every branch so syntax errors anywhere are reported
        result = self.and_expr()
        while self.peek() in (("comma", ","), ("word", "or")):
            self.take()
            result = self.and_expr() or result
        return result

    def and_expr(self) -> bool:
        result = self.unary()
        while self.peek() == ("word", "and"):
            self.take()
            result = self.unary() and result
        return result

    def unary(self) -> bool:
        negate = False
        while self.peek() in (("word", "not"), ("word", "only")):
            if self.take()[1] == "not":
                negate = not negate
        kind, text = self.take()
        if kind == "feature":
            result = evaluate_feature(text, self.env)
        elif kind == "word" and text == "all":
            result = True
        else:
            raise MediaQueryError(f"Unexpected token {text!r}")
        return result != negate


def evaluate(expression: str, environment: Mapping[str, Any]) -> bool:
    """Strict evaluation; raises MediaQueryError on malformed input."""
    return _Parser(tokenize(expression), environment).parse()


def is_applicable(expression: Optional[str], environment: Optional[Mapping[str, Any]] = None) -> bool:
    if expression is None or (isinstance(expression, str) and not expression.strip()):
        return True
    if not isinstance(expression, str):
        return False
    try:
        return evaluate(expression, environment or {})
    except MediaQueryError:
        return False
