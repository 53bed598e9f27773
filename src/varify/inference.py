"""Best-effort type names for Java initializer expressions.

This is a literal-shape heuristic, not a type checker. Callers that own a real
resolver should put resolved names on the declaration instead; the evaluator
treats both the same way.
"""

from __future__ import annotations

import re

STRING_TYPE = "String"
OBJECT_TYPE = "Object"

_INT_RE = re.compile(r"\d+")
_LONG_RE = re.compile(r"\d+[lL]")
_FLOAT_RE = re.compile(r"\d+\.\d+[fF]")
_DOUBLE_RE = re.compile(r"\d+\.\d+")
_NEW_RE = re.compile(r"new\s+\w")
_NEW_TYPE_END_RE = re.compile(r"[(<]")

_LAMBDA_RE = re.compile(r"(?:\([^()]*\)|[A-Za-z_$][\w$]*)\s*->")
_METHOD_REF_RE = re.compile(r"[\w$.<>\[\]]+::(?:new|[A-Za-z_$][\w$]*)")
_ANON_HEAD_RE = re.compile(r"new\s+[\w$.]+\s*(?:<[^;{}()]*>)?\s*\(")


def infer_type(initializer: str) -> str:
    text = initializer.strip()
    if _INT_RE.fullmatch(text):
        return "int"
    if _LONG_RE.fullmatch(text):
        return "long"
    if _FLOAT_RE.fullmatch(text):
        return "float"
    if _DOUBLE_RE.fullmatch(text):
        return "double"
    if text in ("true", "false"):
        return "boolean"
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return STRING_TYPE
    if _NEW_RE.match(text):
        return _NEW_TYPE_END_RE.split(text[len("new"):], maxsplit=1)[0].strip()
    return OBJECT_TYPE


def is_lambda_initializer(initializer: str) -> bool:
    """True for arrow lambdas and method references."""
    text = initializer.strip()
    return bool(_LAMBDA_RE.match(text) or _METHOD_REF_RE.fullmatch(text))


def is_anonymous_class_initializer(initializer: str) -> bool:
    """True for ``new T(...) { ... }`` instance creations."""
    text = initializer.strip()
    head = _ANON_HEAD_RE.match(text)
    if head is None:
        return False
    close = _matching_paren(text, head.end() - 1)
    if close is None:
        return False
    return text[close + 1 :].lstrip().startswith("{")


def _matching_paren(text: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return None
