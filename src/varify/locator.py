"""Heuristic discovery of Java variable declarations in raw source text.

The scanner works on a masked copy of the source where comment bodies and
literal contents are blanked out, so offsets stay identical to the original
while strings and comments can neither match nor disturb brace counting.

Scope classification is brace counting, not real scope resolution: a
declaration is local when at least two ``{`` precede it, more ``{`` than
``}`` are open, and the innermost open ``{`` does not start a class,
interface, enum, record or anonymous class body. A parser-backed locator
can replace this module as long as it returns the same ordered,
non-overlapping ``Declaration`` list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

Span = tuple[int, int]

INFERRED_TYPE_KEYWORD = "var"

JAVA_KEYWORDS: frozenset[str] = frozenset(
    {
        "abstract", "assert", "break", "case", "catch", "class", "const",
        "continue", "default", "do", "else", "enum", "extends", "final",
        "finally", "for", "goto", "if", "implements", "import", "instanceof",
        "interface", "native", "new", "package", "permits", "private",
        "protected", "public", "record", "return", "sealed", "static",
        "strictfp", "super", "switch", "synchronized", "this", "throw",
        "throws", "transient", "try", "volatile", "while", "yield",
        "null", "true", "false",
    }
)

_MODIFIER = r"(?:final|static|private|public|protected|transient|volatile|@[\w$.]+(?:\s*\([^()]*\))?)"
_IDENT = r"[A-Za-z_$][\w$]*"
_DECLARATION_RE = re.compile(
    r"(?<![\w$.@])"
    rf"(?P<modifiers>(?:{_MODIFIER}\s+)*)"
    rf"(?P<type>{_IDENT}(?:\.{_IDENT})*(?:\s*<[^;{{}}=]*?>)?(?:\s*\[\s*\])*)"
    rf"\s+(?P<name>{_IDENT})\s*=(?!=)"
)
_LOOP_HEADER_RE = re.compile(r"\bfor\s*\(\s*$")
_NEXT_DECLARATOR_RE = re.compile(rf"\s*{_IDENT}\s*(?:\[\s*\]\s*)*(?:=|,|;)")
_TYPE_ARGS_OPEN_RE = re.compile(r"(?<=[\w$])<\s*[\w$?]")
_TYPE_BODY_HEADER_RE = re.compile(
    r"(?<![\w$.])(?:class|interface|enum|record)\s+[A-Za-z_$]"
    r"|\bnew\s+[\w$.]+(?:\s*<[^;{}]*>)?\s*\([^;{}()]*\)\s*$"
)
_OPENERS = "([{"
_CLOSERS = ")]}"


@dataclass(frozen=True)
class Declaration:
    declared_type: str
    variable_name: str
    initializer: str
    type_span: Span
    initializer_span: Span
    is_local: bool
    is_loop_variable: bool = False
    initializer_type: str | None = None


def mask_source(text: str) -> str:
    """Blank comment bodies and literal contents, preserving length and newlines."""
    out = list(text)
    length = len(text)
    index = 0

    def blank(start: int, end: int) -> None:
        for pos in range(start, min(end, length)):
            if out[pos] != "\n":
                out[pos] = " "

    while index < length:
        char = text[index]
        pair = text[index : index + 2]
        if pair == "//":
            end = text.find("\n", index)
            end = length if end == -1 else end
            blank(index, end)
            index = end
        elif pair == "/*":
            end = text.find("*/", index + 2)
            end = length if end == -1 else end + 2
            blank(index, end)
            index = end
        elif text.startswith('"""', index):
            end = text.find('"""', index + 3)
            end = length if end == -1 else end
            blank(index + 3, end)
            index = end + 3
        elif char in "\"'":
            end = _literal_end(text, index)
            blank(index + 1, end - 1)
            index = end
        else:
            index += 1
    return "".join(out)


def _literal_end(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote or char == "\n":
            return index + 1
        index += 1
    return len(text)


def _initializer_end(masked: str, start: int) -> int | None:
    """Offset of the first top-level ``;`` after ``start``.

    Returns None when the statement closes an enclosing bracket first (for
    example a try-with-resources header) or declares several variables.
    """
    depth = 0
    # Commas inside open type-argument lists do not separate declarators.
    angles = 0
    for index in range(start, len(masked)):
        char = masked[index]
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth < 0:
                return None
        elif depth > 0:
            continue
        elif char == ";":
            return index
        elif char == "<" and _TYPE_ARGS_OPEN_RE.match(masked, index):
            angles += 1
        elif char == ">" and angles and masked[index - 1] != "-":
            angles -= 1
        elif char == "," and not angles and _NEXT_DECLARATOR_RE.match(masked, index + 1):
            return None
    return None


def _enclosing_brace(masked: str, offset: int) -> int:
    depth = 0
    for index in range(offset - 1, -1, -1):
        char = masked[index]
        if char == "}":
            depth += 1
        elif char == "{":
            if not depth:
                return index
            depth -= 1
    return -1


def _statement_start(masked: str, offset: int) -> int:
    return max(masked.rfind(";", 0, offset), masked.rfind("{", 0, offset), masked.rfind("}", 0, offset)) + 1


def _opens_type_body(masked: str, brace: int) -> bool:
    return bool(_TYPE_BODY_HEADER_RE.search(masked[_statement_start(masked, brace) : brace]))


def _is_local(masked: str, offset: int) -> bool:
    opened = masked.count("{", 0, offset)
    closed = masked.count("}", 0, offset)
    if not (opened - closed >= 1 and opened >= 2):
        return False
    brace = _enclosing_brace(masked, offset)
    # Members of nested and anonymous classes still satisfy the brace count.
    return brace >= 0 and not _opens_type_body(masked, brace)


def _is_loop_header(masked: str, offset: int) -> bool:
    return bool(_LOOP_HEADER_RE.search(masked, _statement_start(masked, offset), offset))


def _base_type_name(type_text: str) -> str:
    return type_text.split("<", 1)[0].split("[", 1)[0].strip()


def locate_declarations(source: str) -> list[Declaration]:
    masked = mask_source(source)
    declarations: list[Declaration] = []
    for match in _DECLARATION_RE.finditer(masked):
        type_text = match.group("type")
        base = _base_type_name(type_text)
        if base == INFERRED_TYPE_KEYWORD or base in JAVA_KEYWORDS:
            continue
        if match.group("name") in JAVA_KEYWORDS:
            continue
        init_start = match.end()
        init_end = _initializer_end(masked, init_start)
        if init_end is None:
            continue
        type_start, type_end = match.span("type")
        declarations.append(
            Declaration(
                declared_type=source[type_start:type_end],
                variable_name=match.group("name"),
                initializer=source[init_start:init_end].strip(),
                type_span=(type_start, type_end),
                initializer_span=(init_start, init_end),
                is_local=_is_local(masked, match.start()),
                is_loop_variable=_is_loop_header(masked, match.start()),
            )
        )
    return declarations
