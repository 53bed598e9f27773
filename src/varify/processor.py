from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from varify.eligibility import initializer_allowed, is_eligible
from varify.exceptions import MalformedEditSequenceError
from varify.inference import infer_type
from varify.locator import INFERRED_TYPE_KEYWORD, Declaration, locate_declarations
from varify.policy import DEFAULT_POLICY, PolicyConfiguration
from varify.rewrite import EditOperation, apply_edits, offset_to_position

logger = logging.getLogger(__name__)

# `var` arrived in Java 10 (JEP 286).
MIN_SUPPORTED_VERSION = 10

_VERSION_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class LineEdit:
    start: tuple[int, int]
    end: tuple[int, int]
    replacement: str


@dataclass(frozen=True)
class ProcessingResult:
    source: str
    text: str
    modified: bool
    gated: bool = False
    edits: list[EditOperation] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)

    def line_edits(self) -> list[LineEdit]:
        """Edits as zero-based ``(line, character)`` ranges of the source text."""
        return [
            LineEdit(
                start=offset_to_position(self.source, edit.start),
                end=offset_to_position(self.source, edit.end),
                replacement=edit.replacement,
            )
            for edit in self.edits
        ]


def parse_language_version(token: str | None) -> int | None:
    if token is None:
        return None
    text = token.strip()
    if not _VERSION_RE.fullmatch(text):
        return None
    return int(text)


def is_version_supported(token: str | None) -> bool:
    version = parse_language_version(token)
    return version is not None and version >= MIN_SUPPORTED_VERSION


def _gated(text: str) -> ProcessingResult:
    return ProcessingResult(source=text, text=text, modified=False, gated=True)


def _approve(declaration: Declaration, policy: PolicyConfiguration) -> bool:
    initializer_type = declaration.initializer_type
    if initializer_type is None:
        initializer_type = infer_type(declaration.initializer)
    if not is_eligible(
        declaration.declared_type,
        initializer_type,
        declaration.is_local,
        declaration.is_loop_variable,
        policy,
    ):
        return False
    return initializer_allowed(declaration.initializer, policy)


def _ordered(declarations: Iterable[Declaration]) -> list[Declaration]:
    ordered = sorted(declarations, key=lambda item: item.type_span)
    for index in range(1, len(ordered)):
        if ordered[index].type_span[0] < ordered[index - 1].type_span[1]:
            raise MalformedEditSequenceError(
                f"declaration '{ordered[index].variable_name}' overlaps "
                f"'{ordered[index - 1].variable_name}'",
                index=index,
            )
    return ordered


def _run_pipeline(
    text: str,
    declarations: Sequence[Declaration],
    policy: PolicyConfiguration,
) -> ProcessingResult:
    approved: list[Declaration] = []
    for declaration in declarations:
        if declaration.declared_type.strip() == INFERRED_TYPE_KEYWORD:
            continue
        if _approve(declaration, policy):
            approved.append(declaration)
        else:
            logger.debug(
                "keeping explicit type %s for %s",
                declaration.declared_type,
                declaration.variable_name,
            )
    edits = [
        EditOperation(
            start=declaration.type_span[0],
            end=declaration.type_span[1],
            replacement=INFERRED_TYPE_KEYWORD,
        )
        for declaration in approved
    ]
    rewritten, _ = apply_edits(text, edits)
    return ProcessingResult(
        source=text,
        text=rewritten,
        modified=rewritten != text,
        edits=edits,
        declarations=approved,
    )


def plan_file(
    text: str,
    language_version: str | None,
    policy: PolicyConfiguration | None = None,
) -> ProcessingResult:
    if not is_version_supported(language_version):
        logger.debug("java version %r does not support var; leaving text unchanged", language_version)
        return _gated(text)
    return _run_pipeline(text, locate_declarations(text), policy or DEFAULT_POLICY)


def plan_declarations(
    text: str,
    declarations: Iterable[Declaration],
    language_version: str | None,
    policy: PolicyConfiguration | None = None,
) -> ProcessingResult:
    """Run the decision and rewrite stages over caller-located declarations.

    Declarations may carry a resolved ``initializer_type``; the heuristic
    inferencer only fills in the ones that do not.
    """
    if not is_version_supported(language_version):
        return _gated(text)
    return _run_pipeline(text, _ordered(declarations), policy or DEFAULT_POLICY)


def process_file(
    text: str,
    language_version: str | None,
    policy: PolicyConfiguration | None = None,
) -> str:
    return plan_file(text, language_version, policy).text


def process_files(
    texts: Sequence[str],
    language_version: str | None,
    policy: PolicyConfiguration | None = None,
) -> list[str]:
    return [process_file(text, language_version, policy) for text in texts]

