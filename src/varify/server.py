from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

from lsprotocol.types import (
    TEXT_DOCUMENT_CODE_ACTION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    CodeAction,
    CodeActionKind,
    CodeActionParams,
    Command,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeConfigurationParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextEdit,
    WorkspaceEdit,
)
from pydantic import ValidationError
from pygls.lsp.server import LanguageServer
from pygls.workspace import PositionCodec

from varify import __version__
from varify.config import DEFAULT_JAVA_VERSION
from varify.policy import DEFAULT_POLICY, PolicyConfiguration
from varify.processor import LineEdit, ProcessingResult, plan_file
from varify.rewrite import offset_to_position
from varify.schema import ConvertRequest, ConvertResponse, DeclarationDTO, TextEditDTO

logger = logging.getLogger(__name__)

CONVERT_COMMAND = "varify.convertToVar"
CODE_ACTION_TITLE = "Convert to 'var'"
SETTINGS_SECTION = "varify"
JAVA_SUFFIX = ".java"


class VarifyLanguageServer(LanguageServer):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.policy: PolicyConfiguration = DEFAULT_POLICY
        self.java_version: str = DEFAULT_JAVA_VERSION


server = VarifyLanguageServer("varify", __version__)


def _uri_to_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


def _is_java_uri(uri: str) -> bool:
    return _uri_to_path(uri).suffix == JAVA_SUFFIX


def _client_units(text: str, position: tuple[int, int], codec: PositionCodec) -> tuple[int, int]:
    line, character = position
    converted = codec.position_to_client_units(
        text.splitlines(True), Position(line=line, character=character)
    )
    return converted.line, converted.character


def _lsp_position(text: str, offset: int, codec: PositionCodec) -> Position:
    line, character = _client_units(text, offset_to_position(text, offset), codec)
    return Position(line=line, character=character)


def _lsp_range(text: str, start: int, end: int, codec: PositionCodec) -> Range:
    return Range(start=_lsp_position(text, start, codec), end=_lsp_position(text, end, codec))


def convert_response(
    path: str,
    java_version: str,
    result: ProcessingResult,
    codec: PositionCodec | None = None,
) -> ConvertResponse:
    """Build the wire response.

    Positions count code points unless ``codec`` is given, in which case they
    are in the client's position encoding.
    """
    edits = result.line_edits()
    if codec is not None:
        edits = [
            LineEdit(
                start=_client_units(result.source, edit.start, codec),
                end=_client_units(result.source, edit.end, codec),
                replacement=edit.replacement,
            )
            for edit in edits
        ]
    declarations = []
    for declaration in result.declarations:
        line, character = offset_to_position(result.source, declaration.type_span[0])
        if codec is not None:
            line, character = _client_units(result.source, (line, character), codec)
        declarations.append(
            DeclarationDTO(
                variable_name=declaration.variable_name,
                declared_type=declaration.declared_type,
                line=line,
                character=character,
            )
        )
    return ConvertResponse(
        path=path,
        java_version=java_version,
        modified=result.modified,
        gated=result.gated,
        edits=[
            TextEditDTO(path=path, start=edit.start, end=edit.end, replacement=edit.replacement)
            for edit in edits
        ],
        declarations=declarations,
    )


def _whole_document_edit(uri: str, source: str, replacement: str, codec: PositionCodec) -> dict:
    end_line, end_char = _client_units(source, offset_to_position(source, len(source)), codec)
    return {
        "changes": {
            uri: [
                {
                    "range": {
                        "start": {"line": 0, "character": 0},
                        "end": {"line": end_line, "character": end_char},
                    },
                    "newText": replacement,
                }
            ]
        }
    }


def _diagnostics_for_text(
    text: str, java_version: str, policy: PolicyConfiguration, codec: PositionCodec
) -> list[Diagnostic]:
    result = plan_file(text, java_version, policy)
    return [
        Diagnostic(
            range=_lsp_range(text, *declaration.type_span, codec),
            message=f"Explicit type '{declaration.declared_type}' can be replaced with 'var'",
            severity=DiagnosticSeverity.Information,
            source="varify",
        )
        for declaration in result.declarations
    ]


def _settings_section(settings: object) -> dict:
    if not isinstance(settings, dict):
        return {}
    section = settings.get(SETTINGS_SECTION, settings)
    return section if isinstance(section, dict) else {}


def _apply_settings(ls: VarifyLanguageServer, settings: object) -> None:
    section = _settings_section(settings)
    if not section:
        return
    ls.policy = ls.policy.with_overrides(section)
    version = section.get("javaVersion", section.get("java_version"))
    if version is not None:
        ls.java_version = str(version).strip()


@server.command(CONVERT_COMMAND)
def execute_convert(ls: VarifyLanguageServer, payload: dict | None = None) -> dict:
    if not isinstance(payload, dict):
        return ConvertResponse(errors=[f"{CONVERT_COMMAND} expects an object payload"]).model_dump()
    try:
        request = ConvertRequest.model_validate(payload)
    except ValidationError as exc:
        return ConvertResponse(errors=[str(exc)]).model_dump()
    java_version = request.java_version or ls.java_version
    policy = ls.policy
    if request.policy is not None:
        policy = request.policy.apply_to(policy)
    path = str(_uri_to_path(request.uri))
    try:
        source = ls.workspace.get_text_document(request.uri).source
    except OSError as exc:
        return ConvertResponse(path=path, errors=[f"Failed to read {path}: {exc}"]).model_dump()
    result = plan_file(source, java_version, policy)
    logger.debug("%s: %d declaration(s) converted", path, len(result.edits))
    codec = ls.workspace.position_codec
    response = convert_response(path, java_version, result, codec).model_dump()
    response["workspace_edit"] = _whole_document_edit(request.uri, source, result.text, codec)
    return response


@server.feature(TEXT_DOCUMENT_CODE_ACTION)
def code_action(ls: VarifyLanguageServer, params: CodeActionParams) -> list[CodeAction]:
    uri = params.text_document.uri
    if not _is_java_uri(uri):
        return []
    source = ls.workspace.get_text_document(uri).source
    result = plan_file(source, ls.java_version, ls.policy)
    if not result.modified:
        return []
    edits = [
        TextEdit(
            range=_lsp_range(source, edit.start, edit.end, ls.workspace.position_codec),
            new_text=edit.replacement,
        )
        for edit in result.edits
    ]
    return [
        CodeAction(
            title=CODE_ACTION_TITLE,
            kind=CodeActionKind.RefactorRewrite,
            edit=WorkspaceEdit(changes={uri: edits}),
            command=Command(title=CODE_ACTION_TITLE, command=CONVERT_COMMAND, arguments=[{"uri": uri}]),
        )
    ]


def _publish(ls: VarifyLanguageServer, uri: str) -> None:
    if not _is_java_uri(uri):
        return
    doc = ls.workspace.get_text_document(uri)
    diagnostics = _diagnostics_for_text(
        doc.source, ls.java_version, ls.policy, ls.workspace.position_codec
    )
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: VarifyLanguageServer, params) -> None:
    _publish(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: VarifyLanguageServer, params) -> None:
    _publish(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: VarifyLanguageServer, params) -> None:
    _publish(ls, params.text_document.uri)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: VarifyLanguageServer, params: DidChangeConfigurationParams
) -> None:
    _apply_settings(ls, params.settings)


def start(start_fn: Callable[[], None] | None = None) -> None:
    """Start the language server over stdio."""
    (start_fn or server.start_io)()


if __name__ == "__main__":  # pragma: no cover
    start()  # pragma: no cover
