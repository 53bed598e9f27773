from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional

import typer

from varify.config import java_defaults, java_version as configured_java_version, resolve_policy
from varify.policy import PolicyConfiguration
from varify.processor import ProcessingResult, plan_file
from varify.rewrite import offset_to_position

app = typer.Typer(add_completion=False, help="Rewrite explicit Java local types to 'var'.")

logger = logging.getLogger(__name__)

JAVA_GLOB = "*.java"


@dataclass(frozen=True)
class PolicyFlags:
    allow_primitive_types: Optional[bool] = None
    allow_loop_variables: Optional[bool] = None
    allow_diamond_operator: Optional[bool] = None
    allow_type_mismatch: Optional[bool] = None
    refactor_anonymous_classes: Optional[bool] = None
    refactor_lambda_expressions: Optional[bool] = None

    def overrides(self) -> dict[str, bool]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class FileOutcome:
    path: Path
    result: ProcessingResult


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _collect_java_files(paths: List[Path]) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(path.rglob(JAVA_GLOB)))
        elif path.is_file():
            files.append(path)
        else:
            raise typer.BadParameter(f"No such file or directory: {path}")
    return files


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Failed to read {path}: {exc}") from exc


def _resolve_java_version(java_version: Optional[str], config_path: Optional[Path]) -> str:
    if java_version is not None:
        return java_version
    return configured_java_version(java_defaults(config_path=config_path))


def _resolve_policy(flags: PolicyFlags, config_path: Optional[Path]) -> PolicyConfiguration:
    return resolve_policy(flags.overrides(), config_path=config_path)


def _process_paths(
    paths: List[Path], java_version: str, policy: PolicyConfiguration
) -> list[FileOutcome]:
    outcomes = []
    for path in _collect_java_files(paths):
        result = plan_file(_read_source(path), java_version, policy)
        logger.debug("%s: %d edit(s)", path, len(result.edits))
        outcomes.append(FileOutcome(path=path, result=result))
    return outcomes


def _preview_lines(outcome: FileOutcome) -> list[str]:
    lines = []
    for declaration in outcome.result.declarations:
        line, character = offset_to_position(outcome.result.source, declaration.type_span[0])
        lines.append(
            f"{outcome.path}:{line + 1}:{character + 1}: "
            f"{declaration.declared_type} {declaration.variable_name} -> var"
        )
    return lines


@app.command("convert")
def convert(
    paths: List[Path] = typer.Argument(..., help="Java files or directories to convert."),
    java_version: Optional[str] = typer.Option(None, "--java-version", help="Source language level."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to varify.toml."),
    write: bool = typer.Option(False, "--write", help="Rewrite files in place."),
    check: bool = typer.Option(False, "--check", help="List pending changes; exit 1 if any."),
    primitives: Optional[bool] = typer.Option(None, "--primitives/--no-primitives"),
    loop_vars: Optional[bool] = typer.Option(None, "--loop-vars/--no-loop-vars"),
    diamond: Optional[bool] = typer.Option(None, "--diamond/--no-diamond"),
    allow_mismatch: Optional[bool] = typer.Option(None, "--allow-mismatch/--no-allow-mismatch"),
    anonymous_classes: Optional[bool] = typer.Option(
        None, "--anonymous-classes/--no-anonymous-classes"
    ),
    lambdas: Optional[bool] = typer.Option(None, "--lambdas/--no-lambdas"),
) -> None:
    """Replace eligible explicit local variable types with 'var'."""
    if write and check:
        raise typer.BadParameter("--write and --check are mutually exclusive.")
    flags = PolicyFlags(
        allow_primitive_types=primitives,
        allow_loop_variables=loop_vars,
        allow_diamond_operator=diamond,
        allow_type_mismatch=allow_mismatch,
        refactor_anonymous_classes=anonymous_classes,
        refactor_lambda_expressions=lambdas,
    )
    version = _resolve_java_version(java_version, config)
    outcomes = _process_paths(paths, version, _resolve_policy(flags, config))

    if check:
        pending = [outcome for outcome in outcomes if outcome.result.modified]
        for outcome in pending:
            for line in _preview_lines(outcome):
                typer.echo(line)
        if pending:
            raise typer.Exit(code=1)
        return

    if write:
        changed = 0
        converted = 0
        for outcome in outcomes:
            if not outcome.result.modified:
                continue
            outcome.path.write_text(outcome.result.text, encoding="utf-8")
            changed += 1
            converted += len(outcome.result.edits)
        typer.echo(f"Converted {converted} declaration(s) in {changed} file(s).")
        return

    for outcome in outcomes:
        if len(outcomes) > 1:
            typer.echo(f"==> {outcome.path} <==")
        typer.echo(outcome.result.text, nl=False)


@app.command("plan")
def plan(
    path: Path = typer.Argument(..., help="Java file to plan."),
    output: Optional[Path] = typer.Option(None, "--output", help="Write plan JSON to this path."),
    java_version: Optional[str] = typer.Option(None, "--java-version"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Emit the pending edits for one file as JSON."""
    from varify.server import convert_response

    if not path.is_file():
        raise typer.BadParameter(f"No such file: {path}")
    version = _resolve_java_version(java_version, config)
    policy = _resolve_policy(PolicyFlags(), config)
    result = plan_file(_read_source(path), version, policy)
    payload = convert_response(str(path), version, result).model_dump()
    rendered = json.dumps(payload, indent=2, sort_keys=True)
    if output is None:
        typer.echo(rendered)
    else:
        output.write_text(rendered + "\n", encoding="utf-8")


def _run_lsp(start_fn: Callable[[], None] | None = None) -> None:
    from varify.server import start

    start(start_fn)


@app.command("lsp")
def lsp() -> None:
    """Run the language server over stdio."""
    _run_lsp()
