from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

from sayer import Option, error, group, info, success

from actorgen.exceptions import SynthesisError
from actorgen.synthesis import SynthesisOptions, SynthesisResult, synthesize_file

help = """
Code Generation CLI Module.

**Synthesize actors from message sets and state classes**

Reads a Python module, pairs every `<Name>Msg` message set with its `<Name>`
state dataclass, and emits the mailbox plumbing, an `Actor<Name>` handle and
one round-trip and one fire-and-forget accessor per request kind.
"""


codegen = group(
    name="codegen",
    help=help,
)


def _run(source: Path | None, output: Path | None, strict: bool) -> SynthesisResult:
    """
    Run the pipeline for a CLI command, turning failures into exit codes.

    Exit Codes:
        1: The synthesis reported errors.
        2: The source file is missing or not valid Python.
    """
    if source is None:
        error("--path is required.")
        raise SystemExit(2)
    if not source.is_file():
        error(f"No such file: {source}")
        raise SystemExit(2)

    options = SynthesisOptions.from_settings(strict=True) if strict else SynthesisOptions.from_settings()
    try:
        return synthesize_file(source, output=output, options=options)
    except SyntaxError as e:
        error(f"{source}: {e.msg} (line {e.lineno})")
        raise SystemExit(2) from None
    except SynthesisError as e:
        error(f"Synthesis of {source} failed with {len(e.diagnostics)} error(s):")
        for diagnostic in e.diagnostics:
            error(f"- {diagnostic}")
        raise SystemExit(1) from None


@codegen.command()
def generate(
    path: Annotated[Path | None, Option(None, help="Python source file to synthesize")],
    output: Annotated[
        Path | None,
        Option(help="Where to write the generated module (stdout if omitted)", required=False),
    ] = None,
    strict: Annotated[bool, Option(help="Treat warnings as errors")] = False,
) -> None:
    """
    Generate the actor scaffolding for a module.

    The source file is never modified. The generated module is written to
    `--output`, or printed to stdout when no output path is given.

    Exit Codes:
        0: Generation succeeded (warnings may have been reported).
        1: Synthesis errors; nothing was written.
        2: Missing or unparsable source file.
    """
    result = _run(path, output, strict)

    for diagnostic in result.report.warnings:
        info(f"- {diagnostic}")

    if output is None:
        sys.stdout.write(result.code)
        return

    success(f"Generated {len(result.actors)} actor(s) into {output}")


@codegen.command()
def check(
    path: Annotated[Path | None, Option(None, help="Python source file to check")],
    strict: Annotated[bool, Option(help="Treat warnings as errors")] = False,
) -> None:
    """
    Run the synthesis pipeline without writing anything and report what it found.

    Lists every actor that would be generated with its accessors, followed by
    all diagnostics.

    Exit Codes:
        0: The module can be synthesized.
        1: Synthesis errors were found.
    """
    result = _run(path, None, strict)

    if not result.actors:
        info("No actors found.")
    for actor in result.actors:
        info(f"{actor.handle_name}: {actor.state_name} <- {actor.message_set_name}")
        for method in actor.methods:
            info(f"  {method}")

    for diagnostic in result.report.diagnostics:
        info(f"- {diagnostic}")

    success("Module can be synthesized.")
