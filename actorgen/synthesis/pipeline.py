"""
The synthesis pipeline.

scanner -> message sets -> resolver -> synthesizer -> accessors -> emission

Each stage only consumes the output of the stages before it. A run keeps no
state once it returns.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .accessors import generate_accessors
from .diagnostics import DiagnosticReport
from .emitter import append_declarations, emit, insert_runtime_import
from .messages import process_message_sets
from .options import SynthesisOptions
from .resolver import resolve
from .scanner import scan
from .synthesizer import SynthesizedActor, synthesize_actor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """
    Outcome of a successful run.

    Attributes
    ----------
    module:
        The rewritten module, with generated declarations appended.
    actors:
        One entry per synthesized actor, in state source order.
    report:
        Every diagnostic reported, errors excluded (a run with errors raises).
    """

    module: ast.Module
    actors: tuple[SynthesizedActor, ...]
    report: DiagnosticReport

    @property
    def code(self) -> str:
        return emit(self.module)


def synthesize(module: ast.Module, options: Optional[SynthesisOptions] = None) -> SynthesisResult:
    """
    Run the pipeline over `module`, rewriting it in place.

    Raises
    ------
    SynthesisError
        If any stage reported an error (or a warning, in strict mode).
    """
    options = options or SynthesisOptions.from_settings()
    report = DiagnosticReport(strict=options.strict)

    namespace = scan(module, report)
    message_sets = process_message_sets(namespace, options, report)
    contexts = resolve(message_sets, namespace, options, report)

    actors: list[SynthesizedActor] = []
    taken: set[str] = set()
    for context in contexts:
        actor = synthesize_actor(context, namespace.names, taken, options, report)
        if actor is None:
            continue
        generate_accessors(actor, options, report)
        actors.append(actor)

    if any(ms.requests for ms in message_sets.values()):
        insert_runtime_import(module, namespace.names, options, report)
    append_declarations(module, (actor.handle for actor in actors))

    report.raise_for_errors()
    logger.debug("Synthesized %d actor(s).", len(actors))
    return SynthesisResult(module=module, actors=tuple(actors), report=report)


def synthesize_source(
    source: str,
    *,
    filename: str = "<string>",
    options: Optional[SynthesisOptions] = None,
) -> str:
    """Parse `source`, synthesize it and return the generated source."""
    module = ast.parse(source, filename=filename)
    return synthesize(module, options).code


def synthesize_file(
    path: str | Path,
    *,
    output: str | Path | None = None,
    options: Optional[SynthesisOptions] = None,
    **overrides: Any,
) -> SynthesisResult:
    """
    Synthesize a source file.

    The result is written to `output` when given; the input file is never
    modified. Keyword `overrides` are applied on top of the configured settings
    when `options` is not given.
    """
    path = Path(path)
    if options is None:
        options = SynthesisOptions.from_settings(**overrides)
    elif overrides:
        raise TypeError("Pass either options or keyword overrides, not both.")

    module = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    result = synthesize(module, options)

    if output is not None:
        Path(output).write_text(result.code, encoding="utf-8")
        logger.info("Wrote %s", output)
    return result
