from __future__ import annotations

from sayer import Sayer

from actorgen.cli.codegen.app import codegen

help = """
actorgen command line.

Synthesizes single-consumer actors from declarative message sets.
"""

app = Sayer(
    name="actorgen",
    help=help,
)

app.add_command(codegen)
