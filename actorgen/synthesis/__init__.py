from .diagnostics import Diagnostic, DiagnosticReport, Severity
from .options import SynthesisOptions
from .pipeline import SynthesisResult, synthesize, synthesize_file, synthesize_source

__all__ = [
    "Diagnostic",
    "DiagnosticReport",
    "Severity",
    "SynthesisOptions",
    "SynthesisResult",
    "synthesize",
    "synthesize_file",
    "synthesize_source",
]
