"""Specification Synthesizer: confirmed DIB + CRG metadata → PSPEC."""

from consolecad.spec.summary import pspec_summary_markdown
from consolecad.spec.synthesizer import synthesize_pspec

__all__ = ["pspec_summary_markdown", "synthesize_pspec"]
