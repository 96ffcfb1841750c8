"""
Synthesis: build, render and emit the generated registry class.
"""

from registrygen.synthesis.synthesizer import SourceSynthesizer

__all__ = [
    "SourceSynthesizer",
]
