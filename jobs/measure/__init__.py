"""Measure runner package - CLI around the latency measurement engine.

Modules:
- config: MeasureRunConfig dataclass
- report: console summary + CSV/JSON/HTML writers
- runner: Orchestrator (run_measure)
- cli: CLI entry point (main)
"""

from .config import MeasureRunConfig
from .runner import run_measure
from .cli import main

__all__ = ["MeasureRunConfig", "run_measure", "main"]
