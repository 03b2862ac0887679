# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Analyzer package for the Python to Swift converter."""

from pyswift.analyzers.interpreter import DEFAULT_INTERPRETER, InterpreterAstProvider
from pyswift.analyzers.python import StructuralAnalyzer

__all__ = ["DEFAULT_INTERPRETER", "InterpreterAstProvider", "StructuralAnalyzer"]
