"""
Compiler components for gimport.

This package provides:
- Compile scopes, progress indicators and compile contexts
- javac execution and diagnostic parsing
- The compile driver (rebuild / make with a completion callback)
"""

from gimport.host.compiler.context import CompileContext, CompileScope, ProgressIndicator
from gimport.host.compiler.driver import CompileDriver
from gimport.host.compiler.javac import JavacRunner, parse_javac_output

__all__ = [
    "CompileContext",
    "CompileDriver",
    "CompileScope",
    "JavacRunner",
    "ProgressIndicator",
    "parse_javac_output",
]
