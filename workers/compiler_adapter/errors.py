"""
Errors raised by the adapter.

Only failures of the compilation *system* are exceptions.  A library that
cannot be resolved is omitted from the arguments, and a compiler that
exits nonzero is reported in the result, not raised.
"""
from __future__ import annotations


class CompilerAdapterError(Exception):
    """Base class for adapter failures."""


class CompilerSpawnError(CompilerAdapterError):
    """The compiler process could not be started at all."""

    def __init__(self, compiler: str, reason: str):
        self.compiler = compiler
        self.reason = reason
        super().__init__(f"Failed to spawn compiler {compiler!r}: {reason}")


class UnknownCompilerError(CompilerAdapterError):
    """No adapter is registered under the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No compiler adapter registered for {key!r}")


class CatalogError(CompilerAdapterError):
    """The library catalog file is unreadable or malformed."""
