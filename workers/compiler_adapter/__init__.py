"""
compiler_adapter — Fortran compiler-invocation adapter.

Builds include and whole-path static-library arguments for gfortran,
runs the compiler beside its input so .mod files land next to the
source, and rewrites diagnostics to refer to ./<basename>.
"""

__version__ = "0.1.0"
ADAPTER_VERSION = "v0"
PACKAGE_NAME = "compiler_adapter"
SCHEMA_VERSION = "0.1"
