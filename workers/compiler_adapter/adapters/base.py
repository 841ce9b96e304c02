"""Capability interface every toolchain adapter provides."""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from compiler_adapter.core.execution import ExecutionOptions
from compiler_adapter.io.schema import CompilationResult, CompilerInfo, SelectedLibrary


@runtime_checkable
class CompilerAdapter(Protocol):
    key: str
    compiler: CompilerInfo

    def library_search_paths(
        self,
        libraries: Sequence[SelectedLibrary],
        lib_root: str,
    ) -> List[str]:
        """Directories to search for static archives, in priority order."""

    def build_static_link_args(
        self,
        libraries: Sequence[SelectedLibrary],
        lib_paths: Sequence[str],
    ) -> List[str]:
        """Whole-path static archives to pass as linker inputs."""

    def build_include_args(
        self,
        libraries: Sequence[SelectedLibrary],
        lib_root: str,
    ) -> List[str]:
        """Flags that make library headers and modules visible."""

    def get_argument_parser(self) -> type:
        """Class that discovers the compiler's supported options."""

    async def run(
        self,
        compiler: str,
        args: Sequence[str],
        input_filename: str,
        options: Optional[ExecutionOptions] = None,
    ) -> CompilationResult:
        """Execute the compiler and return normalized output."""
