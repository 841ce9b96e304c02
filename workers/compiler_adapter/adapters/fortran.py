"""
Fortran adapter — gfortran-specific argument and execution rules.

  - Static libraries go on the command line as whole ``lib<name>.a``
    paths; gfortran has no usable ``-l<name>`` form here.
  - Libraries with packaged headers also expose ``<root>/<id>/mod`` and
    ``<root>/<id>/include``.
  - The compiler runs inside the input's directory so generated .mod
    files land beside the source.
"""
from __future__ import annotations

import os
from typing import List, Optional, Sequence

from compiler_adapter.config import Settings, get_settings
from compiler_adapter.core.argument_parser import GccFortranArgumentParser
from compiler_adapter.core.arguments import (
    build_include_args,
    build_static_link_args,
    static_link_names,
)
from compiler_adapter.core.execution import (
    ExecutionOptions,
    default_exec_options,
    run_compiler_process,
)
from compiler_adapter.core.normalizer import normalize_output
from compiler_adapter.io.catalog import LibraryCatalog
from compiler_adapter.io.schema import (
    CompilationResult,
    CompilerInfo,
    LibraryVersion,
    SelectedLibrary,
)
from compiler_adapter.policy.profile import Profile


class FortranAdapter:
    """gfortran family adapter."""

    key = "fortran"

    def __init__(
        self,
        compiler: CompilerInfo,
        catalog: Optional[LibraryCatalog] = None,
        profile: Optional[Profile] = None,
        settings: Optional[Settings] = None,
    ):
        self.compiler = compiler
        self.catalog = catalog if catalog is not None else LibraryCatalog()
        self.profile = profile or Profile.gfortran(include_flag=compiler.include_flag)
        self.settings = settings or get_settings()

    # -----------------------------------------------------------------
    # Metadata
    # -----------------------------------------------------------------

    def find_version(self, selected: SelectedLibrary) -> Optional[LibraryVersion]:
        return self.catalog.find_version(selected)

    def get_argument_parser(self) -> type:
        return GccFortranArgumentParser

    def std_version_override_description(self) -> str:
        return "Change the Fortran standard version of the compiler."

    # -----------------------------------------------------------------
    # Arguments
    # -----------------------------------------------------------------

    def library_search_paths(
        self,
        libraries: Sequence[SelectedLibrary],
        lib_root: str,
    ) -> List[str]:
        """
        Directories to look for static archives in, most specific first:
        each library's own lib paths, ``<root>/<id>/lib`` for packaged
        libraries, then the compiler's configured lib paths.
        """
        paths: List[str] = []
        for selected in libraries:
            found = self.find_version(selected)
            if found is None:
                continue
            paths.extend(found.lib_path)
            if found.packaged_headers:
                paths.append(os.path.join(lib_root, selected.id, "lib"))
        paths.extend(self.compiler.lib_path)
        return list(dict.fromkeys(p for p in paths if p))

    def build_static_link_args(
        self,
        libraries: Sequence[SelectedLibrary],
        lib_paths: Sequence[str] = (),
    ) -> List[str]:
        names = static_link_names(libraries, self.find_version)
        return build_static_link_args(names, lib_paths, self.profile)

    def build_include_args(
        self,
        libraries: Sequence[SelectedLibrary],
        lib_root: str,
    ) -> List[str]:
        return build_include_args(
            libraries,
            self.find_version,
            lib_root,
            include_flag=self.profile.effective_include_flag(),
            profile=self.profile,
        )

    # -----------------------------------------------------------------
    # Execution
    # -----------------------------------------------------------------

    def default_exec_options(self) -> ExecutionOptions:
        return default_exec_options(self.compiler.env, self.settings)

    async def run(
        self,
        compiler: str,
        args: Sequence[str],
        input_filename: str,
        options: Optional[ExecutionOptions] = None,
    ) -> CompilationResult:
        """
        Run *compiler* beside *input_filename* and normalize its output.

        Raises CompilerSpawnError if the executable cannot be started.
        """
        if options is None:
            options = self.default_exec_options()

        raw = await run_compiler_process(compiler, args, input_filename, options)
        stdout, stderr = normalize_output(raw.stdout, raw.stderr, input_filename)

        return CompilationResult(
            compiler=compiler,
            command=[compiler, *args],
            input_filename=input_filename,
            exit_code=raw.exit_code,
            timed_out=raw.timed_out,
            truncated=raw.truncated,
            exec_time_ms=raw.exec_time_ms,
            stdout_raw=raw.stdout,
            stderr_raw=raw.stderr,
            stdout=stdout,
            stderr=stderr,
        )
