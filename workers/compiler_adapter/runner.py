"""
Compile runner — top-level orchestration: source → CompilationResult.

Ties argument synthesis, execution and normalization together for one
compilation, and wraps it in a small CLI.

Usage (CLI)::

    python -m compiler_adapter.runner main.f90 \\
        --lib mpi:4.1 --catalog libraries.json --lib-root /opt/libs

Usage (async)::

    from compiler_adapter.runner import compile_file
    result = await compile_file(adapter, "/tmp/x/main.f90", libraries)
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from compiler_adapter.adapters.base import CompilerAdapter
from compiler_adapter.adapters.registry import get_adapter
from compiler_adapter.config import Settings, get_settings
from compiler_adapter.core.execution import ExecutionOptions
from compiler_adapter.errors import CompilerAdapterError, CompilerSpawnError
from compiler_adapter.io.catalog import LibraryCatalog
from compiler_adapter.io.schema import CompilationResult, CompilerInfo, SelectedLibrary
from compiler_adapter.io.writer import write_result

logger = logging.getLogger(__name__)


# ─── Command assembly ────────────────────────────────────────────────────────

def build_command(
    adapter: CompilerAdapter,
    input_filename: str,
    libraries: Sequence[SelectedLibrary] = (),
    lib_root: str = "",
    user_options: Sequence[str] = (),
    output_path: Optional[str] = None,
    lib_paths: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Argument list (without the executable):

        <user options> <include flags> [-o <output>] <input> <static archives>

    Archives come after the input so the linker sees the references first.
    """
    if lib_paths is None:
        lib_paths = adapter.library_search_paths(libraries, lib_root)

    args: List[str] = list(user_options)
    args.extend(adapter.build_include_args(libraries, lib_root))
    if output_path:
        args.extend(["-o", output_path])
    args.append(input_filename)
    args.extend(adapter.build_static_link_args(libraries, lib_paths))
    return args


# ─── Compilation ─────────────────────────────────────────────────────────────

async def compile_file(
    adapter: CompilerAdapter,
    input_filename: str,
    libraries: Sequence[SelectedLibrary] = (),
    lib_root: str = "",
    user_options: Sequence[str] = (),
    output_path: Optional[str] = None,
    compiler: Optional[str] = None,
    exec_options: Optional[ExecutionOptions] = None,
    output_dir: Optional[Path] = None,
) -> CompilationResult:
    """
    Compile one file that already exists on disk.

    Parameters
    ----------
    adapter : CompilerAdapter
        Toolchain adapter (e.g. FortranAdapter).
    input_filename : str
        Path of the source file; its directory becomes the compiler's CWD.
    libraries : sequence of SelectedLibrary
        Selected libraries in link order (dependents first).
    compiler : str, optional
        Executable to run.  Defaults to the adapter's configured compiler.
    output_dir : Path, optional
        If set, compilation_result.json is written there.

    Raises
    ------
    CompilerSpawnError
        If the compiler cannot be started.
    """
    compiler = compiler or adapter.compiler.exe
    args = build_command(
        adapter,
        input_filename,
        libraries,
        lib_root=lib_root,
        user_options=user_options,
        output_path=output_path,
    )

    logger.info("Compiling %s with %s (%d libraries)", input_filename, compiler, len(libraries))
    result = await adapter.run(compiler, args, input_filename, exec_options)
    logger.info(
        "Compiled %s: exit=%d timed_out=%s in %dms",
        input_filename, result.exit_code, result.timed_out, result.exec_time_ms,
    )

    if output_dir:
        write_result(result, output_dir)

    return result


async def compile_source(
    adapter: CompilerAdapter,
    source: str,
    filename: str = "example.f90",
    libraries: Sequence[SelectedLibrary] = (),
    lib_root: str = "",
    user_options: Sequence[str] = (),
    build_root: Optional[str] = None,
    keep_workspace: bool = False,
    exec_options: Optional[ExecutionOptions] = None,
) -> CompilationResult:
    """Write *source* into a fresh workspace and compile it there."""
    name = Path(filename).name
    if name in ("", ".", ".."):
        raise ValueError(f"Invalid source filename: {filename!r}")

    root = Path(build_root or get_settings().BUILD_ROOT)
    root.mkdir(parents=True, exist_ok=True)
    workspace = Path(tempfile.mkdtemp(prefix="compile_", dir=root))

    try:
        input_path = workspace / name
        input_path.write_text(source)
        return await compile_file(
            adapter,
            str(input_path),
            libraries,
            lib_root=lib_root,
            user_options=user_options,
            exec_options=exec_options,
        )
    finally:
        if not keep_workspace:
            shutil.rmtree(workspace, ignore_errors=True)


# ─── Wiring ──────────────────────────────────────────────────────────────────

def load_catalog(settings: Settings, path: Optional[str] = None) -> LibraryCatalog:
    path = path or settings.CATALOG_PATH
    if not path:
        return LibraryCatalog()
    return LibraryCatalog.from_file(Path(path))


def make_adapter(
    settings: Optional[Settings] = None,
    catalog: Optional[LibraryCatalog] = None,
    compiler_exe: Optional[str] = None,
    key: str = "fortran",
) -> CompilerAdapter:
    """Build an adapter for the configured compiler."""
    settings = settings or get_settings()
    info = CompilerInfo(
        id=key,
        exe=compiler_exe or settings.FORTRAN_COMPILER,
        include_flag=settings.INCLUDE_FLAG,
        lib_path=settings.LIB_PATHS,
    )
    adapter_cls = get_adapter(key)
    return adapter_cls(info, catalog=catalog if catalog is not None else load_catalog(settings), settings=settings)


def parse_library(spec: str) -> SelectedLibrary:
    """``id:version`` → SelectedLibrary."""
    lib_id, sep, version = spec.partition(":")
    if not sep or not lib_id or not version:
        raise argparse.ArgumentTypeError(f"Expected <id>:<version>, got {spec!r}")
    return SelectedLibrary(id=lib_id, version=version)


# ─── CLI ──────────────────────────────────────────────────────────────────────

def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Compile a Fortran source file with selected libraries",
    )
    parser.add_argument("source", help="Source file to compile")
    parser.add_argument("--compiler", default=settings.FORTRAN_COMPILER, help="Compiler executable")
    parser.add_argument("--lib", action="append", default=[], type=parse_library,
                        help="Library as id:version (repeatable, link order)")
    parser.add_argument("--catalog", default=settings.CATALOG_PATH, help="Library catalog JSON")
    parser.add_argument("--lib-root", default=settings.LIB_ROOT, help="Root of packaged libraries")
    parser.add_argument("--output", default=None, help="Output file passed as -o")
    parser.add_argument("--output-dir", type=Path, default=None, help="Write compilation_result.json here")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--verbose", "-v", action="store_true")
    args, extra = parser.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    try:
        catalog = load_catalog(settings, args.catalog)
        adapter = make_adapter(settings, catalog, compiler_exe=args.compiler)
        result = asyncio.run(compile_file(
            adapter,
            str(Path(args.source).resolve()),
            args.lib,
            lib_root=args.lib_root,
            user_options=extra,
            output_path=args.output,
            compiler=args.compiler,
            output_dir=args.output_dir,
        ))
    except CompilerSpawnError as e:
        logger.error("Compiler could not be started: %s", e.reason)
        return 2
    except CompilerAdapterError as e:
        logger.error("%s", e)
        return 2

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        for line in result.stdout:
            print(line.text)
        for line in result.stderr:
            print(line.text, file=sys.stderr)

    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
