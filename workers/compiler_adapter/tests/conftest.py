"""
Shared pytest fixtures for compiler_adapter tests.

Provides:
  - on-disk library trees with ``lib<id>.a`` archives under tmp_path
  - a small library catalog
  - fake compilers: /bin/sh scripts that report their cwd and arguments,
    drop a .mod file into the cwd, and print a gfortran-style diagnostic

The fake compilers let subprocess behaviour be tested without a Fortran
toolchain.  Tests that need /bin/sh are skipped on Windows.
"""
import platform
import stat
import textwrap
from pathlib import Path

import pytest

from compiler_adapter.io.catalog import LibraryCatalog
from compiler_adapter.io.schema import CompilerInfo, LibraryVersion, SelectedLibrary

requires_posix = pytest.mark.skipif(
    platform.system() == "Windows",
    reason="fake compilers are /bin/sh scripts",
)


# ── Fake compilers ───────────────────────────────────────────────────────────

FAKE_COMPILER_SH = textwrap.dedent("""\
    #!/bin/sh
    echo "cwd=$(pwd)"
    src=""
    for a in "$@"; do
        echo "arg=$a"
        case "$a" in
            *.f90) src="$a" ;;
        esac
    done
    : > fake_module.mod
    name=$(basename "$src")
    echo "$name:3:5: error: Symbol 'y' at (1) has no IMPLICIT type" >&2
    echo "plain trailing line" >&2
    exit ${FAKE_EXIT:-0}
""")

SLOW_COMPILER_SH = textwrap.dedent("""\
    #!/bin/sh
    echo "starting"
    exec sleep 30
""")

NOISY_COMPILER_SH = textwrap.dedent("""\
    #!/bin/sh
    i=0
    while [ $i -lt 500 ]; do
        echo "line $i of noisy output"
        i=$((i + 1))
    done
""")

HELP_COMPILER_SH = textwrap.dedent("""\
    #!/bin/sh
    cat <<'EOF'
    The following options are specific to just the language Fortran:
      -J<directory>               Put MODULE files in 'directory'.
      -fall-intrinsics            All intrinsics procedures are available
                                  regardless of selected standard.
      -std=f2003                  Conform to the ISO Fortran 2003 standard.
      -std=f2008                  Conform to the ISO Fortran 2008 standard.
      -std=f2008ts                Deprecated in favor of -std=f2018.
      -std=f2018                  Conform to the ISO Fortran 2018 standard.
      -std=gnu                    Conform to nothing in particular.
    EOF
""")


def _write_script(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_compiler(tmp_path) -> Path:
    (tmp_path / "bin").mkdir()
    return _write_script(tmp_path / "bin" / "fake-gfortran", FAKE_COMPILER_SH)


@pytest.fixture
def slow_compiler(tmp_path) -> Path:
    (tmp_path / "slowbin").mkdir()
    return _write_script(tmp_path / "slowbin" / "slow-gfortran", SLOW_COMPILER_SH)


@pytest.fixture
def noisy_compiler(tmp_path) -> Path:
    (tmp_path / "noisybin").mkdir()
    return _write_script(tmp_path / "noisybin" / "noisy-gfortran", NOISY_COMPILER_SH)


@pytest.fixture
def help_compiler(tmp_path) -> Path:
    (tmp_path / "helpbin").mkdir()
    return _write_script(tmp_path / "helpbin" / "help-gfortran", HELP_COMPILER_SH)


# ── Sources ──────────────────────────────────────────────────────────────────

MAIN_F90 = textwrap.dedent("""\
    program main
      implicit none
      x = y
    end program main
""")


@pytest.fixture
def source_file(tmp_path) -> Path:
    build = tmp_path / "build123"
    build.mkdir()
    src = build / "main.f90"
    src.write_text(MAIN_F90)
    return src


# ── Libraries ────────────────────────────────────────────────────────────────

@pytest.fixture
def lib_dirs(tmp_path):
    """
    Three candidate directories:
      first/   libfoo.a
      second/  libfoo.a  libbar.a
      third/   libbaz.a
    """
    first = tmp_path / "libs" / "first"
    second = tmp_path / "libs" / "second"
    third = tmp_path / "libs" / "third"
    for d in (first, second, third):
        d.mkdir(parents=True)
    (first / "libfoo.a").write_bytes(b"!<arch>\n")
    (second / "libfoo.a").write_bytes(b"!<arch>\n")
    (second / "libbar.a").write_bytes(b"!<arch>\n")
    (third / "libbaz.a").write_bytes(b"!<arch>\n")
    return [str(first), str(second), str(third)]


MPI = LibraryVersion(id="mpi", version="4.1", path=["/opt/mpi/include"])
FFTW = LibraryVersion(
    id="fftw",
    version="3.3",
    path=["/opt/fftw/include", "/opt/fftw/include/fortran"],
    static_lib_link=["fftw3f", "fftw3"],
)
JSONF = LibraryVersion(
    id="json-fortran",
    version="8.3",
    path=[],
    packaged_headers=True,
    static_lib_link=["jsonfortran"],
)
SOLVER = LibraryVersion(
    id="solver",
    version="1.0",
    path=["/opt/solver/include"],
    static_lib_link=["solver"],
    dependencies=["blas"],
)
LAPACK = LibraryVersion(
    id="lapack",
    version="3.12",
    static_lib_link=["lapack"],
    dependencies=["blas"],
)


@pytest.fixture
def catalog() -> LibraryCatalog:
    return LibraryCatalog.from_versions([MPI, FFTW, JSONF, SOLVER, LAPACK])


def select(lib: LibraryVersion) -> SelectedLibrary:
    return SelectedLibrary(id=lib.id, version=lib.version)


@pytest.fixture
def compiler_info() -> CompilerInfo:
    return CompilerInfo(id="gfortran", exe="gfortran")
