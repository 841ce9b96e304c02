"""
Argument synthesis — include flags and static-library linker inputs.

Two independent operations over the same ordered library selection:

  1. Static link arguments: whole-path ``lib<name>.a`` files, in link
     order, unresolved names dropped.
  2. Include arguments: one include flag per recorded include directory,
     plus ``<root>/<id>/mod`` and ``<root>/<id>/include`` for libraries
     that ship packaged headers.

Neither operation raises.  A library without metadata or without an
archive on disk is simply left out; if it was really needed the compiler
says so itself.
"""
from __future__ import annotations

import os
from typing import Callable, Iterable, List, Optional, Sequence

from compiler_adapter.core.library_locator import locate_static_library
from compiler_adapter.io.schema import LibraryVersion, SelectedLibrary
from compiler_adapter.policy.profile import DEFAULT_INCLUDE_FLAG, Profile

VersionLookup = Callable[[SelectedLibrary], Optional[LibraryVersion]]


# ── Link order ───────────────────────────────────────────────────────────────

def static_link_names(
    libraries: Sequence[SelectedLibrary],
    find_version: VersionLookup,
) -> List[str]:
    """
    Map the selection to static-library link names, in link order.

    A library with metadata contributes its ``static_lib_link`` names
    followed by its ``dependencies``; one without metadata contributes its
    own id.  Repeated names keep their last position so a shared
    dependency follows every library that needs it.
    """
    names: List[str] = []
    for selected in libraries:
        found = find_version(selected)
        if found is None:
            names.append(selected.id)
            continue
        names.extend(n for n in found.static_lib_link if n)
        names.extend(d for d in found.dependencies if d)

    last_index = {name: i for i, name in enumerate(names)}
    return [name for i, name in enumerate(names) if last_index[name] == i]


def build_static_link_args(
    link_names: Iterable[str],
    lib_paths: Sequence[str],
    profile: Optional[Profile] = None,
) -> List[str]:
    """Resolve each link name to a full archive path; drop misses."""
    resolved = (
        locate_static_library(name, lib_paths, profile)
        for name in link_names
        if name
    )
    return [path for path in resolved if path]


# ── Include flags ────────────────────────────────────────────────────────────

def build_include_args(
    libraries: Sequence[SelectedLibrary],
    find_version: VersionLookup,
    lib_root: str,
    include_flag: Optional[str] = None,
    profile: Optional[Profile] = None,
) -> List[str]:
    """
    Include flags for every resolvable library, contiguous per library.

    Order: input library order; within a library, recorded include-path
    order, then the module directory, then the packaged include directory.
    """
    if include_flag is None:
        include_flag = profile.effective_include_flag() if profile else DEFAULT_INCLUDE_FLAG
    module_subdir = profile.module_subdir if profile else "mod"
    include_subdir = profile.include_subdir if profile else "include"

    args: List[str] = []
    for selected in libraries:
        found = find_version(selected)
        if found is None:
            continue

        args.extend(include_flag + p for p in found.path)

        if found.packaged_headers:
            lib_dir = os.path.join(lib_root, selected.id)
            args.append(include_flag + os.path.join(lib_dir, module_subdir))
            args.append(include_flag + os.path.join(lib_dir, include_subdir))

    return args
