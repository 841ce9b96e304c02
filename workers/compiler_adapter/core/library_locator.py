"""
Library locator — find the exact on-disk static library for a library id.

gfortran cannot take ``-l<name>``; the whole path of ``lib<name>.a`` has
to go on the command line.  This means libraries must already be on disk
before the compiler arguments can be computed.

Pure filesystem lookup: one existence check per candidate directory,
short-circuiting on the first hit.  A miss returns ``NOT_FOUND`` (an
empty string) and never raises; callers decide whether that matters.
"""
from __future__ import annotations

import os
from typing import Iterable, Optional

from compiler_adapter.policy.profile import Profile

NOT_FOUND = ""

_DEFAULT_PROFILE = Profile.gfortran()


def locate_static_library(
    lib_id: str,
    candidate_dirs: Iterable[str],
    profile: Optional[Profile] = None,
) -> str:
    """
    Return ``<dir>/<prefix><lib_id><suffix>`` for the first directory in
    *candidate_dirs* where that file exists, else ``NOT_FOUND``.
    """
    profile = profile or _DEFAULT_PROFILE
    filename = profile.static_lib_filename(lib_id)

    for directory in candidate_dirs:
        candidate = os.path.join(directory, filename)
        if os.path.exists(candidate):
            return candidate

    return NOT_FOUND
