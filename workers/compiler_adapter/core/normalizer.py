"""
Normalizer — make compiler output refer to ``./<basename>``.

The compiler ran inside the input file's directory, so it reports the
input by its bare name (or by whatever path was on its command line).
The caller only knows the original filename, so every form is rewritten
to ``./<basename>`` before the streams are split into ResultLines.

stdout and stderr are parsed independently; line order within each
stream is kept.  Normalizing the same input twice gives the same result.
"""
from __future__ import annotations

import os
from typing import List, Tuple

from compiler_adapter.core.output_parser import parse_output
from compiler_adapter.io.schema import ResultLine


def relative_input_name(input_filename: str) -> str:
    """``/tmp/build123/foo.f90`` → ``./foo.f90``."""
    return "./" + os.path.basename(input_filename)


def normalize_stream(text: str, input_filename: str) -> List[ResultLine]:
    relative = relative_input_name(input_filename)
    aliases = (input_filename, os.path.basename(input_filename))
    return parse_output(text, relative, aliases)


def normalize_output(
    raw_stdout: str,
    raw_stderr: str,
    input_filename: str,
) -> Tuple[List[ResultLine], List[ResultLine]]:
    """Return ``(stdout_lines, stderr_lines)`` with input paths rewritten."""
    return (
        normalize_stream(raw_stdout, input_filename),
        normalize_stream(raw_stderr, input_filename),
    )
