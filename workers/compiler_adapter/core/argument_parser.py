"""
Argument parser — discover what a gfortran executable accepts.

Runs ``<compiler> --help=fortran`` and parses GCC's help layout:

    The following options are specific to just the language Fortran:
      -J<directory>               Put MODULE files in 'directory'.
      -std=f2008                  Conform to the ISO Fortran 2008 standard.
      -fall-intrinsics            All intrinsics procedures are available
                                  regardless of selected standard.

Options start two columns in; descriptions follow after whitespace and
may continue on deeper-indented lines.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from compiler_adapter.core.execution import ExecutionOptions, default_exec_options, run_process

_OPTION_RE = re.compile(r"^ {1,4}(?P<option>-\S+)(?:\s+(?P<description>\S.*))?\s*$")
_CONTINUATION_RE = re.compile(r"^\s{5,}(?P<text>\S.*)$")

STD_PREFIX = "-std="


@dataclass(frozen=True)
class StdVersion:
    value: str
    name: str


@dataclass
class CompilerOptions:
    """Options a compiler advertises, and the language standards among them."""

    options: Dict[str, str] = field(default_factory=dict)
    std_versions: List[StdVersion] = field(default_factory=list)

    def supports(self, option: str) -> bool:
        return option in self.options


class GccFortranArgumentParser:
    """Parses gfortran ``--help`` output."""

    help_args = ("--help=fortran",)

    @staticmethod
    def parse_help_text(text: str) -> Dict[str, str]:
        options: Dict[str, str] = {}
        current: Optional[str] = None

        for line in text.splitlines():
            match = _OPTION_RE.match(line)
            if match:
                current = match.group("option")
                options[current] = (match.group("description") or "").strip()
                continue

            cont = _CONTINUATION_RE.match(line)
            if cont and current is not None:
                joined = f"{options[current]} {cont.group('text').strip()}"
                options[current] = joined.strip()
                continue

            current = None

        return options

    @staticmethod
    def possible_std_versions(options: Dict[str, str]) -> List[StdVersion]:
        versions: List[StdVersion] = []
        for option, description in options.items():
            if not option.startswith(STD_PREFIX):
                continue
            if description.lower().startswith("deprecated"):
                continue
            value = option[len(STD_PREFIX):]
            if value and not value.startswith("<"):
                versions.append(StdVersion(value=value, name=description or value))
        return versions

    @classmethod
    async def parse(
        cls,
        compiler: str,
        options: Optional[ExecutionOptions] = None,
    ) -> CompilerOptions:
        """Run the compiler's help and parse it.  Spawn failures propagate."""
        options = options or default_exec_options()
        result = await run_process(compiler, list(cls.help_args), options)
        parsed = cls.parse_help_text(result.stdout)
        return CompilerOptions(
            options=parsed,
            std_versions=cls.possible_std_versions(parsed),
        )
