"""
Profile — toolchain conventions the core logic is parameterized by.

Naming conventions (static-library prefix/suffix, include flag, packaged
header subdirectories) live here so that the locator and the argument
synthesizer carry no toolchain opinions.  Supporting another toolchain
family is a profile change, not a code change.
"""
from dataclasses import dataclass
from typing import Optional


DEFAULT_INCLUDE_FLAG = "-I"


@dataclass(frozen=True)
class Profile:
    """Describes how a toolchain family names and finds library artifacts."""

    # Identity
    profile_id: str

    # Static libraries are passed as whole paths: <prefix><id><suffix>
    static_lib_prefix: str = "lib"
    static_lib_suffix: str = ".a"

    # None means "use DEFAULT_INCLUDE_FLAG"
    include_flag: Optional[str] = None

    # Packaged-header layout under <lib_root>/<id>/
    module_subdir: str = "mod"
    include_subdir: str = "include"

    def static_lib_filename(self, lib_id: str) -> str:
        return f"{self.static_lib_prefix}{lib_id}{self.static_lib_suffix}"

    def effective_include_flag(self) -> str:
        return self.include_flag or DEFAULT_INCLUDE_FLAG

    @classmethod
    def gfortran(cls, include_flag: Optional[str] = None) -> "Profile":
        """The gfortran profile: lib<id>.a, -I, mod/ + include/."""
        return cls(
            profile_id="linux-gfortran",
            include_flag=include_flag,
        )
