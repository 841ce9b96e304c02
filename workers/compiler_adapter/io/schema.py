"""
Schema — Pydantic models for everything that crosses a JSON boundary.

  - Library selection and resolved version metadata (catalog entries).
  - Compiler description.
  - Structured output lines and the final CompilationResult.

Runtime contract fields on the result:
  package_name, adapter_version, schema_version.
"""
from enum import IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from compiler_adapter import ADAPTER_VERSION, PACKAGE_NAME, SCHEMA_VERSION


# ── Libraries ────────────────────────────────────────────────────────────────

class SelectedLibrary(BaseModel):
    """A library the caller asked for, by id and version key."""
    model_config = ConfigDict(frozen=True)

    id: str
    version: str


class LibraryVersion(BaseModel):
    """Resolved metadata for one version of a library."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    version: str
    path: List[str] = Field(default_factory=list)        # include dirs, in order
    packaged_headers: bool = Field(False, alias="packagedheaders")
    static_lib_link: List[str] = Field(default_factory=list, alias="staticliblink")
    dependencies: List[str] = Field(default_factory=list)
    lib_path: List[str] = Field(default_factory=list, alias="libpath")


class LibraryEntry(BaseModel):
    """All known versions of one library, keyed by version string."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    versions: Dict[str, LibraryVersion] = Field(default_factory=dict)


class CatalogDocument(BaseModel):
    """On-disk catalog layout: {"libraries": {<id>: LibraryEntry}}."""

    libraries: Dict[str, LibraryEntry] = Field(default_factory=dict)


# ── Compiler description ─────────────────────────────────────────────────────

class CompilerInfo(BaseModel):
    """One configured compiler executable."""
    model_config = ConfigDict(frozen=True)

    id: str
    exe: str
    include_flag: Optional[str] = None
    lib_path: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)


# ── Structured output ────────────────────────────────────────────────────────

class Severity(IntEnum):
    NONE = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


class ResultLineTag(BaseModel):
    """Location and severity recognized on a diagnostic line."""
    model_config = ConfigDict(frozen=True)

    file: Optional[str] = None
    line: int
    column: int = 0
    severity: Severity = Severity.NONE
    text: str = ""


class ResultLine(BaseModel):
    """One line of compiler output, tagged when it names a location."""
    model_config = ConfigDict(frozen=True)

    text: str
    tag: Optional[ResultLineTag] = None


class CompilationResult(BaseModel):
    """Outcome of a single compiler invocation."""
    model_config = ConfigDict(frozen=True)

    package_name: str = PACKAGE_NAME
    adapter_version: str = ADAPTER_VERSION
    schema_version: str = SCHEMA_VERSION

    compiler: str
    command: List[str] = Field(default_factory=list)
    input_filename: str

    exit_code: int
    timed_out: bool = False
    truncated: bool = False
    exec_time_ms: int = 0

    stdout_raw: str = ""
    stderr_raw: str = ""
    stdout: List[ResultLine] = Field(default_factory=list)
    stderr: List[ResultLine] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.timed_out
