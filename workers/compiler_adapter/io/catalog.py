"""
Catalog — read-only lookup of library version metadata.

The catalog is loaded once from a JSON document:

    {"libraries": {"<id>": {"name": "...", "versions": {"<ver>": {...}}}}}

Version entries accept both snake_case keys and the compact keys used by
existing library property files (``packagedheaders``, ``staticliblink``,
``libpath``).  Lookups that miss return None; they never raise.
"""
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from pydantic import ValidationError

from compiler_adapter.errors import CatalogError
from compiler_adapter.io.schema import (
    CatalogDocument,
    LibraryEntry,
    LibraryVersion,
    SelectedLibrary,
)

logger = logging.getLogger(__name__)


class LibraryCatalog:
    """In-memory library metadata, keyed by library id then version."""

    def __init__(self, libraries: Optional[Dict[str, LibraryEntry]] = None):
        self._libraries: Dict[str, LibraryEntry] = dict(libraries or {})

    # -----------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------

    @classmethod
    def from_document(cls, raw: dict) -> "LibraryCatalog":
        """Build a catalog from an already-parsed JSON document."""
        # Version entries inherit id/version from their keys when omitted.
        raw = copy.deepcopy(raw)
        libraries = raw.get("libraries", {}) if isinstance(raw, dict) else {}
        for lib_id, entry in libraries.items():
            if not isinstance(entry, dict):
                continue
            for ver_key, ver in (entry.get("versions") or {}).items():
                if isinstance(ver, dict):
                    ver.setdefault("id", lib_id)
                    ver.setdefault("version", ver_key)

        try:
            doc = CatalogDocument.model_validate(raw)
        except ValidationError as e:
            raise CatalogError(f"Invalid library catalog: {e}") from e
        return cls(doc.libraries)

    @classmethod
    def from_file(cls, path: Path) -> "LibraryCatalog":
        """Load a catalog from a JSON file."""
        path = Path(path)
        try:
            raw = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Cannot read library catalog {path}: {e}") from e

        catalog = cls.from_document(raw)
        logger.info("Loaded library catalog %s (%d libraries)", path, len(catalog))
        return catalog

    @classmethod
    def from_versions(cls, versions: Iterable[LibraryVersion]) -> "LibraryCatalog":
        """Build a catalog from a flat list of versions (handy in tests)."""
        grouped: Dict[str, Dict[str, LibraryVersion]] = {}
        for v in versions:
            grouped.setdefault(v.id, {})[v.version] = v
        return cls({
            lib_id: LibraryEntry(versions=vers)
            for lib_id, vers in grouped.items()
        })

    # -----------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------

    def find_version(self, selected: SelectedLibrary) -> Optional[LibraryVersion]:
        entry = self._libraries.get(selected.id)
        if entry is None:
            return None
        return entry.versions.get(selected.version)

    def __len__(self) -> int:
        return len(self._libraries)

    def __contains__(self, lib_id: object) -> bool:
        return lib_id in self._libraries
