"""Adapter lookup by compiler family key."""

from __future__ import annotations

from typing import Dict, Type

from compiler_adapter.adapters.base import CompilerAdapter
from compiler_adapter.adapters.fortran import FortranAdapter
from compiler_adapter.errors import UnknownCompilerError

ADAPTERS: Dict[str, Type[CompilerAdapter]] = {
    FortranAdapter.key: FortranAdapter,
}


def get_adapter(key: str) -> Type[CompilerAdapter]:
    try:
        return ADAPTERS[key]
    except KeyError:
        raise UnknownCompilerError(key) from None
