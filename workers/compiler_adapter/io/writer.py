"""
Writer — serialize a CompilationResult to JSON.

Filesystem layout:
    <output_dir>/compilation_result.json
"""
import json
from pathlib import Path

from compiler_adapter.io.schema import CompilationResult

RESULT_FILENAME = "compilation_result.json"


def write_result(result: CompilationResult, output_dir: Path) -> Path:
    """
    Write compilation_result.json into *output_dir*.

    Creates *output_dir* if it does not exist.
    Returns the path of the written file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    result_path = output_dir / RESULT_FILENAME
    result_path.write_text(
        json.dumps(
            result.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )

    return result_path
