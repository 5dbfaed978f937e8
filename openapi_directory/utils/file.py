"""Loading of specification files."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

logger = logging.getLogger(__name__)

SPEC_PATTERNS = ("*.yaml", "*.yml", "*.json")


def load_specification(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse an OpenAPI/Swagger document from a YAML or JSON file.

    Raises:
        ValueError: If the file does not hold a mapping
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            document = json.load(f)
        else:
            document = yaml.safe_load(f)

    if not isinstance(document, dict):
        raise ValueError(f"{path} does not contain an OpenAPI document")
    logger.debug(f"Loaded specification {path} ({len(document.get('paths') or {})} paths)")
    return document


def find_spec_files(directory: Union[str, Path]) -> List[str]:
    """Specification files directly inside a directory, sorted."""
    directory = Path(directory)
    if not directory.exists():
        logger.warning(f"Directory does not exist: {directory}")
        return []

    files = []
    for pattern in SPEC_PATTERNS:
        files.extend(str(p) for p in directory.glob(pattern))

    # Sort for consistent ordering
    files.sort()
    return files


def spec_id_from_path(path: Union[str, Path]) -> str:
    """Default specification id: the file name without extension."""
    return Path(path).stem


__all__ = ["load_specification", "find_spec_files", "spec_id_from_path"]
