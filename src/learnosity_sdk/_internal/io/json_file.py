"""JSON file I/O helpers (internal)."""

import logging
from pathlib import Path
from typing import Any, Union

from learnosity_sdk._internal.canonical_json import decode


logger = logging.getLogger(__name__)


def get_from_file(path: Union[str, Path], decode_json: bool = False) -> Any:
    """Read a JSON resource from disk.

    Args:
        path: Path to the file
        decode_json: Return the parsed JSON value instead of the raw text

    Returns:
        The file text, the decoded value, or None if the file cannot be read,
        is not UTF-8, or (with decode_json) does not hold valid JSON
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read %s: %s", file_path, exc)
        return None

    if not decode_json:
        return text

    result = decode(text)
    if not result.ok:
        logger.debug("Invalid JSON in %s: %s", file_path, result.error_message)
        return None
    return result.value
