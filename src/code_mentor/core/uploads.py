"""Loading local files into the editor.

Files are accepted by extension only; their content is treated as opaque
text and never inspected.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePath

from code_mentor.utils.errors import UnsupportedFileError


def file_extension(filename: str) -> str:
    """Return the lower-cased extension including the dot, or ''."""
    return PurePath(filename).suffix.lower()


def is_allowed_file(filename: str, allowed_extensions: Iterable[str]) -> bool:
    """Check a file name against the extension allow-list (case-insensitive)."""
    extension = file_extension(filename)
    return bool(extension) and extension in {e.lower() for e in allowed_extensions}


def decode_upload(
    filename: str,
    content: bytes,
    allowed_extensions: Iterable[str],
    max_bytes: int,
) -> str:
    """Turn an uploaded file into editor text.

    Args:
        filename: Client-supplied file name
        content: Raw file bytes
        allowed_extensions: Accepted extensions, with leading dots
        max_bytes: Size limit in bytes

    Returns:
        The file content decoded as UTF-8; undecodable bytes are replaced.

    Raises:
        UnsupportedFileError: If the extension is not allowed or the file is too large
    """
    if not is_allowed_file(filename, allowed_extensions):
        raise UnsupportedFileError(f"File type not supported: {filename!r}")
    if len(content) > max_bytes:
        raise UnsupportedFileError(
            f"File too large: {len(content)} bytes (limit {max_bytes})"
        )
    return content.decode("utf-8", errors="replace")
