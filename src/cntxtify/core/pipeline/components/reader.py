from __future__ import annotations

"""
Resilient File Reading Component.

Reads candidate files for aggregation. Focuses on encoding resilience so
that corrupted UTF-8 sequences never interrupt the run; binary and
oversize detection is delegated to the PathFilter.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cntxtify.core.pipeline.components.filters import PathFilter


class ReadStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    FILTERED = "filtered"
    ERROR = "error"


@dataclass(frozen=True)
class FileReadResult:
    """
    Outcome of reading one selected file.

    Attributes:
        rel_path: '/'-separated path relative to the root.
        status: What happened to the file.
        text: Decoded content (OK only).
        error: Failure description (ERROR only).
    """
    rel_path: str
    status: ReadStatus
    text: str = ""
    error: Optional[str] = None


def decode_text(data: bytes) -> str:
    """
    Decode raw bytes as UTF-8.

    Implements the 'replace' error handling strategy to substitute
    unrecognized byte sequences with placeholder characters, preventing
    UnicodeDecodeError in mixed-encoding projects.
    """
    return data.decode("utf-8", errors="replace")


def read_selected_file(abs_path: str, rel_path: str, path_filter: PathFilter) -> FileReadResult:
    """
    Read one file selected for content inclusion.

    A path that vanished since the scan, a symbolic link or anything that
    is not a regular file is reported as MISSING; oversize or binary files
    as FILTERED; any other I/O failure as ERROR. Links are never followed,
    so a target outside the root is never read.

    Args:
        abs_path: Native absolute path of the file.
        rel_path: Normalized relative path used in the output.
        path_filter: Run filter holding the content guards.

    Returns:
        FileReadResult: The read outcome.
    """
    if os.path.islink(abs_path) or not os.path.isfile(abs_path):
        return FileReadResult(rel_path, ReadStatus.MISSING)

    try:
        size = os.path.getsize(abs_path)
        if path_filter.exceeds_size(size):
            return FileReadResult(rel_path, ReadStatus.FILTERED, error="file too large")

        with open(abs_path, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        return FileReadResult(rel_path, ReadStatus.MISSING)
    except OSError as e:
        return FileReadResult(rel_path, ReadStatus.ERROR, error=str(e))

    if not path_filter.allows_content(len(data), data):
        return FileReadResult(rel_path, ReadStatus.FILTERED, error="binary or oversize content")

    return FileReadResult(rel_path, ReadStatus.OK, text=decode_text(data))
