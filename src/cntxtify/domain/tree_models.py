from __future__ import annotations

"""
Directory Tree Structure Data Models.

Provides the recursive node definitions produced by the directory scanner
and consumed by the selection resolver, the renderers and the content
aggregator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Filesystem entry classification."""
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class TreeNode:
    """
    Represents one entry (file or folder) of a scanned project.

    Attributes:
        name: Entry name as found on disk.
        path: Path relative to the scan root, always '/'-separated.
        kind: File or folder classification.
        children: Ordered sub-entries (folders only, empty for files).
    """
    name: str
    path: str
    kind: NodeKind
    children: Tuple["TreeNode", ...] = ()

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE


@dataclass(frozen=True)
class ScanSummary:
    """
    Flat digest of a scan used to populate selection surfaces.

    Attributes:
        folders: Relative paths of every folder, in scan order.
        extensions: Sorted, lower-cased file extensions present.
    """
    folders: List[str]
    extensions: List[str]

    def to_dict(self) -> dict:
        return {"folders": list(self.folders), "extensions": list(self.extensions)}
