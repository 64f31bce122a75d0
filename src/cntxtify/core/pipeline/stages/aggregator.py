from __future__ import annotations

"""
Content Aggregation Stage.

Reads every file selected for content and concatenates the bodies, each
wrapped in START/END FILE markers carrying the same relative path used in
the structure section. Reads fan out on a thread pool; emission always
follows the ascending path order of the input, never completion order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List

from cntxtify.core.pipeline.components.filters import PathFilter
from cntxtify.core.pipeline.components.reader import (
    FileReadResult,
    ReadStatus,
    read_selected_file,
)
from cntxtify.domain.constants import (
    DEFAULT_MAX_WORKERS,
    FILE_END_MARKER,
    FILE_START_MARKER,
    READ_ERROR_PLACEHOLDER,
)
from cntxtify.domain.pipeline_models import ReadFailure
from cntxtify.infra.fs import join_rel_path

logger = logging.getLogger(__name__)


@dataclass
class AggregationOutcome:
    """
    Text and counters produced by one aggregation.

    Attributes:
        text: Concatenated delimited file blocks.
        included: Paths whose bodies were embedded.
        skipped: Paths dropped (vanished, non-regular, binary, oversize).
        failures: Paths replaced by an inline read-error placeholder.
    """
    text: str = ""
    included: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: List[ReadFailure] = field(default_factory=list)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def format_file_block(rel_path: str, text: str) -> str:
    """Wrap one file body in its START/END markers, followed by a blank line."""
    return (
        f"{FILE_START_MARKER.format(path=rel_path)}\n"
        f"{text}\n"
        f"{FILE_END_MARKER.format(path=rel_path)}\n\n"
    )


def aggregate_contents(
        root_path: str,
        rel_paths: Iterable[str],
        path_filter: PathFilter,
        max_workers: int = DEFAULT_MAX_WORKERS,
) -> AggregationOutcome:
    """
    Read and concatenate the selected files in deterministic order.

    A file that vanished or is not a regular file is skipped silently; a
    binary or oversize file is skipped; a read failure emits an inline
    placeholder so the rest of the context is preserved.

    Args:
        root_path: Absolute project root.
        rel_paths: '/'-separated relative paths with effective content inclusion.
        path_filter: Run filter holding the content guards.
        max_workers: Upper bound of concurrent reads.

    Returns:
        AggregationOutcome: Text plus per-path bookkeeping.
    """
    ordered = sorted(set(rel_paths))
    outcome = AggregationOutcome()
    if not ordered:
        return outcome

    def _read(rel_path: str) -> FileReadResult:
        return read_selected_file(join_rel_path(root_path, rel_path), rel_path, path_filter)

    workers = max(1, min(int(max_workers), len(ordered)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ContentReader") as executor:
        # map() yields in submission order regardless of completion order
        results = list(executor.map(_read, ordered))

    parts: List[str] = []
    for res in results:
        if res.status is ReadStatus.OK:
            parts.append(format_file_block(res.rel_path, res.text))
            outcome.included.append(res.rel_path)
        elif res.status is ReadStatus.ERROR:
            logger.error(f"Error reading file '{res.rel_path}': {res.error}")
            parts.append(f"{READ_ERROR_PLACEHOLDER.format(path=res.rel_path)}\n\n")
            outcome.failures.append(ReadFailure(rel_path=res.rel_path, error=res.error or ""))
        elif res.status is ReadStatus.FILTERED:
            logger.debug(f"Content excluded ({res.error}): {res.rel_path}")
            outcome.skipped.append(res.rel_path)
        else:
            logger.debug(f"Skipping vanished or non-regular path: {res.rel_path}")
            outcome.skipped.append(res.rel_path)

    outcome.text = "".join(parts)
    logger.info(
        f"Aggregated {len(outcome.included)} files "
        f"({len(outcome.skipped)} skipped, {len(outcome.failures)} errors)"
    )
    return outcome
