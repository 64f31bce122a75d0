from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the core data structures and factory functions used to communicate
execution results between the pipeline engine and interface layers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

class RootAccessError(OSError):
    """Raised when the scan root itself cannot be listed."""

    def __init__(self, root_path: str, reason: str = "") -> None:
        self.root_path = root_path
        self.reason = reason
        msg = f"Cannot access project root: {root_path}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


@dataclass(frozen=True)
class ReadFailure:
    """
    Encapsulates a file that could not be read during aggregation.

    Attributes:
        rel_path: File path identifier relative to project root.
        error: Descriptive exception or error message.
    """
    rel_path: str
    error: str

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AssemblyResult:
    """
    The assembled context and its estimated token cost.

    Attributes:
        output: Fully assembled text artifact.
        token_count: Approximate token estimate of ``output``.
    """
    output: str
    token_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"output": self.output, "tokens": self.token_count}


@dataclass(frozen=True)
class TokenTier:
    """
    Coarse size class of an assembled context.

    Attributes:
        label: LOW, MODERATE or HIGH.
        hint: Human readable note on which model families fit.
    """
    label: str
    hint: str


@dataclass(frozen=True)
class PipelineResult:
    """
    Unified result object of a complete pipeline execution.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        root_path: Normalized root directory processed.
        result: The assembled context (success only).
        tier: Size class of the estimate (success only).
        summary: Execution counters and diagnostics.
    """
    ok: bool
    error: str
    root_path: str
    result: Optional[AssemblyResult] = None
    tier: Optional[TokenTier] = None
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        root_path: str,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a failed pipeline result instance.

    Args:
        error: Detailed error description.
        root_path: The target input directory.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable error result object.
    """
    return PipelineResult(
        ok=False,
        error=error,
        root_path=root_path,
        summary=summary_extra or {},
    )


def create_success_result(
        root_path: str,
        result: AssemblyResult,
        tier: TokenTier,
        failures: Optional[List[ReadFailure]] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        root_path: Normalized input directory.
        result: Assembled context and estimate.
        tier: Size class of the estimate.
        failures: Per-file read failures absorbed during the run.
        summary_extra: Final execution metrics.

    Returns:
        PipelineResult: An immutable success result object.
    """
    summary: Dict[str, Any] = dict(summary_extra or {})
    summary["token_count"] = result.token_count
    summary["read_failures"] = [f.rel_path for f in (failures or [])]
    return PipelineResult(
        ok=True,
        error="",
        root_path=root_path,
        result=result,
        tier=tier,
        summary=summary,
    )
