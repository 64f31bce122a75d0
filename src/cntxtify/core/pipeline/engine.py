from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the context generation workflow:
1. Validates settings and builds the run's PathFilter.
2. Scans the project root into an ordered tree.
3. Resolves effective selections (defaults and folder cascade).
4. Renders the structure block.
5. Aggregates the selected file contents.
6. Assembles the final artifact and its token estimate.
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional, Tuple

from cntxtify.core.analysis.selection import content_paths, normalize_selections, resolve_tree
from cntxtify.core.analysis.tree_generator import scan_directory
from cntxtify.core.analysis.tree_renderer import render_tree
from cntxtify.core.pipeline.components.filters import PathFilter
from cntxtify.core.pipeline.stages.aggregator import AggregationOutcome, aggregate_contents
from cntxtify.core.pipeline.stages.assembler import assemble_output, find_readme
from cntxtify.core.pipeline.stages.validator import validate_settings
from cntxtify.core.processing.tokenizer import classify_token_tier
from cntxtify.domain.pipeline_models import (
    AssemblyResult,
    PipelineResult,
    RootAccessError,
    create_error_result,
    create_success_result,
)
from cntxtify.domain.selection_models import GeneratorConfig
from cntxtify.domain.tree_models import TreeNode

logger = logging.getLogger(__name__)


def generate_context(
        root_path: str,
        config: GeneratorConfig,
        settings: Optional[Dict[str, Any]] = None,
) -> AssemblyResult:
    """
    Build the context artifact for a project root.

    Args:
        root_path: Project directory.
        config: Selections, prompt and README flag for this run.
        settings: Optional runtime settings (validated here).

    Returns:
        AssemblyResult: Output text and token estimate.

    Raises:
        RootAccessError: If the root itself cannot be accessed.
    """
    result, _ = _generate(os.path.abspath(root_path), config, settings)
    return result


def scan_project(
        root_path: str,
        settings: Optional[Dict[str, Any]] = None,
) -> List[TreeNode]:
    """
    Scan a project root with the filtering rules of the given settings.

    Used by selection surfaces to present the tree before a run.

    Raises:
        RootAccessError: If the root itself cannot be accessed.
    """
    cfg, _ = validate_settings(settings if settings is not None else {}, strict=False)
    base_path = os.path.abspath(root_path)
    return scan_directory(base_path, PathFilter.from_settings(base_path, cfg))


def run_pipeline(
        root_path: str,
        config: GeneratorConfig,
        settings: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """
    Execute context generation and report it as a PipelineResult.

    Root access failures are converted into an error result; per-file
    failures are already absorbed inside the run and only reported in
    the summary.

    Args:
        root_path: Project directory.
        config: Selections, prompt and README flag for this run.
        settings: Optional runtime settings.

    Returns:
        PipelineResult: Object containing status, output and metrics.
    """
    logger.info("Pipeline execution started.")
    base_path = os.path.abspath(root_path)
    start = time.perf_counter()

    try:
        result, outcome = _generate(base_path, config, settings)
    except RootAccessError as e:
        logger.error(str(e))
        return create_error_result(str(e), e.root_path)

    tier = classify_token_tier(result.token_count)
    summary = {
        "files_included": len(outcome.included),
        "files_skipped": len(outcome.skipped),
        "errors": len(outcome.failures),
        "elapsed_seconds": round(time.perf_counter() - start, 3),
    }

    logger.info("Pipeline completed successfully.")
    return create_success_result(base_path, result, tier, outcome.failures, summary)


def _generate(
        base_path: str,
        config: GeneratorConfig,
        settings: Optional[Dict[str, Any]],
) -> Tuple[AssemblyResult, AggregationOutcome]:
    """Shared implementation for an absolute root, returning the artifact and aggregation counters."""
    cfg, warnings = validate_settings(settings if settings is not None else {}, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    path_filter = PathFilter.from_settings(base_path, cfg)

    # 1) Scan (the only fatal step)
    nodes = scan_directory(base_path, path_filter)

    # 2) Effective selections; folder exclusion cascades even if the map is not cascaded
    selections = normalize_selections(config.selections)
    effective = resolve_tree(nodes, selections)

    # 3) Sections
    tree_text = render_tree(nodes, effective, cfg["tree_style"])
    readme = find_readme(base_path) if config.include_readme else None
    outcome = aggregate_contents(
        base_path,
        content_paths(nodes, effective),
        path_filter,
        max_workers=cfg["max_workers"],
    )

    result = assemble_output(config.user_prompt, readme, tree_text, outcome.text)
    return result, outcome
