from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of settings
sources (defaults, settings file, CLI overrides), selection loading,
pipeline execution and result rendering. The artifact goes to stdout (or
a file) and every report or diagnostic goes to stderr so the output can
be piped.
"""

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

from cntxtify.core.analysis.selection import resolve_tree, selections_from_rules
from cntxtify.core.analysis.tree_generator import summarize_scan
from cntxtify.core.analysis.tree_renderer import render_tree
from cntxtify.core.pipeline.engine import run_pipeline, scan_project
from cntxtify.core.pipeline.stages.validator import parse_generator_config, validate_settings
from cntxtify.core.processing.tokenizer import count_tokens
from cntxtify.domain.config import load_settings
from cntxtify.domain.constants import TREE_STYLE_BOX
from cntxtify.domain.pipeline_models import PipelineResult, RootAccessError
from cntxtify.domain.selection_models import GeneratorConfig
from cntxtify.infra.fs import normalize_path, write_text_file
from cntxtify.infra.logging import LoggingConfig, configure_logging, get_logger
from cntxtify.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (stderr, optional rotating file)
    configure_logging(LoggingConfig.for_cli(debug=args.debug, log_file=args.log_file))

    # 3. Settings hierarchy: defaults < settings file < CLI flags
    settings = load_settings(args.settings_file)
    settings.update(cli_args.args_to_overrides(args))
    clean_settings, warnings = validate_settings(settings, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    root_path = normalize_path(args.root, os.getcwd())
    if not os.path.isdir(root_path):
        _print_error(f"Project root does not exist or is not a directory: {root_path}")
        return EXIT_INVALID_INPUT

    try:
        if args.command == "scan":
            return _run_scan(args, root_path, clean_settings)
        return _run_generate(args, root_path, clean_settings)
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except RootAccessError as e:
        _print_error(str(e))
        return EXIT_INVALID_INPUT
    except Exception as e:
        logger.critical(f"Pipeline failure: {e}", exc_info=True)
        _print_error(f"Pipeline failure: {e}")
        return EXIT_FAILURE

# -----------------------------------------------------------------------------
# SUBCOMMANDS
# -----------------------------------------------------------------------------

def _run_scan(args: argparse.Namespace, root_path: str, settings: Dict[str, Any]) -> int:
    nodes = scan_project(root_path, settings)
    if args.print_tree:
        text = render_tree(nodes, resolve_tree(nodes, {}), TREE_STYLE_BOX)
        if text:
            print(text)
    else:
        print(json.dumps(summarize_scan(nodes).to_dict(), ensure_ascii=False, indent=2))
    return EXIT_OK


def _run_generate(args: argparse.Namespace, root_path: str, settings: Dict[str, Any]) -> int:
    config = _build_generator_config(args, root_path, settings)
    if config is None:
        return EXIT_INVALID_INPUT

    result = run_pipeline(root_path, config, settings)
    if not result.ok or result.result is None:
        _print_error(result.error)
        return EXIT_INVALID_INPUT

    if args.json_output:
        payload = json.dumps(result.result.to_dict(), ensure_ascii=False, indent=2) + "\n"
    else:
        payload = result.result.output

    if args.output_file:
        try:
            written = write_text_file(args.output_file, payload)
        except OSError as e:
            _print_error(f"Cannot write output file '{args.output_file}': {e}")
            return EXIT_FAILURE
        print(f"Context written to: {written}", file=sys.stderr)
    else:
        sys.stdout.write(payload)
        sys.stdout.flush()

    _print_report(result, args.model)
    return EXIT_OK

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _build_generator_config(
        args: argparse.Namespace,
        root_path: str,
        settings: Dict[str, Any],
) -> Optional[GeneratorConfig]:
    """
    Combine the JSON selection payload with the command-line rules.

    Per-path selections from ``--config-json`` take precedence over the
    entries expanded from ``--hide`` / ``--tree-only`` rules.

    Returns:
        Optional[GeneratorConfig]: The merged config, or None on unreadable input.
    """
    payload = None
    if args.config_json:
        try:
            with open(args.config_json, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            _print_error(f"Cannot load selection config '{args.config_json}': {e}")
            return None

    config, warnings = parse_generator_config(payload, strict=False)
    for w in warnings:
        logger.warning(f"Selection Constraint: {w}")

    selections = dict(config.selections)
    if args.hide_rules or args.tree_only_rules:
        nodes = scan_project(root_path, settings)
        folder_rules, ext_rules = cli_args.args_to_rules(args, summarize_scan(nodes).folders)
        rule_selections = selections_from_rules(nodes, folder_rules, ext_rules)
        rule_selections.update(selections)
        selections = rule_selections

    user_prompt = args.user_prompt if args.user_prompt is not None else config.user_prompt

    return GeneratorConfig(
        selections=selections,
        user_prompt=user_prompt,
        include_readme=config.include_readme or args.include_readme,
    )

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_report(result: PipelineResult, model: Optional[str]) -> None:
    """
    Print the run summary to stderr.

    Args:
        result: Successful pipeline result.
        model: Optional model name for a model-aware count.
    """
    summary = result.summary
    out = sys.stderr

    print(f"Estimated tokens: {result.result.token_count:,}", file=out)
    if result.tier:
        print(f"Context size: {result.tier.label} ({result.tier.hint})", file=out)
    if model:
        print(f"Tokens for {model}: {count_tokens(result.result.output, model):,}", file=out)

    stats_keys = {
        "files_included": "Files included",
        "files_skipped": "Files skipped",
        "errors": "Read errors",
    }
    for key, label in stats_keys.items():
        if key in summary:
            print(f"{label}: {summary[key]}", file=out)

    for rel_path in summary.get("read_failures", []):
        print(f"  - unreadable: {rel_path}", file=out)


def _print_error(msg: str) -> None:
    logger.error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
