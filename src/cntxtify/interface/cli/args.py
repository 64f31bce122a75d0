from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the ``generate`` and ``scan``
subcommands and translates parsed namespaces into settings overrides and
folder/extension selection rules.
"""

import argparse
from typing import Any, Dict, Iterable, List, Optional, Tuple

from cntxtify.domain.constants import APP_NAME, TREE_STYLES
from cntxtify.domain.selection_models import SelectionEntry, normalize_rel_path

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the cntxtify CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Assemble a project's structure and sources into one LLM context.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    # --- generate ---
    gen = sub.add_parser("generate", help="Assemble the context artifact.")
    gen.add_argument("root", help="Project root directory.")
    gen.add_argument(
        "--config-json",
        dest="config_json",
        default=None,
        help="JSON file with selections, userPrompt and includeReadme.",
    )
    gen.add_argument(
        "--prompt",
        dest="user_prompt",
        default=None,
        help="Instructions placed at the top of the context.",
    )
    gen.add_argument(
        "--readme",
        dest="include_readme",
        action="store_true",
        help="Embed the project README.",
    )
    gen.add_argument(
        "--hide",
        dest="hide_rules",
        action="append",
        default=[],
        metavar="RULE",
        help="Exclude a folder path or an extension (e.g. '.md' or '*.md') from tree and content.",
    )
    gen.add_argument(
        "--tree-only",
        dest="tree_only_rules",
        action="append",
        default=[],
        metavar="RULE",
        help="Keep a folder path or an extension (e.g. '*.md') in the tree but omit its content.",
    )
    gen.add_argument(
        "--model",
        dest="model",
        default=None,
        help="Also report a model-aware token count (e.g. gpt-4o).",
    )
    gen.add_argument(
        "-o", "--output",
        dest="output_file",
        default=None,
        help="Write the artifact to a file instead of stdout.",
    )
    gen.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print {\"output\", \"tokens\"} as JSON.",
    )
    _add_filter_arguments(gen)
    gen.add_argument(
        "--tree-style",
        dest="tree_style",
        choices=TREE_STYLES,
        default=None,
        help="Rendering of the structure section.",
    )
    _add_runtime_arguments(gen)

    # --- scan ---
    scan = sub.add_parser("scan", help="Print the folders and extensions of a project.")
    scan.add_argument("root", help="Project root directory.")
    scan.add_argument(
        "--tree",
        dest="print_tree",
        action="store_true",
        help="Print the box-drawing tree instead of the JSON probe.",
    )
    _add_filter_arguments(scan)
    _add_runtime_arguments(scan)

    return p


def _add_filter_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--max-file-bytes",
        dest="max_file_bytes",
        type=int,
        default=None,
        help="Skip file contents larger than N bytes.",
    )
    p.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Ignore local .gitignore rules.",
    )
    p.add_argument(
        "--exclude",
        dest="exclude_patterns",
        default=None,
        help="Comma-separated regexes matched against entry names.",
    )


def _add_runtime_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--settings",
        dest="settings_file",
        default=None,
        help="Settings JSON file (defaults to the per-user settings).",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write diagnostics to a rotating log file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into settings overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Only the settings explicitly set on the command line.
    """
    overrides: Dict[str, Any] = {}

    if getattr(args, "tree_style", None):
        overrides["tree_style"] = args.tree_style
    if args.max_file_bytes is not None:
        overrides["max_file_bytes"] = args.max_file_bytes
    if args.exclude_patterns:
        overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)
    if args.no_gitignore:
        overrides["respect_gitignore"] = False

    return overrides


def args_to_rules(
        args: argparse.Namespace,
        folders: Optional[Iterable[str]] = None,
) -> Tuple[Dict[str, SelectionEntry], Dict[str, SelectionEntry]]:
    """
    Split ``--hide`` and ``--tree-only`` values into folder and extension rules.

    A value naming a scanned folder (``.github``, ``docs``) is a folder
    rule. ``*.ext`` is always an extension rule. Any other value starting
    with '.' and holding no separator is an extension, anything else a
    folder path. When both flags name the same target, hiding wins.

    Args:
        args: Parsed ``generate`` arguments.
        folders: Relative paths of the scanned folders.

    Returns:
        Tuple[Dict, Dict]: (folder rules, extension rules).
    """
    known_folders = set(folders or ())
    folder_rules: Dict[str, SelectionEntry] = {}
    ext_rules: Dict[str, SelectionEntry] = {}

    tree_only = SelectionEntry(include_in_tree=True, include_content=False)
    hidden = SelectionEntry(include_in_tree=False, include_content=False)

    for values, entry in ((args.tree_only_rules, tree_only), (args.hide_rules, hidden)):
        for raw in values:
            rule = raw.strip()
            if not rule:
                continue

            if rule.startswith("*."):
                ext_rules[rule[1:].lower()] = entry
                continue

            path = normalize_rel_path(rule)
            if path in known_folders:
                folder_rules[path] = entry
            elif rule.startswith(".") and "/" not in rule and "\\" not in rule:
                ext_rules[rule.lower()] = entry
            elif path:
                folder_rules[path] = entry

    return folder_rules, ext_rules

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
