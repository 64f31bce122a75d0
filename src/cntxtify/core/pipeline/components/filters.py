from __future__ import annotations

"""
Path Filtering Engine.

Decides which filesystem entries participate in a scan (built-in deny set,
ignore-file glob rules, user exclusion regexes) and which files are
eligible for content aggregation (size and binary guards). A PathFilter
is built once per run and threaded through the scanner and aggregator.
"""

import fnmatch
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from cntxtify.domain.constants import (
    DEFAULT_DENY_NAMES,
    DEFAULT_IGNORE_FILE,
    DEFAULT_MAX_FILE_BYTES,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: Iterable[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded with a warning so a single bad
    user pattern cannot abort the run.

    Args:
        patterns: List of raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            logger.warning(f"Discarding invalid exclusion pattern '{p}': {e}")
    return compiled


def matches_any(name: str, compiled_patterns: Sequence[re.Pattern]) -> bool:
    """
    Verify if a string matches at least one compiled regex pattern.

    Args:
        name: Filename or directory name to evaluate.
        compiled_patterns: Pre-compiled regex objects.

    Returns:
        bool: True if any match is found, False otherwise.
    """
    return any(rx.search(name) for rx in compiled_patterns)

# -----------------------------------------------------------------------------
# IGNORE FILE INTEGRATION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class IgnoreRule:
    """
    One translated ignore-file line.

    Attributes:
        regex: Compiled translation of the glob.
        anchored: Match against the root-relative path instead of the name.
        dir_only: Rule applies to directories only (trailing '/').
    """
    regex: re.Pattern
    anchored: bool
    dir_only: bool

    def matches(self, rel_path: str, name: str, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        target = rel_path if self.anchored else name
        return self.regex.match(target) is not None


def parse_ignore_lines(lines: Iterable[str]) -> List[IgnoreRule]:
    """
    Translate gitignore-style glob lines into ignore rules.

    Blank lines and comments are skipped. Negated patterns ('!') are not
    supported and are skipped.

    Args:
        lines: Raw lines of an ignore file.

    Returns:
        List[IgnoreRule]: Rules in file order.
    """
    rules: List[IgnoreRule] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            logger.debug(f"Negated ignore pattern not supported, skipping: {line}")
            continue

        rule = _glob_to_rule(line)
        if rule:
            rules.append(rule)
    return rules


def load_ignore_rules(root_path: str, file_name: str = DEFAULT_IGNORE_FILE) -> List[IgnoreRule]:
    """
    Parse the ignore file at the project root.

    Args:
        root_path: Directory containing the ignore file.
        file_name: Ignore file name.

    Returns:
        List[IgnoreRule]: Parsed rules, empty if the file is missing or unreadable.
    """
    ignore_path = os.path.join(root_path, file_name)
    if not os.path.isfile(ignore_path):
        return []

    try:
        with open(ignore_path, "r", encoding="utf-8", errors="replace") as f:
            rules = parse_ignore_lines(f)
    except OSError as e:
        logger.warning(f"Could not read ignore file '{ignore_path}': {e}")
        return []

    logger.debug(f"Loaded {len(rules)} rules from {file_name}")
    return rules


def _glob_to_rule(glob_pattern: str) -> Optional[IgnoreRule]:
    """Helper to translate a single glob into an IgnoreRule."""
    dir_only = glob_pattern.endswith("/")
    pattern = glob_pattern.rstrip("/")

    if pattern.startswith("**/"):
        pattern = pattern[3:]
    pattern = pattern.lstrip("/")
    if not pattern:
        return None

    anchored = "/" in pattern or glob_pattern.startswith("/")
    regex = _path_glob_to_regex(pattern) if anchored else fnmatch.translate(pattern)
    return IgnoreRule(
        regex=re.compile(regex),
        anchored=anchored,
        dir_only=dir_only,
    )


def _path_glob_to_regex(pattern: str) -> str:
    """
    Translate a root-relative glob where wildcards stop at '/'.

    '*' and '?' match within one path segment, '**' spans segments and
    '**/' also matches zero leading directories.

    Args:
        pattern: Glob without leading or trailing slashes.

    Returns:
        str: Regex string matching the whole relative path.
    """
    parts: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            parts.append(".*")
            i += 2
            continue

        c = pattern[i]
        if c == "*":
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            end = _class_end(pattern, i)
            if end < 0:
                parts.append(re.escape(c))
            else:
                body = pattern[i + 1:end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                i = end + 1
                continue
        else:
            parts.append(re.escape(c))
        i += 1

    return "(?s:" + "".join(parts) + r")\Z"


def _class_end(pattern: str, start: int) -> int:
    """Index of the ']' closing the character class opened at ``start``, or -1."""
    j = start + 1
    if j < len(pattern) and pattern[j] == "!":
        j += 1
    if j < len(pattern) and pattern[j] == "]":
        j += 1
    return pattern.find("]", j)

# -----------------------------------------------------------------------------
# PATH FILTER
# -----------------------------------------------------------------------------

class PathFilter:
    """
    Scan participation and content eligibility rules for one run.
    """

    def __init__(
            self,
            deny_names: FrozenSet[str] = DEFAULT_DENY_NAMES,
            ignore_rules: Sequence[IgnoreRule] = (),
            exclude_patterns: Sequence[str] = (),
            max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
    ) -> None:
        self.deny_names = frozenset(deny_names)
        self.ignore_rules = tuple(ignore_rules)
        self.exclude_rx = tuple(compile_patterns(exclude_patterns))
        self.max_file_bytes = int(max_file_bytes)

    @classmethod
    def from_settings(cls, root_path: str, settings: Dict[str, Any]) -> "PathFilter":
        """
        Build the filter for a run from validated settings.

        Args:
            root_path: Absolute project root (ignore file location).
            settings: Validated runtime settings.

        Returns:
            PathFilter: Configured filter instance.
        """
        rules: List[IgnoreRule] = []
        if settings.get("respect_gitignore", True):
            rules = load_ignore_rules(root_path, settings.get("ignore_file") or DEFAULT_IGNORE_FILE)

        return cls(
            ignore_rules=rules,
            exclude_patterns=settings.get("exclude_patterns") or [],
            max_file_bytes=settings.get("max_file_bytes", DEFAULT_MAX_FILE_BYTES),
        )

    def includes(self, rel_path: str, is_dir: bool) -> bool:
        """
        Decide whether an entry takes part in the scan at all.

        Args:
            rel_path: '/'-separated path relative to the root.
            is_dir: Whether the entry is a directory.

        Returns:
            bool: False if the entry (and its subtree) must be pruned.
        """
        name = rel_path.rsplit("/", 1)[-1]
        if name in self.deny_names:
            return False
        if matches_any(name, self.exclude_rx):
            return False
        return not any(rule.matches(rel_path, name, is_dir) for rule in self.ignore_rules)

    def exceeds_size(self, size: int) -> bool:
        return self.max_file_bytes > 0 and size > self.max_file_bytes

    @staticmethod
    def is_binary(data: bytes) -> bool:
        return b"\x00" in data

    def allows_content(self, size: int, data: Optional[bytes] = None) -> bool:
        """
        Decide whether a file body may be embedded.

        Args:
            size: File size in bytes.
            data: Raw file bytes, when already read.

        Returns:
            bool: False for oversize or binary files.
        """
        if self.exceeds_size(size):
            return False
        if data is not None and self.is_binary(data):
            return False
        return True
