"""Data normalization utilities for decorated text fields.

The catalog pages render most values as human-readable labels
("5.2GB", "128K", "1 month ago"). These helpers clean scraped text and turn
size/context labels into comparable numbers.
"""

import re
from typing import List, Optional

from bs4.element import Tag


INFO_SEPARATOR = "·"
CONTEXT_SUFFIX = "context window"

_WHITESPACE_RE = re.compile(r"\s+")
_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?|\.\d+)\s*([KMGT]B)?", re.IGNORECASE)
_CONTEXT_RE = re.compile(r"(\d+(?:\.\d+)?)(?:\s?([KM])(?![A-Za-z]))?", re.IGNORECASE)


def clean_text(value: Optional[str]) -> str:
    """Trim a string and collapse internal whitespace runs to one space."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def node_text(node: Optional[Tag]) -> str:
    """Cleaned text content of a node, or "" when the node is missing."""
    if node is None:
        return ""
    return clean_text(node.get_text())


def split_info_text(info: str) -> List[str]:
    """Split a "5.2GB · 128K context window · Text · 1 month ago" line.

    Args:
        info: Raw info line from the mobile layout

    Returns:
        Trimmed parts in order (may contain empty strings)
    """
    return [clean_text(part) for part in info.split(INFO_SEPARATOR)]


def strip_context_suffix(value: str) -> str:
    """Remove the first "context window" label from a context value."""
    return value.replace(CONTEXT_SUFFIX, "", 1).strip()


class LabelNormalizer:
    """Convert size and context labels to comparable numbers."""

    SIZE_MULTIPLIERS = {
        "TB": 1000.0,
        "GB": 1.0,
        "MB": 1.0 / 1000,
        "KB": 1.0 / 1_000_000,
    }

    @staticmethod
    def parse_size(size: Optional[str]) -> float:
        """Parse a download size label into gigabytes.

        Examples:
            "5.2GB" -> 5.2
            "1.1TB" -> 1100.0
            "274MB" -> 0.274
            "" -> 0.0

        Args:
            size: Size label

        Returns:
            Size in GB, 0.0 when nothing parseable is present
        """
        if not size:
            return 0.0

        match = _SIZE_RE.search(size)
        if not match:
            return 0.0

        value = float(match.group(1))
        unit = (match.group(2) or "GB").upper()
        return value * LabelNormalizer.SIZE_MULTIPLIERS.get(unit, 1.0)

    @staticmethod
    def parse_context(context: Optional[str]) -> float:
        """Parse a context window label into thousands of tokens.

        Examples:
            "128K" -> 128.0
            "1M" -> 1000.0
            "2048" -> 2.048

        Args:
            context: Context label

        Returns:
            Context size in K tokens, 0.0 when nothing parseable is present
        """
        if not context:
            return 0.0

        match = _CONTEXT_RE.search(context)
        if not match:
            return 0.0

        value = float(match.group(1))
        unit = (match.group(2) or "").upper()
        if unit == "K":
            return value
        if unit == "M":
            return value * 1000
        return value / 1000
