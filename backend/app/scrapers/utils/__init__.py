"""Scraper utilities for text cleanup and label normalization."""

from .normalizer import (
    LabelNormalizer,
    clean_text,
    node_text,
    split_info_text,
    strip_context_suffix,
    INFO_SEPARATOR,
    CONTEXT_SUFFIX,
)


__all__ = [
    "LabelNormalizer",
    "clean_text",
    "node_text",
    "split_info_text",
    "strip_context_suffix",
    "INFO_SEPARATOR",
    "CONTEXT_SUFFIX",
]
