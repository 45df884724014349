"""Parsers - turn loaded content into metric records."""

from ..sources.base import LoadedContent, Metric
from .exposition import parse_exposition, parse_label_set, parse_line
from .json_shapes import normalize_json, parse_json_text


def parse_content(content: LoadedContent) -> list[Metric]:
    """Route content to the JSON normalizer or the exposition parser."""
    if content.is_json:
        return parse_json_text(content.text)
    return parse_exposition(content.text)


__all__ = [
    "parse_content",
    "parse_exposition",
    "parse_label_set",
    "parse_line",
    "normalize_json",
    "parse_json_text",
]
