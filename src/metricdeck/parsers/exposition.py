"""Parser for the line-oriented exposition text format.

Each non-blank, non-comment line holds one sample::

    http_requests_total{method="post",code="200"} 1027 1395066363000

Lines that do not fit the grammar are skipped without error, so a partly
garbled payload still yields every well-formed sample it contains.
"""

import logging
import re
from typing import Iterable, Optional

from ..sources.base import Metric

logger = logging.getLogger(__name__)

METRIC_NAME_RE = re.compile(r"[A-Za-z_:][A-Za-z0-9_:]*")

# Whitespace, value, optional integer timestamp (discarded).
_SAMPLE_RE = re.compile(
    r"\s+(?P<value>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"
    r"(?:\s+(?P<timestamp>[-+]?\d+))?"
)
_ESCAPE_RE = re.compile(r'\\(["\\])')


def parse_exposition(text: str) -> list[Metric]:
    """Parse exposition text into metrics, in line order."""
    return list(iter_exposition(text.splitlines()))


def iter_exposition(lines: Iterable[str]):
    """Yield a metric for every well-formed line."""
    skipped = 0
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        metric = parse_line(stripped)
        if metric is None:
            skipped += 1
            continue
        yield metric

    if skipped:
        logger.debug(f"Skipped {skipped} malformed exposition line(s)")


def parse_line(line: str) -> Optional[Metric]:
    """Parse a single sample line. Returns None if it does not match."""
    line = line.strip()
    name_match = METRIC_NAME_RE.match(line)
    if name_match is None:
        return None

    pos = name_match.end()
    labels = None
    if line.startswith("{", pos):
        end = _find_label_block_end(line, pos + 1)
        if end < 0:
            return None
        labels = parse_label_set(line[pos + 1:end])
        pos = end + 1

    # Text after the value and timestamp is ignored
    sample = _SAMPLE_RE.match(line, pos)
    if sample is None:
        return None

    return Metric(
        name=name_match.group(0),
        value=float(sample.group("value")),
        labels=labels,
    )


def parse_label_set(raw: str) -> dict[str, str]:
    """
    Parse the inside of a ``{...}`` label block.

    Pairs are split on commas outside quoted values. Values have their
    surrounding quotes removed and ``\\"`` un-escaped. Pairs with an empty
    key are skipped; a repeated key keeps the last value.
    """
    labels: dict[str, str] = {}
    for pair in _split_label_pairs(raw):
        key, _, value = pair.partition("=")
        key = key.strip()
        if not key:
            continue
        labels[key] = _unquote(value.strip())
    return labels


def _find_label_block_end(line: str, start: int) -> int:
    """Index of the ``}`` closing a label block, or -1 if unterminated."""
    in_quotes = False
    escaped = False
    for i in range(start, len(line)):
        ch = line[i]
        if escaped:
            escaped = False
        elif ch == "\\" and in_quotes:
            escaped = True
        elif ch == '"':
            in_quotes = not in_quotes
        elif ch == "}" and not in_quotes:
            return i
    return -1


def _split_label_pairs(raw: str) -> list[str]:
    pairs = []
    current: list[str] = []
    in_quotes = False
    escaped = False

    for ch in raw:
        if escaped:
            escaped = False
        elif ch == "\\" and in_quotes:
            escaped = True
        elif ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            pairs.append("".join(current))
            current = []
            continue
        current.append(ch)

    pairs.append("".join(current))
    return pairs


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1]
    return _ESCAPE_RE.sub(r"\1", value)
