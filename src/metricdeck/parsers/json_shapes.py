"""Normalizer for JSON metric documents.

Two document shapes are accepted::

    [{"name": "up", "value": 1, "labels": {"job": "api"}}, ...]

    {"up": 1, "queue_depth": {"value": 12, "labels": {"queue": "jobs"}}}

Entries that do not fit are dropped. Any other top-level value yields no
metrics.
"""

import json
import logging
import math
from typing import Any, Optional

from ..sources.base import Metric

logger = logging.getLogger(__name__)


def normalize_json(document: Any) -> list[Metric]:
    """Convert a decoded JSON document into metrics."""
    if isinstance(document, list):
        return _from_sequence(document)
    if isinstance(document, dict):
        return _from_mapping(document)
    return []


def parse_json_text(text: str) -> list[Metric]:
    """Decode JSON text and normalize it. Decoding errors propagate."""
    return normalize_json(json.loads(text))


def _from_sequence(items: list) -> list[Metric]:
    metrics = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        value = item.get("value")
        if not isinstance(name, str) or not _is_number(value):
            continue
        metrics.append(Metric(
            name=name,
            value=float(value),
            labels=_labels(item.get("labels")),
        ))

    dropped = len(items) - len(metrics)
    if dropped:
        logger.debug(f"Dropped {dropped} JSON entries without a string name and numeric value")
    return metrics


def _from_mapping(mapping: dict) -> list[Metric]:
    metrics = []
    for name, value in mapping.items():
        if _is_number(value):
            metrics.append(Metric(name=name, value=float(value)))
        elif isinstance(value, dict):
            number = _to_finite_number(value.get("value"))
            if number is None:
                continue
            metrics.append(Metric(
                name=name,
                value=number,
                labels=_labels(value.get("labels")),
            ))
    return metrics


def _labels(value: Any) -> Optional[dict[str, str]]:
    """Keep non-empty label objects, as strings. Anything else is dropped."""
    if not isinstance(value, dict) or not value:
        return None
    return {str(k): str(v) for k, v in value.items()}


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_finite_number(value: Any) -> Optional[float]:
    """Convert numbers and numeric strings; None if not a finite number."""
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
