"""
Label files and picking rows for a human to label.
"""

import csv
import json
from pathlib import Path
from typing import Mapping, Optional, Sequence

import numpy as np

DEFAULT_SAMPLE_SIZE = 8


def load_labels(source: str | Path) -> dict[str, str]:
    """
    Load an identifier -> label map.

    Supported formats:
    - .json: {"id": "label", ...} or [{"id": ..., "label": ...}, ...]
    - .csv: columns "id" (or "identifier") and "label"

    Blank labels are dropped.
    """
    path = Path(source)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() == ".csv":
        with open(path, newline="") as f:
            records = list(csv.DictReader(f))
    else:
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict):
            return {str(k): str(v).strip() for k, v in data.items() if v is not None and str(v).strip()}
        if not isinstance(data, list):
            raise ValueError(f"Unexpected label format in {path}")
        records = data

    labels = {}
    for record in records:
        identifier = record.get("id", record.get("identifier"))
        label = record.get("label")
        if identifier is None:
            raise ValueError(f"Label record without an id in {path}: {record}")
        if label is not None and str(label).strip():
            labels[str(identifier)] = str(label).strip()
    return labels


def select_for_labeling(
    ids: Sequence[str],
    n: int = DEFAULT_SAMPLE_SIZE,
    labels: Optional[Mapping[str, str]] = None,
    seed: Optional[int] = None,
) -> list[int]:
    """
    Pick up to n random unlabeled rows to show to a labeler.

    Returns row indices in random order.
    """
    labels = labels or {}
    candidates = [i for i, identifier in enumerate(ids) if not labels.get(identifier)]

    rng = np.random.default_rng(seed)
    picked = rng.permutation(len(candidates))[:n]
    return [candidates[i] for i in picked]
