"""
Load embeddings from various file formats.
"""

import csv
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .errors import ValidationError

logger = logging.getLogger(__name__)

ID_KEYS = ("id", "identifier")
TEXT_KEYS = ("text", "content", "description")
VECTOR_KEYS = ("embedding", "vector", "values")
NON_VECTOR_COLUMNS = {"id", "identifier", "text", "content", "description", "label"}


@dataclass
class EmbeddingSet:
    """A set of embeddings with optional metadata."""
    vectors: np.ndarray  # Shape: (n_samples, dimensions)
    ids: Optional[list[str]] = None
    texts: Optional[list[str]] = None
    metadata: dict = field(default_factory=dict)

    @property
    def n_vectors(self) -> int:
        """Number of vectors in the set."""
        return self.vectors.shape[0]

    @property
    def dimensions(self) -> int:
        """Dimensionality of vectors."""
        return self.vectors.shape[1]

    def get_text(self, index: int) -> Optional[str]:
        """Get the source text for a vector."""
        if self.texts and index < len(self.texts):
            return self.texts[index]
        return None

    def get_id(self, index: int) -> str:
        """Get the ID for a vector."""
        if self.ids and index < len(self.ids):
            return self.ids[index]
        return str(index)

    @property
    def identifiers(self) -> list[str]:
        """IDs for every row, falling back to the row index."""
        return [self.get_id(i) for i in range(self.n_vectors)]


def as_matrix(rows) -> np.ndarray:
    """
    Convert a sequence of vectors into a float64 (n, d) matrix.

    Raises ValidationError if the rows do not all have the same length.
    """
    if isinstance(rows, np.ndarray):
        matrix = rows.astype(np.float64, copy=False)
    else:
        rows = list(rows)
        lengths = {len(row) for row in rows}
        if len(lengths) > 1:
            raise ValidationError(
                f"all embeddings must have the same length, got lengths {sorted(lengths)}"
            )
        matrix = np.array(rows, dtype=np.float64)
        if not rows:
            matrix = matrix.reshape(0, 0)

    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1) if matrix.size else matrix.reshape(0, 0)
    if matrix.ndim != 2:
        raise ValidationError(f"embeddings must be a 2D matrix, got {matrix.ndim} dimensions")
    return matrix


def load_embeddings(source: str | Path) -> EmbeddingSet:
    """
    Load embeddings from various file formats.

    Supported formats:
    - .npy: NumPy array file
    - .npz: NumPy compressed archive (optional "ids" and "texts" arrays)
    - .json/.jsonl: JSON with embeddings
    - .csv: CSV with numeric columns

    Args:
        source: Path to embedding file

    Returns:
        EmbeddingSet with loaded vectors
    """
    path = Path(source)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()

    if suffix == ".npy":
        embeddings = load_numpy(path)
    elif suffix == ".npz":
        embeddings = load_numpy_compressed(path)
    elif suffix == ".json":
        embeddings = load_json(path)
    elif suffix == ".jsonl":
        embeddings = load_jsonl(path)
    elif suffix == ".csv":
        embeddings = load_csv(path)
    else:
        embeddings = load_auto(path)

    logger.debug(
        "Loaded %d x %d embeddings from %s",
        embeddings.n_vectors, embeddings.dimensions, path,
    )
    return embeddings


def load_numpy(path: Path) -> EmbeddingSet:
    """Load from .npy file."""
    vectors = np.load(path)

    return EmbeddingSet(
        vectors=as_matrix(vectors),
        metadata={"source": str(path), "format": "numpy"},
    )


def load_numpy_compressed(path: Path) -> EmbeddingSet:
    """Load from .npz file."""
    data = np.load(path)

    # Look for common key names
    for key in ["vectors", "embeddings", "data", "arr_0"]:
        if key in data:
            vectors = data[key]
            break
    else:
        vectors = data[list(data.keys())[0]]

    ids = None
    texts = None

    if "ids" in data:
        ids = [str(i) for i in data["ids"].tolist()]
    if "texts" in data:
        texts = data["texts"].tolist()

    return EmbeddingSet(
        vectors=as_matrix(vectors),
        ids=ids,
        texts=texts,
        metadata={"source": str(path), "format": "numpy_compressed"},
    )


def _first(item: dict, keys: Sequence[str]):
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def _from_records(records: list[dict], path: Path, fmt: str) -> EmbeddingSet:
    vectors = []
    ids = []
    texts = []

    for item in records:
        vec = _first(item, VECTOR_KEYS)
        if vec is None:
            raise ValueError(f"Record {len(ids)} in {path} has no embedding")
        vectors.append(vec)
        record_id = _first(item, ID_KEYS)
        ids.append(str(record_id) if record_id is not None else str(len(ids)))
        texts.append(_first(item, TEXT_KEYS))

    return EmbeddingSet(
        vectors=as_matrix(vectors),
        ids=ids,
        texts=texts if any(texts) else None,
        metadata={"source": str(path), "format": fmt},
    )


def load_json(path: Path) -> EmbeddingSet:
    """Load from JSON file."""
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, dict):
        vectors = None
        for key in ["vectors", "embeddings", "data"]:
            if key in data and isinstance(data[key], list):
                vectors = data[key]
                break

        if vectors is None:
            raise ValueError("No vectors found in JSON file")

        ids = data.get("ids") or data.get("identifiers")
        return EmbeddingSet(
            vectors=as_matrix(vectors),
            ids=[str(i) for i in ids] if ids else None,
            texts=data.get("texts"),
            metadata={"source": str(path), "format": "json"},
        )
    elif isinstance(data, list) and data:
        if isinstance(data[0], list):
            return EmbeddingSet(
                vectors=as_matrix(data),
                metadata={"source": str(path), "format": "json"},
            )
        elif isinstance(data[0], dict):
            return _from_records(data, path, "json")

    raise ValueError(f"Unexpected JSON format in {path}")


def load_jsonl(path: Path) -> EmbeddingSet:
    """Load from JSONL file (one JSON object per line)."""
    records = []

    with open(path) as f:
        for line in f:
            if not line.strip():
                continue
            records.append(json.loads(line))

    return _from_records(records, path, "jsonl")


def load_csv(path: Path) -> EmbeddingSet:
    """Load from CSV file: id/text columns plus one numeric column per dimension."""
    vectors = []
    ids = []
    texts = []

    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        headers = reader.fieldnames or []

        vector_cols = [h for h in headers if h.lower() not in NON_VECTOR_COLUMNS]
        if not vector_cols:
            raise ValueError(f"No numeric columns found in {path}")

        for row in reader:
            try:
                vectors.append([float(row[c]) for c in vector_cols])
            except (TypeError, ValueError) as e:
                raise ValueError(f"Non-numeric value in row {len(ids) + 1} of {path}: {e}")
            row_id = _first(row, ID_KEYS)
            ids.append(row_id if row_id else str(len(ids)))
            texts.append(_first(row, TEXT_KEYS))

    return EmbeddingSet(
        vectors=as_matrix(vectors),
        ids=ids,
        texts=texts if any(texts) else None,
        metadata={"source": str(path), "format": "csv"},
    )


def load_auto(path: Path) -> EmbeddingSet:
    """Try to auto-detect format."""
    try:
        return load_numpy(path)
    except (OSError, ValueError):
        pass

    try:
        return load_json(path)
    except (OSError, ValueError):
        pass

    raise ValueError(f"Could not detect format of: {path}")
