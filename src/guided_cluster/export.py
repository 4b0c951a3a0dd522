"""
Export analysis results as JSON or CSV.
"""

import csv
import io
import json
from datetime import datetime, timezone
from typing import Optional

from .pipeline import AnalysisResult


def export_json(result: AnalysisResult, timestamp: Optional[datetime] = None) -> str:
    """Clusters and statistics with an ISO timestamp."""
    timestamp = timestamp or datetime.now(timezone.utc)
    data = {
        "clusters": result.clusters_list(),
        "statistics": result.statistics_dict(),
        "timestamp": timestamp.isoformat(),
    }
    return json.dumps(data, indent=2)


def export_csv(result: AnalysisResult) -> str:
    """One row per item: identifier, "Cluster <n>" (1-based) and original label."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Identifier", "Cluster", "Original_Label"])
    for group in result.clusters:
        for item in group.items:
            writer.writerow([item.identifier, f"Cluster {group.id + 1}", item.label or "Unlabeled"])
    return buffer.getvalue()
