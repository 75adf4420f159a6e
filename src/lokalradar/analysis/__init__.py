"""
Change analysis over company timelines.

Derives from a built registry:
- Address-change events and their since-move view
- Employee change summaries (first vs. last observation)
- Dataset statistics, including extreme-change flags
- Query helpers used by the API layer
"""

from lokalradar.analysis.changes import (
    NOT_AVAILABLE,
    AddressChangeEvent,
    ChangeAnalysis,
    ChangeAnalyzer,
    EmployeeChangeSummary,
    RelocationCandidate,
    build_candidate,
    format_change_percent,
    is_address_change,
    location_key,
)
from lokalradar.analysis.metrics import (
    AtMove,
    MoveMetrics,
    SinceMove,
    metrics_for,
)
from lokalradar.analysis.statistics import (
    DatasetStatistics,
    compute_statistics,
    is_extreme_change,
)
from lokalradar.analysis.dataset import ChangeDirection, Dataset

__all__ = [
    # Change detection
    "NOT_AVAILABLE",
    "AddressChangeEvent",
    "ChangeAnalysis",
    "ChangeAnalyzer",
    "EmployeeChangeSummary",
    "RelocationCandidate",
    "build_candidate",
    "format_change_percent",
    "is_address_change",
    "location_key",
    # Metrics
    "AtMove",
    "SinceMove",
    "MoveMetrics",
    "metrics_for",
    # Statistics
    "DatasetStatistics",
    "compute_statistics",
    "is_extreme_change",
    # Queries
    "ChangeDirection",
    "Dataset",
]
