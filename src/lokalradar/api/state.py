"""
In-process analysis state shared by the API routes.

Holds the current Dataset, the last clustering result and the export
snapshot. Ingest replaces the whole state; routes never mutate a Dataset.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from lokalradar.analysis.dataset import Dataset
from lokalradar.clustering.engine import ClusteringResult
from lokalradar.config import Settings
from lokalradar.exceptions import DatasetNotLoadedError
from lokalradar.pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportSnapshot:
    """The last event list returned to a client, kept for export."""

    items: tuple[dict[str, Any], ...]
    query: dict[str, Any]
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": list(self.items),
            "count": len(self.items),
            "query": self.query,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class AnalysisState:
    """Everything the API knows between requests."""

    pipeline: AnalysisPipeline
    dataset: Optional[Dataset] = None
    clustering: Optional[ClusteringResult] = None
    snapshot: Optional[ExportSnapshot] = None
    ingested_at: Optional[datetime] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "AnalysisState":
        return cls(pipeline=AnalysisPipeline(config))

    @property
    def has_dataset(self) -> bool:
        return self.dataset is not None

    def require_dataset(self) -> Dataset:
        if self.dataset is None:
            raise DatasetNotLoadedError("No extracts have been ingested yet")
        return self.dataset

    def replace_dataset(self, dataset: Dataset) -> None:
        """Install a freshly built dataset and drop everything derived from the old one."""
        self.dataset = dataset
        self.clustering = None
        self.snapshot = None
        self.ingested_at = datetime.now(timezone.utc)
        logger.info(f"Dataset replaced: {dataset.statistics.total_companies} companies")

    def record_snapshot(self, items: list, query: dict[str, Any]) -> None:
        self.snapshot = ExportSnapshot(
            items=tuple(item.to_dict() for item in items),
            query=query,
            created_at=datetime.now(timezone.utc),
        )
