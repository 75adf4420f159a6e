"""
Relocation clustering.

Groups recent movers into k clusters on four move metrics and labels each
cluster with a risk tier from a fixed decision table on its statistics.

Feature vector (fixed order):
    [years_since_move, employee_change / 100, change_percent / 100, employees_now / 100]

Statistics and labels are computed on the unscaled metric values.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

import numpy as np

from lokalradar.analysis.metrics import MoveMetrics, MovedItem, metrics_for
from lokalradar.clustering.kmeans import KMeans
from lokalradar.exceptions import FailureReason

logger = logging.getLogger(__name__)


FEATURE_NAMES = ("years_since_move", "employee_change", "change_percent", "employees_now")
FEATURE_SCALE = np.array([1.0, 100.0, 100.0, 100.0])

DEFAULT_CLUSTER_COUNT = 4


class RiskTier(str, Enum):
    """Risk tier assigned to a cluster."""

    HIGH = "high"
    MEDIUM = "medium"
    GROWTH = "growth"
    DECLINE = "decline"
    LOW = "low"


@dataclass(frozen=True)
class ClusterProfile:
    """Display label for a risk tier."""

    tier: RiskTier
    label: str
    description: str
    color: str


CLUSTER_PROFILES = {
    RiskTier.HIGH: ClusterProfile(
        tier=RiskTier.HIGH,
        label="High risk - lease expiring",
        description="Moved long ago with a large change in headcount",
        color="#ef4444",
    ),
    RiskTier.MEDIUM: ClusterProfile(
        tier=RiskTier.MEDIUM,
        label="Medium risk - potential need",
        description="Moderate time since the move with a significant change",
        color="#f59e0b",
    ),
    RiskTier.GROWTH: ClusterProfile(
        tier=RiskTier.GROWTH,
        label="High growth - expansion",
        description="Strong growth, may need larger premises soon",
        color="#10b981",
    ),
    RiskTier.DECLINE: ClusterProfile(
        tier=RiskTier.DECLINE,
        label="Decline - downsizing",
        description="Shrinking headcount, may need smaller premises",
        color="#3b82f6",
    ),
    RiskTier.LOW: ClusterProfile(
        tier=RiskTier.LOW,
        label="Stable - low risk",
        description="Stable conditions, a move is unlikely",
        color="#6b7280",
    ),
}


@dataclass
class ClusterStats:
    """Aggregate statistics over a cluster's unscaled metrics."""

    avg_years_since_move: float
    avg_change: float
    avg_percent_change: float
    avg_size: float
    median_change: float
    std_dev_change: float

    @classmethod
    def from_metrics(cls, metrics: Sequence[MoveMetrics]) -> "ClusterStats":
        if not metrics:
            return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

        values = np.array([m.as_tuple() for m in metrics], dtype=float)
        changes = values[:, 1]
        return cls(
            avg_years_since_move=float(values[:, 0].mean()),
            avg_change=float(changes.mean()),
            avg_percent_change=float(values[:, 2].mean()),
            avg_size=float(values[:, 3].mean()),
            median_change=float(np.median(changes)),
            std_dev_change=float(changes.std()),
        )

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "avg_years_since_move": self.avg_years_since_move,
            "avg_change": self.avg_change,
            "avg_percent_change": self.avg_percent_change,
            "avg_size": self.avg_size,
            "median_change": self.median_change,
            "std_dev_change": self.std_dev_change,
        }


def label_cluster(stats: ClusterStats) -> ClusterProfile:
    """
    Decision table, first match wins:

    1. >= 7 years since move and |mean % change| > 30 -> high
    2. >= 5 years since move and |mean % change| > 15 -> medium
    3. mean % change > 50 -> growth
    4. mean % change < -30 -> decline
    5. otherwise -> low
    """
    years = stats.avg_years_since_move
    percent = stats.avg_percent_change

    if years >= 7 and abs(percent) > 30:
        return CLUSTER_PROFILES[RiskTier.HIGH]
    if years >= 5 and abs(percent) > 15:
        return CLUSTER_PROFILES[RiskTier.MEDIUM]
    if percent > 50:
        return CLUSTER_PROFILES[RiskTier.GROWTH]
    if percent < -30:
        return CLUSTER_PROFILES[RiskTier.DECLINE]
    return CLUSTER_PROFILES[RiskTier.LOW]


@dataclass
class ClusterMember:
    """One clustered item and the metrics it was clustered on."""

    item: MovedItem
    metrics: MoveMetrics
    cluster_id: int = -1

    @property
    def orgnr(self) -> str:
        return self.item.orgnr

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def years_since_move(self) -> int:
        return self.metrics.years_since_move

    def features(self) -> np.ndarray:
        return np.array(self.metrics.as_tuple(), dtype=float) / FEATURE_SCALE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            **self.item.to_dict(),
            "cluster_id": self.cluster_id,
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class Cluster:
    """A labelled group of movers."""

    id: int
    members: list[ClusterMember]
    centroid: list[float]
    stats: ClusterStats
    profile: ClusterProfile

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def risk(self) -> RiskTier:
        return self.profile.tier

    @property
    def label(self) -> str:
        return self.profile.label

    @property
    def color(self) -> str:
        return self.profile.color

    def summary(self) -> dict[str, Any]:
        """Label, size and statistics without the member list."""
        return {
            "id": self.id,
            "label": self.profile.label,
            "description": self.profile.description,
            "size": self.size,
            "color": self.profile.color,
            "risk": self.profile.tier.value,
            "stats": self.stats.to_dict(),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            **self.summary(),
            "centroid": self.centroid,
            "members": [m.to_dict() for m in self.members],
        }


@dataclass
class ClusteringResult:
    """Result of one clustering run; empty when there was not enough data."""

    clusters: list[Cluster] = field(default_factory=list)
    k: int = DEFAULT_CLUSTER_COUNT
    total_items: int = 0
    excluded_items: int = 0  # Dropped for non-finite features
    iterations: int = 0
    converged: bool = False
    reason: Optional[FailureReason] = None

    @property
    def is_empty(self) -> bool:
        return not self.clusters

    @property
    def clustered_items(self) -> int:
        return sum(c.size for c in self.clusters)

    def members(self) -> list[ClusterMember]:
        return [m for c in self.clusters for m in c.members]

    def get_cluster(self, cluster_id: int) -> Optional[Cluster]:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    def find_cluster(self, tier: RiskTier) -> Optional[Cluster]:
        """First cluster labelled with the given tier."""
        for cluster in self.clusters:
            if cluster.risk == tier:
                return cluster
        return None

    def overview(self) -> dict[str, Any]:
        """Size-weighted averages across all clusters plus tier lookup."""
        total = self.clustered_items
        if total == 0:
            return {
                "total_companies": 0,
                "avg_years_since_move": 0.0,
                "avg_change": 0.0,
                "clusters_by_risk": {},
            }

        avg_years = sum(c.stats.avg_years_since_move * c.size for c in self.clusters) / total
        avg_change = sum(c.stats.avg_change * c.size for c in self.clusters) / total
        by_risk = {}
        for tier in RiskTier:
            cluster = self.find_cluster(tier)
            if cluster is not None:
                by_risk[tier.value] = cluster.id

        return {
            "total_companies": total,
            "avg_years_since_move": avg_years,
            "avg_change": avg_change,
            "clusters_by_risk": by_risk,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "k": self.k,
            "total_items": self.total_items,
            "excluded_items": self.excluded_items,
            "iterations": self.iterations,
            "converged": self.converged,
            "reason": self.reason.value if self.reason else None,
            "overview": self.overview(),
            "clusters": [c.to_dict() for c in self.clusters],
        }


class ClusteringEngine:
    """
    Cluster movers into labelled risk groups.

    The random source is injectable; pass `seed` or `rng` for reproducible
    runs. Without either, centroid seeding differs between runs.
    """

    def __init__(
        self,
        k: int = DEFAULT_CLUSTER_COUNT,
        max_iterations: int = KMeans.DEFAULT_MAX_ITERATIONS,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        self.k = k
        self.max_iterations = max_iterations
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def extract_members(
        self,
        items: Sequence[MovedItem],
        reference_year: Optional[int] = None,
    ) -> tuple[list[ClusterMember], int]:
        """
        Build members for every item with finite metrics.

        Returns:
            Usable members and the number of excluded items
        """
        members = []
        excluded = 0
        for item in items:
            metrics = metrics_for(item, reference_year)
            if not metrics.is_finite:
                excluded += 1
                continue
            members.append(ClusterMember(item=item, metrics=metrics))
        return members, excluded

    def cluster(
        self,
        items: Sequence[MovedItem],
        reference_year: Optional[int] = None,
    ) -> ClusteringResult:
        """
        Partition items into k labelled clusters.

        Args:
            items: Events or candidates, already restricted to the wanted years
            reference_year: Needed only for plain address-change events

        Returns:
            ClusteringResult; empty with reason NOT_ENOUGH_DATA when fewer
            than k items have finite features
        """
        members, excluded = self.extract_members(items, reference_year)

        if len(members) < self.k:
            logger.warning(
                f"Not enough data for clustering: {len(members)} usable items, k={self.k} "
                f"({excluded} excluded for non-finite features)"
            )
            return ClusteringResult(
                k=self.k,
                total_items=len(items),
                excluded_items=excluded,
                reason=FailureReason.NOT_ENOUGH_DATA,
            )

        points = np.vstack([m.features() for m in members])
        kmeans = KMeans(self.k, max_iterations=self.max_iterations, rng=self.rng)
        fitted = kmeans.fit(points)

        for member, cluster_id in zip(members, fitted.assignments):
            member.cluster_id = int(cluster_id)

        clusters = []
        for cluster_id in range(self.k):
            cluster_members = [m for m in members if m.cluster_id == cluster_id]
            if not cluster_members:
                continue
            stats = ClusterStats.from_metrics([m.metrics for m in cluster_members])
            clusters.append(
                Cluster(
                    id=cluster_id,
                    members=cluster_members,
                    centroid=[float(v) for v in fitted.centroids[cluster_id]],
                    stats=stats,
                    profile=label_cluster(stats),
                )
            )

        logger.info(
            f"Clustered {len(members)} items into {len(clusters)} clusters "
            f"in {fitted.iterations} iterations (converged={fitted.converged})"
        )
        return ClusteringResult(
            clusters=clusters,
            k=self.k,
            total_items=len(items),
            excluded_items=excluded,
            iterations=fitted.iterations,
            converged=fitted.converged,
        )
