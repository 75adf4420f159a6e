"""
Clustering and relocation risk scoring.

- k-means with k-means++ seeding on four move metrics
- Fixed decision table mapping cluster statistics to risk tiers
- Banded 0-100 relocation risk score per mover
"""

from lokalradar.clustering.kmeans import KMeans, KMeansResult, euclidean_distance
from lokalradar.clustering.engine import (
    CLUSTER_PROFILES,
    FEATURE_NAMES,
    Cluster,
    ClusterMember,
    ClusterProfile,
    ClusterStats,
    ClusteringEngine,
    ClusteringResult,
    RiskTier,
    label_cluster,
)
from lokalradar.clustering.risk import (
    RelocationRiskScorer,
    RiskFactors,
    ScoredMember,
)

__all__ = [
    # k-means
    "KMeans",
    "KMeansResult",
    "euclidean_distance",
    # Clustering
    "CLUSTER_PROFILES",
    "FEATURE_NAMES",
    "Cluster",
    "ClusterMember",
    "ClusterProfile",
    "ClusterStats",
    "ClusteringEngine",
    "ClusteringResult",
    "RiskTier",
    "label_cluster",
    # Risk scoring
    "RelocationRiskScorer",
    "RiskFactors",
    "ScoredMember",
]
