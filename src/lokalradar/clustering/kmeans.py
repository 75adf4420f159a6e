"""
k-means with k-means++ seeding.

Seeding and empty-cluster reseeding draw from an injected numpy Generator,
so a fixed seed reproduces a run exactly.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Distance between two feature vectors of equal dimension."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Feature dimension mismatch: {a.shape} vs {b.shape}")
    return float(np.sqrt(np.sum((a - b) ** 2)))


@dataclass
class KMeansResult:
    """Converged (or capped) partition of the input points."""

    assignments: np.ndarray  # Cluster index per point
    centroids: np.ndarray  # Shape (k, dimensions)
    iterations: int
    converged: bool


class KMeans:
    """
    Lloyd's algorithm over a dense feature matrix.

    Iterates assign -> update until no point changes cluster between two
    consecutive iterations, or until max_iterations.
    """

    DEFAULT_MAX_ITERATIONS = 100

    def __init__(
        self,
        k: int,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        if max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self.k = k
        self.max_iterations = max_iterations
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def fit(self, points: np.ndarray) -> KMeansResult:
        """
        Partition points into k clusters.

        Args:
            points: Matrix of shape (n, dimensions) with n >= k

        Returns:
            Assignments, final centroids and convergence info
        """
        points = self._check_points(points)

        centroids = self.init_centroids(points)
        assignments = np.full(len(points), -1, dtype=int)
        converged = False
        iterations = 0

        while not converged and iterations < self.max_iterations:
            new_assignments = self.assign(points, centroids)
            converged = bool(np.array_equal(new_assignments, assignments))
            assignments = new_assignments
            centroids = self.update_centroids(points, assignments)
            iterations += 1

        logger.debug(f"k-means k={self.k} n={len(points)}: {iterations} iterations, converged={converged}")
        return KMeansResult(
            assignments=assignments,
            centroids=centroids,
            iterations=iterations,
            converged=converged,
        )

    def init_centroids(self, points: np.ndarray) -> np.ndarray:
        """
        k-means++ seeding.

        The first centroid is a uniformly random point. Each further one is
        drawn with probability proportional to the squared distance to the
        nearest centroid chosen so far (roulette wheel over the cumulative
        distribution).
        """
        n = len(points)
        centroids = [points[self.rng.integers(n)].copy()]

        for _ in range(1, self.k):
            chosen = np.asarray(centroids)
            squared = ((points[:, None, :] - chosen[None, :, :]) ** 2).sum(axis=2)
            nearest = squared.min(axis=1)

            threshold = self.rng.random() * nearest.sum()
            index = int(np.searchsorted(np.cumsum(nearest), threshold, side="left"))
            centroids.append(points[min(index, n - 1)].copy())

        return np.asarray(centroids, dtype=float)

    def assign(self, points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """Index of the nearest centroid for every point (first one on ties)."""
        if points.shape[1] != centroids.shape[1]:
            raise ValueError(
                f"Feature dimension mismatch: points {points.shape[1]}, "
                f"centroids {centroids.shape[1]}"
            )
        distances = np.linalg.norm(points[:, None, :] - centroids[None, :, :], axis=2)
        return distances.argmin(axis=1)

    def update_centroids(self, points: np.ndarray, assignments: np.ndarray) -> np.ndarray:
        """
        Component-wise mean of each cluster's points.

        An empty cluster is reseeded with a random point.
        """
        centroids = np.empty((self.k, points.shape[1]), dtype=float)
        for cluster_id in range(self.k):
            members = points[assignments == cluster_id]
            if len(members):
                centroids[cluster_id] = members.mean(axis=0)
            else:
                centroids[cluster_id] = points[self.rng.integers(len(points))]
        return centroids

    def _check_points(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=float)
        if points.ndim != 2:
            raise ValueError(f"Expected a 2-D feature matrix, got {points.ndim} dimensions")
        if len(points) < self.k:
            raise ValueError(f"Need at least k={self.k} points, got {len(points)}")
        if not np.isfinite(points).all():
            raise ValueError("Feature matrix contains non-finite values")
        return points
