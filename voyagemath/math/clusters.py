"""
K-means clustering implementation for voyagemath.

This module provides k-means with k-means++ seeding and Lloyd iteration.
Clusters that lose all their points keep their previous center; they are
not reseeded.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import numpy as np

from voyagemath.errors import OperationCancelled, as_matrix
from voyagemath.utils.general import make_rng

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100


class Cluster:
    """
    Represents a cluster in K-means clustering.
    """

    def __init__(self,
                 center: np.ndarray,
                 members: Optional[List[int]] = None,
                 id: Optional[int] = None):
        """
        Initialize a cluster with a center and optional members.

        Args:
            center: The center of the cluster
            members: Indices of members belonging to the cluster
            id: Index of the cluster
        """
        self.center = np.array(center, dtype=float)
        self.members = [] if members is None else list(members)
        self.id = id

    def add_member(self, idx: int) -> None:
        """
        Add a member to the cluster.

        Args:
            idx: Index of the member to add
        """
        self.members.append(idx)

    def update_center(self, data: np.ndarray) -> None:
        """
        Move the center to the mean of the cluster's members.

        Args:
            data: Data matrix containing all points
        """
        if not self.members:
            # If no members, keep the current center
            return

        self.center = np.mean(data[self.members], axis=0)

    def __repr__(self) -> str:
        """String representation of the cluster."""
        return f"Cluster(id={self.id}, members={len(self.members)})"


class ClusterAssignment:
    """
    Result of a k-means run.
    """

    def __init__(self,
                 labels: np.ndarray,
                 centroids: np.ndarray,
                 inertia: float,
                 iterations: int = 0,
                 converged: bool = True):
        """
        Args:
            labels: Cluster index of every row
            centroids: Cluster centers as rows
            inertia: Sum of distances from each row to its centroid
            iterations: Lloyd iterations performed
            converged: False when the iteration limit was reached first
        """
        self.labels = labels
        self.centroids = centroids
        self.inertia = inertia
        self.iterations = iterations
        self.converged = converged

    @property
    def k(self) -> int:
        return len(self.centroids)

    def cluster_sizes(self) -> List[int]:
        """Number of rows assigned to each cluster index."""
        return np.bincount(self.labels, minlength=self.k).tolist() if self.k else []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            'labels': self.labels.tolist(),
            'centroids': self.centroids.tolist(),
            'inertia': float(self.inertia),
            'iterations': self.iterations,
            'converged': self.converged,
        }

    def __repr__(self) -> str:
        return f"ClusterAssignment(k={self.k}, inertia={self.inertia:.4f}, converged={self.converged})"


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """
    Calculate Euclidean distance between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Euclidean distance
    """
    return float(np.linalg.norm(a - b))


def init_centroids(data: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    Choose k initial centers with k-means++ seeding.

    The first center is a uniformly random row. Every further center is
    drawn with probability proportional to the squared distance from each
    row to its nearest chosen center, or uniformly when all those distances
    are zero.

    Args:
        data: Data matrix
        k: Number of clusters
        rng: Random generator

    Returns:
        Array of k centers (copies of data rows)
    """
    n_points = data.shape[0]

    first_idx = int(rng.integers(n_points))
    centers = [data[first_idx].copy()]

    for _ in range(1, k):
        # Squared distance from every point to its nearest center
        diffs = data[:, None, :] - np.array(centers)[None, :, :]
        sq_dists = np.min(np.sum(diffs ** 2, axis=2), axis=1)
        total = np.sum(sq_dists)

        if total == 0:
            next_idx = int(rng.integers(n_points))
        else:
            cumulative = np.cumsum(sq_dists / total)
            r = rng.random()
            next_idx = min(int(np.searchsorted(cumulative, r, side='left')), n_points - 1)
            if sq_dists[next_idx] == 0:
                # r landed on a zero-probability row (r == 0 or rounding at the end)
                positive = np.flatnonzero(sq_dists > 0)
                later = positive[positive >= next_idx]
                next_idx = int(later[0]) if later.size else int(positive[-1])

        centers.append(data[next_idx].copy())

    return np.array(centers)


def assign_points(data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Label each point with its nearest centroid.

    Ties go to the lowest centroid index.

    Args:
        data: Data matrix
        centroids: Centers as rows

    Returns:
        Integer label array
    """
    dists = np.linalg.norm(data[:, None, :] - centroids[None, :, :], axis=2)
    return np.argmin(dists, axis=1)


def update_centroids(data: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Move every centroid to the mean of its assigned points.

    Args:
        data: Data matrix
        labels: Current labels
        centroids: Current centers

    Returns:
        New centers; a center with no points keeps its old value
    """
    clusters = labels_to_clusters(labels, centroids)
    for cluster in clusters:
        cluster.update_center(data)
    return np.array([cluster.center for cluster in clusters])


def labels_to_clusters(labels: np.ndarray, centroids: np.ndarray) -> List[Cluster]:
    """
    Build Cluster objects from a label array.

    Args:
        labels: Cluster index of every row
        centroids: Cluster centers

    Returns:
        One Cluster per centroid, members in row order
    """
    clusters = [Cluster(center, [], i) for i, center in enumerate(centroids)]
    for idx, label in enumerate(labels):
        clusters[int(label)].add_member(idx)
    return clusters


def compute_inertia(data: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
    """
    Sum of (non-squared) Euclidean distances from each row to its centroid.

    Args:
        data: Data matrix
        labels: Cluster index of every row
        centroids: Cluster centers

    Returns:
        Inertia
    """
    if data.shape[0] == 0:
        return 0.0
    return float(np.sum(np.linalg.norm(data - centroids[labels], axis=1)))


def squared_inertia(matrix: Any, assignment: ClusterAssignment) -> float:
    """
    Sum of squared distances from each row to its centroid.

    This is the objective the centroid update minimizes, reported next to
    the inertia of the assignment.

    Args:
        matrix: Data matrix the assignment was computed on
        assignment: Result of kmeans

    Returns:
        Within-cluster sum of squares
    """
    data = as_matrix(matrix)
    if data.shape[0] == 0:
        return 0.0
    diffs = data - assignment.centroids[assignment.labels]
    return float(np.sum(diffs ** 2))


def kmeans(matrix: Any,
           k: int,
           max_iters: int = DEFAULT_MAX_ITERATIONS,
           rng: Optional[np.random.Generator] = None,
           seed: Optional[int] = None,
           cancel_event: Optional[threading.Event] = None) -> ClusterAssignment:
    """
    Perform K-means clustering on the data.

    Lloyd iteration runs until no label changes or max_iters is reached.
    Both outcomes return a valid assignment.

    Args:
        matrix: Data matrix
        k: Number of clusters
        max_iters: Maximum number of iterations
        rng: Random generator for seeding
        seed: Seed used when rng is not given
        cancel_event: Checked before every iteration

    Returns:
        ClusterAssignment

    Raises:
        ValueError: If k is smaller than 1
        OperationCancelled: If cancel_event is set
    """
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")

    data = as_matrix(matrix)
    n_points = data.shape[0]

    if n_points == 0 or data.shape[1] == 0:
        return ClusterAssignment(
            labels=np.zeros(0, dtype=int),
            centroids=np.zeros((0, data.shape[1])),
            inertia=0.0,
        )

    centroids = init_centroids(data, k, make_rng(rng, seed))
    labels = np.zeros(n_points, dtype=int)

    iterations = 0
    changed = True
    while changed and iterations < max_iters:
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelled(f"k-means cancelled after {iterations} iterations")

        iterations += 1
        new_labels = assign_points(data, centroids)
        changed = bool(np.any(new_labels != labels))
        labels = new_labels
        centroids = update_centroids(data, labels, centroids)

    inertia = compute_inertia(data, labels, centroids)

    logger.debug(
        f"k-means k={k} finished after {iterations} iterations "
        f"({'converged' if not changed else 'iteration limit'}), inertia={inertia:.4f}"
    )

    return ClusterAssignment(
        labels=labels,
        centroids=centroids,
        inertia=inertia,
        iterations=iterations,
        converged=not changed,
    )


def clusters_to_dict(assignment: ClusterAssignment,
                     data_indices: Optional[List[Any]] = None) -> List[Dict]:
    """
    Convert an assignment to a per-cluster dictionary format.

    Args:
        assignment: Result of kmeans
        data_indices: Optional mapping from row numbers to original ids

    Returns:
        List of cluster dictionaries
    """
    result = []

    for cluster in labels_to_clusters(assignment.labels, assignment.centroids):
        # Map member indices if needed
        if data_indices is not None:
            members = [data_indices[idx] for idx in cluster.members]
        else:
            members = cluster.members

        result.append({
            'id': cluster.id,
            'center': cluster.center.tolist(),
            'members': members,
        })

    return result
