"""
Cluster quality scores and cluster-count selection.

silhouette_score compares every point's mean distance to its own cluster
with its mean distance to the nearest other cluster. It needs the full
pairwise distance matrix, so its cost grows quadratically with the number
of rows; callers should cap the row count for interactive use.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import numpy as np
from scipy.spatial.distance import pdist, squareform

from voyagemath.errors import MatrixShapeError, OperationCancelled, as_matrix
from voyagemath.math.clusters import DEFAULT_MAX_ITERATIONS, kmeans
from voyagemath.utils.general import argmax_first, first_differences, make_rng

logger = logging.getLogger(__name__)

ELBOW = 'elbow'
SILHOUETTE = 'silhouette'
METHODS = (ELBOW, SILHOUETTE)


def distance_matrix(data: np.ndarray) -> np.ndarray:
    """
    Calculate the distance matrix for a set of points.

    Args:
        data: Data matrix

    Returns:
        Matrix of pairwise Euclidean distances
    """
    if data.shape[0] < 2:
        return np.zeros((data.shape[0], data.shape[0]))
    return squareform(pdist(data, metric='euclidean'))


def point_silhouette(a: float, b: float) -> float:
    """
    Silhouette value of one point.

    Args:
        a: Mean distance to the other members of its cluster
        b: Smallest mean distance to another cluster

    Returns:
        Value in [-1, 1]
    """
    if a == 0 and b == 0:
        return 0.0
    if a == 0:
        return 1.0
    if b == 0:
        return -1.0
    return (b - a) / max(a, b)


def silhouette_samples(matrix: Any,
                       labels: Any,
                       cancel_event: Optional[threading.Event] = None) -> np.ndarray:
    """
    Silhouette value of every point.

    Args:
        matrix: Data matrix
        labels: Cluster label of every row
        cancel_event: Checked before every row

    Returns:
        Array of per-point silhouette values

    Raises:
        MatrixShapeError: If labels and rows differ in number
        OperationCancelled: If cancel_event is set
    """
    data = as_matrix(matrix)
    labels = np.asarray(labels)

    if len(labels) != data.shape[0]:
        raise MatrixShapeError(
            f"Got {len(labels)} labels for a matrix with {data.shape[0]} rows"
        )

    n_points = data.shape[0]
    dists = distance_matrix(data)
    unique_labels = list(dict.fromkeys(labels.tolist()))
    masks = {label: labels == label for label in unique_labels}

    values = np.zeros(n_points)
    for i in range(n_points):
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelled(f"Silhouette cancelled after {i} of {n_points} rows")

        own = masks[labels[i]].copy()
        own[i] = False
        a = float(np.mean(dists[i, own])) if np.any(own) else 0.0

        b_values = [
            float(np.mean(dists[i, masks[label]]))
            for label in unique_labels
            if label != labels[i]
        ]
        b = min(b_values) if b_values else 0.0

        values[i] = point_silhouette(a, b)

    return values


def silhouette_score(matrix: Any,
                     labels: Any,
                     cancel_event: Optional[threading.Event] = None) -> float:
    """
    Mean silhouette coefficient of a clustering.

    Args:
        matrix: Data matrix
        labels: Cluster label of every row
        cancel_event: Passed on to silhouette_samples

    Returns:
        Value in [-1, 1]; 0 for fewer than two points or fewer than two
        distinct labels
    """
    data = as_matrix(matrix)
    labels = np.asarray(labels)

    if len(labels) != data.shape[0]:
        raise MatrixShapeError(
            f"Got {len(labels)} labels for a matrix with {data.shape[0]} rows"
        )

    if data.shape[0] < 2 or len(np.unique(labels)) < 2:
        return 0.0

    return float(np.mean(silhouette_samples(data, labels, cancel_event)))


def elbow_k(scores: List[float], min_k: int = 2) -> int:
    """
    Pick k at the largest second difference of the inertia curve.

    Args:
        scores: Inertia for k = min_k, min_k + 1, ...
        min_k: k of the first score

    Returns:
        Recommended k (min_k when there are fewer than three scores)
    """
    second = first_differences(first_differences(scores))
    if not second:
        return min_k
    return argmax_first(second) + min_k


def silhouette_k(scores: List[float], min_k: int = 2) -> int:
    """
    Pick the k with the highest silhouette score.

    Args:
        scores: Silhouette for k = min_k, min_k + 1, ...
        min_k: k of the first score

    Returns:
        Recommended k (min_k when there are no scores)
    """
    if not scores:
        return min_k
    return argmax_first(scores) + min_k


class OptimalKResult:
    """
    Scores of a k sweep and the recommended k.
    """

    def __init__(self, method: str, k_values: List[int], scores: List[float], recommended_k: int):
        self.method = method
        self.k_values = k_values
        self.scores = scores
        self.recommended_k = recommended_k

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            'method': self.method,
            'k_values': list(self.k_values),
            'scores': [float(s) for s in self.scores],
            'recommended_k': self.recommended_k,
        }

    def __repr__(self) -> str:
        return f"OptimalKResult(method={self.method!r}, recommended_k={self.recommended_k})"


def find_optimal_k(matrix: Any,
                   max_k: int = 10,
                   method: str = ELBOW,
                   max_iters: int = DEFAULT_MAX_ITERATIONS,
                   rng: Optional[np.random.Generator] = None,
                   seed: Optional[int] = None,
                   cancel_event: Optional[threading.Event] = None) -> OptimalKResult:
    """
    Run k-means for k = 2..max_k and recommend a cluster count.

    With method "elbow" the inertia of every run is recorded and the k at
    the sharpest bend is recommended; with "silhouette" the silhouette score
    is recorded and the best-scoring k is recommended.

    Args:
        matrix: Data matrix
        max_k: Largest k to try
        method: "elbow" or "silhouette"
        max_iters: Iteration limit of each k-means run
        rng: Random generator shared by all runs
        seed: Seed used when rng is not given
        cancel_event: Checked before every run and by k-means and silhouette scoring

    Returns:
        OptimalKResult

    Raises:
        ValueError: If the method is unknown
        OperationCancelled: If cancel_event is set
    """
    if method not in METHODS:
        raise ValueError(f"Unknown method '{method}', expected one of {METHODS}")

    data = as_matrix(matrix)
    rng = make_rng(rng, seed)

    k_values = list(range(2, max_k + 1))
    scores = []

    for k in k_values:
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelled(f"k sweep cancelled before k={k}")

        assignment = kmeans(data, k, max_iters, rng=rng, cancel_event=cancel_event)

        if method == ELBOW:
            scores.append(assignment.inertia)
        else:
            scores.append(silhouette_score(data, assignment.labels, cancel_event))

    if method == ELBOW:
        recommended = elbow_k(scores)
    else:
        recommended = silhouette_k(scores)

    logger.info(f"{method} sweep over k=2..{max_k} recommends k={recommended}")

    return OptimalKResult(method, k_values, scores, recommended)
