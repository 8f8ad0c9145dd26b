"""
PCA (Principal Component Analysis) implementation for voyagemath.

This module provides a custom implementation of PCA using power iteration
with deflation over the covariance matrix.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from voyagemath.errors import as_matrix
from voyagemath.utils.general import make_rng

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 30


def vector_length(v: np.ndarray) -> float:
    """
    Calculate the length (norm) of a vector.

    Args:
        v: Vector

    Returns:
        Vector length
    """
    return float(np.linalg.norm(v))


def normalize_vector(v: np.ndarray) -> np.ndarray:
    """
    Normalize a vector to unit length.

    Args:
        v: Vector to normalize

    Returns:
        Normalized vector
    """
    norm = vector_length(v)
    if norm == 0:
        return v
    return v / norm


def covariance_matrix(centered: np.ndarray) -> np.ndarray:
    """
    Sample covariance of an already centered matrix.

    Args:
        centered: Data matrix with zero column means

    Returns:
        Symmetric d x d covariance matrix (zeros when there is a single row)
    """
    n_rows, n_cols = centered.shape
    if n_rows < 2:
        return np.zeros((n_cols, n_cols))

    cov = centered.T @ centered / (n_rows - 1)
    # Mirror the upper triangle so the result is exactly symmetric
    return np.triu(cov) + np.triu(cov, 1).T


def rand_starting_vec(dim: int, rng: np.random.Generator) -> np.ndarray:
    """
    Generate a random unit starting vector for power iteration.

    Args:
        dim: Vector dimension
        rng: Random generator

    Returns:
        Random unit vector with non-negative entries
    """
    return normalize_vector(rng.random(dim))


def power_iteration(matrix: np.ndarray,
                    iters: int = DEFAULT_ITERATIONS,
                    start_vector: Optional[np.ndarray] = None,
                    tolerance: Optional[float] = None,
                    rng: Optional[np.random.Generator] = None) -> Tuple[float, np.ndarray]:
    """
    Find the dominant eigenpair of a symmetric matrix by power iteration.

    Without a tolerance exactly ``iters`` multiply-and-normalize steps are
    run. With a tolerance the loop also stops once the angle between
    successive vectors drops below it.

    Args:
        matrix: Symmetric square matrix
        iters: Maximum number of iterations
        start_vector: Initial vector (random when None)
        tolerance: Optional convergence threshold, in radians
        rng: Random generator for the start vector

    Returns:
        Tuple of (eigenvalue, unit eigenvector); the eigenvalue is the
        Rayleigh quotient of the final vector
    """
    dim = matrix.shape[0]

    if start_vector is None:
        start_vector = rand_starting_vec(dim, make_rng(rng))

    vector = normalize_vector(np.asarray(start_vector, dtype=float))

    for _ in range(iters):
        product_vector = matrix @ vector
        normed = normalize_vector(product_vector)

        if tolerance is not None:
            cos_angle = np.clip(np.dot(vector, normed), -1.0, 1.0)
            converged = np.arccos(cos_angle) < tolerance
        else:
            converged = False

        vector = normed
        if converged:
            break

    eigval = float(vector @ matrix @ vector)
    return eigval, vector


def deflate(matrix: np.ndarray, eigval: float, vector: np.ndarray) -> np.ndarray:
    """
    Remove an eigenpair's contribution from a matrix.

    Args:
        matrix: Symmetric matrix
        eigval: Eigenvalue
        vector: Unit eigenvector

    Returns:
        matrix - eigval * outer(vector, vector)
    """
    return matrix - eigval * np.outer(vector, vector)


def eigen_decomposition(matrix: np.ndarray,
                        n_comps: int,
                        iters: int = DEFAULT_ITERATIONS,
                        tolerance: Optional[float] = None,
                        rng: Optional[np.random.Generator] = None) -> List[Dict[str, Any]]:
    """
    Find the first n_comps eigenpairs of a symmetric matrix.

    Each pair is found by power iteration on the matrix deflated by all
    previously found pairs. The pairs are returned sorted by eigenvalue,
    largest first.

    Args:
        matrix: Symmetric square matrix
        n_comps: Number of eigenpairs to find
        iters: Iterations per eigenpair
        tolerance: Optional convergence threshold for power iteration
        rng: Random generator for the start vectors

    Returns:
        List of {'eigenvalue': float, 'eigenvector': ndarray}
    """
    rng = make_rng(rng)
    remaining = np.array(matrix, dtype=float)
    pairs = []

    for _ in range(n_comps):
        eigval, vector = power_iteration(remaining, iters, tolerance=tolerance, rng=rng)
        pairs.append({'eigenvalue': eigval, 'eigenvector': vector})
        remaining = deflate(remaining, eigval, vector)

    # Stable sort keeps discovery order among equal eigenvalues
    return sorted(pairs, key=lambda p: -p['eigenvalue'])


def project(centered: np.ndarray, components: np.ndarray) -> np.ndarray:
    """
    Project centered rows onto a set of components.

    Args:
        centered: Centered data matrix (n x d)
        components: Components as rows (k x d)

    Returns:
        Projected matrix (n x k)
    """
    if components.size == 0:
        return np.zeros((centered.shape[0], 0))
    return centered @ components.T


class PCAResult:
    """
    Result of a PCA run.
    """

    def __init__(self,
                 projected: np.ndarray,
                 explained_variance_ratios: np.ndarray,
                 components: np.ndarray,
                 eigenvalues: np.ndarray,
                 center: np.ndarray):
        self.projected = projected
        self.explained_variance_ratios = explained_variance_ratios
        self.components = components
        self.eigenvalues = eigenvalues
        self.center = center

    @property
    def n_components(self) -> int:
        return len(self.components)

    def cumulative_variance(self) -> np.ndarray:
        """Running total of the explained variance ratios."""
        return np.cumsum(self.explained_variance_ratios)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            'projected': self.projected.tolist(),
            'explained_variance_ratios': self.explained_variance_ratios.tolist(),
            'components': self.components.tolist(),
            'eigenvalues': self.eigenvalues.tolist(),
            'center': self.center.tolist(),
        }

    def __repr__(self) -> str:
        return f"PCAResult(n_components={self.n_components}, rows={self.projected.shape[0]})"


def empty_pca_result(n_rows: int = 0) -> PCAResult:
    """PCA result for input without rows or columns."""
    return PCAResult(
        projected=np.zeros((n_rows, 0)),
        explained_variance_ratios=np.zeros(0),
        components=np.zeros((0, 0)),
        eigenvalues=np.zeros(0),
        center=np.zeros(0),
    )


def compute_pca(matrix: Any,
                n_components: Optional[int] = None,
                iters: int = DEFAULT_ITERATIONS,
                tolerance: Optional[float] = None,
                rng: Optional[np.random.Generator] = None,
                seed: Optional[int] = None) -> PCAResult:
    """
    Compute the principal components of a matrix and project onto them.

    The full eigen-spectrum of the covariance matrix is estimated so that
    the explained variance ratios are relative to the total variance; the
    top ``n_components`` are kept.

    Args:
        matrix: Data matrix (n x d)
        n_components: Components to keep (None or 0 keeps all d; clamped to d)
        iters: Power iterations per component
        tolerance: Optional early-stopping angle for power iteration
        rng: Random generator for the start vectors
        seed: Seed used when rng is not given

    Returns:
        PCAResult
    """
    data = as_matrix(matrix)
    n_rows, n_cols = data.shape

    if n_rows == 0 or n_cols == 0:
        return empty_pca_result(n_rows if n_cols == 0 else 0)

    if n_components is not None and n_components < 0:
        raise ValueError(f"n_components must be non-negative, got {n_components}")
    if not n_components:
        # None and 0 both mean every component
        n_components = n_cols
    n_components = min(n_components, n_cols)

    center = np.mean(data, axis=0)
    centered = data - center
    cov = covariance_matrix(centered)

    pairs = eigen_decomposition(cov, n_cols, iters, tolerance, make_rng(rng, seed))
    eigenvalues = np.array([p['eigenvalue'] for p in pairs])

    total_variance = np.sum(eigenvalues)
    if total_variance == 0:
        ratios = np.zeros(len(eigenvalues))
    else:
        ratios = eigenvalues / total_variance

    kept = pairs[:n_components]
    components = np.array([p['eigenvector'] for p in kept]).reshape(len(kept), n_cols)

    logger.debug(
        f"PCA on {n_rows}x{n_cols} matrix kept {n_components} components "
        f"explaining {np.sum(ratios[:n_components]):.3f} of the variance"
    )

    return PCAResult(
        projected=project(centered, components),
        explained_variance_ratios=ratios[:n_components],
        components=components,
        eigenvalues=eigenvalues[:n_components],
        center=center,
    )
