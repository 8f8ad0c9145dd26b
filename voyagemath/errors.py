"""
Exceptions raised by the voyagemath package.
"""

from typing import Any

import numpy as np


class VoyageMathError(Exception):
    """Base class for voyagemath errors."""


class MatrixShapeError(VoyageMathError, ValueError):
    """Raised when a matrix is not a rectangular 2-D array of numbers."""


class OperationCancelled(VoyageMathError):
    """Raised when a long-running operation observes its cancel event."""


def as_matrix(data: Any) -> np.ndarray:
    """
    Convert matrix-like input to a 2-D float array.

    Args:
        data: numpy array, DataFrame or sequence of equal-length rows

    Returns:
        2-D float64 array (an empty input becomes shape (0, 0))

    Raises:
        MatrixShapeError: If the rows have different lengths or the input
            is not two-dimensional
    """
    if isinstance(data, np.ndarray):
        if data.size == 0 and data.ndim <= 2:
            return np.zeros((data.shape[0] if data.ndim == 2 else 0,
                             data.shape[1] if data.ndim == 2 else 0))
        if data.ndim != 2:
            raise MatrixShapeError(f"Expected a 2-D matrix, got {data.ndim} dimensions")
        try:
            return data.astype(float)
        except (TypeError, ValueError) as e:
            raise MatrixShapeError(f"Matrix contains non-numeric values: {e}") from e

    if hasattr(data, 'to_numpy'):
        return as_matrix(data.to_numpy())

    rows = list(data)
    if not rows:
        return np.zeros((0, 0))

    for i, row in enumerate(rows):
        if np.ndim(row) != 1:
            raise MatrixShapeError(
                f"Row {i} is not a sequence of numbers; expected a 2-D matrix"
            )

    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise MatrixShapeError(
                f"Row {i} has {len(row)} columns, expected {width}"
            )

    try:
        return np.array(rows, dtype=float).reshape(len(rows), width)
    except (TypeError, ValueError) as e:
        raise MatrixShapeError(f"Matrix contains non-numeric values: {e}") from e
