"""
One-hot encoding and standardization.

This module turns imputed records into a dense numeric matrix. The layout of
the matrix is described by a FeatureSchema, which is built once from the
data and can be reused to encode further records the same way.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from voyagemath.data.records import Record, is_missing
from voyagemath.errors import as_matrix
from voyagemath.math.features import identify_feature_types

logger = logging.getLogger(__name__)


class FeatureSchema:
    """
    Ordered description of the encoded feature columns.

    Numerical columns come first, in the order given, followed by one
    ``<column>_<value>`` column per categorical column and observed value,
    values in first-seen order.
    """

    def __init__(self,
                 numerical: List[str],
                 categorical: List[str],
                 categories: Optional[Dict[str, List[Any]]] = None):
        """
        Initialize a schema.

        Args:
            numerical: Numerical column names
            categorical: Categorical column names
            categories: Observed values of each categorical column
        """
        self.numerical = list(numerical)
        self.categorical = list(categorical)
        categories = categories or {}
        self.categories = {c: list(categories.get(c, [])) for c in self.categorical}

    @classmethod
    def discover(cls,
                 records: List[Record],
                 numerical: List[str],
                 categorical: List[str]) -> 'FeatureSchema':
        """
        Build a schema by scanning the records once.

        Args:
            records: Records to scan
            numerical: Numerical column names
            categorical: Categorical column names

        Returns:
            FeatureSchema
        """
        categories: Dict[str, Dict[Any, None]] = {c: {} for c in categorical}
        for record in records:
            for column in categorical:
                value = record.get(column)
                if is_missing(value) or value == '':
                    continue
                categories[column].setdefault(value, None)

        return cls(numerical, categorical,
                   {c: list(values) for c, values in categories.items()})

    @property
    def feature_names(self) -> List[str]:
        """Names of the encoded columns, in matrix order."""
        names = list(self.numerical)
        for column in self.categorical:
            names.extend(f"{column}_{value}" for value in self.categories[column])
        return names

    @property
    def width(self) -> int:
        return len(self.numerical) + sum(len(v) for v in self.categories.values())

    def block(self, column: str) -> slice:
        """
        Matrix column range of a categorical column's one-hot block.

        Args:
            column: Categorical column name

        Returns:
            slice into the encoded row
        """
        start = len(self.numerical)
        for name in self.categorical:
            size = len(self.categories[name])
            if name == column:
                return slice(start, start + size)
            start += size
        raise KeyError(column)

    def encode_record(self, record: Record) -> List[float]:
        """
        Encode a single record.

        Categorical values that are not part of the schema produce an
        all-zero block.
        """
        row = []
        for column in self.numerical:
            value = record.get(column)
            if is_missing(value):
                raise ValueError(f"Missing value in numerical column '{column}'; impute before encoding")
            row.append(float(value))
        for column in self.categorical:
            value = record.get(column)
            row.extend(1.0 if value == known else 0.0 for known in self.categories[column])
        return row

    def encode(self, records: List[Record]) -> np.ndarray:
        """
        Encode records into a matrix with one row per record.

        Args:
            records: Imputed records

        Returns:
            Array of shape (len(records), self.width)
        """
        if not records:
            return np.zeros((0, self.width))
        return np.array([self.encode_record(r) for r in records], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the schema to a dictionary for serialization."""
        return {
            'numerical': list(self.numerical),
            'categorical': list(self.categorical),
            'categories': {c: list(v) for c, v in self.categories.items()},
            'features': self.feature_names,
        }

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FeatureSchema):
            return NotImplemented
        return (self.numerical == other.numerical
                and self.categorical == other.categorical
                and self.categories == other.categories)

    def __repr__(self) -> str:
        return f"FeatureSchema(features={len(self.feature_names)})"


def one_hot_encode(records: List[Record],
                   categorical_columns: List[str],
                   numerical_columns: Optional[List[str]] = None) -> Tuple[np.ndarray, FeatureSchema]:
    """
    Encode records into a numeric matrix with one-hot categorical blocks.

    Args:
        records: Imputed records
        categorical_columns: Columns to expand into one-hot blocks
        numerical_columns: Columns copied as numbers (identified from the
            records if None)

    Returns:
        Tuple of (matrix, schema)
    """
    if numerical_columns is None:
        numerical_columns, _ = identify_feature_types(records)

    schema = FeatureSchema.discover(records, numerical_columns, categorical_columns)
    matrix = schema.encode(records)

    logger.debug(f"Encoded {matrix.shape[0]} records into {matrix.shape[1]} features")
    return matrix, schema


def column_statistics(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Per-column mean and population standard deviation.

    A standard deviation of zero is replaced by one.

    Args:
        matrix: Data matrix

    Returns:
        Tuple of (means, stds)
    """
    means = np.mean(matrix, axis=0)
    stds = np.sqrt(np.mean((matrix - means) ** 2, axis=0))
    stds[stds == 0] = 1.0
    return means, stds


def standardize(matrix: Any) -> np.ndarray:
    """
    Scale every column to zero mean and unit variance.

    Constant columns become all zeros.

    Args:
        matrix: Data matrix

    Returns:
        Standardized copy of the matrix (shape (0, 0) for empty input)
    """
    data = as_matrix(matrix)
    if data.shape[0] == 0 or data.shape[1] == 0:
        return np.zeros((0, 0))

    means, stds = column_statistics(data)
    return (data - means) / stds
