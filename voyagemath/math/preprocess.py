"""
The preprocessing pipeline: records in, standardized matrix out.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from voyagemath.data.records import Record
from voyagemath.math.encoding import FeatureSchema, one_hot_encode, standardize
from voyagemath.math.features import (
    dataset_summary, engineer_features, identify_feature_types, separate_outcome
)
from voyagemath.math.imputation import impute_missing_values

logger = logging.getLogger(__name__)


class ProcessedData:
    """
    Result of preprocessing a dataset.

    Row i of ``processed`` corresponds to ``original[i]``.
    """

    def __init__(self,
                 original: List[Record],
                 processed: np.ndarray,
                 schema: FeatureSchema,
                 numerical_columns: List[str],
                 categorical_columns: List[str],
                 outcome_column: Optional[List[int]] = None,
                 summary: Optional[Dict[str, Any]] = None):
        self.original = original
        self.processed = processed
        self.schema = schema
        self.numerical_columns = numerical_columns
        self.categorical_columns = categorical_columns
        self.outcome_column = outcome_column
        self.summary = summary or {}

    @property
    def features(self) -> List[str]:
        """Encoded feature names, in matrix column order."""
        return self.schema.feature_names

    def to_dataframe(self) -> pd.DataFrame:
        """
        The processed matrix as a DataFrame labelled with feature names.

        Returns:
            DataFrame with one row per record
        """
        if self.processed.size == 0:
            return pd.DataFrame(columns=self.features)
        return pd.DataFrame(self.processed, columns=self.features)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            'n_records': len(self.original),
            'features': self.features,
            'numerical_columns': list(self.numerical_columns),
            'categorical_columns': list(self.categorical_columns),
            'has_outcome': self.outcome_column is not None,
            'summary': self.summary,
        }

    def __repr__(self) -> str:
        return f"ProcessedData(rows={self.processed.shape[0]}, features={len(self.features)})"


def preprocess(raw_records: List[Record]) -> ProcessedData:
    """
    Run feature engineering, imputation, encoding and standardization.

    The result depends only on the records and their order, so repeated
    calls on the same input give identical matrices.

    Args:
        raw_records: Passenger records (plain mappings are accepted)

    Returns:
        ProcessedData
    """
    records = [r if isinstance(r, Record) else Record(r) for r in raw_records]
    summary = dataset_summary(records)

    enhanced = engineer_features(records)
    features, outcome = separate_outcome(enhanced)
    numerical, categorical = identify_feature_types(features)

    imputed = impute_missing_values(features, numerical, categorical)
    encoded, schema = one_hot_encode(imputed, categorical, numerical)
    processed = standardize(encoded)

    logger.info(
        f"Preprocessed {len(records)} records into a {processed.shape[0]}x{processed.shape[1]} matrix "
        f"({len(numerical)} numerical, {len(categorical)} categorical columns)"
    )

    return ProcessedData(
        original=list(raw_records),
        processed=processed,
        schema=schema,
        numerical_columns=numerical,
        categorical_columns=categorical,
        outcome_column=outcome,
        summary=summary,
    )
