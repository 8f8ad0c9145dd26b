"""
Missing value imputation for passenger records.

Numerical columns are filled with the median of their observed values and
categorical columns with their most frequent observed value. Statistics are
computed only from observed (non-null) cells.
"""

import logging
from typing import Any, Dict, List, Optional

from voyagemath.data.records import EXCLUDED_COLUMNS, Record, is_missing
from voyagemath.math.features import identify_feature_types
from voyagemath.utils.general import median, mode

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return is_missing(value) or value == ''


def column_medians(records: List[Record], columns: List[str]) -> Dict[str, float]:
    """
    Median of the observed values of each numerical column.

    Args:
        records: Records to summarize
        columns: Numerical column names

    Returns:
        Dictionary mapping column to median (0 when nothing is observed)
    """
    medians = {}
    for column in columns:
        observed = [r.get(column) for r in records if not is_missing(r.get(column))]
        medians[column] = median(observed, default=0)
    return medians


def column_modes(records: List[Record], columns: List[str]) -> Dict[str, Any]:
    """
    Most frequent observed value of each categorical column.

    Empty strings do not count as observations. Ties go to the value seen
    first.

    Args:
        records: Records to summarize
        columns: Categorical column names

    Returns:
        Dictionary mapping column to mode ("" when nothing is observed)
    """
    modes = {}
    for column in columns:
        observed = (r.get(column) for r in records if not _is_blank(r.get(column)))
        modes[column] = mode(observed, default='')
    return modes


def impute_missing_values(records: List[Record],
                          numerical: Optional[List[str]] = None,
                          categorical: Optional[List[str]] = None) -> List[Record]:
    """
    Fill missing cells of the feature columns.

    Null numerical cells get the column median; null or empty categorical
    cells get the column mode. Identifier, name, ticket, cabin and outcome
    columns are never touched.

    Args:
        records: Records to impute
        numerical: Numerical columns (identified from the records if None)
        categorical: Categorical columns (identified from the records if None)

    Returns:
        New list of records without missing values in the selected columns
    """
    if numerical is None or categorical is None:
        found_numerical, found_categorical = identify_feature_types(records)
        numerical = found_numerical if numerical is None else numerical
        categorical = found_categorical if categorical is None else categorical

    numerical = [c for c in numerical if c not in EXCLUDED_COLUMNS]
    categorical = [c for c in categorical if c not in EXCLUDED_COLUMNS]

    medians = column_medians(records, numerical)
    modes = column_modes(records, categorical)
    logger.debug(f"Imputation medians: {medians}, modes: {modes}")

    result = []
    filled = 0
    for record in records:
        updates = {}
        for column in numerical:
            if is_missing(record.get(column)):
                updates[column] = medians[column]
        for column in categorical:
            if _is_blank(record.get(column)):
                updates[column] = modes[column]

        filled += len(updates)
        result.append(record.with_values(**updates) if updates else record)

    logger.info(f"Imputed {filled} missing cells across {len(result)} records")
    return result
