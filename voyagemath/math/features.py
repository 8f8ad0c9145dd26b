"""
Feature engineering for passenger records.

This module derives the synthetic columns used by the clustering pipeline
(family size, title and cabin presence) and classifies the columns of a
dataset into numerical and categorical features.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from voyagemath.data.records import (
    CATEGORICAL, EXCLUDED_COLUMNS, NUMERICAL, OUTCOME_COLUMN,
    ColumnDescriptor, Record, column_kind, discover_columns
)

logger = logging.getLogger(__name__)

# ", Mr." / ",Mrs." : comma, optional whitespace, token, then a period
TITLE_PATTERN = re.compile(r',\s*([^\s.]+)\.')

UNKNOWN_TITLE = 'Unknown'

FAMILY_SIZE = 'FamilySize'
TITLE = 'Title'
HAS_CABIN = 'HasCabin'


def family_size(record: Record) -> int:
    """
    Number of family members aboard, including the passenger.

    Args:
        record: Passenger record

    Returns:
        SibSp + Parch + 1, with missing counts treated as 0
    """
    return (record.get('SibSp') or 0) + (record.get('Parch') or 0) + 1


def extract_title(name: str) -> str:
    """
    Extract the honorific from a "Surname, Title. Given names" string.

    Args:
        name: Passenger name

    Returns:
        The title token, or "Unknown" when the name does not match
    """
    match = TITLE_PATTERN.search(name)
    return match.group(1) if match else UNKNOWN_TITLE


def has_cabin(record: Record) -> int:
    """1 when the cabin field is present and non-empty, else 0."""
    cabin = record.get('Cabin')
    return 1 if cabin else 0


def engineer_features(records: List[Record]) -> List[Record]:
    """
    Add FamilySize, Title and HasCabin columns to every record.

    Records without a name get no Title column.

    Args:
        records: Passenger records

    Returns:
        New list of records with the derived columns
    """
    result = []
    for record in records:
        derived = {FAMILY_SIZE: family_size(record)}

        name = record.get('Name')
        if name:
            derived[TITLE] = extract_title(name)

        derived[HAS_CABIN] = has_cabin(record)
        result.append(record.with_values(**derived))

    logger.debug(f"Engineered features for {len(result)} records")
    return result


def describe_columns(records: List[Record]) -> List[ColumnDescriptor]:
    """
    Describe every column of a dataset, in discovery order.

    Args:
        records: Records to describe

    Returns:
        List of ColumnDescriptor, excluded columns included
    """
    return [
        ColumnDescriptor(name, column_kind(records, name), name in EXCLUDED_COLUMNS)
        for name in discover_columns(records)
    ]


def identify_feature_types(records: List[Record]) -> Tuple[List[str], List[str]]:
    """
    Split the usable columns of a dataset into numerical and categorical.

    Identifier and free-text columns are skipped.

    Args:
        records: Records to inspect

    Returns:
        Tuple of (numerical column names, categorical column names)
    """
    numerical = []
    categorical = []

    for descriptor in describe_columns(records):
        if descriptor.excluded:
            continue
        if descriptor.kind == NUMERICAL:
            numerical.append(descriptor.name)
        elif descriptor.kind == CATEGORICAL:
            categorical.append(descriptor.name)

    return numerical, categorical


def separate_outcome(records: List[Record]) -> Tuple[List[Record], Optional[List[int]]]:
    """
    Remove the outcome column from the records.

    Args:
        records: Records that may carry a Survived column

    Returns:
        Tuple of (records without the outcome, outcome values with missing
        as 0 or None when no record has the column)
    """
    if not any(OUTCOME_COLUMN in record for record in records):
        return list(records), None

    outcome = [int(record.get(OUTCOME_COLUMN) or 0) for record in records]
    features = [record.without(OUTCOME_COLUMN) for record in records]
    return features, outcome


def dataset_summary(records: List[Record]) -> Dict[str, Any]:
    """
    Describe a raw dataset before any preprocessing.

    A cell counts as missing when it is None or an empty string.

    Args:
        records: Records to describe

    Returns:
        Dictionary with row_count, column_count, missing_values (per
        column, in discovery order) and the numerical and categorical
        column names
    """
    columns = describe_columns(records)

    missing_values = {}
    for descriptor in columns:
        missing_values[descriptor.name] = sum(
            1 for record in records if record.get(descriptor.name) in (None, '')
        )

    return {
        'row_count': len(records),
        'column_count': len(columns),
        'missing_values': missing_values,
        'numerical': [c.name for c in columns if c.kind == NUMERICAL],
        'categorical': [c.name for c in columns if c.kind == CATEGORICAL],
    }
