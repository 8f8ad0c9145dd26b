"""
Cluster profiling against the original records.
"""

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from voyagemath.data.records import Record
from voyagemath.utils.general import mode


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.number)) and not isinstance(value, bool)


def cluster_profiles(records: List[Record], labels: Any) -> Dict[Any, Dict[str, Any]]:
    """
    Summarize the records of every cluster.

    The columns of a cluster's first member decide the profile: numeric
    columns get the mean (missing values count as 0), other columns get the
    most frequent string value (missing values count as "").

    Args:
        records: Original records, row-aligned with labels
        labels: Cluster label of every record

    Returns:
        Dictionary mapping label (in order of first appearance) to a profile
        with a 'size' entry and one entry per column
    """
    labels = list(np.asarray(labels).tolist())
    if len(labels) != len(records):
        raise ValueError(f"Got {len(labels)} labels for {len(records)} records")

    frame = pd.DataFrame({'label': labels, 'row': range(len(records))})
    profiles = {}

    for label, group in frame.groupby('label', sort=False):
        members = [records[i] for i in group['row']]
        first = members[0]
        profile: Dict[str, Any] = {'size': len(members)}

        for column in first:
            values = [m.get(column) for m in members]
            if _is_number(first[column]):
                numeric = pd.Series([v if _is_number(v) else 0 for v in values], dtype=float)
                profile[column] = float(numeric.mean())
            else:
                profile[column] = mode(('' if v is None else str(v) for v in values), default='')

        profiles[label] = profile

    return profiles


def cluster_outcome_rates(outcome: Optional[List[int]], labels: Any) -> Dict[Any, float]:
    """
    Mean outcome value (e.g. survival rate) of every cluster.

    Args:
        outcome: Outcome value of every record, or None
        labels: Cluster label of every record

    Returns:
        Dictionary mapping label to rate; empty when outcome is None
    """
    if outcome is None:
        return {}

    labels = list(np.asarray(labels).tolist())
    if len(labels) != len(outcome):
        raise ValueError(f"Got {len(labels)} labels for {len(outcome)} outcome values")

    frame = pd.DataFrame({'label': labels, 'outcome': outcome})
    rates = frame.groupby('label', sort=False)['outcome'].mean()
    return {label: float(rate) for label, rate in rates.items()}


def cluster_category_distribution(records: List[Record],
                                  labels: Any,
                                  column: str) -> Dict[Any, Dict[str, float]]:
    """
    Share of each value of a column within every cluster.

    Values are compared as strings; missing values count as "".

    Args:
        records: Original records, row-aligned with labels
        labels: Cluster label of every record
        column: Column to break down (e.g. Sex or Pclass)

    Returns:
        Dictionary mapping label (in order of first appearance) to a
        dictionary of value -> proportion, most common value first
    """
    labels = list(np.asarray(labels).tolist())
    if len(labels) != len(records):
        raise ValueError(f"Got {len(labels)} labels for {len(records)} records")

    values = []
    for record in records:
        value = record.get(column)
        values.append('' if value is None else str(value))

    frame = pd.DataFrame({'label': labels, 'value': values})
    shares = frame.groupby('label', sort=False)['value'].value_counts(normalize=True)

    distribution: Dict[Any, Dict[str, float]] = {label: {} for label in dict.fromkeys(labels)}
    for (label, value), share in shares.items():
        distribution[label][value] = float(share)

    return distribution
