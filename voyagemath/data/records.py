"""
Passenger record type for the voyagemath pipeline.

A Record is an immutable mapping from column name to an int, float, str or
None. The columns of the passenger manifest are recognized by name and
coerced to their declared type; any further columns (including the ones
added by feature engineering) are kept in insertion order after them.
"""

import math
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from voyagemath.utils.general import distinct


NUMERICAL = 'numerical'
CATEGORICAL = 'categorical'

# Column name -> (python type, kind)
CORE_COLUMNS: Dict[str, Tuple[type, str]] = {
    'PassengerId': (int, NUMERICAL),
    'Survived': (int, NUMERICAL),
    'Pclass': (int, NUMERICAL),
    'Name': (str, CATEGORICAL),
    'Sex': (str, CATEGORICAL),
    'Age': (float, NUMERICAL),
    'SibSp': (int, NUMERICAL),
    'Parch': (int, NUMERICAL),
    'Ticket': (str, CATEGORICAL),
    'Fare': (float, NUMERICAL),
    'Cabin': (str, CATEGORICAL),
    'Embarked': (str, CATEGORICAL),
}

OUTCOME_COLUMN = 'Survived'

# Identifier-like and free-text columns never enter the numeric matrix
EXCLUDED_COLUMNS = ('PassengerId', 'Name', 'Ticket', 'Cabin', 'Survived')


def is_missing(value: Any) -> bool:
    """
    Check whether a cell value counts as missing.

    None and float NaN are missing; empty strings are not (categorical
    handling treats them separately).
    """
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def _coerce(column: str, value: Any) -> Any:
    """Coerce a core column value to its declared type."""
    if is_missing(value):
        return None

    kind_type, _ = CORE_COLUMNS[column]

    if kind_type is str:
        return str(value)

    if isinstance(value, str):
        value = value.strip()
        if value == '':
            return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if math.isnan(number):
        return None

    # Imputed medians of integer columns can be fractional; keep them as is
    if kind_type is int and number.is_integer():
        return int(number)
    return number


def _normalize_extra(value: Any) -> Any:
    """Map NaN and numpy scalars onto plain Python values."""
    if is_missing(value):
        return None
    if hasattr(value, 'item') and not isinstance(value, (str, bytes)):
        return value.item()
    return value


class Record(Mapping):
    """
    An immutable passenger row.

    Iteration yields the core columns that are present, in manifest order,
    followed by any extra columns in the order they were added.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **columns: Any):
        merged: Dict[str, Any] = dict(values or {})
        merged.update(columns)

        core = {}
        extra = {}
        for name, value in merged.items():
            if name in CORE_COLUMNS:
                core[name] = _coerce(name, value)
            else:
                extra[name] = _normalize_extra(value)

        self._values: Dict[str, Any] = {
            name: core[name] for name in CORE_COLUMNS if name in core
        }
        self._values.update(extra)

    def __getitem__(self, column: str) -> Any:
        return self._values[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Record):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def __repr__(self) -> str:
        return f"Record({self._values!r})"

    def with_values(self, **columns: Any) -> 'Record':
        """
        Return a new record with the given columns added or replaced.

        Args:
            **columns: Column values to set

        Returns:
            New Record; this record is unchanged
        """
        values = dict(self._values)
        values.update(columns)
        return Record(values)

    def without(self, *names: str) -> 'Record':
        """Return a new record without the named columns."""
        return Record({k: v for k, v in self._values.items() if k not in names})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return dict(self._values)


class ColumnDescriptor:
    """
    Describes one column of a dataset.
    """

    def __init__(self, name: str, kind: str, excluded: bool = False):
        if kind not in (NUMERICAL, CATEGORICAL):
            raise ValueError(f"Unknown column kind: {kind}")
        self.name = name
        self.kind = kind
        self.excluded = excluded

    @property
    def is_numerical(self) -> bool:
        return self.kind == NUMERICAL

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ColumnDescriptor):
            return NotImplemented
        return (self.name, self.kind, self.excluded) == (other.name, other.kind, other.excluded)

    def __repr__(self) -> str:
        return f"ColumnDescriptor(name={self.name!r}, kind={self.kind!r}, excluded={self.excluded})"


def discover_columns(records: Iterable[Record]) -> List[str]:
    """
    Collect column names in first-seen order across all records.

    Args:
        records: Records to scan

    Returns:
        Ordered list of column names
    """
    return distinct(name for record in records for name in record)


def column_kind(records: List[Record], name: str) -> str:
    """
    Determine whether a column is numerical or categorical.

    Core columns use their declared kind. Other columns are numerical when
    the first observed non-null value is a number.
    """
    if name in CORE_COLUMNS:
        return CORE_COLUMNS[name][1]

    for record in records:
        value = record.get(name)
        if value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return NUMERICAL
        return CATEGORICAL

    return CATEGORICAL


def records_from_dataframe(df: pd.DataFrame) -> List[Record]:
    """
    Convert a DataFrame (e.g. from pandas.read_csv) into records.

    Row order is preserved; NaN cells become None.

    Args:
        df: DataFrame with one passenger per row

    Returns:
        List of Record
    """
    columns = [str(c).strip() for c in df.columns]
    return [Record(dict(zip(columns, row))) for row in df.itertuples(index=False, name=None)]


def records_to_dataframe(records: List[Record]) -> pd.DataFrame:
    """
    Convert records into a DataFrame, one row per record.

    Args:
        records: Records to convert

    Returns:
        DataFrame whose columns follow the records' discovery order
    """
    columns = discover_columns(records)
    return pd.DataFrame([r.to_dict() for r in records], columns=columns)
