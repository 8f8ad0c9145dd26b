"""
Tests for the records module.
"""

import numpy as np
import pandas as pd
import pytest
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from voyagemath.data.records import (
    CATEGORICAL, NUMERICAL, ColumnDescriptor, Record, column_kind,
    discover_columns, is_missing, records_from_dataframe, records_to_dataframe
)


class TestRecord:
    """Tests for the Record class."""

    def test_core_columns_are_coerced(self):
        """Test that manifest columns get their declared types."""
        record = Record({
            'PassengerId': '1',
            'Survived': 0,
            'Age': '',
            'Fare': '7.25',
            'Name': 'Braund, Mr. Owen Harris',
            'SibSp': 1.0,
        })

        assert record['PassengerId'] == 1
        assert isinstance(record['PassengerId'], int)
        assert record['Survived'] == 0
        assert record['Age'] is None
        assert record['Fare'] == 7.25
        assert record['SibSp'] == 1
        assert isinstance(record['SibSp'], int)

    def test_fractional_integer_column_is_kept(self):
        """Test that an imputed fractional count is not truncated."""
        record = Record(Parch=1.5)
        assert record['Parch'] == 1.5

    def test_nan_becomes_none(self):
        """Test that NaN cells are treated as missing."""
        record = Record({'Age': float('nan'), 'Cabin': np.nan, 'Extra': np.float64('nan')})

        assert record['Age'] is None
        assert record['Cabin'] is None
        assert record['Extra'] is None

    def test_column_order(self):
        """Test that core columns come first in manifest order."""
        record = Record({'Custom': 1, 'Embarked': 'S', 'Pclass': 3, 'Another': 'x'})
        assert list(record) == ['Pclass', 'Embarked', 'Custom', 'Another']

    def test_with_values_is_pure(self):
        """Test that with_values leaves the original unchanged."""
        record = Record(Pclass=3)
        updated = record.with_values(FamilySize=2, Pclass=1)

        assert record['Pclass'] == 3
        assert 'FamilySize' not in record
        assert updated['Pclass'] == 1
        assert updated['FamilySize'] == 2

    def test_without(self):
        """Test removing columns."""
        record = Record(Survived=1, Pclass=2)
        assert list(record.without('Survived')) == ['Pclass']

    def test_equality(self):
        """Test comparing records with records and plain dicts."""
        assert Record(Pclass=1) == Record({'Pclass': '1'})
        assert Record(Pclass=1) == {'Pclass': 1}
        assert Record(Pclass=1) != Record(Pclass=2)


class TestColumnHelpers:
    """Tests for the column helper functions."""

    def test_is_missing(self):
        assert is_missing(None)
        assert is_missing(float('nan'))
        assert not is_missing('')
        assert not is_missing(0)

    def test_discover_columns(self):
        """Test first-seen column order across records."""
        records = [Record(Pclass=1, Extra=1), Record(Sex='male', Other='a')]
        assert discover_columns(records) == ['Pclass', 'Extra', 'Sex', 'Other']

    def test_column_kind(self):
        """Test column classification."""
        records = [Record(Extra=None, Label=None), Record(Extra=2.5, Label='x')]

        assert column_kind(records, 'Age') == NUMERICAL
        assert column_kind(records, 'Sex') == CATEGORICAL
        assert column_kind(records, 'Extra') == NUMERICAL
        assert column_kind(records, 'Label') == CATEGORICAL

    def test_column_descriptor(self):
        """Test ColumnDescriptor validation and equality."""
        descriptor = ColumnDescriptor('Age', NUMERICAL)
        assert descriptor.is_numerical
        assert not descriptor.excluded
        assert descriptor == ColumnDescriptor('Age', NUMERICAL, False)

        with pytest.raises(ValueError):
            ColumnDescriptor('Age', 'ordinal')


class TestDataFrameConversion:
    """Tests for converting between DataFrames and records."""

    def test_records_from_dataframe(self):
        """Test that rows keep their order and NaN becomes None."""
        df = pd.DataFrame({
            'PassengerId': [1, 2],
            'Age': [22.0, np.nan],
            'Cabin': [np.nan, 'C85'],
            'Embarked': ['S', 'C'],
        })

        records = records_from_dataframe(df)

        assert len(records) == 2
        assert records[0]['PassengerId'] == 1
        assert records[1]['Age'] is None
        assert records[0]['Cabin'] is None
        assert records[1]['Cabin'] == 'C85'

    def test_records_to_dataframe(self):
        """Test converting records back into a DataFrame."""
        records = [Record(Pclass=1, Sex='male'), Record(Pclass=3, Sex='female')]
        df = records_to_dataframe(records)

        assert list(df.columns) == ['Pclass', 'Sex']
        assert df['Pclass'].tolist() == [1, 3]
