"""
Tests for the cluster profiling module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from voyagemath.data.records import Record
from voyagemath.math.profiles import (
    cluster_category_distribution, cluster_outcome_rates, cluster_profiles
)


@pytest.fixture
def records():
    return [
        Record(Pclass=1, Age=30.0, Sex='female', Embarked='S'),
        Record(Pclass=3, Age=20.0, Sex='male', Embarked='S'),
        Record(Pclass=1, Age=None, Sex='female', Embarked='C'),
        Record(Pclass=3, Age=40.0, Sex='male', Embarked=None),
    ]


class TestClusterProfiles:
    """Tests for cluster_profiles."""

    def test_first_appearance_order(self, records):
        profiles = cluster_profiles(records, [1, 0, 1, 0])
        assert list(profiles) == [1, 0]

    def test_numeric_means(self, records):
        """Test means, with missing values counted as zero."""
        profiles = cluster_profiles(records, np.array([1, 0, 1, 0]))

        assert profiles[1]['size'] == 2
        assert np.isclose(profiles[1]['Pclass'], 1.0)
        assert np.isclose(profiles[1]['Age'], 15.0)
        assert np.isclose(profiles[0]['Age'], 30.0)

    def test_categorical_modes(self, records):
        """Test modes, with missing values counted as empty strings."""
        profiles = cluster_profiles(records, [1, 0, 1, 0])

        assert profiles[1]['Sex'] == 'female'
        # 'S' and '' tie; the first seen wins
        assert profiles[0]['Embarked'] == 'S'

    def test_columns_of_first_member(self):
        """Test that only the first member's columns are profiled."""
        records = [Record(Pclass=1), Record(Pclass=2, Sex='male')]
        profiles = cluster_profiles(records, [0, 0])

        assert set(profiles[0]) == {'size', 'Pclass'}

    def test_length_mismatch(self, records):
        with pytest.raises(ValueError):
            cluster_profiles(records, [0, 1])


class TestOutcomeRates:
    """Tests for cluster_outcome_rates."""

    def test_rates(self):
        rates = cluster_outcome_rates([1, 0, 1, 1], [0, 0, 1, 1])

        assert list(rates) == [0, 1]
        assert np.isclose(rates[0], 0.5)
        assert np.isclose(rates[1], 1.0)

    def test_no_outcome(self):
        assert cluster_outcome_rates(None, [0, 1]) == {}

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            cluster_outcome_rates([1, 0], [0])


class TestCategoryDistribution:
    """Tests for cluster_category_distribution."""

    def test_proportions(self, records):
        """Test per-cluster shares, most common value first."""
        distribution = cluster_category_distribution(records, [0, 0, 0, 1], 'Sex')

        assert list(distribution) == [0, 1]
        assert list(distribution[0]) == ['female', 'male']
        assert np.isclose(distribution[0]['female'], 2 / 3)
        assert np.isclose(distribution[0]['male'], 1 / 3)
        assert distribution[1] == {'male': 1.0}

    def test_values_as_strings(self, records):
        distribution = cluster_category_distribution(records, np.array([1, 0, 1, 0]), 'Pclass')

        assert distribution[1] == {'1': 1.0}
        assert distribution[0] == {'3': 1.0}

    def test_missing_as_empty_string(self, records):
        distribution = cluster_category_distribution(records, [1, 0, 1, 0], 'Embarked')

        assert np.isclose(distribution[0]['S'], 0.5)
        assert np.isclose(distribution[0][''], 0.5)
        assert np.isclose(sum(distribution[1].values()), 1.0)

    def test_length_mismatch(self, records):
        with pytest.raises(ValueError):
            cluster_category_distribution(records, [0], 'Sex')
