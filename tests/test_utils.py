"""
Tests for the general utilities and matrix validation.
"""

import pytest
import numpy as np
import pandas as pd
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from voyagemath.errors import MatrixShapeError, as_matrix
from voyagemath.utils.general import (
    argmax_first, distinct, first_differences, make_rng, median, mode
)


class TestGeneral:
    """Tests for the general utility functions."""

    def test_distinct(self):
        assert distinct([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_median(self):
        assert median([3, 1, 2]) == 2
        assert median([4, 1, 3, 2]) == 2.5
        assert median([], default=-1) == -1

    def test_mode(self):
        assert mode(['a', 'b', 'b']) == 'b'
        assert mode(['b', 'a', 'a', 'b']) == 'b'
        assert mode([], default='x') == 'x'

    def test_first_differences(self):
        assert first_differences([10, 4, 1]) == [6, 3]
        assert first_differences([5]) == []

    def test_argmax_first(self):
        assert argmax_first([1, 5, 5]) == 1
        assert argmax_first([]) == -1

    def test_make_rng(self):
        rng = np.random.default_rng(0)
        assert make_rng(rng, seed=5) is rng
        assert make_rng(seed=5).random() == np.random.default_rng(5).random()


class TestAsMatrix:
    """Tests for matrix validation."""

    def test_lists(self):
        result = as_matrix([[1, 2], [3, 4]])

        assert result.dtype == np.float64
        assert result.shape == (2, 2)

    def test_dataframe(self):
        result = as_matrix(pd.DataFrame({'a': [1, 2], 'b': [3.0, 4.0]}))
        assert np.array_equal(result, [[1.0, 3.0], [2.0, 4.0]])

    def test_empty(self):
        assert as_matrix([]).shape == (0, 0)
        assert as_matrix(np.zeros((0, 4))).shape == (0, 4)

    def test_ragged(self):
        with pytest.raises(MatrixShapeError):
            as_matrix([[1.0, 2.0], [3.0]])

    def test_flat_list(self):
        """Test that a single list of numbers is rejected as a matrix."""
        with pytest.raises(MatrixShapeError):
            as_matrix([1.0, 2.0, 3.0])
        with pytest.raises(MatrixShapeError):
            as_matrix([[1.0, 2.0], 3.0])

    def test_wrong_dimensions(self):
        with pytest.raises(MatrixShapeError):
            as_matrix(np.zeros((2, 2, 2)))

    def test_non_numeric(self):
        with pytest.raises(MatrixShapeError):
            as_matrix([['a', 'b']])

    def test_shape_error_is_value_error(self):
        with pytest.raises(ValueError):
            as_matrix([[1.0], [2.0, 3.0]])
