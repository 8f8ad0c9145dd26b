"""
Pytest configuration and fixtures for voyagemath tests.
"""

import os
import sys

import numpy as np
import pytest

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from voyagemath.components.config import ConfigManager
from voyagemath.data.records import Record


TITLES = ['Mr', 'Mrs', 'Miss', 'Master']
PORTS = ['S', 'C', 'Q']


class StubRng:
    """
    Stand-in for numpy's Generator that returns scripted values.

    integers() and random() pop from their queues and repeat the last
    value once a queue is exhausted.
    """

    def __init__(self, integers=(0,), randoms=(0.5,)):
        self._integers = list(integers)
        self._randoms = list(randoms)

    def integers(self, high):
        value = self._integers.pop(0) if len(self._integers) > 1 else self._integers[0]
        return value % high

    def random(self, size=None):
        value = self._randoms.pop(0) if len(self._randoms) > 1 else self._randoms[0]
        if size is None:
            return value
        return np.full(size, value)


def make_passengers(n: int = 40, seed: int = 0):
    """Build a synthetic passenger manifest with some missing cells."""
    rng = np.random.default_rng(seed)
    records = []
    for i in range(n):
        title = TITLES[i % len(TITLES)]
        pclass = int(rng.integers(1, 4))
        records.append(Record({
            'PassengerId': i + 1,
            'Survived': int(rng.integers(0, 2)),
            'Pclass': pclass,
            'Name': f"Family{i}, {title}. Given",
            'Sex': 'female' if title in ('Mrs', 'Miss') else 'male',
            'Age': None if i % 7 == 0 else float(rng.integers(1, 70)),
            'SibSp': int(rng.integers(0, 3)),
            'Parch': int(rng.integers(0, 3)),
            'Ticket': f"T{1000 + i}",
            'Fare': float(np.round(100.0 / pclass + rng.random() * 10, 2)),
            'Cabin': f"C{i}" if pclass == 1 else '',
            'Embarked': '' if i % 11 == 5 else PORTS[i % len(PORTS)],
        }))
    return records


@pytest.fixture
def passengers():
    """A 40-row synthetic manifest."""
    return make_passengers()


@pytest.fixture
def blobs():
    """Three well separated 2-D Gaussian blobs of 30 points each."""
    rng = np.random.default_rng(7)
    centers = np.array([[0.0, 0.0], [20.0, 0.0], [0.0, 20.0]])
    return np.vstack([c + rng.normal(scale=0.5, size=(30, 2)) for c in centers])


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from VOYAGE_* variables and the shared config."""
    for name in list(os.environ):
        if name.startswith('VOYAGE_') or name == 'LOG_LEVEL':
            monkeypatch.delenv(name, raising=False)
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def passenger_csv(tmp_path):
    """The synthetic manifest written to a CSV file."""
    from voyagemath.data.records import records_to_dataframe

    path = tmp_path / 'passengers.csv'
    records_to_dataframe(make_passengers()).to_csv(path, index=False)
    return str(path)
