"""
Tests for the analysis runner and the command line entry point.
"""

import json
import threading

import pytest
import numpy as np
import yaml
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import voyagemath.__main__ as entry_point
from voyagemath.__main__ import main, parse_args
from voyagemath.analysis import DEFAULT_K, Analysis
from voyagemath.components.config import Config
from voyagemath.errors import OperationCancelled


@pytest.fixture
def config():
    return Config({
        'kmeans': {'k': 3},
        'evaluation': {'max-k': 4},
        'random': {'seed': 0},
    })


class TestAnalysis:
    """Tests for the Analysis runner."""

    def test_run(self, passengers, config):
        """Test a full run on a small manifest."""
        report = Analysis(config).run(passengers)

        assert report.k == 3
        assert len(report.clusters.labels) == 40
        assert sum(report.clusters.cluster_sizes()) == 40
        assert report.pca.n_components == report.data.processed.shape[1]
        assert np.isclose(np.sum(report.pca.explained_variance_ratios), 1.0)
        assert report.pca_clusters is not None
        assert -1.0 <= report.silhouette_value <= 1.0

        assert report.elbow.k_values == [2, 3, 4]
        assert report.silhouette.k_values == [2, 3, 4]

        assert sum(p['size'] for p in report.profiles.values()) == 40
        assert set(report.outcome_rates) == set(report.profiles)
        assert all(0.0 <= rate <= 1.0 for rate in report.outcome_rates.values())

    def test_reproducible(self, passengers, config):
        first = Analysis(config).run(passengers)
        second = Analysis(config).run(passengers)

        assert np.array_equal(first.clusters.labels, second.clusters.labels)
        assert np.array_equal(first.pca.projected, second.pca.projected)

    def test_arguments_override_config(self, passengers, config):
        """Test that run arguments win over configuration values."""
        report = Analysis(config).run(passengers, k=2, n_components=2, sweep=False)

        assert report.k == 2
        assert report.clusters.k == 2
        assert report.pca.n_components == 2
        assert report.pca.projected.shape == (40, 2)
        assert report.elbow is None
        assert report.silhouette is None

    def test_silhouette_row_limit(self, passengers, config):
        """Test that large inputs skip silhouette scoring."""
        config.set('evaluation.silhouette-max-rows', 10)
        report = Analysis(config).run(passengers)

        assert report.silhouette is None
        assert report.silhouette_value is None
        assert report.elbow is not None

    def test_to_dict_serializable(self, passengers, config):
        report = Analysis(config).run(passengers)
        data = json.loads(json.dumps(report.to_dict()))

        assert data['summary']['n_records'] == 40
        assert data['summary']['k'] == 3
        assert len(data['pca']['explained_variance_ratios']) == data['pca']['n_components']
        assert sum(data['clusters']['sizes']) == 40
        assert all(isinstance(key, str) for key in data['clusters']['profiles'])

    def test_empty(self, config):
        """Test that no records give an empty report."""
        report = Analysis(config).run([])

        assert report.pca is None
        assert report.clusters is None
        assert report.get_summary()['n_records'] == 0
        assert 'clusters' not in report.to_dict()

    def test_cancelled(self, passengers, config):
        event = threading.Event()
        event.set()

        with pytest.raises(OperationCancelled):
            Analysis(config, cancel_event=event).run(passengers)

    def test_cancelled_without_sweeps(self, passengers, config):
        """Test that cancellation stops a run that skips the sweeps."""
        event = threading.Event()
        event.set()

        with pytest.raises(OperationCancelled):
            Analysis(config, cancel_event=event).run(passengers, sweep=False)

    @pytest.mark.parametrize('method', ['elbow', 'silhouette'])
    def test_k_from_method(self, passengers, method):
        """Test that without a configured k the chosen sweep picks it."""
        config = Config({
            'evaluation': {'max-k': 5, 'method': method},
            'random': {'seed': 0},
        })
        report = Analysis(config).run(passengers)
        chosen = report.elbow if method == 'elbow' else report.silhouette

        assert report.k == chosen.recommended_k
        assert report.clusters.k == report.k

    def test_k_falls_back_to_elbow(self, passengers):
        """Test that a skipped silhouette sweep falls back to the elbow."""
        config = Config({
            'evaluation': {'max-k': 4, 'method': 'silhouette', 'silhouette-max-rows': 10},
            'random': {'seed': 0},
        })
        report = Analysis(config).run(passengers)

        assert report.silhouette is None
        assert report.k == report.elbow.recommended_k

    def test_k_default_without_sweep(self, passengers):
        report = Analysis(Config({'random': {'seed': 0}})).run(passengers, sweep=False)
        assert report.k == DEFAULT_K

    def test_unknown_method(self, passengers):
        config = Config({'evaluation': {'max-k': 3, 'method': 'gap'}})
        with pytest.raises(ValueError):
            Analysis(config).run(passengers)

    def test_distributions(self, passengers, config):
        """Test the Sex and Pclass breakdowns of every cluster."""
        report = Analysis(config).run(passengers)

        assert list(report.distributions) == ['Sex', 'Pclass']
        assert set(report.distributions['Sex']) == set(report.profiles)
        for shares in report.distributions['Pclass'].values():
            assert set(shares) <= {'1', '2', '3'}
            assert np.isclose(sum(shares.values()), 1.0)
        assert list(report.pca_distributions) == ['Sex', 'Pclass']

        data = json.loads(json.dumps(report.to_dict()))
        assert set(data['clusters']['distributions']) == {'Sex', 'Pclass'}
        assert data['preprocessing']['summary']['row_count'] == 40

    def test_distribution_columns_absent(self, config):
        """Test that configured columns missing from the data are skipped."""
        records = [{'Age': float(i), 'Fare': float(i % 3)} for i in range(12)]
        report = Analysis(config).run(records, sweep=False)

        assert report.distributions == {}


class TestCommandLine:
    """Tests for the command line entry point."""

    def test_parse_args(self):
        args = parse_args(['data.csv', '--k', '4', '--no-sweep'])

        assert args.csv == 'data.csv'
        assert args.k == 4
        assert args.no_sweep
        assert args.format == 'json'
        assert args.log_level is None

    def test_main_json(self, passenger_csv, capsys):
        """Test a run that prints a JSON report."""
        exit_code = main([passenger_csv, '--k', '2', '--max-k', '3', '--seed', '1'])
        report = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert report['summary']['n_records'] == 40
        assert report['summary']['k'] == 2
        assert report['elbow']['k_values'] == [2, 3]
        assert sum(report['clusters']['sizes']) == 40

    def test_main_yaml_with_config(self, passenger_csv, tmp_path, capsys):
        """Test a run with a config file and YAML output."""
        config_path = tmp_path / 'settings.yaml'
        config_path.write_text(yaml.safe_dump({'kmeans': {'k': 4}, 'random': {'seed': 2}}))

        exit_code = main([passenger_csv, '--config', str(config_path), '--no-sweep',
                          '--format', 'yaml'])
        report = yaml.safe_load(capsys.readouterr().out)

        assert exit_code == 0
        assert report['summary']['k'] == 4
        assert 'elbow' not in report

    def test_log_level_from_config(self, passenger_csv, monkeypatch, capsys):
        """Test that logging.level sets the level unless --log-level is given."""
        levels = []
        monkeypatch.setattr(entry_point, 'setup_logging', levels.append)
        monkeypatch.setenv('LOG_LEVEL', 'INFO')

        main([passenger_csv, '--k', '2', '--no-sweep'])
        main([passenger_csv, '--k', '2', '--no-sweep', '--log-level', 'ERROR'])
        capsys.readouterr()

        assert levels == ['info', 'error']
