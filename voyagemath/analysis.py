"""
End-to-end analysis of a passenger dataset.

This module ties the preprocessing, PCA, k-means and evaluation steps
together: it clusters both the standardized matrix and its PCA projection,
recommends cluster counts and profiles the resulting clusters.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import numpy as np

from voyagemath.components.config import Config, ConfigManager
from voyagemath.data.records import Record
from voyagemath.math.clusters import ClusterAssignment, kmeans, squared_inertia
from voyagemath.math.evaluation import (
    ELBOW, SILHOUETTE, OptimalKResult, find_optimal_k, silhouette_score
)
from voyagemath.math.pca import PCAResult, compute_pca
from voyagemath.math.preprocess import ProcessedData, preprocess
from voyagemath.math.profiles import (
    cluster_category_distribution, cluster_outcome_rates, cluster_profiles
)
from voyagemath.utils.general import make_rng

logger = logging.getLogger(__name__)

# Used when no k is configured and no sweep ran
DEFAULT_K = 3


class AnalysisReport:
    """
    Everything computed by one Analysis run.
    """

    def __init__(self,
                 data: ProcessedData,
                 k: Optional[int],
                 pca: Optional[PCAResult] = None,
                 clusters: Optional[ClusterAssignment] = None,
                 pca_clusters: Optional[ClusterAssignment] = None,
                 elbow: Optional[OptimalKResult] = None,
                 silhouette: Optional[OptimalKResult] = None,
                 silhouette_value: Optional[float] = None,
                 profiles: Optional[Dict[Any, Dict[str, Any]]] = None,
                 outcome_rates: Optional[Dict[Any, float]] = None,
                 pca_profiles: Optional[Dict[Any, Dict[str, Any]]] = None,
                 pca_outcome_rates: Optional[Dict[Any, float]] = None,
                 distributions: Optional[Dict[str, Dict[Any, Dict[str, float]]]] = None,
                 pca_distributions: Optional[Dict[str, Dict[Any, Dict[str, float]]]] = None,
                 elapsed: float = 0.0):
        self.data = data
        self.k = k
        self.pca = pca
        self.clusters = clusters
        self.pca_clusters = pca_clusters
        self.elbow = elbow
        self.silhouette = silhouette
        self.silhouette_value = silhouette_value
        self.profiles = profiles or {}
        self.outcome_rates = outcome_rates or {}
        self.pca_profiles = pca_profiles or {}
        self.pca_outcome_rates = pca_outcome_rates or {}
        self.distributions = distributions or {}
        self.pca_distributions = pca_distributions or {}
        self.elapsed = elapsed

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a short summary of the run.

        Returns:
            Dictionary with the headline numbers
        """
        return {
            'n_records': len(self.data.original),
            'n_features': len(self.data.features),
            'k': self.k,
            'inertia': self.clusters.inertia if self.clusters else None,
            'silhouette': self.silhouette_value,
            'elbow_k': self.elbow.recommended_k if self.elbow else None,
            'silhouette_k': self.silhouette.recommended_k if self.silhouette else None,
            'elapsed': round(self.elapsed, 3),
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the report to plain Python types for JSON or YAML output.

        Returns:
            Report dictionary
        """
        def keyed(d: Dict[Any, Any]) -> Dict[str, Any]:
            return {str(k): v for k, v in d.items()}

        result = {
            'summary': self.get_summary(),
            'preprocessing': self.data.to_dict(),
        }

        if self.pca is not None:
            result['pca'] = {
                'n_components': self.pca.n_components,
                'explained_variance_ratios': self.pca.explained_variance_ratios.tolist(),
                'cumulative_variance': self.pca.cumulative_variance().tolist(),
            }

        if self.elbow is not None:
            result['elbow'] = self.elbow.to_dict()
        if self.silhouette is not None:
            result['silhouette'] = self.silhouette.to_dict()

        if self.clusters is not None:
            result['clusters'] = {
                'sizes': self.clusters.cluster_sizes(),
                'inertia': self.clusters.inertia,
                'iterations': self.clusters.iterations,
                'converged': self.clusters.converged,
                'profiles': keyed(self.profiles),
                'outcome_rates': keyed(self.outcome_rates),
                'distributions': {c: keyed(d) for c, d in self.distributions.items()},
            }

        if self.pca_clusters is not None:
            result['pca_clusters'] = {
                'sizes': self.pca_clusters.cluster_sizes(),
                'inertia': self.pca_clusters.inertia,
                'profiles': keyed(self.pca_profiles),
                'outcome_rates': keyed(self.pca_outcome_rates),
                'distributions': {c: keyed(d) for c, d in self.pca_distributions.items()},
            }

        return result


class Analysis:
    """
    Runs the clustering pipeline with settings taken from a Config.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 rng: Optional[np.random.Generator] = None,
                 cancel_event: Optional[threading.Event] = None):
        """
        Initialize the analysis.

        Args:
            config: Configuration (the shared instance by default)
            rng: Random generator; created from random.seed when None
            cancel_event: Passed on to the long-running steps
        """
        self.config = config or ConfigManager.get_config()
        self.rng = make_rng(rng, self.config.get('random.seed'))
        self.cancel_event = cancel_event

    def _compute_pca(self, matrix: np.ndarray, n_components: Optional[int]) -> PCAResult:
        return compute_pca(
            matrix,
            n_components,
            iters=self.config.get('pca.iterations', 30),
            tolerance=self.config.get('pca.tolerance'),
            rng=self.rng,
        )

    def _compute_clusters(self, matrix: np.ndarray, k: int) -> ClusterAssignment:
        return kmeans(
            matrix,
            k,
            self.config.get('kmeans.max-iterations', 100),
            rng=self.rng,
            cancel_event=self.cancel_event,
        )

    def _sweep(self, matrix: np.ndarray, method: str) -> Optional[OptimalKResult]:
        """Run a k sweep, skipping silhouette sweeps on large inputs."""
        max_rows = self.config.get('evaluation.silhouette-max-rows')
        if method == SILHOUETTE and max_rows is not None and matrix.shape[0] > max_rows:
            logger.warning(
                f"Skipping silhouette sweep: {matrix.shape[0]} rows exceeds the limit of {max_rows}"
            )
            return None

        return find_optimal_k(
            matrix,
            self.config.get('evaluation.max-k', 10),
            method,
            max_iters=self.config.get('kmeans.max-iterations', 100),
            rng=self.rng,
            cancel_event=self.cancel_event,
        )

    def _choose_k(self, report: AnalysisReport) -> int:
        """
        Take k from the sweep named by evaluation.method.

        Falls back to the other sweep when that one was skipped, and to
        DEFAULT_K when neither ran.
        """
        method = self.config.get('evaluation.method', ELBOW)
        sweeps = {ELBOW: report.elbow, SILHOUETTE: report.silhouette}
        if method not in sweeps:
            raise ValueError(f"Unknown k selection method: {method}")

        chosen = sweeps[method] or report.elbow or report.silhouette
        if chosen is None:
            logger.info(f"No sweep results, using k={DEFAULT_K}")
            return DEFAULT_K

        if chosen.method != method:
            logger.warning(f"No {method} sweep results, using the {chosen.method} recommendation")
        return chosen.recommended_k

    def _distributions(self,
                       records: List[Record],
                       labels: np.ndarray) -> Dict[str, Dict[Any, Dict[str, float]]]:
        columns = self.config.get('profiles.distribution-columns') or []
        return {
            column: cluster_category_distribution(records, labels, column)
            for column in columns
            if any(column in record for record in records)
        }

    def run(self,
            records: List[Record],
            k: Optional[int] = None,
            n_components: Optional[int] = None,
            sweep: Optional[bool] = None) -> AnalysisReport:
        """
        Analyze a dataset.

        Without an explicit k (argument or kmeans.k) the cluster count is the
        recommendation of the sweep named by evaluation.method.

        Args:
            records: Passenger records
            k: Number of clusters (kmeans.k by default)
            n_components: PCA components to keep (pca.n-components by default)
            sweep: Whether to run the elbow and silhouette sweeps

        Returns:
            AnalysisReport
        """
        start_time = time.time()

        if k is None:
            k = self.config.get('kmeans.k')
        if n_components is None:
            n_components = self.config.get('pca.n-components')
        if sweep is None:
            sweep = self.config.get('evaluation.sweep', True)

        data = preprocess(records)
        matrix = data.processed
        report = AnalysisReport(data, k)

        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            logger.info("No data to analyze")
            report.elapsed = time.time() - start_time
            return report

        report.pca = self._compute_pca(matrix, n_components)
        logger.info(
            f"[{time.time() - start_time:.2f}s] PCA kept {report.pca.n_components} components"
        )

        if sweep:
            report.elbow = self._sweep(matrix, ELBOW)
            report.silhouette = self._sweep(matrix, SILHOUETTE)
            logger.info(f"[{time.time() - start_time:.2f}s] Cluster count sweeps completed")

        if k is None:
            k = self._choose_k(report)
            report.k = k

        report.clusters = self._compute_clusters(matrix, k)
        max_rows = self.config.get('evaluation.silhouette-max-rows')
        if max_rows is None or matrix.shape[0] <= max_rows:
            report.silhouette_value = silhouette_score(
                matrix, report.clusters.labels, cancel_event=self.cancel_event
            )
        report.profiles = cluster_profiles(data.original, report.clusters.labels)
        report.outcome_rates = cluster_outcome_rates(data.outcome_column, report.clusters.labels)
        report.distributions = self._distributions(data.original, report.clusters.labels)

        logger.info(
            f"k-means k={k}: inertia={report.clusters.inertia:.4f}, "
            f"sum of squares={squared_inertia(matrix, report.clusters):.4f}, "
            f"silhouette={report.silhouette_value}"
        )

        if report.pca.n_components > 0:
            report.pca_clusters = self._compute_clusters(report.pca.projected, k)
            report.pca_profiles = cluster_profiles(data.original, report.pca_clusters.labels)
            report.pca_outcome_rates = cluster_outcome_rates(
                data.outcome_column, report.pca_clusters.labels
            )
            report.pca_distributions = self._distributions(
                data.original, report.pca_clusters.labels
            )

        report.elapsed = time.time() - start_time
        logger.info(f"Analysis completed in {report.elapsed:.2f}s")
        return report
