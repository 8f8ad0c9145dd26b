"""
Core algorithms for preprocessing, PCA, K-means clustering and evaluation.

This module contains implementations of:
- Feature engineering, imputation, one-hot encoding and standardization
- Principal Component Analysis (PCA) by power iteration
- K-means clustering with k-means++ seeding
- Silhouette scoring and cluster count selection
"""

from voyagemath.math.features import engineer_features
from voyagemath.math.imputation import impute_missing_values
from voyagemath.math.encoding import FeatureSchema, one_hot_encode, standardize
from voyagemath.math.preprocess import ProcessedData, preprocess
from voyagemath.math.pca import PCAResult, compute_pca
from voyagemath.math.clusters import ClusterAssignment, kmeans
from voyagemath.math.evaluation import OptimalKResult, find_optimal_k, silhouette_score

__all__ = [
    'engineer_features',
    'impute_missing_values',
    'FeatureSchema',
    'one_hot_encode',
    'standardize',
    'ProcessedData',
    'preprocess',
    'PCAResult',
    'compute_pca',
    'ClusterAssignment',
    'kmeans',
    'OptimalKResult',
    'find_optimal_k',
    'silhouette_score',
]
