"""
voyagemath: unsupervised analysis of passenger manifests.

Records are turned into a standardized numeric matrix, optionally reduced
with PCA, partitioned with k-means and scored with the silhouette
coefficient.
"""

__version__ = '0.1.0'

from voyagemath.data.records import Record
from voyagemath.errors import MatrixShapeError, OperationCancelled, VoyageMathError
from voyagemath.math import (
    compute_pca,
    engineer_features,
    find_optimal_k,
    impute_missing_values,
    kmeans,
    one_hot_encode,
    preprocess,
    silhouette_score,
    standardize,
)
