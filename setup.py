"""
Setup script for voyagemath package.
"""

from setuptools import setup, find_packages

setup(
    name="voyagemath",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        # Testing
        "test": [
            "pytest>=6.0.0",
            "scikit-learn>=1.0.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'voyagemath=voyagemath.__main__:main',
        ],
    },
    author="Cluster Voyage Team",
    description="Preprocessing, PCA and k-means clustering for passenger manifests",
    keywords="titanic, pca, kmeans, clustering, silhouette",
    python_requires=">=3.8",
)
