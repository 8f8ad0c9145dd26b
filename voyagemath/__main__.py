"""
Main entry point for voyagemath.

Loads a passenger manifest, runs the clustering analysis and prints a
report.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import pandas as pd
import yaml

from voyagemath.analysis import Analysis
from voyagemath.components.config import ConfigManager, read_config_file
from voyagemath.data.records import records_from_dataframe


def setup_logging(level: str = 'INFO') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Cluster a passenger manifest')

    parser.add_argument(
        'csv',
        help='Path to a CSV file with one passenger per row'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration file (JSON or YAML)'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (logging.level from the configuration by default)'
    )

    parser.add_argument(
        '--k',
        type=int,
        help='Number of clusters'
    )

    parser.add_argument(
        '--components',
        type=int,
        help='Number of principal components to keep'
    )

    parser.add_argument(
        '--max-k',
        type=int,
        help='Largest k tried by the elbow and silhouette sweeps'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for reproducible runs'
    )

    parser.add_argument(
        '--no-sweep',
        action='store_true',
        help='Skip the elbow and silhouette sweeps'
    )

    parser.add_argument(
        '--format',
        default='json',
        choices=['json', 'yaml'],
        help='Output format'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.
    """
    # Parse arguments
    args = parse_args(argv)

    # Create overrides from arguments
    overrides = {}

    # Load configuration from file if provided
    if args.config:
        overrides.update(read_config_file(args.config))

    # Override with command line arguments
    if args.k is not None:
        overrides.setdefault('kmeans', {})['k'] = args.k

    if args.components is not None:
        overrides.setdefault('pca', {})['n-components'] = args.components

    if args.max_k is not None:
        overrides.setdefault('evaluation', {})['max-k'] = args.max_k

    if args.no_sweep:
        overrides.setdefault('evaluation', {})['sweep'] = False

    if args.seed is not None:
        overrides.setdefault('random', {})['seed'] = args.seed

    if args.log_level is not None:
        overrides.setdefault('logging', {})['level'] = args.log_level.lower()

    # Initialize configuration
    config = ConfigManager.get_config(overrides)

    # Set up logging
    setup_logging(config.get('logging.level', 'warn'))

    records = records_from_dataframe(pd.read_csv(args.csv))
    report = Analysis(config).run(records)

    if args.format == 'yaml':
        yaml.safe_dump(report.to_dict(), sys.stdout, default_flow_style=False, sort_keys=False)
    else:
        json.dump(report.to_dict(), sys.stdout, indent=2)
        sys.stdout.write('\n')

    return 0


if __name__ == '__main__':
    sys.exit(main())
