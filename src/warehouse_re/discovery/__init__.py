"""
Clustering key discovery.

    from warehouse_re.discovery import parse_clustering_key

    segments = parse_clustering_key(["A", "B"], "LINEAR(A, SUBSTRING(B, 1, 3))")
"""

from warehouse_re.discovery.clustering import (
    ClusteringKeyParser,
    parse_clustering_key,
)

__all__ = [
    "ClusteringKeyParser",
    "parse_clustering_key",
]
