"""
Analysis module: member distribution across virtual-node counts.
"""

from bucketring.analysis.distribution import (
    DistributionStats,
    distribution,
    distribution_count,
    distribution_percentage,
    distribution_summary,
    summarize,
    best_virtual_nodes,
)

__all__ = [
    "DistributionStats",
    "distribution",
    "distribution_count",
    "distribution_percentage",
    "distribution_summary",
    "summarize",
    "best_virtual_nodes",
]
