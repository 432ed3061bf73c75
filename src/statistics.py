"""
Statistical summary of a ranked result.

Calculates the spread of latencies across the reachable nameservers:
- Basic stats: fastest, slowest, average, median
- Percentile: p95
- Reachability rate
"""

from dataclasses import dataclass

import numpy as np

from .models import RankedResult


@dataclass
class LatencySummary:
    """Latency spread over the reachable nameservers of a run."""
    candidates_probed: int
    reachable: int
    fastest_ms: float
    slowest_ms: float
    mean_ms: float
    median_ms: float
    p95_ms: float
    stddev_ms: float

    @property
    def reachable_rate(self) -> float:
        """Percentage of candidates that answered."""
        if self.candidates_probed == 0:
            return 0.0
        return (self.reachable / self.candidates_probed) * 100


class StatisticsEngine:
    """Calculates summary statistics from ranked results."""

    @staticmethod
    def summarize(result: RankedResult) -> LatencySummary:
        """
        Summarize the latencies of a ranked result.

        Args:
            result: RankedResult of a run

        Returns:
            LatencySummary, all zeros when nothing was reachable
        """
        if result.is_empty:
            return LatencySummary(
                candidates_probed=result.candidates_probed,
                reachable=0,
                fastest_ms=0.0,
                slowest_ms=0.0,
                mean_ms=0.0,
                median_ms=0.0,
                p95_ms=0.0,
                stddev_ms=0.0,
            )

        latencies = np.array([outcome.average_ms for outcome in result])

        return LatencySummary(
            candidates_probed=result.candidates_probed,
            reachable=len(latencies),
            fastest_ms=float(np.min(latencies)),
            slowest_ms=float(np.max(latencies)),
            mean_ms=float(np.mean(latencies)),
            median_ms=float(np.median(latencies)),
            p95_ms=float(np.percentile(latencies, 95)),
            stddev_ms=float(np.std(latencies)),
        )
