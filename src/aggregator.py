"""
Result aggregation.

Waits for every outstanding probe, drops unreachable candidates and
orders the rest by ascending latency.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Iterable, Optional

from .models import ProbeOutcome, RankedResult


logger = logging.getLogger(__name__)


class AggregatorState(Enum):
    COLLECTING = "collecting"
    COMPLETE = "complete"


def rank_outcomes(outcomes: Iterable[ProbeOutcome]) -> list[ProbeOutcome]:
    """
    Keep reachable outcomes, fastest first.

    The sort is stable, so equal latencies keep their settle order.
    """
    reachable = [outcome for outcome in outcomes if outcome.is_reachable]
    return sorted(reachable, key=lambda outcome: outcome.average_ms)


class ResultAggregator:
    """
    Single-shot barrier over a batch of probes.

    An aggregator collects exactly one batch; create a new one per run.
    """

    def __init__(self, started_at: Optional[datetime] = None):
        self.state = AggregatorState.COLLECTING
        self.started_at = started_at or datetime.now()
        self._consumed = False

    async def aggregate(
        self,
        pending: Iterable[Awaitable[ProbeOutcome]],
    ) -> RankedResult:
        """
        Wait for all probes to settle and rank the reachable ones.

        Args:
            pending: Probe tasks or coroutines, one per candidate

        Returns:
            RankedResult, possibly empty
        """
        if self._consumed:
            raise RuntimeError("ResultAggregator is single-shot; create a new one per run")
        self._consumed = True

        outcomes = await asyncio.gather(*pending)
        ranked = rank_outcomes(outcomes)
        self.state = AggregatorState.COMPLETE

        logger.debug(
            "%d of %d candidates reachable",
            len(ranked),
            len(outcomes),
        )

        return RankedResult(
            outcomes=ranked,
            candidates_probed=len(outcomes),
            started_at=self.started_at,
            completed_at=datetime.now(),
        )
