"""
Run orchestration for nameserver-sort.

A run fetches the candidate list, probes every candidate concurrently
and ranks the reachable ones by latency.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from .aggregator import ResultAggregator
from .classifier import AddressClassifier
from .config import Settings
from .errors import EmptyResult
from .models import RankedResult
from .probe_engine import ProbeEngine, ProgressCallback
from .sources import fetch_candidates
from .transports import BaseTransport, create_transport


logger = logging.getLogger(__name__)

# Signature of fetch_candidates, replaceable for tests and offline use
CandidateSource = Callable[[str, int], Awaitable[list[str]]]


class SortRunner:
    """
    Fetch, probe and rank nameservers for one country.

    Candidate source failures propagate before any probe is issued.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[BaseTransport] = None,
        source: Optional[CandidateSource] = None,
    ):
        """
        Initialize the runner.

        Args:
            settings: Run configuration
            transport: Probe transport (default: from settings.method)
            source: Candidate source (default: public-dns.info listing)
        """
        settings.validate()
        self.settings = settings
        self.source = source or fetch_candidates
        self.engine = ProbeEngine(
            transport=transport or create_transport(settings.method),
            classifier=AddressClassifier(
                timeout_seconds=settings.timeout_seconds,
                min_reply_count=settings.min_replies,
            ),
            concurrency=settings.concurrency,
        )

    async def rank(
        self,
        candidates: list[str],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RankedResult:
        """Probe the given candidates and rank the reachable ones."""
        self.engine.progress_callback = progress_callback
        aggregator = ResultAggregator(started_at=datetime.now())
        return await aggregator.aggregate(self.engine.launch(candidates))

    async def run(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        require_results: bool = False,
    ) -> RankedResult:
        """
        Execute a full run.

        Args:
            progress_callback: Optional callback for progress updates
            require_results: Raise EmptyResult instead of returning an empty ranking

        Returns:
            RankedResult, fastest first

        Raises:
            SourceUnavailable: if the candidate list cannot be fetched
            EmptyResult: if require_results and nothing answered
        """
        candidates = await self.source(self.settings.country_code, self.settings.max_servers)
        logger.debug("Probing %d candidates", len(candidates))

        result = await self.rank(candidates, progress_callback=progress_callback)

        if result.fastest is not None:
            logger.debug(
                "The fastest server is %s at %s ms",
                result.fastest.address,
                result.fastest.average_ms,
            )
        elif require_results:
            raise EmptyResult(result.candidates_probed)

        return result

    async def close(self):
        """Clean up resources."""
        await self.engine.close()
