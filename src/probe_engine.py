"""
Core probe engine.

Fans out one liveness/latency probe per candidate nameserver and turns
every success or failure into a ProbeOutcome.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional

from .classifier import AddressClassifier
from .models import ProbeOutcome
from .transports import BaseTransport


logger = logging.getLogger(__name__)

# Type for progress callback
ProgressCallback = Callable[[str, int, int], None]


class ProbeEngine:
    """
    Concurrent nameserver probe engine.

    Every candidate is probed independently. A failing probe resolves to
    an unreachable outcome and never affects the other candidates.
    """

    def __init__(
        self,
        transport: BaseTransport,
        classifier: Optional[AddressClassifier] = None,
        concurrency: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the probe engine.

        Args:
            transport: Transport used to measure latency
            classifier: Chooses the probe profile per address
            concurrency: Maximum in-flight probes (default: unbounded)
            progress_callback: Called as each probe settles
        """
        if concurrency is not None and concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.transport = transport
        self.classifier = classifier or AddressClassifier()
        self.concurrency = concurrency
        self.progress_callback = progress_callback

    async def probe(self, address: str) -> ProbeOutcome:
        """
        Probe a single candidate.

        Args:
            address: IPv4/IPv6 literal or hostname

        Returns:
            ProbeOutcome, reachable with its average latency or unreachable
        """
        profile = self.classifier.classify(address)
        logger.debug("Pinging %s (%s)", address, profile.transport.value)

        try:
            average = await self.transport.probe(address, profile)
        except Exception as e:
            logger.debug("Average for %s is unknown: %s", address, e)
            return ProbeOutcome.unreachable(
                address,
                error_message=str(e) or type(e).__name__,
                transport=profile.transport,
            )

        logger.debug("Average for %s is %s ms", address, average)
        return ProbeOutcome.reachable(address, average, transport=profile.transport)

    def launch(self, candidates: Iterable[str]) -> list["asyncio.Task[ProbeOutcome]"]:
        """
        Start one probe task per candidate.

        Must be called from a running event loop. All tasks start at once;
        with a concurrency limit they queue on a semaphore instead.

        Returns:
            Tasks in candidate order
        """
        candidates = list(candidates)
        total = len(candidates)
        settled = 0
        semaphore = asyncio.Semaphore(self.concurrency) if self.concurrency else None

        async def tracked_probe(address: str) -> ProbeOutcome:
            nonlocal settled
            if semaphore is None:
                outcome = await self.probe(address)
            else:
                async with semaphore:
                    outcome = await self.probe(address)
            settled += 1
            if self.progress_callback:
                self.progress_callback(f"Probed {address}", settled, total)
            return outcome

        return [asyncio.ensure_future(tracked_probe(address)) for address in candidates]

    async def probe_all(self, candidates: Iterable[str]) -> list[ProbeOutcome]:
        """
        Probe every candidate concurrently.

        Returns:
            ProbeOutcome per candidate, in input order
        """
        return list(await asyncio.gather(*self.launch(candidates)))

    async def close(self):
        """Close the underlying transport."""
        await self.transport.close()
