"""
Exception types raised by nameserver-sort.
"""


class NameserverSortError(Exception):
    """Base class for all nameserver-sort errors."""


class SourceUnavailable(NameserverSortError):
    """The candidate listing could not be fetched or was empty."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Candidate source {url} unavailable: {reason}")


class ProbeError(NameserverSortError):
    """A single probe failed (timeout, unreachable, too few replies)."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Probe of {address} failed: {reason}")


class EmptyResult(NameserverSortError):
    """Every candidate failed probing."""

    def __init__(self, candidates_probed: int):
        self.candidates_probed = candidates_probed
        super().__init__(
            f"No usable results: all {candidates_probed} candidates were unreachable"
        )
