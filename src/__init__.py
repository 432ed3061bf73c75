"""
nameserver-sort - rank public DNS nameservers by latency.

Fetches the public nameservers of a country, probes them concurrently
and writes the fastest ones out as JSON, CSV and a BIND forwarders block.
"""

__version__ = "1.0.0"
__author__ = "nameserver-sort contributors"

from .aggregator import ResultAggregator
from .classifier import AddressClassifier
from .models import ProbeOutcome, ProbeStatus, RankedResult, Transport, TransportProfile
from .probe_engine import ProbeEngine
from .runner import SortRunner

__all__ = [
    "__version__",
    "AddressClassifier",
    "ProbeEngine",
    "ProbeOutcome",
    "ProbeStatus",
    "RankedResult",
    "ResultAggregator",
    "SortRunner",
    "Transport",
    "TransportProfile",
]
