"""
Data models for nameserver-sort.

Defines structured types for transport profiles, per-candidate
probe outcomes, and the ranked result of a run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional


class Transport(Enum):
    """Address families the probe engine distinguishes."""
    IPV4_HOSTNAME = "ipv4"
    IPV6 = "ipv6"


class ProbeStatus(Enum):
    """Result status of a single liveness probe."""
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class TransportProfile:
    """Probe parameters selected for one candidate address."""
    transport: Transport
    timeout_seconds: Optional[float] = None
    min_reply_count: Optional[int] = None

    @property
    def is_bounded(self) -> bool:
        """Whether the probe carries an explicit timeout."""
        return self.timeout_seconds is not None


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing one candidate nameserver."""
    address: str
    status: ProbeStatus
    transport: Transport
    average_ms: Optional[float] = None
    error_message: Optional[str] = None

    @classmethod
    def reachable(
        cls,
        address: str,
        average_ms: float,
        transport: Transport = Transport.IPV4_HOSTNAME,
    ) -> "ProbeOutcome":
        return cls(
            address=address,
            status=ProbeStatus.REACHABLE,
            transport=transport,
            average_ms=average_ms,
        )

    @classmethod
    def unreachable(
        cls,
        address: str,
        error_message: Optional[str] = None,
        transport: Transport = Transport.IPV4_HOSTNAME,
    ) -> "ProbeOutcome":
        return cls(
            address=address,
            status=ProbeStatus.UNREACHABLE,
            transport=transport,
            error_message=error_message,
        )

    @property
    def is_reachable(self) -> bool:
        """Check if the probe produced a latency measurement."""
        return self.status == ProbeStatus.REACHABLE

    def to_record(self) -> dict:
        """Serializable form consumed by the output writers."""
        return {"average": self.average_ms, "address": self.address}


@dataclass
class RankedResult:
    """Reachable nameservers of a run, fastest first."""
    outcomes: list[ProbeOutcome] = field(default_factory=list)
    candidates_probed: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime = field(default_factory=datetime.now)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[ProbeOutcome]:
        return iter(self.outcomes)

    @property
    def is_empty(self) -> bool:
        return not self.outcomes

    @property
    def fastest(self) -> Optional[ProbeOutcome]:
        """Nameserver with the lowest average latency (if any responded)."""
        if not self.outcomes:
            return None
        return self.outcomes[0]

    @property
    def unreachable_count(self) -> int:
        return self.candidates_probed - len(self.outcomes)

    @property
    def duration_seconds(self) -> float:
        """Total run duration in seconds."""
        return (self.completed_at - self.started_at).total_seconds()

    def top(self, count: int) -> list[ProbeOutcome]:
        return self.outcomes[:count]

    def to_records(self) -> list[dict]:
        return [outcome.to_record() for outcome in self.outcomes]
