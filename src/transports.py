"""
Probe transport implementations.

Provides transport classes for measuring nameserver round-trip latency:
- Ping (ICMP echo via the system ping binary)
- TCP (connect time to the DNS port)

Each transport returns the average latency in milliseconds or raises
ProbeError. None of them retries.
"""

import asyncio
import math
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

from .errors import ProbeError
from .models import Transport, TransportProfile
from .system_utils import find_ping_binary, get_platform


# Echo requests sent when a profile does not set a minimum reply count
DEFAULT_PROBE_COUNT = 1

# Interval between echo requests used by ping unless told otherwise
PING_INTERVAL_SECONDS = 1.0

# Slack added on top of the expected ping runtime before killing the process
PROCESS_GRACE_SECONDS = 2.0

DNS_PORT = 53

_RECEIVED_PATTERNS = [
    re.compile(r"(\d+)\s+(?:packets\s+)?received"),   # Linux, macOS
    re.compile(r"Received\s*=\s*(\d+)"),               # Windows
]
_AVERAGE_PATTERNS = [
    re.compile(r"=\s*[\d.]+/([\d.]+)/[\d.]+"),         # rtt min/avg/max[/mdev]
    re.compile(r"Average\s*=\s*(\d+(?:\.\d+)?)\s*ms"),  # Windows
]


class BaseTransport(ABC):
    """Base class for probe transports."""

    name: str

    @abstractmethod
    async def probe(self, address: str, profile: TransportProfile) -> float:
        """
        Probe one address and return its average latency.

        Returns:
            Average round-trip latency in milliseconds

        Raises:
            ProbeError: if the address did not answer well enough
        """
        pass

    async def close(self):
        """Release any resources held by the transport."""


def parse_ping_output(output: str) -> tuple[int, Optional[float]]:
    """
    Extract reply count and average RTT from ping's summary.

    Returns:
        Tuple of (replies_received, average_ms or None)
    """
    received = 0
    for pattern in _RECEIVED_PATTERNS:
        match = pattern.search(output)
        if match:
            received = int(match.group(1))
            break

    average = None
    for pattern in _AVERAGE_PATTERNS:
        match = pattern.search(output)
        if match:
            average = float(match.group(1))
            break

    return received, average


def build_ping_command(
    binary: str,
    address: str,
    profile: TransportProfile,
    system: str,
) -> list[str]:
    """Build the ping argument list for the platform's ping dialect."""
    count = str(profile.min_reply_count or DEFAULT_PROBE_COUNT)
    ipv6 = profile.transport == Transport.IPV6
    timeout = profile.timeout_seconds

    if system == "windows":
        command = [binary, "-n", count]
        if timeout is not None:
            command += ["-w", str(int(timeout * 1000))]
        if ipv6:
            command.append("-6")
    elif system == "macos":
        command = [binary, "-n", "-c", count]
        # ping6 on macOS has no per-reply wait option
        if timeout is not None and not ipv6:
            command += ["-W", str(int(timeout * 1000))]
    else:
        command = [binary, "-n", "-c", count]
        if timeout is not None:
            command += ["-W", str(max(1, math.ceil(timeout)))]
        if ipv6:
            command.append("-6")

    command.append(address)
    return command


class PingTransport(BaseTransport):
    """ICMP echo using the system ping binary."""

    name = "ping"

    def __init__(self, system: Optional[str] = None):
        """
        Initialize ping transport.

        Args:
            system: Platform dialect to speak (default: detect)
        """
        self.system = system or get_platform()

    def process_deadline(self, profile: TransportProfile) -> Optional[float]:
        """Wall-clock ceiling for one ping process, None when unbounded."""
        if profile.timeout_seconds is None:
            return None
        count = profile.min_reply_count or DEFAULT_PROBE_COUNT
        per_reply = max(profile.timeout_seconds, PING_INTERVAL_SECONDS)
        return count * per_reply + PROCESS_GRACE_SECONDS

    async def probe(self, address: str, profile: TransportProfile) -> float:
        """Run ping against the address and parse the average RTT."""
        binary = find_ping_binary(ipv6=profile.transport == Transport.IPV6)
        if binary is None:
            raise ProbeError(address, "ping binary not found")

        command = build_ping_command(binary, address, profile, self.system)
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        deadline = self.process_deadline(profile)
        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=deadline)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ProbeError(address, f"timed out after {deadline:.1f}s")

        received, average = parse_ping_output(stdout.decode(errors="replace"))
        required = profile.min_reply_count or DEFAULT_PROBE_COUNT

        if received < required:
            raise ProbeError(address, f"{received}/{required} replies received")
        if average is None:
            raise ProbeError(address, "no average in ping output")

        return average


class TCPTransport(BaseTransport):
    """Connect time to the DNS port over TCP, for hosts where ICMP is filtered."""

    name = "tcp"

    def __init__(self, port: int = DNS_PORT):
        self.port = port

    async def _connect_once(self, address: str, timeout: Optional[float]) -> float:
        start = time.perf_counter_ns()
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(address, self.port),
            timeout=timeout,
        )
        end = time.perf_counter_ns()

        writer.close()
        await writer.wait_closed()

        return (end - start) / 1_000_000

    async def probe(self, address: str, profile: TransportProfile) -> float:
        """Open and close count connections sequentially, average the connect time."""
        count = profile.min_reply_count or DEFAULT_PROBE_COUNT
        samples = []

        for _ in range(count):
            try:
                samples.append(
                    await self._connect_once(address, profile.timeout_seconds)
                )
            except asyncio.TimeoutError:
                raise ProbeError(address, f"connect timed out after {profile.timeout_seconds}s")
            except OSError as e:
                raise ProbeError(address, str(e) or type(e).__name__)

        return sum(samples) / len(samples)


TRANSPORTS = {
    PingTransport.name: PingTransport,
    TCPTransport.name: TCPTransport,
}


def create_transport(method: str) -> BaseTransport:
    """
    Create a transport instance for the given probe method.

    Args:
        method: "ping" or "tcp"

    Returns:
        Appropriate transport instance
    """
    try:
        return TRANSPORTS[method]()
    except KeyError:
        raise ValueError(f"Unknown probe method: {method}. Available: {list(TRANSPORTS)}")
