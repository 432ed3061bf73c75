"""
Address classification.

Decides whether a candidate nameserver address is an IPv6 literal or an
IPv4 literal / hostname, and selects the probe parameters for it.
"""

import re
from typing import Optional

from .models import Transport, TransportProfile


_HEX = r"[0-9a-fA-F]{1,4}"
_OCTET = r"(?:25[0-5]|(?:2[0-4]|1?[0-9])?[0-9])"
_IPV4 = rf"(?:{_OCTET}\.){{3}}{_OCTET}"

_ZONE = r"(?:%[^\s%]+)?"

IPV6_PATTERN = re.compile(
    "(?:" + "|".join([
        rf"(?:{_HEX}:){{7}}{_HEX}",                       # 1:2:3:4:5:6:7:8
        rf"(?:{_HEX}:){{1,7}}:",                          # 1::  1:2:3:4:5:6:7::
        rf"(?:{_HEX}:){{1,6}}:{_HEX}",                    # 1::8
        rf"(?:{_HEX}:){{1,5}}(?::{_HEX}){{1,2}}",         # 1::7:8
        rf"(?:{_HEX}:){{1,4}}(?::{_HEX}){{1,3}}",
        rf"(?:{_HEX}:){{1,3}}(?::{_HEX}){{1,4}}",
        rf"(?:{_HEX}:){{1,2}}(?::{_HEX}){{1,5}}",
        rf"{_HEX}:(?::{_HEX}){{1,6}}",                    # 1::3:4:5:6:7:8
        rf":(?:(?::{_HEX}){{1,7}}|:)",                    # ::2:3  ::
        r"fe80:(?::[0-9a-f]{0,4}){0,4}%[^\s%]+",          # fe80::%eth0.10
        rf"::(?:ffff(?::0{{1,4}})?:)?{_IPV4}",            # ::ffff:192.0.2.1
        rf"(?:{_HEX}:){{1,4}}:{_IPV4}",                   # 64:ff9b::192.0.2.33
    ]) + ")" + _ZONE,                                     # optional %zone index
    re.IGNORECASE,
)


def is_ipv6(address: str) -> bool:
    """Check if the address is an IPv6 literal."""
    return IPV6_PATTERN.fullmatch(address.strip()) is not None


def classify_transport(address: str) -> Transport:
    """Transport family for an address; never fails."""
    if is_ipv6(address):
        return Transport.IPV6
    return Transport.IPV4_HOSTNAME


class AddressClassifier:
    """
    Maps candidate addresses to transport profiles.

    IPv4 literals and hostnames get the configured timeout and minimum
    reply count. IPv6 literals get neither and fall back to the probing
    transport's own defaults.
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = 1.0,
        min_reply_count: Optional[int] = 10,
    ):
        """
        Initialize the classifier.

        Args:
            timeout_seconds: Per-reply timeout for IPv4/hostname probes
            min_reply_count: Replies an IPv4/hostname probe must receive
        """
        self.timeout_seconds = timeout_seconds
        self.min_reply_count = min_reply_count
        self._ipv6_profile = TransportProfile(transport=Transport.IPV6)
        self._ipv4_profile = TransportProfile(
            transport=Transport.IPV4_HOSTNAME,
            timeout_seconds=timeout_seconds,
            min_reply_count=min_reply_count,
        )

    def classify(self, address: str) -> TransportProfile:
        """Select the probe profile for a single address."""
        if is_ipv6(address):
            return self._ipv6_profile
        return self._ipv4_profile
