"""
Cross-platform system utilities.

Provides platform detection and lookup of the system ping binary on
Windows, Linux, and macOS.
"""

import platform
import shutil
from typing import Optional


def get_platform() -> str:
    """Get the current platform name."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system  # "windows" or "linux"


def find_ping_binary(ipv6: bool = False) -> Optional[str]:
    """
    Locate the ping executable for the given address family.

    Older Linux and macOS systems ship a separate ``ping6``; newer ones
    accept ``ping -6``. Returns None when no ping binary is installed.
    """
    if ipv6 and get_platform() == "macos":
        found = shutil.which("ping6")
        if found:
            return found
    return shutil.which("ping")

