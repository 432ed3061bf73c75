"""
Entry point for running nameserver_sort as a module.

Usage: python -m nameserver_sort [OPTIONS] COMMAND [ARGS]...
"""

from .cli import entry_point

if __name__ == "__main__":
    entry_point()
