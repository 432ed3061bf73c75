"""
Run configuration for nameserver-sort.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_COUNTRY_CODE = "US"
DEFAULT_MAX_SERVERS = 200
DEFAULT_TIMEOUT_SECONDS = 1.0
DEFAULT_MIN_REPLIES = 10
DEFAULT_METHOD = "ping"


@dataclass
class Settings:
    """Everything a run needs, resolved from the command line."""
    country_code: str = DEFAULT_COUNTRY_CODE
    max_servers: int = DEFAULT_MAX_SERVERS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    min_replies: int = DEFAULT_MIN_REPLIES
    output_dir: Path = Path("./")
    filename: Optional[str] = None
    method: str = DEFAULT_METHOD
    concurrency: Optional[int] = None  # None: one task per candidate, no cap
    debug: bool = False

    def __post_init__(self):
        self.country_code = (self.country_code or DEFAULT_COUNTRY_CODE).strip().lower()
        self.output_dir = Path(self.output_dir)

    @property
    def output_stem(self) -> str:
        """Base filename for the JSON and CSV outputs."""
        name = self.filename or f"results-{self.country_code}"
        return name.replace(".json", "").replace(".csv", "")

    def validate(self) -> None:
        """Raise ValueError on settings a run cannot work with."""
        if self.max_servers < 2:
            raise ValueError("max_servers must be at least 2")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.min_replies < 1:
            raise ValueError("min_replies must be at least 1")
        if self.concurrency is not None and self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
