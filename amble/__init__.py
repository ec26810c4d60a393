"""amble - find recently accessed, created or modified files."""

__version__ = "0.3.0"

from .config import ScanConfig, resolve_config  # noqa: E402
from .errors import AmbleError, ConfigError, MetadataError, TraversalError  # noqa: E402
from .models import MatchResult, ScanError, ScanStats  # noqa: E402
from .scanner import ParallelScanner, SequentialScanner, find_matching  # noqa: E402

__all__ = [
    "__version__",
    "ScanConfig",
    "resolve_config",
    "AmbleError",
    "ConfigError",
    "MetadataError",
    "TraversalError",
    "MatchResult",
    "ScanError",
    "ScanStats",
    "ParallelScanner",
    "SequentialScanner",
    "find_matching",
]
